"""SmallBank workload driver: account provisioning, transaction generation and balance verification."""
