import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .account_space import AccountRange, compute_range
from .classifier import Classification
from .client import SmallBankClient, WorkloadSettings
from .metrics import MetricsCollector
from .provisioner import AccountProvisioner
from .transport import HttpTransport
from .verifier import collect_balances

logger = logging.getLogger(__name__)


class Runner:
    def __init__(
        self,
        host: str,
        path_prefix: str = "/app",
        ca_file: Optional[str] = None,
        cert_file: Optional[str] = None,
        key_file: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize Runner with service connection parameters.

        Args:
            host: Base URL of the service (e.g., "https://127.0.0.1:8000")
            path_prefix: Path prepended to every method name (default: "/app")
            ca_file: Optional path to root certificate file for TLS
            cert_file: Optional path to client certificate file
            key_file: Optional path to client private key file
            timeout: Request timeout in seconds (default: 10)
        """
        self.host = host
        self._path_prefix = path_prefix
        self._ca_file = ca_file
        self._cert_file = cert_file
        self._key_file = key_file
        self._timeout = timeout

    @staticmethod
    def _account_range(settings: WorkloadSettings, client_id: int) -> AccountRange:
        return compute_range(settings.total_accounts, client_id, settings.partition_clients)

    @contextmanager
    def _get_transport(self) -> Iterator[HttpTransport]:
        """Create a transport for the duration of one client run and close it afterwards."""
        with HttpTransport(
            self.host,
            path_prefix=self._path_prefix,
            ca_file=self._ca_file,
            cert_file=self._cert_file,
            key_file=self._key_file,
            timeout=self._timeout,
        ) as transport:
            yield transport

    def init_accounts(self, settings: WorkloadSettings, client_id: int = 0) -> Classification:
        """Create the accounts owned by a client instance without running any workload."""
        with self._get_transport() as transport:
            provisioner = AccountProvisioner(
                self._account_range(settings, client_id),
                settings.initial_checking_balance,
                settings.initial_savings_balance,
            )
            return provisioner.create_accounts(transport)

    def run(self, settings: WorkloadSettings, client_id: int = 0) -> MetricsCollector:
        """Run the full workload of one client instance."""
        with self._get_transport() as transport:
            client = SmallBankClient(transport, settings, client_id)
            return client.run()

    def dump_balances(self, settings: WorkloadSettings, client_id: int = 0) -> List[Dict[str, int]]:
        """Read the balance of every account owned by a client instance."""
        with self._get_transport() as transport:
            return collect_balances(transport, self._account_range(settings, client_id))
