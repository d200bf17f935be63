import logging
import statistics
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .classifier import Outcome

logger = logging.getLogger(__name__)

SUMMARY = "SUMMARY"


@dataclass
class TransactionMetrics:
    """Metrics for a single transaction."""

    operation: str
    start_time: float
    end_time: float
    outcome: Outcome
    error_message: str = ""

    @property
    def latency(self) -> float:
        """Transaction latency in seconds."""
        return self.end_time - self.start_time


@dataclass
class MetricsCollector:
    """Collector for transaction metrics of one or more client instances."""

    transactions: List[TransactionMetrics] = field(default_factory=list)

    def record_transaction(
        self,
        operation: str,
        start_time: float,
        end_time: float,
        outcome: Outcome,
        error_message: str = "",
    ) -> None:
        """
        Record a transaction's metrics.

        Args:
            operation: Method name of the transaction
            start_time: Transaction start timestamp
            end_time: Transaction end timestamp
            outcome: Classification of the response
            error_message: Response body if the transaction was rejected or failed
        """
        self.transactions.append(
            TransactionMetrics(
                operation=operation,
                start_time=start_time,
                end_time=end_time,
                outcome=outcome,
                error_message=error_message,
            )
        )

    def merge(self, other: "MetricsCollector") -> None:
        """
        Merge transactions from another MetricsCollector into this one.

        Args:
            other: Another MetricsCollector instance to merge from
        """
        self.transactions.extend(other.transactions)

    def _calculate_percentiles(self, values: List[float]) -> Dict[str, float]:
        """Calculate percentiles for a list of values."""
        if not values:
            return {"avg": 0.0, "stddev": 0.0, "min": 0.0, "max": 0.0, "p50": 0.0, "p95": 0.0, "p99": 0.0}

        sorted_values = sorted(values)
        count = len(sorted_values)

        def percentile(q: float) -> float:
            return sorted_values[min(int(count * q), count - 1)]

        return {
            "avg": sum(sorted_values) / count,
            "stddev": statistics.stdev(sorted_values) if count > 1 else 0.0,
            "min": sorted_values[0],
            "max": sorted_values[-1],
            "p50": percentile(0.50),
            "p95": percentile(0.95),
            "p99": percentile(0.99),
        }

    def get_summary(self, operation: str = SUMMARY) -> Dict[str, Any]:
        """
        Calculate summary statistics for one operation, or all of them.

        Returns:
            Dictionary containing metrics summary
        """
        if operation == SUMMARY:
            selected = self.transactions
        else:
            selected = [t for t in self.transactions if t.operation == operation]

        if not selected:
            return {
                "total_duration": 0.0,
                "total_transactions": 0,
                "accepted_transactions": 0,
                "rejected_transactions": 0,
                "failed_transactions": 0,
                "tps": 0.0,
                "latency": self._calculate_percentiles([]),
            }

        total_duration = max(t.end_time for t in selected) - min(t.start_time for t in selected)
        total_transactions = len(selected)
        accepted = sum(1 for t in selected if t.outcome is Outcome.ACCEPTED)
        rejected = sum(1 for t in selected if t.outcome is Outcome.RECOGNIZED_REJECTION)

        return {
            "total_duration": total_duration,
            "total_transactions": total_transactions,
            "accepted_transactions": accepted,
            "rejected_transactions": rejected,
            "failed_transactions": total_transactions - accepted - rejected,
            "tps": total_transactions / total_duration if total_duration > 0 else 0.0,
            "latency": self._calculate_percentiles([t.latency * 1000 for t in selected]),
        }

    def print_group(self, operation: str) -> None:
        """Print formatted metrics summary to stdout (not as log)."""
        summary = self.get_summary(operation)
        lat = summary["latency"]

        print("=" * 60, file=sys.stdout)
        print(f"PERFORMANCE METRICS: {operation}", file=sys.stdout)
        print("=" * 60, file=sys.stdout)
        print(f"Total Duration:           {summary['total_duration']:.2f} seconds", file=sys.stdout)
        print(f"Total Transactions:       {summary['total_transactions']}", file=sys.stdout)
        print(f"Accepted Transactions:    {summary['accepted_transactions']}", file=sys.stdout)
        print(f"Rejected Transactions:    {summary['rejected_transactions']}", file=sys.stdout)
        print(f"Failed Transactions:      {summary['failed_transactions']}", file=sys.stdout)
        print(f"Transactions per Second:  {summary['tps']:.2f} TPS", file=sys.stdout)
        print("-" * 60, file=sys.stdout)
        print(f"{'Metric':<15} {'Latency (ms)':>20}", file=sys.stdout)
        print(f"{'Average':<15} {lat['avg']:>20.2f}", file=sys.stdout)
        print(f"{'STDDev':<15} {lat['stddev']:>20.2f}", file=sys.stdout)
        print(f"{'Minimum':<15} {lat['min']:>20.2f}", file=sys.stdout)
        print(f"{'Maximum':<15} {lat['max']:>20.2f}", file=sys.stdout)
        print(f"{'P50 (Median)':<15} {lat['p50']:>20.2f}", file=sys.stdout)
        print(f"{'P95':<15} {lat['p95']:>20.2f}", file=sys.stdout)
        print(f"{'P99':<15} {lat['p99']:>20.2f}", file=sys.stdout)
        print("=" * 60, file=sys.stdout)
        sys.stdout.flush()

    def print_summary(self) -> None:
        operations = sorted({t.operation for t in self.transactions})
        self.print_group(SUMMARY)
        if len(operations) > 1:
            for operation in operations:
                print()
                self.print_group(operation)
