"""Parallel execution logic for running client instances across multiple processes."""

from multiprocessing import Pool

from .client import WorkloadSettings
from .metrics import MetricsCollector
from .runner import Runner


def _run_worker(runner: Runner, settings: WorkloadSettings, client_id: int) -> MetricsCollector:
    """Worker function that runs one client instance."""
    return runner.run(settings, client_id)


class ParallelRunner:
    """Handles parallel execution of client instances across multiple processes."""

    def __init__(self, runner: Runner):
        """
        Initialize ParallelRunner with a Runner instance.

        Args:
            runner: Runner instance to use for workload execution
        """
        self.runner = runner

    def run_parallel(self, settings: WorkloadSettings, processes: int, base_client_id: int = 0) -> MetricsCollector:
        """
        Run one client instance per process.

        Process i runs as client base_client_id + i. With partitioned settings
        every process owns a disjoint account range, otherwise all of them
        share the same accounts and contend for them.

        Args:
            settings: Workload parameters shared by every process
            processes: Number of parallel client processes
            base_client_id: Client id of the first process

        Returns:
            Merged MetricsCollector with results from all processes
        """
        worker_args = [(self.runner, settings, base_client_id + i) for i in range(processes)]

        with Pool(processes) as pool:
            results = pool.starmap(_run_worker, worker_args)

        merged_metrics = MetricsCollector()
        for result in results:
            merged_metrics.merge(result)
        return merged_metrics
