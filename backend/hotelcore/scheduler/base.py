"""
Scheduler backend interface: framework-agnostic periodic task abstraction

The app layer implements ISchedulerBackend on top of a concrete scheduler
(APScheduler) and passes the instance explicitly to whoever registers jobs.
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, List


class ISchedulerBackend(ABC):
    """Scheduler backend"""

    @abstractmethod
    def add_job(
        self,
        job_id: str,
        func: Callable,
        trigger: str,
        **trigger_args,
    ) -> None:
        """Register a periodic job

        Args:
            job_id: unique job identifier
            func: zero-argument callable to run
            trigger: trigger kind ('cron', 'interval', 'date')
            **trigger_args: trigger fields, e.g. cron_expression="0 * * * *"
        """

    @abstractmethod
    def get_jobs(self) -> List[Dict]:
        """List registered jobs

        Returns:
            one dict per job with at least id, name, trigger, next_run_time, status
        """

    def start(self) -> None:
        """Start firing jobs (no-op by default)"""

    def shutdown(self) -> None:
        """Stop firing jobs (no-op by default)"""
