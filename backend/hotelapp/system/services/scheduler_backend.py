"""
APScheduler backend: implements the hotelcore ISchedulerBackend interface
"""
import logging
from typing import Callable, Dict, List, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from hotelcore.scheduler import ISchedulerBackend

logger = logging.getLogger(__name__)


class APSchedulerBackend(ISchedulerBackend):
    """Scheduler backend on top of an APScheduler BackgroundScheduler"""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("APScheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("APScheduler shut down")

    def add_job(
        self,
        job_id: str,
        func: Callable,
        trigger: str,
        **trigger_args,
    ) -> None:
        """Register a job; a cron job takes a five-field crontab in cron_expression"""
        if trigger == "cron" and "cron_expression" in trigger_args:
            expr = trigger_args.pop("cron_expression")
            trigger = CronTrigger.from_crontab(expr, timezone="UTC")
        # one instance at a time; a run missed while the process was busy is merged
        self._scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            name=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **trigger_args,
        )
        logger.info(f"Job added: {job_id}")

    def get_jobs(self) -> List[Dict]:
        return [self._job_to_dict(j) for j in self._scheduler.get_jobs()]

    def _job_to_dict(self, job) -> Dict:
        # jobs added before start() have no next_run_time yet
        next_run = getattr(job, "next_run_time", None)
        if not self._scheduler.running:
            status = "pending"
        else:
            status = "active" if next_run else "paused"
        return {
            "id": job.id,
            "name": job.name or job.id,
            "trigger": str(job.trigger),
            "next_run_time": next_run.isoformat() if next_run else None,
            "status": status,
        }
