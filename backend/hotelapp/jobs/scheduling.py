"""
Wiring of the lifecycle jobs: builders over a database session, the
zero-argument scheduler entry points and their registration
"""
import logging
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from hotelcore.clock import Clock, SystemClock
from hotelcore.scheduler import ISchedulerBackend
from hotelapp.config import settings
from hotelapp.database import SessionLocal
from hotelapp.jobs.auto_checkout import AutoCheckoutJob
from hotelapp.jobs.auto_completion import AutoCompletionJob
from hotelapp.jobs.base import RunSummary
from hotelapp.jobs.interfaces import StoreUnavailableError
from hotelapp.jobs.stores import SqlReservationStore, SqlServiceContractStore
from hotelapp.services.notification_service import build_notifier

logger = logging.getLogger(__name__)

AUTO_CHECKOUT_JOB_ID = AutoCheckoutJob.job_id
AUTO_COMPLETION_JOB_ID = AutoCompletionJob.job_id


def build_auto_checkout_job(db: Session, clock: Optional[Clock] = None) -> AutoCheckoutJob:
    clock = clock or SystemClock()
    return AutoCheckoutJob(
        SqlReservationStore(db), SqlServiceContractStore(db), build_notifier(db, clock), clock
    )


def build_auto_completion_job(db: Session, clock: Optional[Clock] = None) -> AutoCompletionJob:
    clock = clock or SystemClock()
    return AutoCompletionJob(SqlServiceContractStore(db), build_notifier(db, clock), clock)


JOB_BUILDERS: Dict[str, Callable] = {
    AUTO_CHECKOUT_JOB_ID: build_auto_checkout_job,
    AUTO_COMPLETION_JOB_ID: build_auto_completion_job,
}


def _run_scheduled(job_id: str, session_factory: Optional[Callable[[], Session]] = None
                   ) -> Optional[RunSummary]:
    db = (session_factory or SessionLocal)()
    try:
        return JOB_BUILDERS[job_id](db).run()
    except StoreUnavailableError as e:
        logger.error(f"Job {job_id} aborted, store unavailable: {e}")
        return None
    finally:
        db.close()


def run_auto_checkout(session_factory: Optional[Callable[[], Session]] = None) -> Optional[RunSummary]:
    """Scheduler entry point for the auto-checkout job"""
    return _run_scheduled(AUTO_CHECKOUT_JOB_ID, session_factory)


def run_auto_completion(session_factory: Optional[Callable[[], Session]] = None) -> Optional[RunSummary]:
    """Scheduler entry point for the auto-completion job"""
    return _run_scheduled(AUTO_COMPLETION_JOB_ID, session_factory)


def register_lifecycle_jobs(backend: ISchedulerBackend) -> None:
    """Register both lifecycle jobs with their configured crontabs"""
    backend.add_job(AUTO_CHECKOUT_JOB_ID, run_auto_checkout, "cron",
                    cron_expression=settings.AUTO_CHECKOUT_CRON)
    backend.add_job(AUTO_COMPLETION_JOB_ID, run_auto_completion, "cron",
                    cron_expression=settings.AUTO_COMPLETION_CRON)
