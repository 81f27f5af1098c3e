"""
Auto-completion job

Completes CONFIRMED service contracts whose scheduled time has passed.
PENDING contracts are left alone even when overdue; only the auto-checkout
cascade cancels them.
"""
import logging
from datetime import datetime
from typing import Optional

from hotelcore.clock import Clock, SystemClock, to_naive_utc
from hotelapp.jobs.base import RunSummary
from hotelapp.jobs.interfaces import ServiceContractStore, StoreUnavailableError
from hotelapp.models.ontology import ServiceContractStatus
from hotelapp.services.notification_service import NotificationService, MSG_SERVICE_COMPLETADO

logger = logging.getLogger(__name__)


class AutoCompletionJob:
    """Service contract auto-completion"""

    job_id = "service_auto_completion"

    def __init__(self, contracts: ServiceContractStore, notifier: NotificationService,
                 clock: Optional[Clock] = None):
        self.contracts = contracts
        self.notifier = notifier
        self.clock = clock or SystemClock()

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        now = to_naive_utc(now) if now is not None else self.clock.now()
        logger.debug(f"Running service auto-completion at {now.isoformat()}")
        summary = RunSummary(job_id=self.job_id, now=now)

        for contract in self.contracts.find_overdue_confirmed(now):
            logger.info(f"Completing expired service contract {contract.id}")
            contract.status = ServiceContractStatus.COMPLETED
            self.contracts.save(contract)
            summary.processed += 1

            try:
                if self.notifier.notify_contract(contract, MSG_SERVICE_COMPLETADO):
                    summary.notified += 1
            except StoreUnavailableError:
                raise
            except Exception:
                logger.exception(f"Completion notice failed for service contract {contract.id}")
                summary.failed.append(contract.id)

        return summary
