"""
Auto-checkout job

Finalizes CONFIRMED / CHECK_IN reservations whose end has passed, settles
their contracted services and tells the customer. The FINALIZED status is
persisted before any follow-up, so a crash leaves "finalized, not notified"
and a second run skips the reservation.
"""
import logging
from datetime import datetime
from typing import Optional

from hotelcore.clock import Clock, SystemClock, to_naive_utc
from hotelapp.jobs.base import RunSummary, finalize_cascade_target
from hotelapp.jobs.interfaces import (
    ReservationStore, ServiceContractStore, StoreUnavailableError
)
from hotelapp.models.ontology import Reservation, ReservationStatus
from hotelapp.services.notification_service import NotificationService, MSG_RESERVA_AUTO_CHECKOUT

logger = logging.getLogger(__name__)


class AutoCheckoutJob:
    """Reservation auto-checkout"""

    job_id = "reservation_auto_checkout"

    def __init__(self, reservations: ReservationStore, contracts: ServiceContractStore,
                 notifier: NotificationService, clock: Optional[Clock] = None):
        self.reservations = reservations
        self.contracts = contracts
        self.notifier = notifier
        self.clock = clock or SystemClock()

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """Process every overdue reservation

        Raises:
            StoreUnavailableError: the stores failed; the run stops here
        """
        now = to_naive_utc(now) if now is not None else self.clock.now()
        logger.debug(f"Running auto-checkout at {now.isoformat()}")
        summary = RunSummary(job_id=self.job_id, now=now)

        for reservation in self.reservations.find_overdue_active(now):
            logger.info(f"Auto-checkout for reservation {reservation.id}")
            reservation.status = ReservationStatus.FINALIZED
            self.reservations.save(reservation)
            summary.processed += 1

            try:
                summary.cascaded += self.cascade(reservation)
                if self.notifier.notify_reservation(reservation, MSG_RESERVA_AUTO_CHECKOUT):
                    summary.notified += 1
            except StoreUnavailableError:
                raise
            except Exception:
                logger.exception(f"Auto-checkout follow-up failed for reservation {reservation.id}")
                summary.failed.append(reservation.id)

        if summary.processed:
            logger.info(
                f"Auto-checkout finished: {summary.processed} finalized, "
                f"{summary.cascaded} services settled, {len(summary.failed)} with errors"
            )
        return summary

    def cascade(self, reservation: Reservation) -> int:
        """Settle the reservation's contracts; returns how many changed"""
        changed = 0
        for contract in self.contracts.find_by_reservation(reservation.id):
            target = finalize_cascade_target(contract.status)
            if target is None:
                continue
            logger.debug(
                f"Service contract {contract.id} of reservation {reservation.id}: "
                f"{contract.status.value} -> {target.value}"
            )
            contract.status = target
            self.contracts.save(contract)
            changed += 1
        return changed
