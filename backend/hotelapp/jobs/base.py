"""
Shared pieces of the lifecycle jobs
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from hotelapp.models.ontology import ReservationStatus, ServiceContractStatus

# Reservations the auto-checkout job may finalize
CHECKOUT_ELIGIBLE_STATUSES = (ReservationStatus.CONFIRMED, ReservationStatus.CHECK_IN)


def finalize_cascade_target(status: ServiceContractStatus) -> Optional[ServiceContractStatus]:
    """New status for a contract whose reservation was finalized, or None to leave it"""
    if status == ServiceContractStatus.CONFIRMED:
        return ServiceContractStatus.COMPLETED
    if status == ServiceContractStatus.PENDING:
        return ServiceContractStatus.CANCELLED
    return None


@dataclass
class RunSummary:
    """Outcome of one job run"""
    job_id: str
    now: datetime
    processed: int = 0
    cascaded: int = 0
    notified: int = 0
    failed: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "now": self.now.isoformat(),
            "processed": self.processed,
            "cascaded": self.cascaded,
            "notified": self.notified,
            "failed": list(self.failed),
        }
