"""
Collaborators of the lifecycle jobs

The jobs only see these protocols, so tests can hand them in-memory fakes and
the app wires the SQLAlchemy implementations from hotelapp.jobs.stores.
"""
from datetime import datetime
from typing import List, Optional, Protocol

from hotelapp.models.ontology import Reservation, ServiceContract


class StoreUnavailableError(RuntimeError):
    """The backing store cannot be read or written; fatal for the current run"""


class ReservationStore(Protocol):
    def find_overdue_active(self, before: datetime) -> List[Reservation]:
        """CONFIRMED / CHECK_IN reservations whose end_at is strictly before `before`"""
        ...

    def save(self, reservation: Reservation) -> None:
        ...


class ServiceContractStore(Protocol):
    def find_by_reservation(self, reservation_id: int) -> List[ServiceContract]:
        ...

    def find_overdue_confirmed(self, before: datetime) -> List[ServiceContract]:
        """CONFIRMED contracts whose scheduled_at is strictly before `before`"""
        ...

    def save(self, contract: ServiceContract) -> None:
        ...


class ConfigLookup(Protocol):
    def find_by_key(self, key: str) -> Optional[str]:
        ...
