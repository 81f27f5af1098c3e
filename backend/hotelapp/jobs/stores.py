"""
SQLAlchemy-backed stores for the lifecycle jobs

Every save commits on its own so each record's transition is one atomic unit.
Database errors are rolled back and surfaced as StoreUnavailableError.
"""
from datetime import datetime
from typing import Callable, List, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotelapp.jobs.base import CHECKOUT_ELIGIBLE_STATUSES
from hotelapp.jobs.interfaces import StoreUnavailableError
from hotelapp.models.ontology import (
    Reservation, ServiceContract, ServiceContractStatus
)

T = TypeVar("T")


class _SqlStore:
    def __init__(self, db: Session):
        self.db = db

    def _guard(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError(f"{operation} failed: {e}") from e

    def _save(self, operation: str, obj) -> None:
        def _commit():
            self.db.add(obj)
            self.db.commit()
        self._guard(operation, _commit)


class SqlReservationStore(_SqlStore):

    def find_overdue_active(self, before: datetime) -> List[Reservation]:
        return self._guard("find_overdue_active", lambda: self.db.query(Reservation).filter(
            Reservation.status.in_(CHECKOUT_ELIGIBLE_STATUSES),
            Reservation.end_at < before,
        ).order_by(Reservation.id).all())

    def save(self, reservation: Reservation) -> None:
        self._save(f"save reservation {reservation.id}", reservation)


class SqlServiceContractStore(_SqlStore):

    def find_by_reservation(self, reservation_id: int) -> List[ServiceContract]:
        return self._guard("find_by_reservation", lambda: self.db.query(ServiceContract).filter(
            ServiceContract.reservation_id == reservation_id
        ).order_by(ServiceContract.id).all())

    def find_overdue_confirmed(self, before: datetime) -> List[ServiceContract]:
        return self._guard("find_overdue_confirmed", lambda: self.db.query(ServiceContract).filter(
            ServiceContract.status == ServiceContractStatus.CONFIRMED,
            ServiceContract.scheduled_at < before,
        ).order_by(ServiceContract.id).all())

    def save(self, contract: ServiceContract) -> None:
        self._save(f"save service contract {contract.id}", contract)
