"""
Reservation service
Reservations, their room lines and the manual status transitions
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from hotelcore.clock import to_naive_utc
from hotelapp.jobs.base import finalize_cascade_target
from hotelapp.models.ontology import (
    Customer, Payment, Reservation, ReservationDetail, ReservationStatus,
    Room, ServiceContract, ServiceContractStatus
)
from hotelapp.models.schemas import (
    ReservationCreate, ReservationUpdate, ReservationDetailCreate, ReservationDetailUpdate
)
from hotelapp.services.notification_service import (
    NotificationService, build_notifier,
    MSG_ADMIN_FINALIZE, MSG_ADMIN_FORCED_FINALIZE, MSG_SERVICE_CANCELADO,
)
from hotelapp.services.room_service import NON_BLOCKING_STATUSES, RoomService
from hotelapp.system.models.message import SupportMessage

logger = logging.getLogger(__name__)


class ReservationService:
    """Reservation service"""

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or build_notifier(db)
        self.room_service = RoomService(db)

    # ============== Queries ==============

    def get_reservations(self, status: Optional[ReservationStatus] = None,
                         customer_id: Optional[int] = None,
                         is_active: Optional[bool] = None) -> List[Reservation]:
        query = self.db.query(Reservation)
        if status:
            query = query.filter(Reservation.status == status)
        if customer_id:
            query = query.filter(Reservation.customer_id == customer_id)
        if is_active is not None:
            query = query.filter(Reservation.is_active == is_active)
        return query.order_by(Reservation.start_at.desc()).all()

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        return self.db.query(Reservation).filter(Reservation.id == reservation_id).first()

    def get_status_counts(self) -> Dict[str, int]:
        rows = self.db.query(Reservation.status, func.count(Reservation.id)).group_by(Reservation.status).all()
        counts = {s.value: 0 for s in ReservationStatus}
        for status, count in rows:
            counts[status.value] = count
        return counts

    @staticmethod
    def _blocks_rooms(status: ReservationStatus, is_active: bool) -> bool:
        return is_active and status not in NON_BLOCKING_STATUSES

    def _check_lines_free(self, reservation: Reservation, start: datetime, end: datetime) -> None:
        """Every active line of reservation must be free over [start, end) apart from its own lines"""
        lines = [d for d in reservation.details if d.is_active]
        if not lines:
            return
        occupied = self.room_service.get_occupied_room_ids(
            start, end, exclude_reservation_id=reservation.id
        )
        for detail in lines:
            if detail.room_id in occupied:
                raise ValueError(f"Room {detail.room.number} is already booked for these dates")

    # ============== Create / update ==============

    def create_reservation(self, data: ReservationCreate) -> Reservation:
        if data.customer_id is not None:
            if not self.db.query(Customer).filter(Customer.id == data.customer_id).first():
                raise ValueError("Customer not found")

        reservation = Reservation(
            start_at=to_naive_utc(data.start_at),
            end_at=to_naive_utc(data.end_at),
            customer_id=data.customer_id,
            status=data.status,
        )
        self.db.add(reservation)
        self.db.commit()
        self.db.refresh(reservation)
        logger.info(f"Reservation {reservation.id} created ({reservation.status.value})")
        return reservation

    def update_reservation(self, reservation_id: int, data: ReservationUpdate,
                           is_admin: bool = False) -> Reservation:
        """Partial update with the status side effects

        Finalizing settles the contracts like the auto-checkout job does and
        tells the customer; only admins may finalize a reservation that never
        checked in. Cancelling cancels every open contract.
        """
        reservation = self.get_reservation(reservation_id)
        if not reservation:
            raise ValueError("Reservation not found")

        update_data = data.model_dump(exclude_unset=True)
        new_status = update_data.get('status')

        finalize_key = None
        if new_status == ReservationStatus.FINALIZED and reservation.status != ReservationStatus.FINALIZED:
            if reservation.status == ReservationStatus.CHECK_IN:
                finalize_key = MSG_ADMIN_FINALIZE
            elif is_admin:
                finalize_key = MSG_ADMIN_FORCED_FINALIZE
            else:
                raise PermissionError("Only administrators can finalize a reservation that has not checked in")
        cancelling = (new_status == ReservationStatus.CANCELLED
                      and reservation.status != ReservationStatus.CANCELLED)

        for key in ('start_at', 'end_at'):
            if update_data.get(key) is not None:
                update_data[key] = to_naive_utc(update_data[key])
        start = update_data.get('start_at') or reservation.start_at
        end = update_data.get('end_at') or reservation.end_at
        if end <= start:
            raise ValueError("End date must be after start date")

        target_status = new_status or reservation.status
        if self._blocks_rooms(target_status, reservation.is_active):
            was_blocking = self._blocks_rooms(reservation.status, reservation.is_active)
            moved = start != reservation.start_at or end != reservation.end_at
            if moved or not was_blocking:
                self._check_lines_free(reservation, start, end)

        if update_data.get('customer_id') is not None:
            if not self.db.query(Customer).filter(Customer.id == update_data['customer_id']).first():
                raise ValueError("Customer not found")

        for key, value in update_data.items():
            setattr(reservation, key, value)

        cancelled_contracts = []
        contracts = self.db.query(ServiceContract).filter(
            ServiceContract.reservation_id == reservation.id
        ).all()
        if finalize_key:
            for contract in contracts:
                target = finalize_cascade_target(contract.status)
                if target is not None:
                    contract.status = target
        elif cancelling:
            for contract in contracts:
                if not contract.status.is_terminal:
                    contract.status = ServiceContractStatus.CANCELLED
                    cancelled_contracts.append(contract)

        self.db.commit()
        self.db.refresh(reservation)

        if finalize_key:
            logger.info(f"Reservation {reservation.id} finalized manually ({finalize_key})")
            self.notifier.notify_reservation(reservation, finalize_key)
        for contract in cancelled_contracts:
            self.notifier.notify_contract(contract, MSG_SERVICE_CANCELADO)
        return reservation

    def set_active(self, reservation_id: int, active: bool) -> Reservation:
        """Toggle the active flag of the reservation and all its lines"""
        reservation = self.get_reservation(reservation_id)
        if not reservation:
            raise ValueError("Reservation not found")
        if not active and reservation.status != ReservationStatus.CANCELLED:
            raise ValueError("Only cancelled reservations can be deactivated")
        if active and not reservation.is_active and self._blocks_rooms(reservation.status, True):
            self._check_lines_free(reservation, reservation.start_at, reservation.end_at)

        reservation.is_active = active
        for detail in reservation.details:
            detail.is_active = active
        self.db.commit()
        self.db.refresh(reservation)
        return reservation

    def delete_reservation(self, reservation_id: int) -> bool:
        reservation = self.get_reservation(reservation_id)
        if not reservation:
            return False
        if reservation.status == ReservationStatus.FINALIZED:
            raise ValueError("A finalized reservation cannot be deleted")
        if reservation.status != ReservationStatus.CANCELLED:
            raise ValueError("Only cancelled reservations can be deleted")

        # keep contracts, payments and messages, just detach them
        for model in (ServiceContract, Payment, SupportMessage):
            self.db.query(model).filter(model.reservation_id == reservation_id).update(
                {"reservation_id": None}, synchronize_session=False
            )
        line_count = len(reservation.details)
        self.db.delete(reservation)
        self.db.commit()
        logger.info(f"Reservation {reservation_id} deleted with {line_count} lines")
        return True

    # ============== Room lines ==============

    def get_details(self, reservation_id: Optional[int] = None) -> List[ReservationDetail]:
        query = self.db.query(ReservationDetail)
        if reservation_id:
            query = query.filter(ReservationDetail.reservation_id == reservation_id)
        return query.order_by(ReservationDetail.id).all()

    def get_detail(self, detail_id: int) -> Optional[ReservationDetail]:
        return self.db.query(ReservationDetail).filter(ReservationDetail.id == detail_id).first()

    def _check_room_free(self, reservation: Reservation, room_id: int,
                         exclude_detail_id: Optional[int] = None) -> None:
        room = self.db.query(Room).filter(Room.id == room_id).first()
        if not room:
            raise ValueError("Room not found")
        if not room.is_active:
            raise ValueError(f"Room {room.number} is not active")
        occupied = self.room_service.get_occupied_room_ids(
            reservation.start_at, reservation.end_at, exclude_detail_id=exclude_detail_id
        )
        if room_id in occupied:
            raise ValueError(f"Room {room.number} is already booked for these dates")

    def create_detail(self, data: ReservationDetailCreate) -> ReservationDetail:
        reservation = self.get_reservation(data.reservation_id)
        if not reservation:
            raise ValueError("Reservation not found")
        self._check_room_free(reservation, data.room_id)

        detail = ReservationDetail(**data.model_dump())
        self.db.add(detail)
        self.db.commit()
        self.db.refresh(detail)
        return detail

    def update_detail(self, detail_id: int, data: ReservationDetailUpdate) -> ReservationDetail:
        detail = self.get_detail(detail_id)
        if not detail:
            raise ValueError("Reservation line not found")

        update_data = data.model_dump(exclude_unset=True)
        room_id = update_data.get('room_id', detail.room_id)
        reactivating = update_data.get('is_active') is True and not detail.is_active
        reservation = detail.reservation
        if room_id != detail.room_id or (
                reactivating and self._blocks_rooms(reservation.status, reservation.is_active)):
            self._check_room_free(reservation, room_id, exclude_detail_id=detail.id)

        for key, value in update_data.items():
            setattr(detail, key, value)
        self.db.commit()
        self.db.refresh(detail)
        return detail

    def delete_detail(self, detail_id: int) -> bool:
        detail = self.get_detail(detail_id)
        if not detail:
            return False
        self.db.delete(detail)
        self.db.commit()
        return True
