"""
Contracted services - booking validation and manual lifecycle transitions

A contract tied to a reservation and a scheduled instant must fit a CONFIRMED
reservation's range and an active weekly slot of the service with quota left.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from hotelcore.clock import to_naive_utc
from hotelapp.models.ontology import (
    Customer, Reservation, ReservationStatus, Service, ServiceAvailability,
    ServiceContract, ServiceContractStatus, ServiceType, Weekday
)
from hotelapp.models.schemas import ServiceContractCreate, ServiceContractUpdate
from hotelapp.services.notification_service import (
    NotificationService, build_notifier,
    MSG_SERVICE_CONFIRMADO, MSG_SERVICE_COMPLETADO, MSG_SERVICE_CANCELADO,
)

logger = logging.getLogger(__name__)

# Contracts that take a place in a slot
QUOTA_STATUSES = (
    ServiceContractStatus.PENDING,
    ServiceContractStatus.CONFIRMED,
    ServiceContractStatus.COMPLETED,
)


class ServiceContractService:
    """Contracted service operations"""

    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or build_notifier(db)

    # ============== Queries ==============

    def get_contracts(self, status: Optional[ServiceContractStatus] = None,
                      reservation_id: Optional[int] = None,
                      customer_id: Optional[int] = None,
                      service_id: Optional[int] = None) -> List[ServiceContract]:
        query = self.db.query(ServiceContract)
        if status:
            query = query.filter(ServiceContract.status == status)
        if reservation_id:
            query = query.filter(ServiceContract.reservation_id == reservation_id)
        if customer_id:
            query = query.filter(ServiceContract.customer_id == customer_id)
        if service_id:
            query = query.filter(ServiceContract.service_id == service_id)
        return query.order_by(ServiceContract.scheduled_at.desc(), ServiceContract.id.desc()).all()

    def get_contract(self, contract_id: int) -> Optional[ServiceContract]:
        return self.db.query(ServiceContract).filter(ServiceContract.id == contract_id).first()

    def get_by_reservation(self, reservation_id: int) -> List[ServiceContract]:
        return self.db.query(ServiceContract).filter(
            ServiceContract.reservation_id == reservation_id
        ).order_by(ServiceContract.id).all()

    # ============== Validation ==============

    def _count_taken(self, service_id: int, scheduled_at: datetime,
                     exclude_id: Optional[int] = None) -> int:
        query = self.db.query(ServiceContract).filter(
            ServiceContract.service_id == service_id,
            ServiceContract.scheduled_at == scheduled_at,
            ServiceContract.status.in_(QUOTA_STATUSES),
        )
        if exclude_id is not None:
            query = query.filter(ServiceContract.id != exclude_id)
        return query.count()

    @staticmethod
    def _slot_accepts(slot: ServiceAvailability, scheduled_at: datetime) -> bool:
        at = scheduled_at.time()
        if slot.fixed_time:
            return (slot.start_time.hour, slot.start_time.minute) == (at.hour, at.minute)
        if at < slot.start_time:
            return False
        return slot.end_time is None or at <= slot.end_time

    def validate_schedule(self, service: Service, reservation: Reservation,
                          scheduled_at: datetime, exclude_id: Optional[int] = None) -> ServiceAvailability:
        """Check reservation state, date range, weekly slot and quota; returns the slot used"""
        if reservation.status != ReservationStatus.CONFIRMED:
            raise ValueError("Reservation is not confirmed")
        if scheduled_at < reservation.start_at or scheduled_at > reservation.end_at:
            raise ValueError("Service date must be within the reservation dates")

        weekday = Weekday.from_date(scheduled_at)
        slots = self.db.query(ServiceAvailability).filter(
            ServiceAvailability.service_id == service.id,
            ServiceAvailability.weekday == weekday,
            ServiceAvailability.is_active == True,
        ).all()
        if not slots:
            raise ValueError(f"Service is not available on {weekday.value}")

        for slot in slots:
            if not self._slot_accepts(slot, scheduled_at):
                continue
            if self._count_taken(service.id, scheduled_at, exclude_id) < slot.max_quota:
                return slot

        raise ValueError("Service not available at this time (invalid time or quota full)")

    # ============== Create / update ==============

    def create_contract(self, data: ServiceContractCreate,
                        customer: Optional[Customer] = None) -> ServiceContract:
        """Book a service; customer, when given, overrides data.customer_id"""
        service = self.db.query(Service).filter(Service.id == data.service_id).first()
        if not service:
            raise ValueError("Service not found")
        if not service.is_available:
            raise ValueError(f"Service '{service.name}' is not available")

        reservation = None
        if data.reservation_id is not None:
            reservation = self.db.query(Reservation).filter(Reservation.id == data.reservation_id).first()
            if not reservation:
                raise ValueError("Reservation not found")

        customer_id = customer.id if customer is not None else data.customer_id
        if customer_id is None and reservation is not None:
            customer_id = reservation.customer_id
        if customer is not None and reservation is not None and reservation.customer_id != customer.id:
            raise PermissionError("Reservation belongs to another customer")

        scheduled_at = to_naive_utc(data.scheduled_at) if data.scheduled_at else None
        if reservation is not None and scheduled_at is not None:
            self.validate_schedule(service, reservation, scheduled_at)

        if data.unit_price is not None:
            unit_price = data.unit_price
        else:
            unit_price = 0 if service.service_type == ServiceType.FREE else service.price

        contract = ServiceContract(
            service_id=service.id,
            reservation_id=data.reservation_id,
            customer_id=customer_id,
            scheduled_at=scheduled_at,
            quantity=data.quantity,
            unit_price=unit_price,
            notes=data.notes,
            status=ServiceContractStatus.PENDING,
            contracted_at=datetime.utcnow(),
        )
        self.db.add(contract)
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"Service contract {contract.id} created for service {service.id}")
        return contract

    def update_contract(self, contract_id: int, data: ServiceContractUpdate) -> ServiceContract:
        contract = self.get_contract(contract_id)
        if not contract:
            raise ValueError("Service contract not found")
        if contract.status.is_terminal:
            raise ValueError(f"Service contract is already {contract.status.value}")

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get('scheduled_at') is not None:
            update_data['scheduled_at'] = to_naive_utc(update_data['scheduled_at'])
            if contract.reservation is not None:
                self.validate_schedule(contract.service, contract.reservation,
                                       update_data['scheduled_at'], exclude_id=contract.id)

        for key, value in update_data.items():
            setattr(contract, key, value)

        self.db.commit()
        self.db.refresh(contract)
        return contract

    def delete_contract(self, contract_id: int) -> bool:
        contract = self.get_contract(contract_id)
        if not contract:
            return False
        self.db.delete(contract)
        self.db.commit()
        return True

    # ============== Transitions ==============

    def _transition(self, contract_id: int, allowed_from: tuple,
                    target: ServiceContractStatus) -> ServiceContract:
        contract = self.get_contract(contract_id)
        if not contract:
            raise ValueError("Service contract not found")
        if contract.status not in allowed_from:
            raise ValueError(
                f"Cannot move service contract from {contract.status.value} to {target.value}"
            )
        contract.status = target
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"Service contract {contract.id} -> {target.value}")
        return contract

    def confirm(self, contract_id: int) -> ServiceContract:
        contract = self._transition(
            contract_id, (ServiceContractStatus.PENDING,), ServiceContractStatus.CONFIRMED
        )
        self.notifier.notify_contract(contract, MSG_SERVICE_CONFIRMADO)
        return contract

    def complete(self, contract_id: int) -> ServiceContract:
        contract = self._transition(
            contract_id,
            (ServiceContractStatus.PENDING, ServiceContractStatus.CONFIRMED),
            ServiceContractStatus.COMPLETED,
        )
        self.notifier.notify_contract(contract, MSG_SERVICE_COMPLETADO)
        return contract

    def cancel(self, contract_id: int, customer: Optional[Customer] = None) -> ServiceContract:
        """Cancel a contract; when customer is given it must own the contract"""
        if customer is not None:
            contract = self.get_contract(contract_id)
            if contract and contract.customer_id != customer.id:
                raise PermissionError("Service contract belongs to another customer")
        contract = self._transition(
            contract_id,
            (ServiceContractStatus.PENDING, ServiceContractStatus.CONFIRMED),
            ServiceContractStatus.CANCELLED,
        )
        self.notifier.notify_contract(contract, MSG_SERVICE_CANCELADO)
        return contract
