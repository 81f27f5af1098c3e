"""
Payment service
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from hotelcore.clock import to_naive_utc
from hotelapp.models.ontology import Payment, PaymentStatus, Reservation
from hotelapp.models.schemas import PaymentCreate, PaymentUpdate


class PaymentService:
    """Payment records"""

    def __init__(self, db: Session):
        self.db = db

    def get_payments(self, reservation_id: Optional[int] = None,
                     status: Optional[PaymentStatus] = None) -> List[Payment]:
        query = self.db.query(Payment)
        if reservation_id:
            query = query.filter(Payment.reservation_id == reservation_id)
        if status:
            query = query.filter(Payment.status == status)
        return query.order_by(Payment.paid_at.desc()).all()

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.id == payment_id).first()

    def _check_reservation(self, reservation_id: Optional[int]) -> None:
        if reservation_id is not None:
            if not self.db.query(Reservation).filter(Reservation.id == reservation_id).first():
                raise ValueError("Reservation not found")

    def create_payment(self, data: PaymentCreate) -> Payment:
        self._check_reservation(data.reservation_id)
        values = data.model_dump()
        values['paid_at'] = to_naive_utc(data.paid_at) if data.paid_at else datetime.utcnow()
        payment = Payment(**values)
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def update_payment(self, payment_id: int, data: PaymentUpdate) -> Payment:
        payment = self.get_payment(payment_id)
        if not payment:
            raise ValueError("Payment not found")

        update_data = data.model_dump(exclude_unset=True)
        if 'reservation_id' in update_data:
            self._check_reservation(update_data['reservation_id'])
        for key, value in update_data.items():
            setattr(payment, key, value)

        self.db.commit()
        self.db.refresh(payment)
        return payment

    def delete_payment(self, payment_id: int) -> bool:
        payment = self.get_payment(payment_id)
        if not payment:
            return False
        self.db.delete(payment)
        self.db.commit()
        return True
