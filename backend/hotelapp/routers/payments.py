"""
Payments
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelapp.database import get_db
from hotelapp.models.ontology import PaymentStatus
from hotelapp.models.schemas import PaymentCreate, PaymentUpdate, PaymentResponse
from hotelapp.security.auth import CurrentUser, require_admin, require_staff
from hotelapp.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=List[PaymentResponse])
def list_payments(
    reservation_id: Optional[int] = None,
    payment_status: Optional[PaymentStatus] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return PaymentService(db).get_payments(reservation_id, payment_status)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    payment = PaymentService(db).get_payment(payment_id)
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return payment


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    data: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    try:
        return PaymentService(db).create_payment(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = PaymentService(db)
    if not service.get_payment(payment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    try:
        return service.update_payment(payment_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    if not PaymentService(db).delete_payment(payment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
