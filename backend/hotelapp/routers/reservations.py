"""
Reservations and reservation lines
"""
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelapp.database import get_db
from hotelapp.models.ontology import Reservation, ReservationDetail, ReservationStatus
from hotelapp.models.schemas import (
    ReservationCreate, ReservationUpdate, ReservationResponse,
    ReservationDetailCreate, ReservationDetailUpdate, ReservationDetailResponse
)
from hotelapp.security.auth import (
    CurrentUser, get_current_user, require_admin, require_any_role, require_staff
)
from hotelapp.services.customer_service import CustomerService
from hotelapp.services.notification_service import customer_display_name
from hotelapp.services.reservation_service import ReservationService

router = APIRouter(prefix="/reservations", tags=["Reservations"])
detail_router = APIRouter(prefix="/reservation-details", tags=["Reservation lines"])


def _detail_response(detail: ReservationDetail) -> ReservationDetailResponse:
    response = ReservationDetailResponse.model_validate(detail)
    response.room_number = detail.room.number if detail.room else None
    return response


def _reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        id=reservation.id,
        booked_at=reservation.booked_at,
        start_at=reservation.start_at,
        end_at=reservation.end_at,
        status=reservation.status,
        is_active=reservation.is_active,
        customer_id=reservation.customer_id,
        customer_name=customer_display_name(reservation.customer) if reservation.customer else None,
        details=[_detail_response(d) for d in reservation.details],
    )


def _get_or_404(service: ReservationService, reservation_id: int) -> Reservation:
    reservation = service.get_reservation(reservation_id)
    if not reservation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return reservation


def _check_owner(db: Session, reservation: Reservation, current_user: CurrentUser) -> None:
    if current_user.is_staff:
        return
    customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
    if not customer or reservation.customer_id != customer.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your reservation")


# ============== Reservations ==============

@router.get("", response_model=List[ReservationResponse])
def list_reservations(
    status: Optional[ReservationStatus] = None,
    customer_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = ReservationService(db)
    return [_reservation_response(r) for r in service.get_reservations(status, customer_id, is_active)]


@router.get("/mine", response_model=List[ReservationResponse])
def list_my_reservations(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Reservations of the caller's customer record"""
    customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
    if not customer:
        return []
    service = ReservationService(db)
    return [_reservation_response(r) for r in service.get_reservations(customer_id=customer.id)]


@router.get("/status-counts", response_model=Dict[str, int])
def reservation_status_counts(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return ReservationService(db).get_status_counts()


@router.get("/{reservation_id}", response_model=ReservationResponse)
def get_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_any_role)
):
    reservation = _get_or_404(ReservationService(db), reservation_id)
    _check_owner(db, reservation, current_user)
    return _reservation_response(reservation)


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def create_reservation(
    data: ReservationCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_any_role)
):
    """Staff book for any customer; clients book for themselves, always PENDING"""
    if not current_user.is_staff:
        customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
        if not customer:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="No customer linked to this account")
        data = data.model_copy(update={"customer_id": customer.id, "status": ReservationStatus.PENDING})
    try:
        return _reservation_response(ReservationService(db).create_reservation(data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{reservation_id}", response_model=ReservationResponse)
def update_reservation(
    reservation_id: int,
    data: ReservationUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = ReservationService(db)
    _get_or_404(service, reservation_id)
    try:
        reservation = service.update_reservation(reservation_id, data, is_admin=current_user.is_admin)
        return _reservation_response(reservation)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{reservation_id}/activate", response_model=ReservationResponse)
def activate_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = ReservationService(db)
    _get_or_404(service, reservation_id)
    return _reservation_response(service.set_active(reservation_id, True))


@router.post("/{reservation_id}/deactivate", response_model=ReservationResponse)
def deactivate_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = ReservationService(db)
    _get_or_404(service, reservation_id)
    try:
        return _reservation_response(service.set_active(reservation_id, False))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = ReservationService(db)
    _get_or_404(service, reservation_id)
    try:
        service.delete_reservation(reservation_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ============== Reservation lines ==============

@detail_router.get("", response_model=List[ReservationDetailResponse])
def list_details(
    reservation_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return [_detail_response(d) for d in ReservationService(db).get_details(reservation_id)]


@detail_router.get("/{detail_id}", response_model=ReservationDetailResponse)
def get_detail(
    detail_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    detail = ReservationService(db).get_detail(detail_id)
    if not detail:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation line not found")
    return _detail_response(detail)


@detail_router.post("", response_model=ReservationDetailResponse, status_code=status.HTTP_201_CREATED)
def create_detail(
    data: ReservationDetailCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_any_role)
):
    """Add a room to a reservation; the room must be free over the reservation's range"""
    service = ReservationService(db)
    reservation = _get_or_404(service, data.reservation_id)
    _check_owner(db, reservation, current_user)
    try:
        return _detail_response(service.create_detail(data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@detail_router.put("/{detail_id}", response_model=ReservationDetailResponse)
def update_detail(
    detail_id: int,
    data: ReservationDetailUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = ReservationService(db)
    if not service.get_detail(detail_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation line not found")
    try:
        return _detail_response(service.update_detail(detail_id, data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@detail_router.delete("/{detail_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_detail(
    detail_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    if not ReservationService(db).delete_detail(detail_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation line not found")
