"""
Customers
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelapp.database import get_db
from hotelapp.models.schemas import CustomerCreate, CustomerUpdate, CustomerResponse
from hotelapp.security.auth import CurrentUser, get_current_user, require_admin, require_staff
from hotelapp.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return CustomerService(db).get_customers(search, is_active)


@router.get("/me", response_model=CustomerResponse)
def get_my_customer(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Customer record linked to the caller's identity account"""
    customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No customer linked to this account")
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    customer = CustomerService(db).get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    return customer


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    data: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    try:
        return CustomerService(db).create_customer(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = CustomerService(db)
    if not service.get_customer(customer_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    try:
        return service.update_customer(customer_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = CustomerService(db)
    if not service.get_customer(customer_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found")
    try:
        service.delete_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
