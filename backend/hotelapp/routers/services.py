"""
Service catalog, weekly availability slots and contracted services
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelapp.database import get_db
from hotelapp.models.ontology import ServiceContract, ServiceContractStatus, ServiceType, Weekday
from hotelapp.models.schemas import (
    ServiceCreate, ServiceUpdate, ServiceResponse,
    ServiceAvailabilityCreate, ServiceAvailabilityResponse,
    ServiceContractCreate, ServiceContractUpdate, ServiceContractResponse
)
from hotelapp.security.auth import (
    CurrentUser, get_current_user, require_admin, require_any_role, require_staff
)
from hotelapp.services.catalog_service import CatalogService
from hotelapp.services.customer_service import CustomerService
from hotelapp.services.service_contract_service import ServiceContractService

router = APIRouter(prefix="/services", tags=["Services"])
contract_router = APIRouter(prefix="/service-contracts", tags=["Service contracts"])


def _contract_response(contract: ServiceContract) -> ServiceContractResponse:
    response = ServiceContractResponse.model_validate(contract)
    response.service_name = contract.service.name if contract.service else None
    return response


# ============== Catalog ==============

@router.get("", response_model=List[ServiceResponse])
def list_services(
    service_type: Optional[ServiceType] = None,
    is_available: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    return CatalogService(db).get_services(service_type, is_available)


@router.get("/available", response_model=List[ServiceResponse])
def list_available_services(db: Session = Depends(get_db)):
    return CatalogService(db).get_services(is_available=True)


@router.get("/free", response_model=List[ServiceResponse])
def list_free_services(db: Session = Depends(get_db)):
    return CatalogService(db).get_services(ServiceType.FREE, is_available=True)


@router.get("/paid", response_model=List[ServiceResponse])
def list_paid_services(db: Session = Depends(get_db)):
    return CatalogService(db).get_services(ServiceType.PAID, is_available=True)


@router.get("/{service_id}", response_model=ServiceResponse)
def get_service(service_id: int, db: Session = Depends(get_db)):
    service = CatalogService(db).get_service(service_id)
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    return CatalogService(db).create_service(data)


@router.put("/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: int,
    data: ServiceUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    catalog = CatalogService(db)
    if not catalog.get_service(service_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return catalog.update_service(service_id, data)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    catalog = CatalogService(db)
    if not catalog.get_service(service_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    try:
        catalog.delete_service(service_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ============== Availability slots ==============

@router.get("/{service_id}/availability", response_model=List[ServiceAvailabilityResponse])
def list_slots(
    service_id: int,
    weekday: Optional[Weekday] = None,
    db: Session = Depends(get_db)
):
    catalog = CatalogService(db)
    if not catalog.get_service(service_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return catalog.get_slots(service_id, weekday)


@router.post("/{service_id}/availability", response_model=ServiceAvailabilityResponse,
             status_code=status.HTTP_201_CREATED)
def add_slot(
    service_id: int,
    data: ServiceAvailabilityCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    try:
        return CatalogService(db).add_slot(service_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/availability/{slot_id}", response_model=ServiceAvailabilityResponse)
def update_slot(
    slot_id: int,
    data: ServiceAvailabilityCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    try:
        return CatalogService(db).update_slot(slot_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/availability/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_slot(
    slot_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    if not CatalogService(db).delete_slot(slot_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Availability slot not found")


# ============== Contracted services ==============

@contract_router.get("", response_model=List[ServiceContractResponse])
def list_contracts(
    status: Optional[ServiceContractStatus] = None,
    reservation_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    contracts = ServiceContractService(db).get_contracts(status, reservation_id, customer_id)
    return [_contract_response(c) for c in contracts]


@contract_router.get("/mine", response_model=List[ServiceContractResponse])
def list_my_contracts(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
    if not customer:
        return []
    contracts = ServiceContractService(db).get_contracts(customer_id=customer.id)
    return [_contract_response(c) for c in contracts]


@contract_router.get("/reservation/{reservation_id}", response_model=List[ServiceContractResponse])
def list_reservation_contracts(
    reservation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return [_contract_response(c) for c in ServiceContractService(db).get_by_reservation(reservation_id)]


@contract_router.get("/{contract_id}", response_model=ServiceContractResponse)
def get_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    contract = ServiceContractService(db).get_contract(contract_id)
    if not contract:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service contract not found")
    return _contract_response(contract)


@contract_router.post("", response_model=ServiceContractResponse, status_code=status.HTTP_201_CREATED)
def create_contract(
    data: ServiceContractCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_any_role)
):
    """Book a service; clients always book for their own customer record"""
    customer = None
    if not current_user.is_staff:
        customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
        if not customer:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                detail="No customer linked to this account")
    try:
        return _contract_response(ServiceContractService(db).create_contract(data, customer))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@contract_router.put("/{contract_id}", response_model=ServiceContractResponse)
def update_contract(
    contract_id: int,
    data: ServiceContractUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = ServiceContractService(db)
    if not service.get_contract(contract_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service contract not found")
    try:
        return _contract_response(service.update_contract(contract_id, data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _run_transition(db: Session, contract_id: int, action: str, customer=None) -> ServiceContractResponse:
    service = ServiceContractService(db)
    if not service.get_contract(contract_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service contract not found")
    try:
        if action == "cancel":
            contract = service.cancel(contract_id, customer)
        else:
            contract = getattr(service, action)(contract_id)
        return _contract_response(contract)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@contract_router.post("/{contract_id}/confirm", response_model=ServiceContractResponse)
def confirm_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return _run_transition(db, contract_id, "confirm")


@contract_router.post("/{contract_id}/complete", response_model=ServiceContractResponse)
def complete_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return _run_transition(db, contract_id, "complete")


@contract_router.post("/{contract_id}/cancel", response_model=ServiceContractResponse)
def cancel_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_any_role)
):
    """Staff cancel any contract; clients only their own"""
    customer = None
    if not current_user.is_staff:
        customer = CustomerService(db).get_by_keycloak_id(current_user.subject)
        if not customer:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your service contract")
    return _run_transition(db, contract_id, "cancel", customer)


@contract_router.delete("/{contract_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    if not ServiceContractService(db).delete_contract(contract_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service contract not found")
