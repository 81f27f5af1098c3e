"""
Service catalog: ancillary services and their weekly availability slots
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from hotelapp.models.ontology import Service, ServiceAvailability, ServiceContract, ServiceType, Weekday
from hotelapp.models.schemas import ServiceCreate, ServiceUpdate, ServiceAvailabilityCreate


class CatalogService:
    """Service catalog"""

    def __init__(self, db: Session):
        self.db = db

    # ============== Services ==============

    def get_services(self, service_type: Optional[ServiceType] = None,
                     is_available: Optional[bool] = None) -> List[Service]:
        query = self.db.query(Service)
        if service_type:
            query = query.filter(Service.service_type == service_type)
        if is_available is not None:
            query = query.filter(Service.is_available == is_available)
        return query.order_by(Service.name).all()

    def get_service(self, service_id: int) -> Optional[Service]:
        return self.db.query(Service).filter(Service.id == service_id).first()

    def create_service(self, data: ServiceCreate) -> Service:
        values = data.model_dump()
        if values['service_type'] == ServiceType.FREE:
            values['price'] = 0
        service = Service(**values)
        self.db.add(service)
        self.db.commit()
        self.db.refresh(service)
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)
        if not service:
            raise ValueError("Service not found")

        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(service, key, value)
        if service.service_type == ServiceType.FREE:
            service.price = 0

        self.db.commit()
        self.db.refresh(service)
        return service

    def delete_service(self, service_id: int) -> bool:
        service = self.get_service(service_id)
        if not service:
            raise ValueError("Service not found")

        in_use = self.db.query(ServiceContract).filter(ServiceContract.service_id == service_id).count()
        if in_use:
            raise ValueError("Service has been contracted, mark it unavailable instead")

        self.db.delete(service)
        self.db.commit()
        return True

    # ============== Availability slots ==============

    def get_slots(self, service_id: int, weekday: Optional[Weekday] = None,
                  active_only: bool = False) -> List[ServiceAvailability]:
        query = self.db.query(ServiceAvailability).filter(ServiceAvailability.service_id == service_id)
        if weekday:
            query = query.filter(ServiceAvailability.weekday == weekday)
        if active_only:
            query = query.filter(ServiceAvailability.is_active == True)
        return query.order_by(ServiceAvailability.weekday, ServiceAvailability.start_time).all()

    def get_slot(self, slot_id: int) -> Optional[ServiceAvailability]:
        return self.db.query(ServiceAvailability).filter(ServiceAvailability.id == slot_id).first()

    def add_slot(self, service_id: int, data: ServiceAvailabilityCreate) -> ServiceAvailability:
        if not self.get_service(service_id):
            raise ValueError("Service not found")

        slot = ServiceAvailability(service_id=service_id, **data.model_dump())
        self.db.add(slot)
        self.db.commit()
        self.db.refresh(slot)
        return slot

    def update_slot(self, slot_id: int, data: ServiceAvailabilityCreate) -> ServiceAvailability:
        slot = self.get_slot(slot_id)
        if not slot:
            raise ValueError("Availability slot not found")

        for key, value in data.model_dump().items():
            setattr(slot, key, value)
        self.db.commit()
        self.db.refresh(slot)
        return slot

    def delete_slot(self, slot_id: int) -> bool:
        slot = self.get_slot(slot_id)
        if not slot:
            return False
        self.db.delete(slot)
        self.db.commit()
        return True
