"""
Pydantic schemas
Request / response validation for the API
"""
from datetime import datetime, date, time
from decimal import Decimal
from typing import ClassVar, Optional, List, Tuple
from pydantic import BaseModel, Field, ConfigDict, model_validator
from hotelapp.models.ontology import (
    RoomStatus, ReservationStatus, ServiceContractStatus, ServiceType,
    Weekday, IdentificationType, PaymentMethod, PaymentStatus
)


class PartialUpdate(BaseModel):
    """Partial update body: omitted fields stay as they are

    Fields named in NOT_NULL back non-nullable columns; they may be left out
    but not sent as null.
    """
    NOT_NULL: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = [name for name in cls.NOT_NULL if name in data and data[name] is None]
            if nulls:
                raise ValueError(f"{', '.join(nulls)} may not be null")
        return data


# ============== Room category schemas ==============

class RoomCategoryBase(BaseModel):
    name: str = Field(..., max_length=50)
    description: Optional[str] = None
    base_price: Decimal = Field(..., ge=0)
    is_active: bool = True


class RoomCategoryCreate(RoomCategoryBase):
    pass


class RoomCategoryUpdate(PartialUpdate):
    NOT_NULL = ("name", "base_price")

    name: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class RoomCategoryResponse(RoomCategoryBase):
    id: int
    created_at: datetime
    room_count: int = 0
    model_config = ConfigDict(from_attributes=True)


# ============== Room schemas ==============

class RoomBase(BaseModel):
    number: str = Field(..., max_length=10)
    capacity: int = Field(default=2, ge=1)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=255)
    category_id: Optional[int] = None


class RoomCreate(RoomBase):
    status: RoomStatus = RoomStatus.AVAILABLE


class RoomUpdate(PartialUpdate):
    NOT_NULL = ("number", "capacity")

    number: Optional[str] = Field(None, max_length=10)
    capacity: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=255)
    category_id: Optional[int] = None
    status: Optional[RoomStatus] = None
    is_active: Optional[bool] = None


class RoomResponse(RoomBase):
    id: int
    status: RoomStatus
    is_active: bool
    category_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Customer schemas ==============

class CustomerBase(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: str = Field(..., max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=255)
    id_type: Optional[IdentificationType] = IdentificationType.ID_CARD
    id_number: Optional[str] = Field(None, max_length=50)
    keycloak_id: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(PartialUpdate):
    NOT_NULL = ("email",)

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=255)
    id_type: Optional[IdentificationType] = None
    id_number: Optional[str] = Field(None, max_length=50)
    keycloak_id: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    is_active: Optional[bool] = None


class CustomerResponse(CustomerBase):
    id: int
    is_active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


# ============== Reservation schemas ==============

class ReservationCreate(BaseModel):
    start_at: datetime
    end_at: datetime
    customer_id: Optional[int] = None
    status: ReservationStatus = ReservationStatus.PENDING

    @model_validator(mode="after")
    def check_range(self):
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class ReservationUpdate(PartialUpdate):
    NOT_NULL = ("start_at", "end_at", "status")

    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    customer_id: Optional[int] = None
    status: Optional[ReservationStatus] = None


class ReservationDetailBase(BaseModel):
    reservation_id: int
    room_id: int
    note: Optional[str] = Field(None, max_length=255)


class ReservationDetailCreate(ReservationDetailBase):
    pass


class ReservationDetailUpdate(PartialUpdate):
    NOT_NULL = ("room_id", "is_active")

    room_id: Optional[int] = None
    note: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class ReservationDetailResponse(ReservationDetailBase):
    id: int
    is_active: bool
    room_number: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class ReservationResponse(BaseModel):
    id: int
    booked_at: datetime
    start_at: datetime
    end_at: datetime
    status: ReservationStatus
    is_active: bool
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    details: List[ReservationDetailResponse] = []
    model_config = ConfigDict(from_attributes=True)


# ============== Service schemas ==============

class ServiceBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    service_type: ServiceType = ServiceType.PAID
    price: Decimal = Field(default=Decimal("0"), ge=0)
    is_available: bool = True
    image_url: Optional[str] = Field(None, max_length=255)


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(PartialUpdate):
    NOT_NULL = ("name", "service_type", "price", "is_available")

    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    service_type: Optional[ServiceType] = None
    price: Optional[Decimal] = Field(None, ge=0)
    is_available: Optional[bool] = None
    image_url: Optional[str] = Field(None, max_length=255)


class ServiceResponse(ServiceBase):
    id: int
    model_config = ConfigDict(from_attributes=True)


class ServiceAvailabilityCreate(BaseModel):
    weekday: Weekday
    start_time: time
    end_time: Optional[time] = None
    fixed_time: bool = False
    max_quota: int = Field(default=1, ge=1)
    is_active: bool = True

    @model_validator(mode="after")
    def check_window(self):
        if not self.fixed_time and self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class ServiceAvailabilityResponse(ServiceAvailabilityCreate):
    id: int
    service_id: int
    model_config = ConfigDict(from_attributes=True)


# ============== Service contract schemas ==============

class ServiceContractCreate(BaseModel):
    service_id: int
    reservation_id: Optional[int] = None
    customer_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    quantity: int = Field(default=1, ge=1)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)


class ServiceContractUpdate(PartialUpdate):
    NOT_NULL = ("quantity", "unit_price")

    scheduled_at: Optional[datetime] = None
    quantity: Optional[int] = Field(None, ge=1)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)
    payment_id: Optional[int] = None


class ServiceContractResponse(BaseModel):
    id: int
    contracted_at: datetime
    scheduled_at: Optional[datetime] = None
    quantity: int
    unit_price: Decimal
    total: Optional[Decimal] = None
    status: ServiceContractStatus
    notes: Optional[str] = None
    service_id: int
    service_name: Optional[str] = None
    reservation_id: Optional[int] = None
    customer_id: Optional[int] = None
    payment_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Payment schemas ==============

class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    paid_at: Optional[datetime] = None
    reservation_id: Optional[int] = None


class PaymentUpdate(PartialUpdate):
    NOT_NULL = ("amount", "method", "status")

    amount: Optional[Decimal] = Field(None, gt=0)
    method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    reservation_id: Optional[int] = None


class PaymentResponse(BaseModel):
    id: int
    paid_at: datetime
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    reservation_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Support message schemas ==============

class SupportMessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    user_id: Optional[str] = Field(None, max_length=100)
    user_name: Optional[str] = Field(None, max_length=200)
    reservation_id: Optional[int] = None


class SupportMessageResponse(BaseModel):
    id: int
    content: str
    sent_at: datetime
    user_id: str
    user_name: Optional[str] = None
    sender: str
    is_read: bool
    is_active: bool
    reservation_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Landing schemas ==============

class HeroSectionUpsert(BaseModel):
    title: str = Field(..., max_length=200)
    subtitle: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=255)


class HeroSectionResponse(HeroSectionUpsert):
    id: int
    is_active: bool
    model_config = ConfigDict(from_attributes=True)


class CarouselItemCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    image_url: str = Field(..., max_length=255)
    position: int = Field(default=0, ge=0)
    is_active: bool = True


class CarouselItemUpdate(PartialUpdate):
    NOT_NULL = ("image_url", "position", "is_active")

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=255)
    position: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CarouselItemResponse(CarouselItemCreate):
    id: int
    model_config = ConfigDict(from_attributes=True)


class ContactSectionUpsert(BaseModel):
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)


class ContactSectionResponse(ContactSectionUpsert):
    id: int
    is_active: bool
    model_config = ConfigDict(from_attributes=True)


class LandingResponse(BaseModel):
    hero: Optional[HeroSectionResponse] = None
    carousel: List[CarouselItemResponse] = []
    contact: Optional[ContactSectionResponse] = None

