"""
Domain objects
All back-office entities as SQLAlchemy models; instants are naive UTC datetimes
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Time,
    ForeignKey, Text, Enum as SQLEnum, Boolean, Numeric
)
from sqlalchemy.orm import relationship
from hotelapp.database import Base


# ============== Enums ==============

class RoomStatus(str, Enum):
    """Room housekeeping status"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"


class ReservationStatus(str, Enum):
    """Reservation lifecycle"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECK_IN = "check_in"
    FINALIZED = "finalized"
    CANCELLED = "cancelled"


class ServiceContractStatus(str, Enum):
    """Contracted service lifecycle; COMPLETED and CANCELLED are terminal"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ServiceContractStatus.COMPLETED, ServiceContractStatus.CANCELLED)


class ServiceType(str, Enum):
    FREE = "free"
    PAID = "paid"


class Weekday(str, Enum):
    """Weekday, ordered like date.weekday()"""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value) -> "Weekday":
        return list(cls)[value.weekday()]


class IdentificationType(str, Enum):
    ID_CARD = "id_card"
    PASSPORT = "passport"
    FOREIGN_ID = "foreign_id"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


# ============== Rooms ==============

class RoomCategory(Base):
    """Room category (single, double, suite...) with its base nightly price"""
    __tablename__ = "room_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(Text)
    base_price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rooms = relationship("Room", back_populates="category")


class Room(Base):
    """Bookable room"""
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(10), unique=True, nullable=False)
    capacity = Column(Integer, nullable=False, default=2)
    description = Column(Text)
    image_url = Column(String(255))
    status = Column(SQLEnum(RoomStatus), default=RoomStatus.AVAILABLE)
    is_active = Column(Boolean, default=True)
    category_id = Column(Integer, ForeignKey("room_categories.id"))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("RoomCategory", back_populates="rooms")
    details = relationship("ReservationDetail", back_populates="room")


# ============== Customers & reservations ==============

class Customer(Base):
    """Hotel customer, linked to an identity-provider account by keycloak_id"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    email = Column(String(100), unique=True, nullable=False)
    phone = Column(String(30))
    address = Column(String(255))
    id_type = Column(SQLEnum(IdentificationType), default=IdentificationType.ID_CARD)
    id_number = Column(String(50))
    keycloak_id = Column(String(100), unique=True, index=True)
    birth_date = Column(Date)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    reservations = relationship("Reservation", back_populates="customer")
    service_contracts = relationship("ServiceContract", back_populates="customer")


class Reservation(Base):
    """A customer's stay over [start_at, end_at]"""
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    booked_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    start_at = Column(DateTime, nullable=False, index=True)
    end_at = Column(DateTime, nullable=False, index=True)
    status = Column(SQLEnum(ReservationStatus), default=ReservationStatus.PENDING, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer", back_populates="reservations")
    details = relationship("ReservationDetail", back_populates="reservation",
                           cascade="all, delete-orphan")
    service_contracts = relationship("ServiceContract", back_populates="reservation")
    payments = relationship("Payment", back_populates="reservation")


class ReservationDetail(Base):
    """One room line of a reservation"""
    __tablename__ = "reservation_details"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(Integer, ForeignKey("reservations.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    note = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)

    reservation = relationship("Reservation", back_populates="details")
    room = relationship("Room", back_populates="details")


# ============== Services ==============

class Service(Base):
    """Ancillary service offered by the hotel (spa, dining...)"""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(1000))
    service_type = Column(SQLEnum(ServiceType), default=ServiceType.PAID, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_available = Column(Boolean, default=True, nullable=False)
    image_url = Column(String(255))

    slots = relationship("ServiceAvailability", back_populates="service",
                         cascade="all, delete-orphan")
    contracts = relationship("ServiceContract", back_populates="service")


class ServiceAvailability(Base):
    """Weekly slot in which a service can be booked"""
    __tablename__ = "service_availability"

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    weekday = Column(SQLEnum(Weekday), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time)
    max_quota = Column(Integer, nullable=False, default=1)
    fixed_time = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    service = relationship("Service", back_populates="slots")


class ServiceContract(Base):
    """A service booked by a customer, optionally tied to a reservation"""
    __tablename__ = "service_contracts"

    id = Column(Integer, primary_key=True, index=True)
    contracted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    scheduled_at = Column(DateTime, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(SQLEnum(ServiceContractStatus), default=ServiceContractStatus.PENDING,
                    nullable=False, index=True)
    notes = Column(String(500))
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    reservation_id = Column(Integer, ForeignKey("reservations.id"), index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"))
    payment_id = Column(Integer, ForeignKey("payments.id"))

    service = relationship("Service", back_populates="contracts")
    reservation = relationship("Reservation", back_populates="service_contracts")
    customer = relationship("Customer", back_populates="service_contracts")
    payment = relationship("Payment")

    @property
    def total(self):
        if self.unit_price is None or self.quantity is None:
            return None
        return self.unit_price * self.quantity


class Payment(Base):
    """Payment received, optionally against a reservation"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    paid_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod), nullable=False)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    reservation_id = Column(Integer, ForeignKey("reservations.id"))

    reservation = relationship("Reservation", back_populates="payments")


# ============== Landing content ==============

class HeroSection(Base):
    __tablename__ = "landing_hero"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    subtitle = Column(String(500))
    image_url = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)


class CarouselItem(Base):
    __tablename__ = "landing_carousel"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200))
    description = Column(String(500))
    image_url = Column(String(255), nullable=False)
    position = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class ContactSection(Base):
    __tablename__ = "landing_contact"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(String(1000))
    phone = Column(String(30))
    email = Column(String(100))
    address = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)
