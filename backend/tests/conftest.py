"""
Pytest configuration and shared fixtures
"""
import os

# no background scheduler and no file database while testing
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, UTC
from decimal import Decimal
from typing import List

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hotelapp.config import settings
from hotelapp.database import Base, get_db
from hotelapp.models import ontology  # noqa
from hotelapp.system import models as system_models  # noqa
from hotelapp.models.ontology import (
    Customer, Reservation, ReservationDetail, ReservationStatus, Room, RoomCategory,
    Service, ServiceAvailability, ServiceType, Weekday
)
from hotelapp.security.auth import ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE
from hotelapp.main import app
from hotelcore.notification import INotificationChannel, Notification


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Database session"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Test client"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== Auth fixtures ==============

def make_token(subject: str, roles: List[str], **claims) -> str:
    """Token shaped like the identity provider's, signed with the configured key"""
    payload = {
        "sub": subject,
        "iss": settings.OIDC_ISSUER,
        "exp": datetime.now(UTC) + timedelta(hours=1),
        "realm_access": {"roles": roles},
        "preferred_username": subject,
    }
    payload.update(claims)
    return jwt.encode(payload, settings.OIDC_SECRET_KEY, algorithm=settings.OIDC_ALGORITHM)


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token('kc-admin', [ROLE_ADMIN])}"}


@pytest.fixture
def employee_headers():
    return {"Authorization": f"Bearer {make_token('kc-employee', [ROLE_EMPLOYEE])}"}


@pytest.fixture
def client_headers(sample_customer):
    token = make_token(sample_customer.keycloak_id, [ROLE_CLIENT],
                       given_name="Ana", family_name="García")
    return {"Authorization": f"Bearer {token}"}


# ============== Sample data ==============

class RecordingChannel(INotificationChannel):
    """Channel that keeps what it was given"""

    def __init__(self, fail: bool = False):
        self.sent: List[Notification] = []
        self.fail = fail

    def send(self, notification: Notification) -> None:
        if self.fail:
            raise RuntimeError("channel down")
        self.sent.append(notification)

    def get_channel_type(self) -> str:
        return "recording"


@pytest.fixture
def sample_customer(db_session) -> Customer:
    customer = Customer(
        first_name="Ana",
        last_name="García",
        email="ana@example.com",
        keycloak_id="kc-client-1",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def other_customer(db_session) -> Customer:
    customer = Customer(
        first_name="Luis",
        last_name="Pérez",
        email="luis@example.com",
        keycloak_id="kc-client-2",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def sample_category(db_session) -> RoomCategory:
    category = RoomCategory(name="Doble", base_price=Decimal("80.00"))
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def sample_rooms(db_session, sample_category) -> List[Room]:
    rooms = [
        Room(number="101", capacity=2, category_id=sample_category.id),
        Room(number="102", capacity=2, category_id=sample_category.id),
        Room(number="201", capacity=4, category_id=sample_category.id),
    ]
    db_session.add_all(rooms)
    db_session.commit()
    for room in rooms:
        db_session.refresh(room)
    return rooms


@pytest.fixture
def confirmed_reservation(db_session, sample_customer, sample_rooms) -> Reservation:
    """Monday 2024-01-01 to Friday 2024-01-05, room 101"""
    reservation = Reservation(
        start_at=datetime(2024, 1, 1, 14, 0),
        end_at=datetime(2024, 1, 5, 11, 0),
        status=ReservationStatus.CONFIRMED,
        customer_id=sample_customer.id,
    )
    db_session.add(reservation)
    db_session.flush()
    db_session.add(ReservationDetail(reservation_id=reservation.id, room_id=sample_rooms[0].id))
    db_session.commit()
    db_session.refresh(reservation)
    return reservation


@pytest.fixture
def spa_service(db_session) -> Service:
    """Paid spa with a Tuesday 09:00-12:00 window for two and a fixed 18:00 Wednesday slot"""
    service = Service(name="Spa", service_type=ServiceType.PAID, price=Decimal("25.00"))
    db_session.add(service)
    db_session.flush()
    db_session.add_all([
        ServiceAvailability(service_id=service.id, weekday=Weekday.TUESDAY,
                            start_time=datetime(2024, 1, 1, 9, 0).time(),
                            end_time=datetime(2024, 1, 1, 12, 0).time(), max_quota=2),
        ServiceAvailability(service_id=service.id, weekday=Weekday.WEDNESDAY,
                            start_time=datetime(2024, 1, 1, 18, 0).time(),
                            fixed_time=True, max_quota=1),
    ])
    db_session.commit()
    db_session.refresh(service)
    return service


@pytest.fixture
def recording_channel():
    return RecordingChannel()


@pytest.fixture
def failing_channel():
    return RecordingChannel(fail=True)


@pytest.fixture
def other_client_headers(other_customer):
    token = make_token(other_customer.keycloak_id, [ROLE_CLIENT])
    return {"Authorization": f"Bearer {token}"}
