"""Shared test fixtures."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from studio_ops.core.constants import EventStatusId, EventTypeId, StateId, UserRoleId
from studio_ops.core.database import get_session, seed_reference_data
from studio_ops.main import app
from studio_ops.models import Event, Order, OrderJob, OrderJobElement, User

# Monday; the Friday of the same week is 2026-10-23.
MONDAY = datetime(2026, 10, 19, 9, 0)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session with reference data for each test."""
    with Session(engine) as session:
        seed_reference_data(session)
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


class Factory:
    """Builds and persists staff, orders and events."""

    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def user(self, first_name="Sam", last_name="Shooter", role_id=UserRoleId.SHOOTER,
             state_id=StateId.NSW, email=None, **kwargs) -> User:
        email = email or f"{first_name}.{last_name}@studio.test".lower()
        return self._save(User(
            first_name=first_name, last_name=last_name, role_id=role_id,
            state_id=state_id, email=email, **kwargs,
        ))

    def order(self, name="Harbour View Apartments", **kwargs) -> Order:
        return self._save(Order(name=name, **kwargs))

    def job(self, order: Order | None = None, **kwargs) -> OrderJob:
        kwargs.setdefault("state_id", StateId.NSW)
        return self._save(OrderJob(order_id=order.id if order else None, **kwargs))

    def element(self, job: OrderJob, name="Main shoot") -> OrderJobElement:
        return self._save(OrderJobElement(order_job_id=job.id, name=name))

    def event(self, name="Booking", event_type_id=EventTypeId.SHOOT,
              event_status_id=EventStatusId.SCHEDULED, start_time=None,
              duration=timedelta(hours=2), element: OrderJobElement | None = None,
              **kwargs) -> Event:
        start_time = start_time or MONDAY
        kwargs.setdefault("state_id", StateId.NSW)
        return self._save(Event(
            name=name,
            event_type_id=event_type_id,
            event_status_id=event_status_id,
            start_time=start_time,
            end_time=start_time + duration,
            order_job_element_id=element.id if element else None,
            **kwargs,
        ))


@pytest.fixture(name="factory")
def factory_fixture(session: Session) -> Factory:
    return Factory(session)


@pytest.fixture(name="shoot_job")
def shoot_job_fixture(factory: Factory) -> dict:
    """An order with one job: a shoot plus producer and drone crew on the same element.

    Also an edit booking on that element and a producer booking on a second
    element of the same job.
    """
    am = factory.user("Alex", "Manager", role_id=UserRoleId.ACCOUNT_MANAGER, calendar_color="#aa0000")
    tl = factory.user("Terry", "Leader", role_id=UserRoleId.TEAM_LEADER)
    shooter = factory.user("Sam", "Shooter", role_id=UserRoleId.SHOOTER)
    producer = factory.user("Pat", "Producer", role_id=UserRoleId.PRODUCER)
    pilot = factory.user("Dee", "Pilot", role_id=UserRoleId.SHOOTER)

    order = factory.order(account_manager_id=am.id, team_leader_id=tl.id)
    job = factory.job(order, production_date=MONDAY, contact_email="client@example.com")
    element = factory.element(job)
    other_element = factory.element(job, name="Pickup shoot")

    start = MONDAY + timedelta(days=1)
    shoot = factory.event("Harbour shoot", EventTypeId.SHOOT, start_time=start,
                          duration=timedelta(hours=3), element=element, user_id=shooter.id)
    producer_event = factory.event("Harbour producer", EventTypeId.PRODUCER, start_time=start,
                                   duration=timedelta(hours=4), element=element, user_id=producer.id)
    drone = factory.event("Harbour drone", EventTypeId.DRONE, start_time=start + timedelta(hours=1),
                          duration=timedelta(hours=1), element=element, user_id=pilot.id)
    edit = factory.event("Harbour edit", EventTypeId.EDIT, start_time=start + timedelta(days=2),
                         duration=timedelta(hours=6), element=element)
    other_producer = factory.event("Pickup producer", EventTypeId.PRODUCER, start_time=start,
                                   element=other_element, user_id=producer.id)

    return {
        "am": am, "tl": tl, "shooter": shooter, "producer": producer, "pilot": pilot,
        "order": order, "job": job, "element": element,
        "shoot": shoot, "producer_event": producer_event, "drone": drone,
        "edit": edit, "other_producer": other_producer,
    }
