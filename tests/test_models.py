"""Tests for database models."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import DateTime
from sqlmodel import Session, select

from studio_ops.core.constants import EVENT_TYPE_NAMES, EventStatusId, StateId
from studio_ops.core.database import seed_reference_data
from studio_ops.models import EndOfDayNote, Event, EventType, OrderJob, State, User


class TestReferenceData:
    """Tests for seeded lookup rows."""

    def test_seeded_states(self, session: Session):
        """Test states are seeded with their state in charge."""
        act = session.get(State, StateId.ACT)
        assert act.name == "ACT"
        assert act.state_in_charge == StateId.NSW

    def test_seeding_is_idempotent(self, session: Session):
        """Test seeding twice adds no duplicate rows."""
        seed_reference_data(session)
        event_types = session.exec(select(EventType)).all()
        assert len(event_types) == len(EVENT_TYPE_NAMES)


class TestEventModel:
    """Tests for the Event model."""

    def test_defaults(self, factory):
        """Test a new event starts incomplete, unapproved and live."""
        event = factory.event("Fresh", event_status_id=EventStatusId.UNSCHEDULED)
        assert event.is_completed is False
        assert event.is_approved is False
        assert event.deleted_at is None
        assert event.is_deleted is False

    def test_published(self, factory):
        """Test on-hold and unscheduled events are not published."""
        assert factory.event(event_status_id=EventStatusId.SCHEDULED).is_published
        assert not factory.event(event_status_id=EventStatusId.ON_HOLD).is_published
        assert not factory.event(event_status_id=EventStatusId.UNSCHEDULED).is_published

    def test_duration(self, factory):
        """Test duration is end minus start."""
        event = factory.event(duration=timedelta(minutes=45))
        assert event.duration == timedelta(minutes=45)

    def test_job_traversal(self, shoot_job):
        """Test an event reaches its job and order through the element."""
        shoot = shoot_job["shoot"]
        assert shoot.order_job.id == shoot_job["job"].id
        assert shoot.order_job_id == shoot_job["job"].id
        assert shoot.order.name == "Harbour View Apartments"
        assert shoot.order.account_manager.full_name == "Alex Manager"

    def test_event_without_job(self, factory):
        """Test a standalone event has no job or order."""
        event = factory.event("Internal")
        assert event.order_job is None
        assert event.order_job_id is None
        assert event.order is None


class TestOrderModel:
    """Tests for orders and jobs."""

    def test_all_job_contact_emails(self, factory):
        """Test job contact emails are distinct and in job order."""
        order = factory.order()
        factory.job(order, contact_email="a@example.com")
        factory.job(order, contact_email="b@example.com")
        factory.job(order, contact_email="a@example.com")
        factory.job(order)

        assert order.all_job_contact_emails == ["a@example.com", "b@example.com"]

    def test_production_date_roundtrip(self, session: Session, factory):
        """Test the production date reads back unchanged."""
        job = factory.job(factory.order(), production_date=datetime(2026, 10, 20, 9, 0))
        session.expire(job)
        assert job.production_date == datetime(2026, 10, 20, 9, 0)


class TestDateTimeColumns:
    """Tests for the naive local-time columns."""

    @pytest.mark.parametrize("column", [
        Event.__table__.c.start_time,
        Event.__table__.c.end_time,
        Event.__table__.c.created_at,
        Event.__table__.c.updated_at,
        Event.__table__.c.deleted_at,
        OrderJob.__table__.c.production_date,
        EndOfDayNote.__table__.c.created_at,
    ], ids=lambda column: f"{column.table.name}.{column.name}")
    def test_plain_datetime_type(self, column):
        """Test datetime columns use a plain, timezone-naive DateTime type."""
        assert type(column.type) is DateTime
        assert column.type.timezone is False

    def test_naive_times_are_stored_as_given(self, session: Session, factory):
        """Test a naive local time is accepted and read back unchanged."""
        event = factory.event("Local time", start_time=datetime(2026, 10, 21, 7, 30))
        session.expire(event)
        assert event.start_time == datetime(2026, 10, 21, 7, 30)
        assert event.start_time.tzinfo is None


class TestUserModel:
    """Tests for the User model."""

    def test_full_name(self):
        """Test the full name joins the names that are set."""
        assert User(first_name="Sam", last_name="Shooter").full_name == "Sam Shooter"
        assert User(first_name="Cher").full_name == "Cher"

    def test_state_relationship(self, factory):
        """Test a user loads their state."""
        user = factory.user(state_id=StateId.VIC)
        assert user.state.name == "VIC"
