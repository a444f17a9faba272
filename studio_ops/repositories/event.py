"""Event queries, mutations and the shoot reschedule cascade."""
import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy import String, and_, cast, or_
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from studio_ops.calendar.feed import transform_events_for_calendar
from studio_ops.core.clock import end_of_day, local_now, start_of_day, to_local_naive, tomorrow_window
from studio_ops.core.config import settings
from studio_ops.core.constants import (
    SHOOT_RELATED_EVENT_TYPE_IDS,
    UNPUBLISHED_EVENT_STATUS_IDS,
    EventStatusId,
    EventTypeId,
)
from studio_ops.core.errors import EventWindowError
from studio_ops.models import (
    EndOfDayNote,
    Event,
    Order,
    OrderJob,
    OrderJobElement,
    Product,
    State,
)
from studio_ops.repositories.order_job import OrderJobRepository
from studio_ops.repositories.reference import EventTypeRepository, StateRepository

logger = logging.getLogger(__name__)


def _job_path():
    return selectinload(Event.order_job_element).selectinload(OrderJobElement.order_job)


def _detail_options() -> list:
    """Eager-load the relations the calendar, sidebar and emails read."""
    return [
        selectinload(Event.user),
        selectinload(Event.event_type),
        selectinload(Event.event_status),
        selectinload(Event.state),
        selectinload(Event.end_of_day_notes),
        _job_path().selectinload(OrderJob.video),
        _job_path().selectinload(OrderJob.product),
        _job_path().selectinload(OrderJob.state),
        _job_path().selectinload(OrderJob.order).selectinload(Order.account_manager),
        _job_path().selectinload(OrderJob.order).selectinload(Order.team_leader),
        _job_path().selectinload(OrderJob.order).selectinload(Order.office),
    ]


def _coerce_datetime(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return to_local_naive(value)


def _normalise_times(data: Mapping[str, Any]) -> dict[str, Any]:
    data = dict(data)
    for key in ("start_time", "end_time"):
        if data.get(key) is not None:
            data[key] = _coerce_datetime(data[key])
    return data


def _check_window(event: Event) -> None:
    if event.start_time is None or event.end_time is None:
        raise EventWindowError("Event needs both a start and an end time")
    if event.start_time > event.end_time:
        raise EventWindowError(
            f"Event ends ({event.end_time}) before it starts ({event.start_time})"
        )


class EventRepository:
    """Query and mutation facade over calendar events.

    Soft-deleted (cancelled) events are invisible to every query here except
    ``force_delete_event_by_id``.
    """

    def __init__(self, session: Session):
        self.session = session
        self.order_job_repository = OrderJobRepository(session)
        self.event_type_repository = EventTypeRepository(session)
        self.state_repository = StateRepository(session)

    # Base statements

    def _live(self):
        return select(Event).where(Event.deleted_at.is_(None))

    def _published(self):
        return self._live().where(Event.event_status_id.not_in(UNPUBLISHED_EVENT_STATUS_IDS))

    def _unpublished(self):
        return self._live().where(Event.event_status_id.in_(UNPUBLISHED_EVENT_STATUS_IDS))

    def _all(self, statement) -> list[Event]:
        return list(self.session.exec(statement).all())

    # Calendar

    def get_events_for_calendar(self, filters: Mapping[str, Any]) -> list[dict]:
        """Published events for the calendar widget.

        ``filters`` keys: ``staff_filters``, ``not_assigned_state_filters``,
        ``event_type_filters`` (lists of ids), ``account_manager_filter``
        (single id), ``start`` and ``end`` (datetimes). A missing list filter
        counts as empty, so with no event types selected nothing is returned.
        """
        staff_filters = list(filters.get("staff_filters") or [])
        not_assigned_state_filters = list(filters.get("not_assigned_state_filters") or [])
        event_type_filters = list(filters.get("event_type_filters") or [])

        statement = self._published().options(*_detail_options())

        account_manager_id = filters.get("account_manager_filter")
        if account_manager_id:
            managed_elements = (
                select(OrderJobElement.id)
                .join(OrderJob, OrderJobElement.order_job_id == OrderJob.id)
                .join(Order, OrderJob.order_id == Order.id)
                .where(Order.account_manager_id == account_manager_id)
            )
            statement = statement.where(
                or_(
                    Event.created_by == account_manager_id,
                    Event.order_job_element_id.in_(managed_elements),
                )
            )

        if filters.get("start"):
            statement = statement.where(Event.end_time >= _coerce_datetime(filters["start"]))
        if filters.get("end"):
            statement = statement.where(Event.start_time < _coerce_datetime(filters["end"]))

        # Assigned to a selected staff member, or unassigned in a selected state.
        statement = statement.where(
            or_(
                Event.user_id.in_(staff_filters),
                and_(
                    or_(Event.user_id.is_(None), Event.user_id == 0),
                    Event.state_id.in_(not_assigned_state_filters),
                ),
            )
        )
        statement = statement.where(Event.event_type_id.in_(event_type_filters))

        return transform_events_for_calendar(self._all(statement))

    def get_unscheduled_events(self) -> list[Event]:
        return self._all(self._live().where(Event.event_status_id == EventStatusId.UNSCHEDULED))

    def get_on_hold_events(self) -> list[Event]:
        return self._all(self._live().where(Event.event_status_id == EventStatusId.ON_HOLD))

    def get_unpublished_events(self) -> list[Event]:
        statement = self._unpublished().options(*_detail_options()).order_by(Event.start_time)
        return self._all(statement)

    # Production review queues

    def get_events_need_to_be_verified(self, state_id: int, now: datetime | None = None) -> list[Event]:
        """Past video-product bookings in ``state_id``'s territory awaiting EOD verification.

        Looks back ``settings.eod_admin_days_limit`` days up to the end of
        yesterday. In-room auction jobs are outsourced and never need notes.
        """
        now = now or local_now()
        yesterday_end = end_of_day(now - timedelta(days=1))
        earliest = now - timedelta(days=settings.eod_admin_days_limit)

        statement = (
            self._published()
            .options(*_detail_options())
            .join(OrderJobElement, Event.order_job_element_id == OrderJobElement.id)
            .join(OrderJob, OrderJobElement.order_job_id == OrderJob.id)
            .join(Product, OrderJob.product_id == Product.id)
            .join(State, OrderJob.state_id == State.id)
            .where(Event.is_verified == False)  # noqa: E712
            .where(Event.end_time <= yesterday_end)
            .where(Event.end_time > earliest)
            .where(OrderJob.product_id != settings.in_room_auction_product_id)
            .where(State.state_in_charge == state_id)
            .where(Product.is_video_product == True)  # noqa: E712
            .order_by(Event.start_time.desc())
        )
        return self._all(statement)

    def get_events_need_to_be_approved(self, state_id: int) -> list[Event]:
        """Unapproved recording bookings on orders edited by ``state_id``'s team.

        A job belongs to the team if either its own state or its alternate
        edit state is run by ``state_id``.
        """
        event_type_ids = self.event_type_repository.get_recording_event_types()
        statement = (
            self._live()
            .options(*_detail_options())
            .join(OrderJobElement, Event.order_job_element_id == OrderJobElement.id)
            .join(OrderJob, OrderJobElement.order_job_id == OrderJob.id)
            .where(Event.event_type_id.in_(event_type_ids))
            .where(Event.is_approved == False)  # noqa: E712
            .where(OrderJob.order_id.isnot(None))
        )
        in_charge_ids = set(self.get_state_in_charge_states_ids(state_id))
        return [
            event for event in self._all(statement)
            if event.order_job.state_id in in_charge_ids
            or event.order_job.alternate_edit_state_id in in_charge_ids
        ]

    def get_state_in_charge_states_ids(self, state_id: int | None) -> list[int]:
        return self.state_repository.get_state_in_charge_states_ids(state_id)

    # Staff dashboards

    def _scheduled_events_list_base_query(self, user_id: int):
        return (
            self._published()
            .options(*_detail_options())
            .where(Event.user_id == user_id)
        )

    def get_user_overdue_events(self, user_id: int, now: datetime | None = None) -> list[Event]:
        """The user's uncompleted bookings that finished before today."""
        now = now or local_now()
        statement = (
            self._scheduled_events_list_base_query(user_id)
            .where(Event.is_completed == False)  # noqa: E712
            .where(Event.end_time <= end_of_day(now - timedelta(days=1)))
            .order_by(Event.start_time)
        )
        return self._all(statement)

    def get_user_today_events(self, user_id: int, now: datetime | None = None) -> list[Event]:
        now = now or local_now()
        statement = (
            self._scheduled_events_list_base_query(user_id)
            .where(Event.start_time >= start_of_day(now))
            .where(Event.start_time <= end_of_day(now))
            .order_by(Event.start_time)
        )
        return self._all(statement)

    def get_user_future_events(self, user_id: int, now: datetime | None = None) -> list[Event]:
        """The user's bookings from tomorrow through the following week."""
        now = now or local_now()
        tomorrow = now + timedelta(days=1)
        statement = (
            self._scheduled_events_list_base_query(user_id)
            .where(Event.start_time >= start_of_day(tomorrow))
            .where(Event.start_time <= end_of_day(tomorrow + timedelta(days=7)))
            .order_by(Event.start_time)
        )
        return self._all(statement)

    # Single event CRUD

    def load_by_id(self, event_id: int) -> Event:
        """Load a live event with its relations.

        Raises:
            sqlalchemy.exc.NoResultFound: No live event has this id.
        """
        statement = self._live().where(Event.id == event_id).options(*_detail_options())
        return self.session.exec(statement).one()

    def create_event(self, data: Mapping[str, Any]) -> Event:
        event = Event(**_normalise_times(data))
        _check_window(event)
        self.session.add(event)
        self.session.commit()
        self.session.refresh(event)
        logger.info(f"Created event {event.id} ({event.name})")
        return event

    def update_event(self, event_id: int, data: Mapping[str, Any]) -> Event:
        """Update an event and cascade shoot time changes to its crew bookings.

        The event update, the job production date and every moved crew
        booking are committed together; any failure rolls all of them back.
        """
        event = self.load_by_id(event_id)
        try:
            for key, value in _normalise_times(data).items():
                setattr(event, key, value)
            _check_window(event)
            event.updated_at = datetime.now(UTC)
            self.session.add(event)
            self._check_and_update_job_events(event)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(event)
        return event

    def delete_event_by_id(self, event_id: int) -> bool:
        """Cancel an event. The row is kept with ``deleted_at`` set."""
        event = self.load_by_id(event_id)
        event.deleted_at = datetime.now(UTC)
        self.session.add(event)
        self.session.commit()
        logger.info(f"Cancelled event {event_id}")
        return True

    def force_delete_event_by_id(self, event_id: int) -> None:
        """Permanently remove an event and its end-of-day notes (admin only)."""
        event = self.session.exec(select(Event).where(Event.id == event_id)).one()
        for note in self.session.exec(
            select(EndOfDayNote).where(EndOfDayNote.event_id == event_id)
        ).all():
            self.session.delete(note)
        self.session.delete(event)
        self.session.commit()
        logger.warning(f"Permanently deleted event {event_id}")

    def update_event_status(self, event: Event, event_status_id: int) -> bool:
        event.event_status_id = event_status_id
        event.updated_at = datetime.now(UTC)
        self.session.add(event)
        self.session.commit()
        return True

    def approve(self, event: Event | int) -> Event:
        if not isinstance(event, Event):
            event = self.load_by_id(event)
        event.is_approved = True
        event.updated_at = datetime.now(UTC)
        self.session.add(event)
        self.session.commit()
        return event

    # Search

    def event_name_search_suggestion(self, text: str) -> list[str]:
        """Distinct event names containing ``text``, for autocomplete."""
        statement = (
            select(Event.name)
            .where(Event.deleted_at.is_(None))
            .where(Event.name.contains(text))
            .distinct()
            .limit(settings.search_suggestion_limit)
        )
        return [name.strip() for name in self.session.exec(statement).all() if name and name.strip()]

    def search_events(self, keyword: str | int) -> list[Event]:
        """Find events by order number (numeric keyword) or by name."""
        keyword = str(keyword).strip()
        statement = self._live().options(*_detail_options())
        if keyword.isdecimal():
            matching_elements = (
                select(OrderJobElement.id)
                .join(OrderJob, OrderJobElement.order_job_id == OrderJob.id)
                .join(Order, OrderJob.order_id == Order.id)
                .where(cast(Order.id, String).contains(str(int(keyword))))
            )
            statement = statement.where(Event.order_job_element_id.in_(matching_elements))
        else:
            statement = statement.where(Event.name.contains(keyword))
        return self._all(statement.order_by(Event.name))

    # Rescheduling

    def schedule_event_to_datetime(self, event_id: int, new_from: datetime | str) -> Event:
        """Move an event to ``new_from``, keep its length, and mark it scheduled."""
        return self.update_event_to_datetime(event_id, new_from, schedule_event=True)

    def update_event_to_datetime(
        self, event: Event | int, new_from: datetime | str, schedule_event: bool = False
    ) -> Event:
        if not isinstance(event, Event):
            event = self.load_by_id(event)
        self._move_event(event, _coerce_datetime(new_from), schedule_event)
        self.session.commit()
        self.session.refresh(event)
        return event

    def _move_event(self, event: Event, new_from: datetime, schedule_event: bool = False) -> None:
        duration = event.duration
        event.start_time = new_from
        event.end_time = new_from + duration
        if schedule_event:
            event.event_status_id = EventStatusId.SCHEDULED
        event.updated_at = datetime.now(UTC)
        self.session.add(event)

    def check_event_datetime_change(self, event: Event, data: Mapping[str, Any]) -> bool:
        """True if ``data`` moves either end of the event's window. Missing keys count as unchanged."""
        new_start = _coerce_datetime(data["start_time"]) if data.get("start_time") else event.start_time
        new_end = _coerce_datetime(data["end_time"]) if data.get("end_time") else event.end_time
        return event.start_time != new_start or event.end_time != new_end

    def check_and_get_datetime_change_url(self, event_id: int, data: Mapping[str, Any]) -> str | None:
        """Link to the order's date/time change email when a job shoot is moved."""
        event = self.load_by_id(event_id)
        if self.is_job_shoot_event(event) and self.check_event_datetime_change(event, data):
            return settings.order_datetime_email_url.format(order_id=event.order_job.order_id)
        return None

    def is_job_shoot_event(self, event: Event) -> bool:
        return self.is_job_event(event) and event.event_type_id == EventTypeId.SHOOT

    def is_job_event(self, event: Event) -> bool:
        return bool(event.order_job_element_id)

    def _check_and_update_job_events(self, event: Event) -> None:
        """Follow a job shoot's new time with the job and its crew bookings."""
        if not self.is_job_shoot_event(event):
            return

        self.order_job_repository.update_order_job(
            event.order_job_id, {"production_date": event.start_time}, commit=False
        )
        moved = self._update_job_events_time_for_shoot_related_events(event)
        logger.info(
            f"Shoot event {event.id} moved to {event.start_time}; "
            f"rescheduled {moved} related event(s)"
        )

    def _update_job_events_time_for_shoot_related_events(self, shoot_event: Event) -> int:
        related = self._load_shoot_related_events(shoot_event)
        for event in related:
            self._move_event(event, shoot_event.start_time)
        return len(related)

    def _load_shoot_related_events(self, shoot_event: Event) -> list[Event]:
        statement = (
            self._live()
            .where(Event.order_job_element_id == shoot_event.order_job_element_id)
            .where(Event.id != shoot_event.id)
            .where(Event.event_type_id.in_(SHOOT_RELATED_EVENT_TYPE_IDS))
        )
        return self._all(statement)

    # Jobs and notifications

    def unassign_job_events(self, order_job: OrderJob) -> None:
        for element in order_job.elements:
            for event in element.events:
                event.user_id = None
                self.session.add(event)
        self.session.commit()

    def get_tomorrow_order_events(
        self, event_type_ids: Iterable[int] | None = None, today: date | None = None
    ) -> list[Event]:
        """Scheduled order bookings happening tomorrow (Saturday to Monday on a Friday)."""
        start, end = tomorrow_window(today or local_now().date())
        statement = (
            self._published()
            .options(*_detail_options())
            .where(Event.order_job_element_id.isnot(None))
            .where(Event.event_status_id == EventStatusId.SCHEDULED)
            .where(Event.start_time >= start)
            .where(Event.start_time <= end)
            .order_by(Event.start_time)
        )
        if event_type_ids:
            statement = statement.where(Event.event_type_id.in_(list(event_type_ids)))
        return self._all(statement)

    def group_events_by_staff_id(self, events: Iterable[Event]) -> dict[int, list[Event]]:
        """Index events under their order's account manager and team leader.

        An event appears under both when they differ, and once when the same
        person holds both roles.
        """
        grouped: dict[int, list[Event]] = {}
        for event in events:
            order = event.order
            if order is None:
                continue
            staff_ids = {order.account_manager_id, order.team_leader_id} - {None}
            for staff_id in staff_ids:
                grouped.setdefault(staff_id, []).append(event)
        return grouped
