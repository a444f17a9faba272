"""Event routes for searching, editing and rescheduling bookings."""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import field_validator
from sqlmodel import Session, SQLModel

from studio_ops.core.constants import EVENT_STATUS_NAMES, EventStatusId
from studio_ops.core.database import get_session
from studio_ops.models import Event
from studio_ops.repositories.event import EventRepository

router = APIRouter(prefix="/events", tags=["events"])


class EventRead(SQLModel):
    id: int
    name: str
    event_type_id: int
    event_status_id: int
    state_id: int | None = None
    user_id: int | None = None
    address: str | None = None
    description: str | None = None
    start_time: datetime
    end_time: datetime
    is_all_day: bool
    is_completed: bool
    is_approved: bool
    is_verified: bool
    order_job_element_id: int | None = None


class EventCreate(SQLModel):
    name: str
    event_type_id: int
    event_status_id: int = EventStatusId.UNSCHEDULED
    state_id: int | None = None
    user_id: int | None = None
    created_by: int | None = None
    address: str | None = None
    description: str | None = None
    start_time: datetime
    end_time: datetime
    is_all_day: bool = False
    order_job_element_id: int | None = None


class EventUpdate(SQLModel):
    """Partial update; only fields present in the request are written."""
    name: str | None = None
    event_type_id: int | None = None
    event_status_id: int | None = None
    state_id: int | None = None
    user_id: int | None = None
    address: str | None = None
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_all_day: bool | None = None
    is_completed: bool | None = None
    is_verified: bool | None = None

    @field_validator(
        "name", "event_type_id", "event_status_id", "start_time", "end_time",
        "is_all_day", "is_completed", "is_verified",
    )
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class EventUpdateResult(SQLModel):
    event: EventRead
    datetime_change_url: str | None = None


class EventStatusChange(SQLModel):
    event_status_id: int


class EventSchedule(SQLModel):
    start_time: datetime


class StaffEvents(SQLModel):
    overdue: list[EventRead]
    today: list[EventRead]
    future: list[EventRead]


def _read(event: Event) -> EventRead:
    return EventRead.model_validate(event, from_attributes=True)


def _read_all(events: list[Event]) -> list[EventRead]:
    return [_read(event) for event in events]


@router.get("/search", response_model=list[EventRead])
async def search_events(keyword: str, session: Session = Depends(get_session)):
    """Find events by order number (digits) or by name."""
    return _read_all(EventRepository(session).search_events(keyword))


@router.get("/suggest", response_model=list[str])
async def suggest_event_names(text: str, session: Session = Depends(get_session)):
    """Autocomplete event names."""
    if not text.strip():
        return []
    return EventRepository(session).event_name_search_suggestion(text.strip())


@router.get("/verify", response_model=list[EventRead])
async def events_to_verify(state_id: int, session: Session = Depends(get_session)):
    """Past bookings in a state team's territory still awaiting end-of-day verification."""
    return _read_all(EventRepository(session).get_events_need_to_be_verified(state_id))


@router.get("/approve", response_model=list[EventRead])
async def events_to_approve(state_id: int, session: Session = Depends(get_session)):
    """Recording bookings whose footage a state team still has to approve."""
    return _read_all(EventRepository(session).get_events_need_to_be_approved(state_id))


@router.get("/staff/{user_id}", response_model=StaffEvents)
async def staff_events(user_id: int, session: Session = Depends(get_session)):
    """A staff member's overdue, today's and upcoming bookings."""
    repository = EventRepository(session)
    return StaffEvents(
        overdue=_read_all(repository.get_user_overdue_events(user_id)),
        today=_read_all(repository.get_user_today_events(user_id)),
        future=_read_all(repository.get_user_future_events(user_id)),
    )


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event_id: int, session: Session = Depends(get_session)):
    return _read(EventRepository(session).load_by_id(event_id))


@router.post("", response_model=EventRead, status_code=201)
async def create_event(payload: EventCreate, session: Session = Depends(get_session)):
    return _read(EventRepository(session).create_event(payload.model_dump()))


@router.put("/{event_id}", response_model=EventUpdateResult)
async def update_event(
    event_id: int,
    payload: EventUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an event.

    Moving a job's shoot also moves the job's production date and its crew
    bookings. The response then carries a link to the order's date/time
    change email so staff can notify the client.
    """
    data = payload.model_dump(exclude_unset=True)
    repository = EventRepository(session)
    datetime_change_url = repository.check_and_get_datetime_change_url(event_id, data)
    event = repository.update_event(event_id, data)
    return EventUpdateResult(event=_read(event), datetime_change_url=datetime_change_url)


@router.delete("/{event_id}")
async def delete_event(event_id: int, session: Session = Depends(get_session)):
    """Cancel an event. It disappears from every view but the row is kept."""
    EventRepository(session).delete_event_by_id(event_id)
    return {"deleted": True, "id": event_id}


@router.post("/{event_id}/status", response_model=EventRead)
async def change_event_status(
    event_id: int,
    payload: EventStatusChange,
    session: Session = Depends(get_session),
):
    if payload.event_status_id not in EVENT_STATUS_NAMES:
        raise HTTPException(status_code=400, detail=f"Unknown event status {payload.event_status_id}")
    repository = EventRepository(session)
    event = repository.load_by_id(event_id)
    repository.update_event_status(event, payload.event_status_id)
    return _read(event)


@router.post("/{event_id}/approve", response_model=EventRead)
async def approve_event(event_id: int, session: Session = Depends(get_session)):
    return _read(EventRepository(session).approve(event_id))


@router.post("/{event_id}/schedule", response_model=EventRead)
async def schedule_event(
    event_id: int,
    payload: EventSchedule,
    session: Session = Depends(get_session),
):
    """Drop an unpublished booking onto the calendar at a new start time."""
    return _read(EventRepository(session).schedule_event_to_datetime(event_id, payload.start_time))
