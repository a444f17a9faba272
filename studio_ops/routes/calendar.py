"""Calendar page and the JSON feed behind its widget."""
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlmodel import Field, Session, SQLModel

from studio_ops.calendar.filters import (
    filter_on_hold_events_by_states,
    filter_unscheduled_events_by_states,
)
from studio_ops.core.database import get_session
from studio_ops.core.templating import templates
from studio_ops.repositories.event import EventRepository
from studio_ops.repositories.reference import EventTypeRepository, StateRepository
from studio_ops.repositories.user import UserRepository

router = APIRouter(prefix="/calendar", tags=["calendar"])


class CalendarFeedFilters(SQLModel):
    """Selections made in the calendar sidebar. Omitted lists mean nothing selected."""
    staff_filters: list[int] = Field(default_factory=list)
    not_assigned_state_filters: list[int] = Field(default_factory=list)
    event_type_filters: list[int] = Field(default_factory=list)
    account_manager_filter: int | None = None
    start: datetime | None = None
    end: datetime | None = None


@router.get("", response_class=HTMLResponse)
async def calendar_page(request: Request, session: Session = Depends(get_session)):
    """
    Display the scheduling calendar.

    The sidebar lists staff grouped by role, event types, states and account
    managers as feed filters, plus the unpublished bookings (unscheduled and
    on hold) bucketed by state so they can be dragged onto the calendar.
    """
    event_repository = EventRepository(session)
    unpublished = event_repository.get_unpublished_events()

    return templates.TemplateResponse(
        request,
        "calendar/index.html",
        {
            "grouped_users": UserRepository(session).get_grouped_users_for_calendar_filter(),
            "event_types": EventTypeRepository(session).get_event_types_list(),
            "states": StateRepository(session).get_states_list(),
            "account_managers": UserRepository(session).get_account_managers_list(),
            "unscheduled_events": filter_unscheduled_events_by_states(unpublished),
            "on_hold_events": filter_on_hold_events_by_states(unpublished),
        },
    )


@router.get("/events")
async def calendar_events(
    staff_filters: list[int] = Query(default=[]),
    not_assigned_state_filters: list[int] = Query(default=[]),
    event_type_filters: list[int] = Query(default=[]),
    account_manager_filter: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    session: Session = Depends(get_session),
):
    """Calendar feed filtered by query parameters (repeat a key for several ids)."""
    filters = CalendarFeedFilters(
        staff_filters=staff_filters,
        not_assigned_state_filters=not_assigned_state_filters,
        event_type_filters=event_type_filters,
        account_manager_filter=account_manager_filter,
        start=start,
        end=end,
    )
    return EventRepository(session).get_events_for_calendar(filters.model_dump())


@router.post("/events")
async def calendar_events_search(
    filters: CalendarFeedFilters | None = None,
    session: Session = Depends(get_session),
):
    """Calendar feed filtered by a JSON body."""
    filters = filters or CalendarFeedFilters()
    return EventRepository(session).get_events_for_calendar(filters.model_dump())
