"""Event model for calendar bookings.

This module defines the Event model: a scheduled calendar occurrence such
as a shoot, a producer or drone booking, an edit, or an internal meeting.
Events created for an order hang off an order job element; one event per
element is the shoot, the others are the crew bookings that follow it.
"""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

from studio_ops.core.constants import UNPUBLISHED_EVENT_STATUS_IDS, EventStatusId

if TYPE_CHECKING:
    from studio_ops.models.end_of_day import EndOfDayNote
    from studio_ops.models.order import Order, OrderJob, OrderJobElement
    from studio_ops.models.reference import EventStatus, EventType, State
    from studio_ops.models.user import User


class Event(SQLModel, table=True):
    """A calendar booking.

    Attributes:
        id: Primary key.
        name: Event title entered by staff.
        event_type_id: One of ``EventTypeId``.
        event_status_id: One of ``EventStatusId``. Unscheduled and on-hold
            events are "unpublished" and sit in the calendar sidebar instead
            of on the calendar grid.
        state_id: Jurisdiction the event takes place in.
        user_id: Assigned staff member; None (or 0 in legacy rows) when the
            booking is not yet assigned.
        created_by: Staff member who created the booking.
        start_time: Start of the booking window.
        end_time: End of the booking window, never before ``start_time``.
        is_all_day: Render as an all-day event.
        is_completed: The assignee has finished the booking.
        is_approved: Footage approved for editing.
        is_verified: End-of-day paperwork checked by production.
        order_job_element_id: Owning job element for order bookings.
        deleted_at: Set when the booking is cancelled (soft delete).
    """
    id: int | None = Field(default=None, primary_key=True)
    name: str = ""
    event_type_id: int = Field(foreign_key="eventtype.id", index=True)
    event_status_id: int = Field(
        default=EventStatusId.UNSCHEDULED, foreign_key="eventstatus.id", index=True
    )
    state_id: int | None = Field(default=None, foreign_key="state.id")
    user_id: int | None = Field(default=None, foreign_key="user.id", index=True)
    created_by: int | None = Field(default=None, foreign_key="user.id")
    address: str | None = None
    description: str | None = None
    start_time: datetime = Field(sa_type=DateTime)
    end_time: datetime = Field(sa_type=DateTime)
    is_all_day: bool = Field(default=False)
    is_completed: bool = Field(default=False)
    is_approved: bool = Field(default=False)
    is_verified: bool = Field(default=False)
    order_job_element_id: int | None = Field(
        default=None, foreign_key="orderjobelement.id", index=True
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=DateTime)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=DateTime)
    deleted_at: datetime | None = Field(default=None, index=True, sa_type=DateTime)

    # Relationships
    user: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "Event.user_id"}
    )
    event_type: Optional["EventType"] = Relationship()
    event_status: Optional["EventStatus"] = Relationship()
    state: Optional["State"] = Relationship()
    order_job_element: Optional["OrderJobElement"] = Relationship(back_populates="events")
    end_of_day_notes: list["EndOfDayNote"] = Relationship(back_populates="event")

    @property
    def order_job(self) -> Optional["OrderJob"]:
        if self.order_job_element is None:
            return None
        return self.order_job_element.order_job

    @property
    def order_job_id(self) -> int | None:
        if self.order_job_element is None:
            return None
        return self.order_job_element.order_job_id

    @property
    def order(self) -> Optional["Order"]:
        job = self.order_job
        return job.order if job is not None else None

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def is_published(self) -> bool:
        return self.event_status_id not in UNPUBLISHED_EVENT_STATUS_IDS

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
