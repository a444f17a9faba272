"""End-of-day note model.

Crew file an end-of-day (EOD) note after a shoot to record what was
delivered: footage handed over as media, or a written event report.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from studio_ops.models.event import Event


class EndOfDayNote(SQLModel, table=True):
    """A post-event note classifying delivery type.

    Attributes:
        id: Primary key.
        event_id: Foreign key to the Event the note was filed against.
        end_of_day_type_id: One of ``EndOfDayTypeId`` (media or event).
        note: Free text entered by the crew member.
        created_at: When the note was filed.
    """
    id: int | None = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    end_of_day_type_id: int
    note: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=DateTime)

    event: Optional["Event"] = Relationship(back_populates="end_of_day_notes")
