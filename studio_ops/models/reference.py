"""Reference tables for states, event types and event statuses.

Rows are seeded at startup from the identifiers in
``studio_ops.core.constants`` so code can compare against the enums directly.
"""

from sqlmodel import Field, SQLModel


class State(SQLModel, table=True):
    """A jurisdiction events and jobs are booked in.

    Attributes:
        id: Primary key, matches ``StateId``.
        name: Display name, e.g. "NSW".
        code: Short code used in reports.
        state_in_charge: Id of the state whose production team covers this
            one (ACT is run out of NSW, for example). Equal to ``id`` for
            states that run themselves.
    """
    id: int | None = Field(default=None, primary_key=True)
    name: str
    code: str = ""
    state_in_charge: int | None = Field(default=None, index=True)


class EventType(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str


class EventStatus(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str
