"""Staff user model."""

from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from studio_ops.models.reference import State


class User(SQLModel, table=True):
    """A staff member who can be assigned to events or manage orders.

    Attributes:
        id: Primary key.
        first_name: Given name.
        last_name: Family name.
        email: Address used for notifications and email CCs.
        role_id: One of ``UserRoleId``.
        state_id: Home state; production staff are matched to events by it.
        calendar_color: Background colour of the user's events in the calendar.
        is_active: Inactive users are hidden from calendar filters.
    """
    id: int | None = Field(default=None, primary_key=True)
    first_name: str = ""
    last_name: str = ""
    email: str | None = Field(default=None, index=True)
    role_id: int | None = Field(default=None, index=True)
    state_id: int | None = Field(default=None, foreign_key="state.id")
    calendar_color: str | None = None
    is_active: bool = Field(default=True)

    state: Optional["State"] = Relationship()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
