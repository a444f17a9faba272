"""Order, job and job element models.

An order is a client's booking. It contains one or more jobs (a product
delivered in a state on a production date), and each job is split into
elements that own the calendar events for the shoot and its crew.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from studio_ops.models.event import Event
    from studio_ops.models.reference import State
    from studio_ops.models.user import User


class Office(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str


class Product(SQLModel, table=True):
    """A sellable product. Only video products need end-of-day notes."""
    id: int | None = Field(default=None, primary_key=True)
    name: str
    is_video_product: bool = Field(default=False)


class Order(SQLModel, table=True):
    """A client order.

    Attributes:
        id: Primary key; also the number staff search events by.
        name: Order name, used in email subjects.
        order_status_id: One of ``OrderStatusId``.
        account_manager_id: Staff member who owns the client relationship.
        team_leader_id: Staff member leading the production team.
        office_id: Office the order was sold from.
        jobs: Jobs belonging to this order.
    """
    id: int | None = Field(default=None, primary_key=True)
    name: str
    order_status_id: int | None = None
    account_manager_id: int | None = Field(default=None, foreign_key="user.id")
    team_leader_id: int | None = Field(default=None, foreign_key="user.id")
    office_id: int | None = Field(default=None, foreign_key="office.id")

    account_manager: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "Order.account_manager_id"}
    )
    team_leader: Optional["User"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "Order.team_leader_id"}
    )
    office: Optional[Office] = Relationship()
    jobs: list["OrderJob"] = Relationship(back_populates="order")

    @property
    def all_job_contact_emails(self) -> list[str]:
        """Unique contact emails across the order's jobs, in job order."""
        emails = []
        for job in self.jobs:
            if job.contact_email and job.contact_email not in emails:
                emails.append(job.contact_email)
        return emails


class OrderJob(SQLModel, table=True):
    """A job within an order.

    Attributes:
        id: Primary key.
        order_id: Parent order.
        product_id: Product being delivered.
        state_id: State the job is produced in.
        alternate_edit_state_id: State editing is outsourced to, if any.
        production_date: Start of the job's shoot. Kept in step with the
            shoot event when that event is rescheduled.
        contact_email: Client contact for this job.
    """
    id: int | None = Field(default=None, primary_key=True)
    order_id: int | None = Field(default=None, foreign_key="order.id", index=True)
    product_id: int | None = Field(default=None, foreign_key="product.id")
    state_id: int | None = Field(default=None, foreign_key="state.id")
    alternate_edit_state_id: int | None = Field(default=None, foreign_key="state.id")
    production_date: datetime | None = Field(default=None, sa_type=DateTime)
    contact_email: str | None = None

    order: Optional[Order] = Relationship(back_populates="jobs")
    product: Optional[Product] = Relationship()
    state: Optional["State"] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "OrderJob.state_id"}
    )
    video: Optional["Video"] = Relationship(
        back_populates="order_job", sa_relationship_kwargs={"uselist": False}
    )
    elements: list["OrderJobElement"] = Relationship(back_populates="order_job")


class Video(SQLModel, table=True):
    """The delivered video of a job."""
    id: int | None = Field(default=None, primary_key=True)
    order_job_id: int = Field(foreign_key="orderjob.id", unique=True)
    title: str = ""

    order_job: Optional[OrderJob] = Relationship(back_populates="video")


class OrderJobElement(SQLModel, table=True):
    """A schedulable part of a job; owns the shoot event and its crew events."""
    id: int | None = Field(default=None, primary_key=True)
    order_job_id: int = Field(foreign_key="orderjob.id", index=True)
    name: str = ""

    order_job: Optional[OrderJob] = Relationship(back_populates="elements")
    events: list["Event"] = Relationship(back_populates="order_job_element")
