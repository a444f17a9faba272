"""Order job persistence and crew lookups."""
import logging
from collections.abc import Iterable
from typing import Any

from sqlmodel import Session, select

from studio_ops.models import Event, OrderJob, OrderJobElement, User

logger = logging.getLogger(__name__)


class OrderJobRepository:
    def __init__(self, session: Session):
        self.session = session

    def load_by_id(self, order_job_id: int) -> OrderJob:
        return self.session.exec(select(OrderJob).where(OrderJob.id == order_job_id)).one()

    def update_order_job(
        self, order_job_id: int, data: dict[str, Any], commit: bool = True
    ) -> OrderJob:
        """Apply ``data`` to the job. With ``commit=False`` the caller owns the transaction."""
        order_job = self.load_by_id(order_job_id)
        for key, value in data.items():
            setattr(order_job, key, value)
        self.session.add(order_job)
        if commit:
            self.session.commit()
            self.session.refresh(order_job)
        return order_job

    def load_job_crews_categorised_by_event_types(
        self, order_job: OrderJob, event_type_ids: Iterable[int]
    ) -> dict[int, list[User]]:
        """Assigned staff on the job's live events, keyed by event type.

        Each list holds distinct users in booking order (earliest first).
        Types with no assigned crew map to an empty list.
        """
        type_ids = list(event_type_ids)
        crews: dict[int, list[User]] = {type_id: [] for type_id in type_ids}

        statement = (
            select(Event)
            .join(OrderJobElement, Event.order_job_element_id == OrderJobElement.id)
            .where(OrderJobElement.order_job_id == order_job.id)
            .where(Event.event_type_id.in_(type_ids))
            .where(Event.user_id.isnot(None))
            .where(Event.deleted_at.is_(None))
            .order_by(Event.start_time, Event.id)
        )
        for event in self.session.exec(statement).all():
            if event.user is None:
                continue
            crew = crews.setdefault(event.event_type_id, [])
            if all(user.id != event.user.id for user in crew):
                crew.append(event.user)

        counts = {type_id: len(users) for type_id, users in crews.items()}
        logger.debug(f"Loaded crews for job {order_job.id}: {counts}")
        return crews
