"""Shooter introduction email.

Sent on weekday afternoons for the next day's shoots (Saturday through
Monday when run on a Friday). Each order gets one email introducing the
crew to the client's job contacts, copied to the crew, the order's account
manager and team leader, and the production team of the shoot's state.
"""
import logging
from collections.abc import Callable
from datetime import date

from sqlmodel import Session

from studio_ops.core.clock import local_now
from studio_ops.core.config import settings
from studio_ops.core.constants import EventTypeId, UserRoleId
from studio_ops.core.templating import render
from studio_ops.models import Event, User
from studio_ops.notifications.mailer import EmailMessage, dispatch_email
from studio_ops.repositories.event import EventRepository
from studio_ops.repositories.order_job import OrderJobRepository
from studio_ops.repositories.user import UserRepository

logger = logging.getLogger(__name__)

# Priority order for the "who you'll meet" list.
MEET_CREW_EVENT_TYPE_IDS = [
    EventTypeId.PRODUCER,
    EventTypeId.SHOOT,
    EventTypeId.ADDITIONAL_SHOOTER,
]


def _add_unique(emails: list[str], email: str | None) -> None:
    if email and email not in emails:
        emails.append(email)


class ShooterIntroductionEmail:
    """Batch job sending one introduction email per order with a shoot tomorrow.

    Args:
        session: Database session.
        dispatch: Callable that sends or queues an ``EmailMessage``.
        today: Run as if on this date; defaults to the local date.
    """

    def __init__(
        self,
        session: Session,
        dispatch: Callable[[EmailMessage], None] = dispatch_email,
        today: date | None = None,
    ):
        self.session = session
        self.dispatch = dispatch
        self.today = today or local_now().date()
        self.event_repository = EventRepository(session)
        self.order_job_repository = OrderJobRepository(session)
        self.user_repository = UserRepository(session)

    def handle(self) -> dict:
        """Send the emails. Returns counts of orders processed, sent and failed."""
        logger.info(f"------- Start process of shooter introduction email on {self.today} -------")
        stats = {"orders": 0, "sent": 0, "failed": 0}

        events = self.event_repository.get_tomorrow_order_events(
            [EventTypeId.SHOOT], today=self.today
        )
        if not events:
            logger.info("No shoot events found for tomorrow")
            return stats

        for order_id, order_events in self.group_events_by_order_id(events).items():
            stats["orders"] += 1
            if self.process_shooter_introduction_email(order_events):
                stats["sent"] += 1
            else:
                stats["failed"] += 1

        logger.info(f"Shooter introduction email finished: {stats}")
        return stats

    def group_events_by_order_id(self, events: list[Event]) -> dict[int, list[Event]]:
        """Group events by their order, keeping event order. Non-order events are dropped."""
        grouped: dict[int, list[Event]] = {}
        for event in events:
            job = event.order_job
            if job is None or not job.order_id:
                continue
            grouped.setdefault(job.order_id, []).append(event)
        return grouped

    def process_shooter_introduction_email(self, events: list[Event]) -> bool:
        """Build and send one order's email. On any error send an error email instead."""
        try:
            order_job = events[0].order_job
            order = order_job.order

            crews = self.order_job_repository.load_job_crews_categorised_by_event_types(
                order_job, MEET_CREW_EVENT_TYPE_IDS
            )
            primary_crew = self.get_primary_crew(crews)
            meet_crews = self.get_meet_crews(crews, MEET_CREW_EVENT_TYPE_IDS)

            message = EmailMessage(
                subject=f"FILMING REMINDER: {order.name}",
                body=render(
                    "emails/shoot_introduction.html",
                    primary_crew=primary_crew,
                    meet_crews=meet_crews,
                    am=order.account_manager,
                    order=order,
                    events=events,
                ),
                to=order.all_job_contact_emails,
                cc=self.get_email_ccs(events),
                reply_to=self.get_email_reply_to(events[0]),
            )
            self.dispatch(message)
            logger.info(f"Shooter introduction email dispatched for order #{order.id}")
            return True
        except Exception as e:
            logger.error(f"Shooter introduction email failed for order #{events[0].order_job.order_id}: {e}")
            self.send_error_email(events, e)
            return False

    def get_primary_crew(self, crews: dict[int, list[User]]) -> User | None:
        """The producer if one is booked, otherwise the shooter. The latest booking wins."""
        if crews.get(EventTypeId.PRODUCER):
            return crews[EventTypeId.PRODUCER][-1]
        if crews.get(EventTypeId.SHOOT):
            return crews[EventTypeId.SHOOT][-1]
        return None

    def get_meet_crews(self, crews: dict[int, list[User]], event_type_ids: list[int]) -> list[User]:
        """Crew in ``event_type_ids`` priority order, each person once."""
        users: list[User] = []
        for event_type_id in event_type_ids:
            for user in crews.get(event_type_id, []):
                if all(existing.id != user.id for existing in users):
                    users.append(user)
        return users

    def get_email_ccs(self, events: list[Event]) -> list[str]:
        """Assignees, account manager, team leader and state production staff."""
        cc_list: list[str] = []
        for event in events:
            if event.user is not None:
                _add_unique(cc_list, event.user.email)

            order = event.order
            if order is not None:
                if order.account_manager is not None:
                    _add_unique(cc_list, order.account_manager.email)
                if order.team_leader is not None:
                    _add_unique(cc_list, order.team_leader.email)

            if event.state is not None:
                productions = self.user_repository.get_users_by_roles_and_states(
                    [UserRoleId.PRODUCTION], [event.state.state_in_charge]
                )
                for user in productions:
                    _add_unique(cc_list, user.email)
        return cc_list

    def get_email_reply_to(self, event: Event) -> dict[str, str]:
        order = event.order
        am = order.account_manager if order is not None else None
        if am is None or not am.email:
            return {}
        return {"name": am.full_name, "email": am.email}

    def send_error_email(self, events: list[Event], error: Exception) -> None:
        job = events[0].order_job if events else None
        order_id = job.order_id if job is not None else "unknown"
        message = EmailMessage(
            subject=f"Error occur when send shooter introduction email. order id #{order_id}",
            body=str(error),
            to=[settings.email_group_general_error],
        )
        try:
            self.dispatch(message)
        except Exception as e:
            logger.error(f"Could not send shooter introduction error email for order #{order_id}: {e}")
