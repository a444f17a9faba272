"""Turn events into records for the front-end calendar widget."""
import logging
from collections.abc import Iterable
from datetime import datetime

from studio_ops.core.config import settings
from studio_ops.core.constants import RECORDING_EVENT_TYPE_IDS, OrderStatusId
from studio_ops.models import Event

logger = logging.getLogger(__name__)

ERROR_PLACEHOLDER = "Error occur"


def format_production_date(value: datetime) -> str:
    """Format like "Tue 20/10/2026 9:30am"."""
    hour = value.hour % 12 or 12
    period = "am" if value.hour < 12 else "pm"
    return f"{value:%a %d/%m/%Y} {hour}:{value:%M}{period}"


def _is_order_cancelled(event: Event) -> bool:
    order = event.order
    return order is not None and order.order_status_id == OrderStatusId.CANCELLED


def process_event_title(event: Event) -> str:
    """Build "[ORDER CANCELLED - ]<type> - <name>"."""
    try:
        parts = []
        if _is_order_cancelled(event):
            parts.append("ORDER CANCELLED")
        if event.event_type is not None and event.event_type.name:
            parts.append(event.event_type.name)
        if event.name:
            parts.append(event.name)
        return " - ".join(parts)
    except Exception as e:
        logger.warning(f"Could not build calendar title for event {event.id}: {e}")
        return ERROR_PLACEHOLDER


def process_event_detail(event: Event) -> str:
    """Build the tooltip text.

    Lists type, assignee, account manager and office. Bookings that are not
    part of the shoot (edits, meetings) also show the job's production date.
    """
    try:
        parts = []
        if _is_order_cancelled(event):
            parts.append("ORDER CANCELLED")
        if event.event_type is not None and event.event_type.name:
            parts.append(event.event_type.name)
        if event.user is not None and event.user.full_name:
            parts.append(event.user.full_name)
        order = event.order
        if order is not None:
            if order.account_manager is not None and order.account_manager.full_name:
                parts.append(order.account_manager.full_name)
            if order.office is not None and order.office.name:
                parts.append(order.office.name)

        detail = " - ".join(parts)

        job = event.order_job
        if event.event_type_id not in RECORDING_EVENT_TYPE_IDS and job is not None:
            if job.production_date is not None:
                detail += "<br>" + format_production_date(job.production_date)
        return detail
    except Exception as e:
        logger.warning(f"Could not build calendar detail for event {event.id}: {e}")
        return ERROR_PLACEHOLDER


def transform_events_for_calendar(events: Iterable[Event]) -> list[dict]:
    """Flatten events into the widget's record format.

    Formatting problems in one event's title or detail are replaced by a
    placeholder so the rest of the feed still renders.
    """
    calendar_events = []
    for event in events:
        detail = process_event_detail(event)
        title = process_event_title(event)

        background = settings.calendar_event_default_background_color
        if event.user is not None and event.user.calendar_color:
            background = event.user.calendar_color

        order = event.order
        calendar_events.append({
            "id": event.id,
            "title": title,
            "detail": detail,
            "eventType": event.event_type.name.lower() if event.event_type and event.event_type.name else "",
            "allDay": event.is_all_day,
            "start": event.start_time.isoformat(sep=" ") if event.start_time else None,
            "end": event.end_time.isoformat(sep=" ") if event.end_time else None,
            "className": f"event-{event.id}" if event.id is not None else "",
            "backgroundColor": background,
            "orderId": order.id if order is not None else None,
        })
    return calendar_events
