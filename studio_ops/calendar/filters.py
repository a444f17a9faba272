"""In-memory filters over event collections.

Each filter takes an already loaded iterable of events and returns a new
list, keeping input order. None of them touch the database beyond reading
relationships that are loaded or lazily loadable from the owning session.
"""
from collections.abc import Iterable

from studio_ops.core.constants import (
    EndOfDayTypeId,
    EventStatusId,
    StateId,
)
from studio_ops.models import Event


def _has_video(event: Event) -> bool:
    job = event.order_job
    return job is not None and job.video is not None and job.video.id is not None


def _eod_type_ids(event: Event) -> set[int]:
    return {note.end_of_day_type_id for note in event.end_of_day_notes}


def filter_events_by_type(events: Iterable[Event], event_type_ids: Iterable[int]) -> list[Event]:
    type_ids = set(event_type_ids)
    return [e for e in events if e.event_type_id in type_ids]


def filter_events_by_event_status(events: Iterable[Event] | None, event_status_id: int) -> list[Event]:
    """Keep events whose status equals ``event_status_id``."""
    if not events:
        return []
    return [e for e in events if e.event_status_id == event_status_id]


def filter_unpublished_events(events: Iterable[Event] | None) -> list[Event]:
    """Keep every event that is not scheduled."""
    if not events:
        return []
    return [e for e in events if e.event_status_id != EventStatusId.SCHEDULED]


def filter_bay_events_nsw(events: Iterable[Event], event_status_id: int) -> list[Event]:
    return [
        e for e in events
        if e.event_status_id == event_status_id and e.state_id == StateId.NSW
    ]


def filter_bay_events_other_states(events: Iterable[Event], event_status_id: int) -> list[Event]:
    return [
        e for e in events
        if e.event_status_id == event_status_id and e.state_id != StateId.NSW
    ]


def filter_event_without_video_and_eod(events: Iterable[Event]) -> list[Event]:
    """Events with no end-of-day note and no delivered video."""
    return [e for e in events if not e.end_of_day_notes and not _has_video(e)]


def filter_event_with_video_and_eod(events: Iterable[Event]) -> list[Event]:
    """Events with an end-of-day note and a delivered video."""
    return [e for e in events if e.end_of_day_notes and _has_video(e)]


def filter_event_with_video_and_without_eod(events: Iterable[Event]) -> list[Event]:
    """Events with a delivered video still missing their end-of-day note."""
    return [e for e in events if not e.end_of_day_notes and _has_video(e)]


def filter_event_without_video_and_with_eod(events: Iterable[Event]) -> list[Event]:
    """Events with an end-of-day note but no delivered video yet."""
    return [e for e in events if e.end_of_day_notes and not _has_video(e)]


def filter_event_only_has_event_eod(events: Iterable[Event]) -> list[Event]:
    """Events whose end-of-day notes are all event notes."""
    returned = []
    for event in events:
        type_ids = _eod_type_ids(event)
        if EndOfDayTypeId.EVENT in type_ids and EndOfDayTypeId.MEDIA not in type_ids:
            returned.append(event)
    return returned


def filter_event_only_has_media_eod(events: Iterable[Event]) -> list[Event]:
    """Events whose end-of-day notes are all media notes."""
    returned = []
    for event in events:
        type_ids = _eod_type_ids(event)
        if EndOfDayTypeId.MEDIA in type_ids and EndOfDayTypeId.EVENT not in type_ids:
            returned.append(event)
    return returned


def filter_event_with_media_and_event_eod(events: Iterable[Event]) -> list[Event]:
    """Events carrying both a media and an event end-of-day note."""
    returned = []
    for event in events:
        type_ids = _eod_type_ids(event)
        if EndOfDayTypeId.MEDIA in type_ids and EndOfDayTypeId.EVENT in type_ids:
            returned.append(event)
    return returned


def filter_event_without_eod(events: Iterable[Event]) -> list[Event]:
    return [e for e in events if not e.end_of_day_notes]


def categorize_events_by_state(events: Iterable[Event] | None) -> dict[str, list[Event]]:
    """Bucket events by lower-cased state name.

    Events without a state (or with a blank state name) land in "other".
    Every input event appears in exactly one bucket.
    """
    buckets: dict[str, list[Event]] = {}
    for event in events or []:
        name = event.state.name if event.state is not None else None
        key = name.lower() if name else "other"
        buckets.setdefault(key, []).append(event)
    return buckets


def filter_unscheduled_events_by_states(events: Iterable[Event] | None) -> dict[str, list[Event]]:
    unscheduled = filter_events_by_event_status(events, EventStatusId.UNSCHEDULED)
    return categorize_events_by_state(unscheduled)


def filter_on_hold_events_by_states(events: Iterable[Event] | None) -> dict[str, list[Event]]:
    on_hold = filter_events_by_event_status(events, EventStatusId.ON_HOLD)
    return categorize_events_by_state(on_hold)
