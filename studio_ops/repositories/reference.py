"""Lookups over the state and event type reference tables."""
from sqlmodel import Session, select

from studio_ops.core.constants import RECORDING_EVENT_TYPE_IDS
from studio_ops.models import EventType, State


class EventTypeRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_event_types_list(self) -> list[EventType]:
        return list(self.session.exec(select(EventType).order_by(EventType.name)).all())

    def get_recording_event_types(self) -> list[int]:
        """Event types that put a camera on site: the shoot and its crew bookings."""
        return [int(type_id) for type_id in RECORDING_EVENT_TYPE_IDS]


class StateRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_states_list(self) -> list[State]:
        return list(self.session.exec(select(State).order_by(State.id)).all())

    def get_state_in_charge_states_ids(self, state_id: int | None) -> list[int]:
        """Ids of every state run by ``state_id``'s production team."""
        if not state_id:
            return []
        statement = select(State.id).where(State.state_in_charge == state_id)
        return list(self.session.exec(statement).all())
