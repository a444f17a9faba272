"""Identifiers of the seeded reference rows and derived groupings."""

from enum import IntEnum


class EventStatusId(IntEnum):
    UNSCHEDULED = 1
    ON_HOLD = 2
    SCHEDULED = 3


class EventTypeId(IntEnum):
    SHOOT = 1
    PRODUCER = 2
    ADDITIONAL_SHOOTER = 3
    SHOOT_ASSISTANT = 4
    DRONE = 5
    MODEL_TALENT = 6
    EDIT = 7
    MEETING = 8


class StateId(IntEnum):
    NSW = 1
    VIC = 2
    QLD = 3
    WA = 4
    SA = 5
    TAS = 6
    ACT = 7
    NT = 8


class EndOfDayTypeId(IntEnum):
    MEDIA = 1
    EVENT = 2


class OrderStatusId(IntEnum):
    NEW = 1
    CONFIRMED = 2
    COMPLETED = 3
    CANCELLED = 4


class UserRoleId(IntEnum):
    ADMIN = 1
    ACCOUNT_MANAGER = 2
    TEAM_LEADER = 3
    PRODUCTION = 4
    SHOOTER = 5
    PRODUCER = 6
    EDITOR = 7


UNPUBLISHED_EVENT_STATUS_IDS = (EventStatusId.UNSCHEDULED, EventStatusId.ON_HOLD)

# Crew and equipment bookings that follow the shoot's time window.
SHOOT_RELATED_EVENT_TYPE_IDS = (
    EventTypeId.PRODUCER,
    EventTypeId.ADDITIONAL_SHOOTER,
    EventTypeId.SHOOT_ASSISTANT,
    EventTypeId.DRONE,
    EventTypeId.MODEL_TALENT,
)

RECORDING_EVENT_TYPE_IDS = (EventTypeId.SHOOT, *SHOOT_RELATED_EVENT_TYPE_IDS)

EVENT_STATUS_NAMES = {
    EventStatusId.UNSCHEDULED: "Unscheduled",
    EventStatusId.ON_HOLD: "On Hold",
    EventStatusId.SCHEDULED: "Scheduled",
}

EVENT_TYPE_NAMES = {
    EventTypeId.SHOOT: "Shoot",
    EventTypeId.PRODUCER: "Producer",
    EventTypeId.ADDITIONAL_SHOOTER: "Additional Shooter",
    EventTypeId.SHOOT_ASSISTANT: "Shoot Assistant",
    EventTypeId.DRONE: "Drone",
    EventTypeId.MODEL_TALENT: "Model Talent",
    EventTypeId.EDIT: "Edit",
    EventTypeId.MEETING: "Meeting",
}

# state -> (name, state in charge)
STATES = {
    StateId.NSW: ("NSW", StateId.NSW),
    StateId.VIC: ("VIC", StateId.VIC),
    StateId.QLD: ("QLD", StateId.QLD),
    StateId.WA: ("WA", StateId.WA),
    StateId.SA: ("SA", StateId.SA),
    StateId.TAS: ("TAS", StateId.VIC),
    StateId.ACT: ("ACT", StateId.NSW),
    StateId.NT: ("NT", StateId.SA),
}

USER_ROLE_NAMES = {
    UserRoleId.ADMIN: "Admin",
    UserRoleId.ACCOUNT_MANAGER: "Account Managers",
    UserRoleId.TEAM_LEADER: "Team Leaders",
    UserRoleId.PRODUCTION: "Production",
    UserRoleId.SHOOTER: "Shooters",
    UserRoleId.PRODUCER: "Producers",
    UserRoleId.EDITOR: "Editors",
}
