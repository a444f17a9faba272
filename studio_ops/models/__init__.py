from studio_ops.models.end_of_day import EndOfDayNote
from studio_ops.models.event import Event
from studio_ops.models.order import Office, Order, OrderJob, OrderJobElement, Product, Video
from studio_ops.models.reference import EventStatus, EventType, State
from studio_ops.models.user import User

__all__ = [
    "EndOfDayNote",
    "Event",
    "EventStatus",
    "EventType",
    "Office",
    "Order",
    "OrderJob",
    "OrderJobElement",
    "Product",
    "State",
    "User",
    "Video",
]
