"""Domain errors mapped to HTTP responses in ``studio_ops.main``."""


class EventWindowError(ValueError):
    """Raised when an event would end before it starts."""
