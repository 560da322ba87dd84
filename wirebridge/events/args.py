"""Event payloads."""

from typing import Any, Optional


class EventArgs:
    """Base class for event payloads. Carries no data by itself."""

    _empty: Optional["EventArgs"] = None

    @classmethod
    def empty(cls) -> "EventArgs":
        if EventArgs._empty is None:
            EventArgs._empty = EventArgs()
        return EventArgs._empty


class LifecycleEventArgs(EventArgs):
    """Payload for entity lifecycle events (pre_persist, post_update, ...)."""

    def __init__(self, entity: Any, connection: Optional[str] = None):
        self.entity = entity
        self.connection = connection

    def __repr__(self) -> str:
        return f"LifecycleEventArgs({self.entity!r}, connection={self.connection!r})"
