"""Event subscriber contract."""

from typing import List, Protocol, runtime_checkable


@runtime_checkable
class EventSubscriber(Protocol):
    """
    An object that names the events it listens to.

    For each returned event name the subscriber must define a method of the
    same name taking the event args.
    """

    def get_subscribed_events(self) -> List[str]:
        ...
