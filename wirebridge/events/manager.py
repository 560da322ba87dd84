"""
EventManager - per-connection dispatcher for ORM lifecycle events.

Listeners are objects exposing a method named after each event they handle.
With a container (usually a ServiceLocator) a listener may be given as a
service id and is only instantiated the first time its event is dispatched.
"""

from typing import Any, Dict, Iterable, List, Optional, Protocol, Union
import inspect
import logging

from ..di.errors import DIError
from .args import EventArgs
from .subscriber import EventSubscriber

logger = logging.getLogger("wirebridge.events.manager")


class ServiceProvider(Protocol):
    def get(self, service_id: str) -> Any:
        ...


def _listener_key(listener: Any) -> str:
    if isinstance(listener, str):
        return listener
    return f"object:{id(listener)}"


class EventManager:
    """
    Registry of listeners per event name.

    Args:
        container: Resolves listeners registered by service id
    """

    def __init__(self, container: Optional[ServiceProvider] = None):
        self._container = container
        self._listeners: Dict[str, Dict[str, Any]] = {}
        self._initialized: Dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_event_listener(self, events: Union[str, Iterable[str]], listener: Any) -> None:
        """Register ``listener`` for one or more events."""
        if isinstance(listener, str) and self._container is None:
            raise DIError(
                f'Cannot register listener "{listener}" by service id: '
                f"the event manager has no container to resolve it."
            )

        key = _listener_key(listener)
        for event in _as_event_list(events):
            listeners = self._listeners.setdefault(event, {})
            listeners[key] = listener
            if isinstance(listener, str):
                self._initialized[event] = False
            logger.debug(f"Added listener {key} for '{event}'")

    def remove_event_listener(self, events: Union[str, Iterable[str]], listener: Any) -> None:
        key = _listener_key(listener)
        for event in _as_event_list(events):
            listeners = self._listeners.get(event)
            if listeners is None:
                continue
            if key in listeners:
                del listeners[key]
            else:
                # A listener registered by id is stored under its id once resolved.
                for stored_key, stored in list(listeners.items()):
                    if stored is listener:
                        del listeners[stored_key]
            if not listeners:
                del self._listeners[event]
                self._initialized.pop(event, None)

    def add_event_subscriber(self, subscriber: EventSubscriber) -> None:
        self.add_event_listener(subscriber.get_subscribed_events(), subscriber)

    def remove_event_subscriber(self, subscriber: EventSubscriber) -> None:
        self.remove_event_listener(subscriber.get_subscribed_events(), subscriber)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_listeners(self, event: str) -> List[Any]:
        """Listeners for ``event`` in registration order, ids resolved."""
        if not self._initialized.get(event, True):
            self._initialize_listeners(event)
        return list(self._listeners.get(event, {}).values())

    def get_all_listeners(self) -> Dict[str, List[Any]]:
        return {event: self.get_listeners(event) for event in list(self._listeners)}

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def _initialize_listeners(self, event: str) -> None:
        listeners = self._listeners[event]
        for key, listener in listeners.items():
            if isinstance(listener, str):
                listeners[key] = self._container.get(listener)
                logger.debug(f"Resolved listener '{listener}' for '{event}'")
        self._initialized[event] = True

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch_event(self, event: str, args: Optional[EventArgs] = None) -> None:
        """Call ``listener.<event>(args)`` on every listener, in order."""
        if not self.has_listeners(event):
            return

        if args is None:
            args = EventArgs.empty()

        for listener in self.get_listeners(event):
            getattr(listener, event)(args)

    async def dispatch_event_async(self, event: str, args: Optional[EventArgs] = None) -> None:
        """Like dispatch_event, awaiting listeners that return awaitables."""
        if not self.has_listeners(event):
            return

        if args is None:
            args = EventArgs.empty()

        for listener in self.get_listeners(event):
            result = getattr(listener, event)(args)
            if inspect.isawaitable(result):
                await result


def _as_event_list(events: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(events, str):
        return [events]
    return list(events)
