"""
Typed views of the ORM event tags.

``{prefix}.event_listener`` requires an ``event`` attribute;
``{prefix}.event_subscriber`` needs none. Both accept ``connection``
(absent means every connection) and ``priority`` (int, default 0).
"""

from typing import Any, Mapping, Optional, Union
from dataclasses import dataclass

from ..di.errors import InvalidConfigurationError


@dataclass(frozen=True, slots=True)
class ListenerTag:
    service_id: str
    event: str
    connection: Optional[str] = None
    priority: int = 0

    @property
    def is_listener(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class SubscriberTag:
    service_id: str
    connection: Optional[str] = None
    priority: int = 0

    @property
    def is_listener(self) -> bool:
        return False


EventTag = Union[ListenerTag, SubscriberTag]


def _parse_priority(service_id: str, attributes: Mapping[str, Any]) -> int:
    value = attributes.get("priority")
    if value is None:
        return 0
    if isinstance(value, bool):
        value = None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(
            f'The "priority" attribute of service "{service_id}" must be an integer, '
            f"got {attributes.get('priority')!r}.",
            service_id=service_id,
        ) from None


def parse_listener_tag(service_id: str, attributes: Mapping[str, Any]) -> ListenerTag:
    event = attributes.get("event")
    if event is None:
        raise InvalidConfigurationError(
            f'ORM event listener "{service_id}" must specify the "event" attribute.',
            service_id=service_id,
        )
    return ListenerTag(
        service_id=service_id,
        event=event,
        connection=attributes.get("connection"),
        priority=_parse_priority(service_id, attributes),
    )


def parse_subscriber_tag(service_id: str, attributes: Mapping[str, Any]) -> SubscriberTag:
    return SubscriberTag(
        service_id=service_id,
        connection=attributes.get("connection"),
        priority=_parse_priority(service_id, attributes),
    )
