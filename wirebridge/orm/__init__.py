"""
ORM integration: event tags, the listener wiring compiler pass and the
config extension that sets both up.
"""

from .tags import ListenerTag, SubscriberTag, parse_listener_tag, parse_subscriber_tag
from .passes import RegisterEventListenersAndSubscribersPass, format_manager_id
from .extension import (
    OrmEventsExtension,
    build_container_builder,
    CONNECTIONS_PARAMETER,
    EVENT_MANAGER_TEMPLATE,
)

__all__ = [
    "ListenerTag",
    "SubscriberTag",
    "parse_listener_tag",
    "parse_subscriber_tag",
    "RegisterEventListenersAndSubscribersPass",
    "format_manager_id",
    "OrmEventsExtension",
    "build_container_builder",
    "CONNECTIONS_PARAMETER",
    "EVENT_MANAGER_TEMPLATE",
]
