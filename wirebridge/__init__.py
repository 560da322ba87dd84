"""
wirebridge - wires ORM event listeners and subscribers onto per-connection
event managers at container build time.
"""

__version__ = "0.1.0"

from .di import (
    ContainerBuilder,
    Container,
    Definition,
    Reference,
    ServiceLocator,
    register_service_locator,
    DIError,
    InvalidConfigurationError,
    ServiceNotFoundError,
)
from .events import EventArgs, LifecycleEventArgs, EventManager, EventSubscriber
from .orm import (
    RegisterEventListenersAndSubscribersPass,
    OrmEventsExtension,
    build_container_builder,
)
from .config import ConfigLoader, ConfigError

__all__ = [
    "__version__",
    "ContainerBuilder",
    "Container",
    "Definition",
    "Reference",
    "ServiceLocator",
    "register_service_locator",
    "DIError",
    "InvalidConfigurationError",
    "ServiceNotFoundError",
    "EventArgs",
    "LifecycleEventArgs",
    "EventManager",
    "EventSubscriber",
    "RegisterEventListenersAndSubscribersPass",
    "OrmEventsExtension",
    "build_container_builder",
    "ConfigLoader",
    "ConfigError",
]
