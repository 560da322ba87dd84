"""
OrmEventsExtension - turns the ``orm`` and ``services`` config sections into
container definitions and registers the listener wiring pass.

Expected config::

    orm:
      tag_prefix: orm                  # optional
      connections:
        default: {url: "sqlite:///app.db"}
        audit: {url: "postgresql://..."}
    services:
      ...                              # see wirebridge.di.loader
"""

from typing import Any, Mapping, Optional
import logging

from ..config import ConfigLoader
from ..di.builder import ContainerBuilder
from ..di.container import SERVICE_CONTAINER_ID
from ..di.definitions import Definition, Reference
from ..di.errors import InvalidConfigurationError
from ..di.loader import load_services
from ..events.manager import EventManager
from .passes import RegisterEventListenersAndSubscribersPass, format_manager_id

logger = logging.getLogger("wirebridge.orm.extension")

CONNECTIONS_PARAMETER = "orm.connections"
EVENT_MANAGER_TEMPLATE = "orm.{}_connection.event_manager"
DEFAULT_TAG_PREFIX = "orm"


class OrmEventsExtension:
    """
    Args:
        config: A ConfigLoader or a plain mapping
        manager_template: Service id template for per-connection managers
    """

    def __init__(self, config: Any, manager_template: str = EVENT_MANAGER_TEMPLATE):
        self.config = config.to_dict() if isinstance(config, ConfigLoader) else dict(config or {})
        self.manager_template = manager_template

    @property
    def connections(self) -> Mapping[str, Any]:
        orm = self.config.get("orm") or {}
        connections = orm.get("connections") or {}
        if not isinstance(connections, Mapping):
            raise InvalidConfigurationError(
                f'"orm.connections" must be a mapping of connection name to settings, '
                f"got {type(connections).__name__}."
            )
        return connections

    @property
    def tag_prefix(self) -> str:
        return (self.config.get("orm") or {}).get("tag_prefix", DEFAULT_TAG_PREFIX)

    def load(self, builder: ContainerBuilder) -> None:
        connections = dict(self.connections)
        builder.set_parameter(CONNECTIONS_PARAMETER, connections)

        for name in connections:
            manager_id = format_manager_id(self.manager_template, name)
            if not builder.has_definition(manager_id):
                builder.set_definition(
                    manager_id, Definition(EventManager, [Reference(SERVICE_CONTAINER_ID)])
                )

        load_services(builder, self.config.get("services") or {})

        builder.add_compiler_pass(
            RegisterEventListenersAndSubscribersPass(
                CONNECTIONS_PARAMETER, self.manager_template, self.tag_prefix
            )
        )
        logger.debug(
            f"Loaded {len(connections)} connection(s) with tag prefix '{self.tag_prefix}'"
        )


def build_container_builder(config: Any, builder: Optional[ContainerBuilder] = None) -> ContainerBuilder:
    """Create (or extend) a builder from ``config``, ready to compile."""
    builder = builder or ContainerBuilder()
    OrmEventsExtension(config).load(builder)
    return builder
