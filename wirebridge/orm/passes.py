"""
Compiler pass registering ORM event listeners and subscribers on the event
manager of each connection.
"""

from typing import Any, Dict, List, Mapping, Union
import logging

from ..di.builder import ContainerBuilder
from ..di.compiler import sort_by_priority
from ..di.definitions import Definition, Reference
from ..di.errors import InvalidConfigurationError
from ..di.locator import register_service_locator
from .tags import EventTag, parse_listener_tag, parse_subscriber_tag

logger = logging.getLogger("wirebridge.orm.passes")


class RegisterEventListenersAndSubscribersPass:
    """
    Wire ``{prefix}.event_listener`` and ``{prefix}.event_subscriber``
    services onto per-connection event managers.

    Args:
        connections: Mapping of connection name to its config, or the name of
            a container parameter holding that mapping
        manager_template: Event manager service id with one placeholder for
            the connection name ("{}" or "%s")
        tag_prefix: Prefix of the listener and subscriber tags
    """

    def __init__(
        self,
        connections: Union[Mapping[str, Any], str],
        manager_template: str,
        tag_prefix: str,
    ):
        self.connections = connections
        self.manager_template = manager_template
        self.tag_prefix = tag_prefix
        self._event_managers: Dict[str, Definition] = {}

    def process(self, container: ContainerBuilder) -> None:
        tagged_subscribers = container.find_tagged_service_ids(f"{self.tag_prefix}.event_subscriber")
        tagged_listeners = container.find_tagged_service_ids(f"{self.tag_prefix}.event_listener")

        if not tagged_subscribers and not tagged_listeners:
            return

        connections = self._resolve_connections(container)
        self._event_managers = {}

        tags: List[EventTag] = []
        for service_id, instances in tagged_listeners.items():
            tags.extend(parse_listener_tag(service_id, attrs) for attrs in instances)
        for service_id, instances in tagged_subscribers.items():
            tags.extend(parse_subscriber_tag(service_id, attrs) for attrs in instances)

        listener_refs: Dict[str, Dict[str, Reference]] = {}

        for tag in sort_by_priority(tags, lambda t: t.priority):
            targets = [tag.connection] if tag.connection is not None else list(connections)

            for connection in targets:
                if connection not in connections:
                    raise InvalidConfigurationError(
                        f'The ORM connection "{connection}" referenced in service '
                        f'"{tag.service_id}" does not exist. Available connection names: '
                        f'{", ".join(map(str, connections))}',
                        service_id=tag.service_id,
                    )

                manager = self._get_event_manager_definition(container, connection)

                if tag.is_listener:
                    listener_refs.setdefault(connection, {})[tag.service_id] = Reference(tag.service_id)
                    manager.add_method_call("add_event_listener", [[tag.event], tag.service_id])
                    logger.debug(
                        f"Listener {tag.service_id} -> {connection} "
                        f"(event={tag.event}, priority={tag.priority})"
                    )
                else:
                    manager.add_method_call("add_event_subscriber", [Reference(tag.service_id)])
                    logger.debug(
                        f"Subscriber {tag.service_id} -> {connection} (priority={tag.priority})"
                    )

        # Listeners are handed to the manager by id; give it a locator over
        # exactly those ids instead of the whole container so they can stay private.
        for connection, refs in listener_refs.items():
            self._get_event_manager_definition(container, connection).replace_argument(
                0, register_service_locator(container, refs)
            )

    def _resolve_connections(self, container: ContainerBuilder) -> Mapping[str, Any]:
        if isinstance(self.connections, str):
            return container.get_parameter(self.connections)
        return self.connections

    def _get_event_manager_definition(self, container: ContainerBuilder, connection: str) -> Definition:
        if connection not in self._event_managers:
            self._event_managers[connection] = container.get_definition(
                format_manager_id(self.manager_template, connection)
            )
        return self._event_managers[connection]


def format_manager_id(template: str, connection: str) -> str:
    if "%s" in template:
        return template % connection
    return template.format(connection)
