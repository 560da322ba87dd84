"""
Load service definitions from a config mapping.

Format::

    services:
      app.audit_listener:
        class: myapp.listeners:AuditListener
        arguments: ["@logger", 3]
        public: false
        calls:
          - [configure, [debug]]
        tags:
          - {name: orm.event_listener, event: post_persist, priority: 10}
          - orm.event_subscriber

A string argument starting with "@" is a reference; "@@" escapes a literal
"@".
"""

from typing import Any, Dict, Mapping

from .builder import ContainerBuilder
from .definitions import Definition, Reference
from .errors import InvalidConfigurationError

_KNOWN_KEYS = frozenset(("class", "arguments", "public", "shared", "tags", "calls"))


def parse_argument(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("@"):
        if value.startswith("@@"):
            return value[1:]
        return Reference(value[1:])
    if isinstance(value, list):
        return [parse_argument(v) for v in value]
    if isinstance(value, dict):
        return {k: parse_argument(v) for k, v in value.items()}
    return value


def parse_definition(service_id: str, config: Mapping[str, Any]) -> Definition:
    if not isinstance(config, Mapping):
        raise InvalidConfigurationError(
            f'Service "{service_id}" must be a mapping, got {type(config).__name__}.',
            service_id=service_id,
        )

    unknown = set(config) - _KNOWN_KEYS
    if unknown:
        raise InvalidConfigurationError(
            f'Service "{service_id}" has unknown keys: {", ".join(sorted(unknown))}. '
            f'Allowed: {", ".join(sorted(_KNOWN_KEYS))}.',
            service_id=service_id,
        )

    if "class" not in config:
        raise InvalidConfigurationError(
            f'Service "{service_id}" must specify a "class".', service_id=service_id
        )

    definition = Definition(
        config["class"],
        [parse_argument(arg) for arg in config.get("arguments") or []],
        public=bool(config.get("public", True)),
        shared=bool(config.get("shared", True)),
    )

    for call in config.get("calls") or []:
        if isinstance(call, str):
            definition.add_method_call(call)
        else:
            method, *args = call
            definition.add_method_call(method, [parse_argument(a) for a in args[0]] if args else [])

    for tag in config.get("tags") or []:
        if isinstance(tag, str):
            definition.add_tag(tag)
            continue
        if not isinstance(tag, Mapping) or "name" not in tag:
            raise InvalidConfigurationError(
                f'A tag of service "{service_id}" must be a string or a mapping with a "name".',
                service_id=service_id,
            )
        attributes = {k: v for k, v in tag.items() if k != "name"}
        definition.add_tag(tag["name"], **attributes)

    return definition


def load_services(builder: ContainerBuilder, services: Mapping[str, Any]) -> Dict[str, Definition]:
    """Parse each entry and register it on ``builder``."""
    loaded = {}
    for service_id, config in (services or {}).items():
        loaded[service_id] = builder.set_definition(service_id, parse_definition(service_id, config))
    return loaded
