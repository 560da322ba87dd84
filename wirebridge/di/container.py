"""
Runtime container - instantiates services from compiled definitions.
"""

from typing import Any, Dict, List, Optional
import difflib
import logging

from .definitions import Definition, Reference, ServiceClosure
from .errors import DependencyCycleError, ParameterNotFoundError, ServiceNotFoundError

logger = logging.getLogger("wirebridge.di.container")

SERVICE_CONTAINER_ID = "service_container"


class Container:
    """
    Creates services on demand.

    Only public services are reachable through get(); private ones can still
    be injected into others or handed out through a service locator.
    """

    def __init__(self, definitions: Dict[str, Definition], parameters: Optional[Dict[str, Any]] = None):
        self._definitions = dict(definitions)
        self._parameters = dict(parameters or {})
        self._instances: Dict[str, Any] = {SERVICE_CONTAINER_ID: self}
        self._loading: List[str] = []

    def has(self, service_id: str) -> bool:
        if service_id == SERVICE_CONTAINER_ID:
            return True
        definition = self._definitions.get(service_id)
        return definition is not None and definition.public

    def get(self, service_id: str) -> Any:
        if not self.has(service_id):
            if service_id in self._definitions:
                raise ServiceNotFoundError(
                    service_id,
                    reason="the service is private; inject it or expose it through a service locator",
                )
            public_ids = [sid for sid, d in self._definitions.items() if d.public]
            raise ServiceNotFoundError(
                service_id,
                candidates=difflib.get_close_matches(service_id, public_ids, n=3),
            )
        return self._resolve(service_id)

    def initialized(self, service_id: str) -> bool:
        return service_id in self._instances

    def get_parameter(self, name: str) -> Any:
        try:
            return self._parameters[name]
        except KeyError:
            raise ParameterNotFoundError(name) from None

    # ------------------------------------------------------------------
    # Internal resolution
    # ------------------------------------------------------------------

    def _resolve(self, service_id: str, requested_by: Optional[str] = None) -> Any:
        if service_id in self._instances:
            return self._instances[service_id]

        definition = self._definitions.get(service_id)
        if definition is None:
            raise ServiceNotFoundError(
                service_id,
                candidates=difflib.get_close_matches(service_id, self._definitions, n=3),
                requested_by=requested_by,
            )

        if service_id in self._loading:
            cycle = self._loading[self._loading.index(service_id):] + [service_id]
            raise DependencyCycleError(cycle)

        self._loading.append(service_id)
        try:
            instance = self._instantiate(service_id, definition)
        finally:
            self._loading.pop()

        return instance

    def _instantiate(self, service_id: str, definition: Definition) -> Any:
        arguments = [self._resolve_value(arg, service_id) for arg in definition.arguments]
        target = definition.factory or definition.resolve_class()
        instance = target(*arguments)

        # Cache before method calls so calls may reference the service itself.
        if definition.shared:
            self._instances[service_id] = instance

        for call in definition.calls:
            call_args = [self._resolve_value(arg, service_id) for arg in call.arguments]
            getattr(instance, call.method)(*call_args)

        logger.debug(f"Instantiated {service_id} ({type(instance).__qualname__})")
        return instance

    def _resolve_value(self, value: Any, requested_by: str) -> Any:
        if isinstance(value, Reference):
            return self._resolve(value.id, requested_by)
        if isinstance(value, ServiceClosure):
            target_id = value.reference.id
            return lambda: self._resolve(target_id, requested_by)
        if isinstance(value, list):
            return [self._resolve_value(v, requested_by) for v in value]
        if isinstance(value, tuple):
            return tuple(self._resolve_value(v, requested_by) for v in value)
        if isinstance(value, dict):
            return {k: self._resolve_value(v, requested_by) for k, v in value.items()}
        return value
