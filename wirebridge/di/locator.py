"""
Service locators - small, fixed maps of service id to lazily built service.

A locator lets a consumer reach a handful of services by id without making
them public on the container.
"""

from typing import Any, Callable, Dict, List, Mapping
import hashlib
import json
import logging

from .definitions import Definition, Reference, ServiceClosure
from .errors import ServiceNotFoundError

logger = logging.getLogger("wirebridge.di.locator")

SERVICE_LOCATOR_TAG = "container.service_locator"


class ServiceLocator:
    """Resolves a fixed set of ids through zero-argument factories."""

    __slots__ = ("_factories", "_instances")

    def __init__(self, factories: Mapping[str, Callable[[], Any]]):
        self._factories: Dict[str, Callable[[], Any]] = dict(factories)
        self._instances: Dict[str, Any] = {}

    def has(self, service_id: str) -> bool:
        return service_id in self._factories

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def get(self, service_id: str) -> Any:
        if service_id in self._instances:
            return self._instances[service_id]

        try:
            factory = self._factories[service_id]
        except KeyError:
            raise ServiceNotFoundError(
                service_id,
                candidates=sorted(self._factories),
                reason="not provided by this service locator",
            ) from None

        instance = factory()
        self._instances[service_id] = instance
        return instance

    def provided_services(self) -> List[str]:
        return list(self._factories)

    def __repr__(self) -> str:
        return f"ServiceLocator({self.provided_services()!r})"


def register_service_locator(container, refs: Mapping[str, Reference]) -> Reference:
    """
    Register a private ServiceLocator definition for ``refs``.

    Returns a Reference to it. Identical maps share a single definition.
    """
    closures = {
        service_id: ref if isinstance(ref, ServiceClosure) else ServiceClosure(ref)
        for service_id, ref in refs.items()
    }

    digest = hashlib.sha256(
        json.dumps(
            {service_id: c.reference.id for service_id, c in closures.items()},
            sort_keys=True,
        ).encode()
    ).hexdigest()[:12]
    locator_id = f".service_locator.{digest}"

    if not container.has_definition(locator_id):
        definition = Definition(ServiceLocator, [closures], public=False)
        definition.add_tag(SERVICE_LOCATOR_TAG)
        container.set_definition(locator_id, definition)
        logger.debug(f"Registered {locator_id} for {sorted(closures)}")

    return Reference(locator_id)
