"""
ContainerBuilder - mutable service graph assembled at bootstrap.

Holds definitions and parameters, runs compiler passes once, then freezes
and hands out a runtime Container.
"""

from typing import Any, Dict, List, Optional, Union, Type
import difflib
import logging

from .compiler import CompilerPass, PassConfig
from .definitions import Definition
from .errors import FrozenContainerError, ParameterNotFoundError, ServiceNotFoundError

logger = logging.getLogger("wirebridge.di.builder")


class ContainerBuilder:
    """Build-time service graph."""

    def __init__(self, parameters: Optional[Dict[str, Any]] = None):
        self._definitions: Dict[str, Definition] = {}
        self._parameters: Dict[str, Any] = dict(parameters or {})
        self._pass_config = PassConfig()
        self._compiled = False

    @property
    def is_compiled(self) -> bool:
        return self._compiled

    def _ensure_mutable(self, action: str) -> None:
        if self._compiled:
            raise FrozenContainerError(action)

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def set_definition(self, service_id: str, definition: Definition) -> Definition:
        self._ensure_mutable(f"set definition '{service_id}'")
        self._definitions[service_id] = definition
        return definition

    def register(
        self,
        service_id: str,
        cls: Union[Type, str, None] = None,
        arguments: Optional[List[Any]] = None,
        **options: Any,
    ) -> Definition:
        """Create and store a Definition, returning it for further setup."""
        return self.set_definition(service_id, Definition(cls, arguments, **options))

    def has_definition(self, service_id: str) -> bool:
        return service_id in self._definitions

    def get_definition(self, service_id: str) -> Definition:
        try:
            return self._definitions[service_id]
        except KeyError:
            raise ServiceNotFoundError(
                service_id,
                candidates=difflib.get_close_matches(service_id, self._definitions, n=3),
            ) from None

    def remove_definition(self, service_id: str) -> None:
        self._ensure_mutable(f"remove definition '{service_id}'")
        self._definitions.pop(service_id, None)

    def get_definitions(self) -> Dict[str, Definition]:
        return dict(self._definitions)

    def find_tagged_service_ids(self, name: str) -> Dict[str, List[Dict[str, Any]]]:
        """
        Find services carrying tag ``name``.

        Returns:
            Mapping of service id to one attribute dict per tag instance,
            in definition registration order. The dicts are copies.
        """
        return {
            service_id: definition.get_tag(name)
            for service_id, definition in self._definitions.items()
            if definition.has_tag(name)
        }

    # ------------------------------------------------------------------
    # Parameters
    # ------------------------------------------------------------------

    def set_parameter(self, name: str, value: Any) -> None:
        self._ensure_mutable(f"set parameter '{name}'")
        self._parameters[name] = value

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    def get_parameter(self, name: str) -> Any:
        try:
            return self._parameters[name]
        except KeyError:
            raise ParameterNotFoundError(
                name, candidates=difflib.get_close_matches(name, self._parameters, n=3)
            ) from None

    def get_parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def add_compiler_pass(self, compiler_pass: CompilerPass, priority: int = 0) -> None:
        self._ensure_mutable("add a compiler pass")
        self._pass_config.add_pass(compiler_pass, priority)

    def get_compiler_passes(self) -> List[CompilerPass]:
        return self._pass_config.get_passes()

    def compile(self) -> None:
        """Run every compiler pass once and freeze the builder."""
        if self._compiled:
            return

        self._pass_config.run(self)
        self._compiled = True
        logger.info(
            f"Compiled container: {len(self._definitions)} definitions, "
            f"{len(self._pass_config)} passes"
        )

    def build(self) -> "Container":
        """Compile (if needed) and create the runtime container."""
        from .container import Container

        self.compile()
        return Container(self._definitions, self._parameters)
