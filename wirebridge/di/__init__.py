"""
wirebridge dependency injection

Build-time service graph with tagged definitions and compiler passes.

Key Features:
- Definitions with constructor arguments, method calls and repeatable tags
- Priority-ordered compiler passes, stable on ties
- Service locators for lazy, private service access
- Runtime container with cycle detection
"""

from .definitions import (
    Definition,
    MethodCall,
    Reference,
    ServiceClosure,
    import_string,
)

from .builder import ContainerBuilder

from .compiler import (
    CompilerPass,
    PassConfig,
    sort_by_priority,
)

from .container import Container, SERVICE_CONTAINER_ID

from .locator import (
    ServiceLocator,
    register_service_locator,
    SERVICE_LOCATOR_TAG,
)

from .loader import load_services, parse_definition

from .errors import (
    DIError,
    ServiceNotFoundError,
    ParameterNotFoundError,
    InvalidConfigurationError,
    FrozenContainerError,
    DependencyCycleError,
)

__all__ = [
    # Definitions
    "Definition",
    "MethodCall",
    "Reference",
    "ServiceClosure",
    "import_string",

    # Builder & compilation
    "ContainerBuilder",
    "CompilerPass",
    "PassConfig",
    "sort_by_priority",

    # Runtime
    "Container",
    "SERVICE_CONTAINER_ID",
    "ServiceLocator",
    "register_service_locator",
    "SERVICE_LOCATOR_TAG",

    # Loading
    "load_services",
    "parse_definition",

    # Errors
    "DIError",
    "ServiceNotFoundError",
    "ParameterNotFoundError",
    "InvalidConfigurationError",
    "FrozenContainerError",
    "DependencyCycleError",
]
