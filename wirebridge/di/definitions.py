"""
Service definitions - the build-time description of how to create a service.

Definitions are plain mutable records. Compiler passes edit them through the
small API below; nothing is instantiated until the runtime container asks.
"""

from typing import Any, Callable, Dict, List, Optional, Type, Union
from dataclasses import dataclass, field
import importlib

from .errors import DIError


@dataclass(frozen=True, slots=True)
class Reference:
    """Points at another service by id, resolved when the owner is built."""
    id: str

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True, slots=True)
class ServiceClosure:
    """
    Argument resolved into a zero-argument callable returning the service.

    Lets a consumer defer instantiation of the referenced service until it
    actually needs it.
    """
    reference: Reference


@dataclass(slots=True)
class MethodCall:
    """A method invoked on the instance right after construction."""
    method: str
    arguments: List[Any] = field(default_factory=list)


class Definition:
    """
    How to build one service.

    Args:
        cls: Class (or "module:attr" import path) to instantiate
        arguments: Positional constructor arguments
        public: Whether Container.get() may return it directly
        shared: Cache one instance per container
        factory: Callable used instead of cls
    """

    def __init__(
        self,
        cls: Union[Type, str, None] = None,
        arguments: Optional[List[Any]] = None,
        *,
        public: bool = True,
        shared: bool = True,
        factory: Optional[Callable[..., Any]] = None,
    ):
        self.cls = cls
        self.arguments: List[Any] = list(arguments or [])
        self.calls: List[MethodCall] = []
        self.tags: Dict[str, List[Dict[str, Any]]] = {}
        self.public = public
        self.shared = shared
        self.factory = factory

    def __repr__(self) -> str:
        target = self.factory or self.cls
        name = getattr(target, "__qualname__", target)
        return f"Definition({name!r}, public={self.public}, calls={len(self.calls)})"

    # ------------------------------------------------------------------
    # Arguments
    # ------------------------------------------------------------------

    def add_argument(self, value: Any) -> "Definition":
        self.arguments.append(value)
        return self

    def replace_argument(self, index: int, value: Any) -> "Definition":
        """Replace the constructor argument at ``index``."""
        if not self.arguments:
            raise DIError(
                f"Cannot replace argument {index} of {self!r}: it has no arguments."
            )
        if index < 0 or index >= len(self.arguments):
            raise DIError(
                f"Cannot replace argument {index} of {self!r}: "
                f"index must be between 0 and {len(self.arguments) - 1}."
            )
        self.arguments[index] = value
        return self

    # ------------------------------------------------------------------
    # Method calls
    # ------------------------------------------------------------------

    def add_method_call(self, method: str, arguments: Optional[List[Any]] = None) -> "Definition":
        if not method:
            raise DIError("Method name cannot be empty.")
        self.calls.append(MethodCall(method, list(arguments or [])))
        return self

    def get_method_calls(self) -> List[MethodCall]:
        return list(self.calls)

    def has_method_call(self, method: str) -> bool:
        return any(call.method == method for call in self.calls)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def add_tag(self, name: str, **attributes: Any) -> "Definition":
        """Attach a tag. The same tag may be added several times."""
        self.tags.setdefault(name, []).append(dict(attributes))
        return self

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def get_tag(self, name: str) -> List[Dict[str, Any]]:
        return [dict(attrs) for attrs in self.tags.get(name, [])]

    def clear_tag(self, name: str) -> "Definition":
        self.tags.pop(name, None)
        return self

    # ------------------------------------------------------------------
    # Class resolution
    # ------------------------------------------------------------------

    def resolve_class(self) -> Type:
        """Return the class, importing it if it was given as a path."""
        if not isinstance(self.cls, str):
            if self.cls is None:
                raise DIError(f"{self!r} has neither a class nor a factory.")
            return self.cls
        return import_string(self.cls)


def import_string(path: str) -> Any:
    """Import ``"pkg.module:attr"`` or ``"pkg.module.attr"``."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")

    if not module_name or not attr:
        raise DIError(f"Invalid import path '{path}'. Use 'module:attr'.")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise DIError(f"Cannot import module '{module_name}' for '{path}': {e}") from e

    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise DIError(f"Module '{module_name}' has no attribute '{attr}'") from e
