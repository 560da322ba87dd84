"""
DI-specific error types with rich diagnostics.
"""

from typing import List, Optional, Sequence


class DIError(Exception):
    """Base exception for DI errors."""
    pass


class ServiceNotFoundError(DIError):
    """No definition (or no public service) registered under the requested id."""

    def __init__(
        self,
        service_id: str,
        candidates: Optional[Sequence[str]] = None,
        requested_by: Optional[str] = None,
        reason: Optional[str] = None,
    ):
        self.service_id = service_id
        self.candidates = list(candidates or [])
        self.requested_by = requested_by
        self.reason = reason

        msg = f'Service "{service_id}" not found'
        if reason:
            msg += f": {reason}"

        if requested_by:
            msg += f"\nRequested by: {requested_by}"

        if self.candidates:
            msg += "\n\nDid you mean one of these?"
            for candidate in self.candidates:
                msg += f"\n  - {candidate}"

        super().__init__(msg)


class ParameterNotFoundError(DIError):
    """Container parameter not set."""

    def __init__(self, name: str, candidates: Optional[Sequence[str]] = None):
        self.name = name
        self.candidates = list(candidates or [])

        msg = f'Parameter "{name}" is not defined'
        if self.candidates:
            msg += f" (known: {', '.join(self.candidates)})"

        super().__init__(msg)


class InvalidConfigurationError(DIError):
    """Service declarations or tags are malformed."""

    def __init__(self, message: str, service_id: Optional[str] = None):
        self.service_id = service_id
        super().__init__(message)


class FrozenContainerError(DIError):
    """Attempted to mutate a compiled container builder."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(
            f"Cannot {action}: the container builder is already compiled."
            f"\n\nSuggested fix:"
            f"\n  - Register definitions and compiler passes before calling compile()"
        )


class DependencyCycleError(DIError):
    """Circular reference detected while instantiating services."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle

        msg = "Detected service reference cycle:"
        for i, service_id in enumerate(cycle):
            arrow = " -> " if i < len(cycle) - 1 else ""
            msg += f"\n  {service_id}{arrow}"

        msg += "\n\nSuggested fixes:"
        msg += "\n  - Inject a service locator instead of the service itself"
        msg += "\n  - Move one of the dependencies to a method call"

        super().__init__(msg)
