"""
Compiler passes and their ordering.
"""

from typing import Any, Callable, Dict, Iterable, List, Protocol, TypeVar, TYPE_CHECKING, runtime_checkable
import logging

if TYPE_CHECKING:
    from .builder import ContainerBuilder

logger = logging.getLogger("wirebridge.di.compiler")

T = TypeVar("T")


@runtime_checkable
class CompilerPass(Protocol):
    """A build-time transformation over a container builder."""

    def process(self, container: "ContainerBuilder") -> None:
        ...


def sort_by_priority(items: Iterable[T], priority: Callable[[T], int]) -> List[T]:
    """
    Order items by descending priority, keeping input order for ties.

    Items are grouped into per-priority buckets (dicts keep insertion order)
    and the buckets are concatenated from the highest priority down. heapq
    and PriorityQueue give no FIFO guarantee between equal keys, so they
    must not be used here.
    """
    buckets: Dict[int, List[T]] = {}
    for item in items:
        buckets.setdefault(priority(item), []).append(item)

    ordered: List[T] = []
    for key in sorted(buckets, reverse=True):
        ordered.extend(buckets[key])
    return ordered


class PassConfig:
    """Holds compiler passes; higher priority runs first."""

    def __init__(self):
        self._passes: List[tuple[int, CompilerPass]] = []

    def add_pass(self, compiler_pass: CompilerPass, priority: int = 0) -> None:
        if not callable(getattr(compiler_pass, "process", None)):
            raise TypeError(
                f"{type(compiler_pass).__qualname__} is not a compiler pass "
                f"(missing process(container))"
            )
        self._passes.append((priority, compiler_pass))

    def get_passes(self) -> List[CompilerPass]:
        return [p for _, p in sort_by_priority(self._passes, lambda entry: entry[0])]

    def __len__(self) -> int:
        return len(self._passes)

    def run(self, container: "ContainerBuilder") -> None:
        for compiler_pass in self.get_passes():
            logger.debug(f"Running compiler pass {type(compiler_pass).__qualname__}")
            compiler_pass.process(container)
