"""
ORM event runtime: payloads, subscriber contract and the per-connection
event manager.
"""

from .args import EventArgs, LifecycleEventArgs
from .subscriber import EventSubscriber
from .manager import EventManager

__all__ = [
    "EventArgs",
    "LifecycleEventArgs",
    "EventSubscriber",
    "EventManager",
]
