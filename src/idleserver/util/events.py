"""Typed event bus — decoupled notifications out of the engine.

The engine emits events after it has committed a state change; handlers
must not mutate the GameState they are notified about.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Type, TypeVar

T = TypeVar("T")


# -- Progress events -----------------------------------------------------

@dataclass(frozen=True)
class SpecializationLevelUp:
    """A specialization reached a new level (one event per level)."""
    specialization: str
    level: int


@dataclass(frozen=True)
class SpecializationChanged:
    """The active specialization was switched."""
    specialization: str


# -- Command events ------------------------------------------------------

@dataclass(frozen=True)
class ProductionUpgraded:
    """A production line was upgraded."""
    line_id: str
    level: int
    cost: float


@dataclass(frozen=True)
class SkillNodeAllocated:
    """A skill point was spent on a node."""
    specialization: str
    node_id: str
    available_points: int


@dataclass(frozen=True)
class ResourceTraded:
    """A buy or sell order was filled."""
    resource: str
    amount: float
    total: float
    side: str  # "buy" or "sell"


# -- Market events -------------------------------------------------------

@dataclass(frozen=True)
class MarketRepriced:
    """The market re-rolled its prices."""
    timestamp: float


# -- Event Bus -----------------------------------------------------------

class EventBus:
    """Simple synchronous event bus with typed events.

    Usage:
        bus = EventBus()
        bus.on(SpecializationLevelUp, lambda e: print(e.level))
        bus.emit(SpecializationLevelUp(specialization="mining", level=2))
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def on(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Register a handler for an event type."""
        self._handlers[event_type].append(handler)

    def off(self, event_type: Type[T], handler: Callable[[T], None]) -> None:
        """Unregister a handler."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: object) -> None:
        """Emit an event to all registered handlers."""
        for handler in self._handlers.get(type(event), []):
            handler(event)

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
