"""
Event bus for Trade Winds state changes.

Provides decoupled communication between the simulation core and
whatever front end is attached. Components subscribe to events and
react without the core knowing who is listening.

Usage:
    from tradewinds.state.event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.GOOD_SOLD, my_handler)

    # Emitted by the trading system
    bus.emit(EventType.GOOD_SOLD, good_id="silk", quantity=5, total=450)

    def my_handler(event: EngineEvent):
        print(f"Sold {event.data['quantity']} {event.data['good_id']}")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Engine events that can be published."""

    # Trading
    GOOD_BOUGHT = "trade.bought"
    GOOD_SOLD = "trade.sold"

    # Turn progression
    TRAVELED = "turn.traveled"
    SEASON_CHANGED = "season.changed"
    WORLD_EVENT_STARTED = "world_event.started"
    WORLD_EVENT_EXPIRED = "world_event.expired"

    # Standing and intel
    REPUTATION_CHANGED = "reputation.changed"
    PRICE_ALERT_TRIGGERED = "alert.triggered"

    # Lifecycle
    GAME_CREATED = "game.created"
    GAME_LOADED = "game.loaded"
    GAME_SAVED = "game.saved"
    GAME_ENDED = "game.ended"


@dataclass
class EngineEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        turn: Game turn when the event occurred
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    turn: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


# Type alias for event handlers
EventHandler = Callable[[EngineEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), in subscription order.
    No priority, no async, no middleware.
    """

    def __init__(self):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[EngineEvent] = []
        self._history_limit = 100  # Keep last N events for debugging

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from an event type."""
        if event_type in self._listeners and handler in self._listeners[event_type]:
            self._listeners[event_type].remove(handler)

    def emit(self, event_type: EventType, turn: int = 0, **data) -> EngineEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            turn: Game turn (optional)
            **data: Event-specific data

        Returns:
            The emitted EngineEvent (for chaining/testing)
        """
        event = EngineEvent(type=event_type, data=data, turn=turn)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                # One bad listener must not abort a half-applied turn
                logger.exception("Error in handler for %s", event_type.value)

        return event

    def clear(self) -> None:
        """Clear all listeners. Useful for testing."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[EngineEvent]:
        """Recent events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))


# Global singleton instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """
    Get the global event bus instance.

    Returns the same instance across all calls (singleton pattern).
    """
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus. Useful for testing."""
    global _event_bus
    _event_bus = None
