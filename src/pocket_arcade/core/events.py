"""
Event bus for pocket_arcade.

Carries input events into a game session and score events out of it.
The engines themselves never see the bus; only ``GameSession`` and its
collaborators (leaderboards, renderers, bots) do.
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from enum import Enum, auto
from collections import defaultdict
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Built-in event types."""
    # Input events
    BUTTON_PRESS = auto()
    KEYPAD_INPUT = auto()
    ARCADE_LEFT = auto()
    ARCADE_RIGHT = auto()
    ARCADE_UP = auto()
    ARCADE_DOWN = auto()

    # Game events
    GAME_STARTED = auto()
    SCORE_CHANGED = auto()
    GAME_OVER = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: Event type (EventType enum or custom string)
        data: Event payload
        source: Component that emitted the event
        timestamp: When event was created
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None]


class EventBus:
    """
    Synchronous pub/sub bus.

    Handlers run in subscription order. A failing handler is logged and
    does not stop delivery to the others.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._event_history: list[Event] = []
        self._history_limit = history_limit

    def subscribe(
        self,
        event_type: EventType | str,
        handler: Handler
    ) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to listen for
            handler: Callback function

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Record the event and deliver it to every matching handler."""
        self._add_to_history(event)
        handlers = list(self._handlers.get(event.type, []))

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")

    def _add_to_history(self, event: Event) -> None:
        """Add event to history, maintaining limit."""
        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

    def get_history(
        self,
        event_type: EventType | str | None = None,
        limit: int = 10
    ) -> list[Event]:
        """Get recent events from history."""
        history = self._event_history
        if event_type is not None:
            history = [e for e in history if e.type == event_type]
        return history[-limit:]


# Convenience functions for creating common events
def button_press_event(source: str = "button") -> Event:
    """Create a button press event."""
    return Event(EventType.BUTTON_PRESS, source=source)


def keypad_event(key: str, source: str = "keypad") -> Event:
    """Create a keypad input event."""
    return Event(EventType.KEYPAD_INPUT, data={"key": key}, source=source)


def arcade_event(direction: str, source: str = "arcade") -> Event:
    """Create an arcade stick event for "left", "right", "up" or "down"."""
    event_type = {
        "left": EventType.ARCADE_LEFT,
        "right": EventType.ARCADE_RIGHT,
        "up": EventType.ARCADE_UP,
        "down": EventType.ARCADE_DOWN,
    }[direction]
    return Event(event_type, source=source)
