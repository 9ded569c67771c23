"""Core framework components for pocket_arcade."""

from .state import GamePhase
from .events import EventBus, Event, EventType

__all__ = ["GamePhase", "EventBus", "Event", "EventType"]
