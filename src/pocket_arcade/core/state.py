"""
Game phase state machine shared by the engines.

Phases:
    RUNNING: Normal play, input accepted
    FALLING_INTO_PIT: Runner dropped into a pit; no recovery, ends the run
    ENDED: Terminal, only a restart leaves it

The phase is a single tagged value instead of a pair of booleans, so a
state that is both "falling" and "ended but not falling" cannot be built.
"""

from enum import Enum, auto
import logging

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """Engine phases."""
    RUNNING = auto()
    FALLING_INTO_PIT = auto()
    ENDED = auto()

    @property
    def is_game_over(self) -> bool:
        return self is GamePhase.ENDED


# Valid phase transitions
VALID_TRANSITIONS: list[tuple[GamePhase, GamePhase]] = [
    (GamePhase.RUNNING, GamePhase.FALLING_INTO_PIT),
    (GamePhase.RUNNING, GamePhase.ENDED),
    (GamePhase.FALLING_INTO_PIT, GamePhase.ENDED),
]

_VALID = set(VALID_TRANSITIONS)


def can_transition(current: GamePhase, target: GamePhase) -> bool:
    """Check if moving from ``current`` to ``target`` is allowed."""
    return (current, target) in _VALID


def advance(current: GamePhase, target: GamePhase) -> GamePhase:
    """
    Return the phase after attempting a transition.

    Staying in the same phase is always fine. An illegal transition is
    logged and leaves the phase unchanged.

    Args:
        current: Phase the state is in now
        target: Requested phase

    Returns:
        ``target`` if the transition is valid, ``current`` otherwise
    """
    if current is target:
        return current
    if not can_transition(current, target):
        logger.warning(f"Invalid phase transition: {current.name} -> {target.name}")
        return current
    logger.debug(f"Phase transition: {current.name} -> {target.name}")
    return target
