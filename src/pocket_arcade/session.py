"""Game sessions: fixed-timestep hosts around the pure engines.

A session owns the current engine state, turns wall-clock deltas into a
whole number of engine steps, maps input events to engine inputs and
publishes game events on the bus. Rendering and persistence belong to
whoever subscribes.

Lifecycle:
    1. start() - build the initial state, emit GAME_STARTED
    2. update(delta_ms) - step the engine once per elapsed tick
    3. handle_input(event) - jump / turn / restart
    4. GAME_OVER is emitted once, ``result`` becomes available
"""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from pocket_arcade.core.events import Event, EventBus, EventType
from pocket_arcade.core.rng import RandomSource
from pocket_arcade.games import runner, snake
from pocket_arcade.games.snake import Direction

logger = logging.getLogger(__name__)

KEYPAD_DIRECTIONS = {
    "8": Direction.UP,
    "2": Direction.DOWN,
    "4": Direction.LEFT,
    "6": Direction.RIGHT,
}

ARCADE_DIRECTIONS = {
    EventType.ARCADE_UP: Direction.UP,
    EventType.ARCADE_DOWN: Direction.DOWN,
    EventType.ARCADE_LEFT: Direction.LEFT,
    EventType.ARCADE_RIGHT: Direction.RIGHT,
}


@dataclass(frozen=True)
class SessionResult:
    """Final outcome handed to score collaborators."""

    game: str
    score: int
    ticks: int


class GameSession(ABC):
    """Abstract host for one engine.

    Subclasses plug in the engine's four operations and their own input
    mapping; timing and event publishing live here.
    """

    name: str = "base"

    def __init__(
        self,
        event_bus: EventBus,
        tick_ms: float,
        rng: Optional[RandomSource] = None,
        max_steps_per_update: int = 8,
    ):
        self.event_bus = event_bus
        self.tick_ms = tick_ms
        self.max_steps_per_update = max_steps_per_update
        self._rng = rng or random.random
        self._state: Any = None
        self._tick_timer = 0.0
        self._ticks = 0
        self._result: Optional[SessionResult] = None

    @property
    def state(self) -> Any:
        """Current engine snapshot."""
        return self._state

    @property
    def ticks(self) -> int:
        """Engine steps taken since the last (re)start."""
        return self._ticks

    @property
    def is_game_over(self) -> bool:
        return self._state is not None and self._state.is_game_over

    @property
    def result(self) -> Optional[SessionResult]:
        """Available once the game has ended."""
        return self._result

    def start(self) -> None:
        """Begin a new game."""
        self._begin(self._create(self._rng))

    def restart(self) -> None:
        """Begin a new game in the same world."""
        if self._state is None:
            self.start()
            return
        self._begin(self._restart(self._state, self._rng))

    def _begin(self, state: Any) -> None:
        self._state = state
        self._tick_timer = 0.0
        self._ticks = 0
        self._result = None
        logger.info(f"Session started: {self.name}")
        self._emit(EventType.GAME_STARTED, {"game": self.name})

    def update(self, delta_ms: float) -> int:
        """
        Advance by wall-clock time.

        Args:
            delta_ms: Time since last update in milliseconds

        Returns:
            Number of engine steps taken
        """
        if self._state is None or self.is_game_over:
            return 0

        self._tick_timer += delta_ms
        steps = 0
        while self._tick_timer >= self.tick_ms and not self.is_game_over:
            if steps >= self.max_steps_per_update:
                # Drop the backlog instead of spiralling
                logger.debug(f"{self.name}: dropping {self._tick_timer:.1f}ms of backlog")
                self._tick_timer = 0.0
                break
            self._tick_timer -= self.tick_ms
            self.tick()
            steps += 1
        return steps

    def tick(self) -> None:
        """Take exactly one engine step."""
        if self._state is None or self.is_game_over:
            return

        previous = self._state
        self._state = self._step(previous, self._rng)
        self._ticks += 1

        if self._state.score != previous.score:
            self._emit(EventType.SCORE_CHANGED, {
                "game": self.name,
                "score": self._state.score,
                "previous": previous.score,
            })

        if self._state.is_game_over:
            self._finish()

    def _finish(self) -> None:
        self._result = SessionResult(game=self.name, score=self._state.score, ticks=self._ticks)
        logger.info(f"Game over: {self.name} score={self._result.score} ticks={self._ticks}")
        self._emit(EventType.GAME_OVER, {
            "game": self.name,
            "score": self._result.score,
            "ticks": self._ticks,
        })

    def handle_input(self, event: Event) -> bool:
        """
        Process input event.

        Returns:
            True if event was handled
        """
        if self._state is None:
            return False
        return self.on_input(event)

    def _emit(self, event_type: EventType, data: dict) -> None:
        self.event_bus.emit(Event(event_type, data=data, source=f"session_{self.name}"))

    # Engine hooks
    @abstractmethod
    def _create(self, rng: RandomSource) -> Any:
        pass

    @abstractmethod
    def _step(self, state: Any, rng: RandomSource) -> Any:
        pass

    @abstractmethod
    def _restart(self, state: Any, rng: RandomSource) -> Any:
        pass

    @abstractmethod
    def on_input(self, event: Event) -> bool:
        """Handle user input. Return True if handled."""
        pass


class RunnerSession(GameSession):
    name = "runner"

    def __init__(self, event_bus: EventBus, config: Optional[runner.RunnerConfig] = None,
                 tick_ms: float = 1000.0 / 60.0, **kwargs):
        super().__init__(event_bus, tick_ms, **kwargs)
        self.config = config or runner.RunnerConfig()

    def _create(self, rng: RandomSource) -> runner.RunnerState:
        return runner.create_initial_state(self.config, rng=rng)

    def _step(self, state: runner.RunnerState, rng: RandomSource) -> runner.RunnerState:
        return runner.step(state, rng)

    def _restart(self, state: runner.RunnerState, rng: RandomSource) -> runner.RunnerState:
        return runner.restart(state, rng)

    def on_input(self, event: Event) -> bool:
        pressed = (
            event.type in (EventType.BUTTON_PRESS, EventType.ARCADE_UP)
            or (event.type == EventType.KEYPAD_INPUT and event.data.get("key") == "5")
        )
        if not pressed:
            return False

        if self.is_game_over:
            self.restart()
        else:
            self._state = runner.jump(self._state)
        return True


class SnakeSession(GameSession):
    name = "snake"

    def __init__(self, event_bus: EventBus, config: Optional[snake.SnakeConfig] = None,
                 tick_ms: float = 140.0, **kwargs):
        super().__init__(event_bus, tick_ms, **kwargs)
        self.config = config or snake.SnakeConfig()

    def _create(self, rng: RandomSource) -> snake.SnakeState:
        return snake.create_initial_state(self.config, rng=rng)

    def _step(self, state: snake.SnakeState, rng: RandomSource) -> snake.SnakeState:
        return snake.step(state, rng)

    def _restart(self, state: snake.SnakeState, rng: RandomSource) -> snake.SnakeState:
        return snake.restart(state, rng)

    def on_input(self, event: Event) -> bool:
        if event.type == EventType.BUTTON_PRESS and self.is_game_over:
            self.restart()
            return True

        direction = ARCADE_DIRECTIONS.get(event.type)
        if direction is None and event.type == EventType.KEYPAD_INPUT:
            direction = KEYPAD_DIRECTIONS.get(event.data.get("key", ""))

        if direction is None:
            return False

        self._state = snake.set_direction(self._state, direction)
        return True


def create_session(game: str, event_bus: EventBus, rng: Optional[RandomSource] = None,
                   settings=None) -> GameSession:
    """Build a session for ``game`` ("runner" or "snake") from settings."""
    if settings is None:
        from pocket_arcade.config import get_settings
        settings = get_settings()

    timing = settings.session
    if game == "runner":
        return RunnerSession(
            event_bus,
            config=settings.runner_config(),
            tick_ms=timing.runner_tick_ms,
            rng=rng,
            max_steps_per_update=timing.max_steps_per_update,
        )
    if game == "snake":
        return SnakeSession(
            event_bus,
            config=settings.snake_config(),
            tick_ms=timing.snake_tick_ms,
            rng=rng,
            max_steps_per_update=timing.max_steps_per_update,
        )
    raise ValueError(f"Unknown game: {game}")
