"""Snake - toroidal grid snake with grow and shrink food.

Both axes wrap, so the only way to lose is running into your own body.
Food alternates on a cycle: every 3rd or 4th food is a Shrink food that
takes a segment and a point away, and expires after a random number of
ticks if left alone.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np
from numpy.typing import NDArray

from pocket_arcade.core.rng import RandomSource, random_int
from pocket_arcade.core.state import GamePhase, advance

logger = logging.getLogger(__name__)

SHRINK_CYCLE_CHOICES = (3, 4)

# Occupancy grid cell codes
EMPTY = 0
BODY = 1
HEAD = 2
GROW_FOOD = 3
SHRINK_FOOD = 4


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return Direction((-self.dx, -self.dy))

    @classmethod
    def parse(cls, value) -> Optional["Direction"]:
        """Accept a Direction or its name in any case; anything else is None."""
        if isinstance(value, Direction):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class Cell(NamedTuple):
    x: int
    y: int


class FoodKind(Enum):
    GROW = "grow"
    SHRINK = "shrink"


@dataclass(frozen=True)
class Food:
    cell: Cell
    kind: FoodKind = FoodKind.GROW
    ttl_ticks: Optional[int] = None  # Shrink food only


@dataclass(frozen=True)
class SnakeConfig:
    width: int = 20
    height: int = 20
    shrink_ttl_min: int = 22
    shrink_ttl_max: int = 36


@dataclass(frozen=True)
class SnakeState:
    """Complete snake snapshot for one tick. ``snake`` is head first."""
    config: SnakeConfig
    snake: tuple[Cell, ...]
    direction: Direction = Direction.RIGHT
    pending_direction: Direction = Direction.RIGHT
    food: Optional[Food] = None
    food_spawn_counter: int = 0
    next_shrink_at: int = 3
    score: int = 0
    phase: GamePhase = GamePhase.RUNNING
    did_grow_on_last_step: bool = False

    @property
    def is_game_over(self) -> bool:
        return self.phase is GamePhase.ENDED

    @property
    def head(self) -> Cell:
        return self.snake[0]


def _next_shrink_at(rng: RandomSource) -> int:
    return SHRINK_CYCLE_CHOICES[0] if rng() < 0.5 else SHRINK_CYCLE_CHOICES[1]


def random_free_cell(
    config: SnakeConfig,
    snake: tuple[Cell, ...],
    rng: RandomSource,
) -> Optional[Cell]:
    """Pick uniformly among cells the snake does not cover (row-major order)."""
    occupied = set(snake)
    free = [
        Cell(x, y)
        for y in range(config.height)
        for x in range(config.width)
        if (x, y) not in occupied
    ]
    if not free:
        return None
    return free[int(rng() * len(free))]


def spawn_food(
    config: SnakeConfig,
    snake: tuple[Cell, ...],
    kind: FoodKind,
    rng: RandomSource,
) -> Optional[Food]:
    """Place food of the given kind on a free cell, or None if the board is full."""
    cell = random_free_cell(config, snake, rng)
    if cell is None:
        return None
    if kind is FoodKind.SHRINK:
        ttl = random_int(config.shrink_ttl_min, config.shrink_ttl_max, rng)
        return Food(cell=cell, kind=FoodKind.SHRINK, ttl_ticks=ttl)
    return Food(cell=cell)


def _spawn_next_food_by_cycle(
    state: SnakeState,
    snake: tuple[Cell, ...],
    rng: RandomSource,
) -> tuple[Optional[Food], int, int]:
    counter = state.food_spawn_counter + 1
    next_shrink_at = state.next_shrink_at
    kind = FoodKind.GROW

    if counter >= next_shrink_at:
        kind = FoodKind.SHRINK
        counter = 0
        next_shrink_at = _next_shrink_at(rng)

    return spawn_food(state.config, snake, kind, rng), counter, next_shrink_at


def create_initial_state(
    config: Optional[SnakeConfig] = None,
    *,
    rng: RandomSource,
) -> SnakeState:
    """Single-segment snake in the middle of the grid, heading right."""
    config = config or SnakeConfig()
    snake = (Cell(config.width // 2, config.height // 2),)
    next_shrink_at = _next_shrink_at(rng)
    return SnakeState(
        config=config,
        snake=snake,
        food=spawn_food(config, snake, FoodKind.GROW, rng),
        food_spawn_counter=1,
        next_shrink_at=next_shrink_at,
    )


def restart(state: SnakeState, rng: RandomSource) -> SnakeState:
    """Fresh game on the same grid."""
    logger.debug(f"Snake restart, previous score {state.score}")
    return create_initial_state(state.config, rng=rng)


def set_direction(state: SnakeState, direction) -> SnakeState:
    """
    Queue a turn for the next step.

    Unknown directions and 180 degree reversals of either the live or
    the already-queued direction are ignored.
    """
    new_direction = Direction.parse(direction)
    if new_direction is None:
        return state
    if new_direction is state.direction.opposite:
        return state
    if new_direction is state.pending_direction.opposite:
        return state
    return replace(state, pending_direction=new_direction)


def step(state: SnakeState, rng: RandomSource) -> SnakeState:
    """Advance the snake by one cell."""
    if state.is_game_over:
        return state

    config = state.config
    direction = state.pending_direction
    head = state.head
    new_head = Cell(
        (head.x + direction.dx) % config.width,
        (head.y + direction.dy) % config.height,
    )

    food_kind = None
    if state.food is not None and state.food.cell == new_head:
        food_kind = state.food.kind
    grows = food_kind is FoodKind.GROW
    shrinks = food_kind is FoodKind.SHRINK

    # The tail moves out of the way this tick unless the snake grows
    body = state.snake if grows else state.snake[:-1]
    if new_head in body:
        logger.debug(f"Snake hit itself at {new_head}, score {state.score}")
        return replace(
            state,
            direction=direction,
            phase=advance(state.phase, GamePhase.ENDED),
            did_grow_on_last_step=False,
        )

    snake = (new_head,) + state.snake
    if not grows:
        snake = snake[:-1]
    if shrinks and len(snake) > 1:
        snake = snake[:-1]

    food = state.food
    food_spawn_counter = state.food_spawn_counter
    next_shrink_at = state.next_shrink_at

    if food_kind is not None:
        food, food_spawn_counter, next_shrink_at = _spawn_next_food_by_cycle(state, snake, rng)
    elif food is not None and food.kind is FoodKind.SHRINK:
        ttl = food.ttl_ticks if food.ttl_ticks is not None else config.shrink_ttl_max
        if ttl <= 1:
            food = spawn_food(config, snake, FoodKind.GROW, rng)
        else:
            food = replace(food, ttl_ticks=ttl - 1)

    return replace(
        state,
        direction=direction,
        snake=snake,
        food=food,
        food_spawn_counter=food_spawn_counter,
        next_shrink_at=next_shrink_at,
        score=max(0, state.score + (1 if grows else 0) - (1 if shrinks else 0)),
        did_grow_on_last_step=grows,
    )


def occupancy_grid(state: SnakeState) -> NDArray[np.int8]:
    """Board as a (height, width) array of cell codes."""
    grid = np.zeros((state.config.height, state.config.width), dtype=np.int8)
    for cell in state.snake[1:]:
        grid[cell.y, cell.x] = BODY
    grid[state.head.y, state.head.x] = HEAD
    if state.food is not None:
        code = SHRINK_FOOD if state.food.kind is FoodKind.SHRINK else GROW_FOOD
        grid[state.food.cell.y, state.food.cell.x] = code
    return grid
