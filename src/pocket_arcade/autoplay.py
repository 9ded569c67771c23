"""Simple deterministic autopilots for headless runs and demos."""

from typing import Optional

from pocket_arcade.core.state import GamePhase
from pocket_arcade.games import runner, snake
from pocket_arcade.games.snake import Direction

# Ticks of look-ahead before a hazard's leading edge reaches the player
JUMP_LEAD_TICKS = 6


def next_hazard(state: runner.RunnerState) -> Optional[runner.Obstacle]:
    """Closest obstacle whose trailing edge is still ahead of the player."""
    player = state.player
    ahead = [obs for obs in state.obstacles if obs.x + obs.width > player.x]
    return min(ahead, key=lambda obs: obs.x, default=None)


def runner_should_jump(state: runner.RunnerState) -> bool:
    """Jump when the next hazard is about to reach the player's front edge."""
    if state.phase is not GamePhase.RUNNING or not state.is_grounded:
        return False

    hazard = next_hazard(state)
    if hazard is None:
        return False

    gap = hazard.x - (state.player.x + state.player.width)
    return gap <= state.speed * JUMP_LEAD_TICKS


def _torus_distance(a: int, b: int, size: int) -> int:
    d = abs(a - b)
    return min(d, size - d)


def snake_choose_direction(state: snake.SnakeState) -> Direction:
    """
    Greedy pick among the three non-reversing moves.

    Moves into the body are discarded (the tail cell counts as free, it
    moves away this tick). Shrink food is avoided while anything else is
    available; the rest are ranked by wrap-around distance to grow food.
    """
    if state.is_game_over:
        return state.direction

    config = state.config
    grid = snake.occupancy_grid(state)
    tail = state.snake[-1] if len(state.snake) > 1 else None
    head = state.head
    target = state.food.cell if state.food and state.food.kind is snake.FoodKind.GROW else None

    candidates = []
    for direction in Direction:
        if direction is state.direction.opposite:
            continue
        x = (head.x + direction.dx) % config.width
        y = (head.y + direction.dy) % config.height
        code = grid[y, x]
        if code in (snake.BODY, snake.HEAD) and (x, y) != tail:
            continue

        distance = 0
        if target is not None:
            distance = (
                _torus_distance(x, target.x, config.width)
                + _torus_distance(y, target.y, config.height)
            )
        avoid = 1 if code == snake.SHRINK_FOOD else 0
        keep = 0 if direction is state.direction else 1
        candidates.append(((avoid, distance, keep), direction))

    if not candidates:
        return state.direction
    return min(candidates, key=lambda item: item[0])[1]
