import pytest

from pocket_arcade.config import Settings
from pocket_arcade.core.events import EventBus
from pocket_arcade.core.rng import fixed
from pocket_arcade.games import runner, snake


@pytest.fixture
def runner_state() -> runner.RunnerState:
    """Fresh runner with the default world and a zero rng."""
    return runner.create_initial_state(rng=fixed(0))


@pytest.fixture
def quiet_runner(runner_state) -> runner.RunnerState:
    """Runner with spawning pushed far into the future."""
    return runner.RunnerState(
        config=runner_state.config,
        player=runner_state.player,
        speed=runner_state.speed,
        spawn_countdown=999,
        pickup_spawn_countdown=999,
    )


@pytest.fixture
def make_snake():
    """Build a snake state from plain (x, y) tuples."""
    def build(cells, width=6, height=6, food=None, food_kind=snake.FoodKind.GROW,
              ttl=None, direction=snake.Direction.RIGHT, pending=None, **kwargs):
        return snake.SnakeState(
            config=snake.SnakeConfig(width=width, height=height),
            snake=tuple(snake.Cell(*c) for c in cells),
            direction=direction,
            pending_direction=pending or direction,
            food=snake.Food(snake.Cell(*food), food_kind, ttl) if food else None,
            **kwargs,
        )
    return build


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def settings() -> Settings:
    """Settings from defaults only, ignoring any local .env file."""
    return Settings(_env_file=None)
