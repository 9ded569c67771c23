"""Runner - side-scrolling jump-and-collect engine.

The player stands at a fixed x while blocks, pits and pickups scroll in
from the right. Blocks end the run on contact, pits drop the player into
a multi-tick fall that always ends the run, pickups add one point each.

Every operation is a pure function of its inputs: states are frozen and
each call returns a fresh snapshot. Randomness comes only from the
``rng`` argument.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from pocket_arcade.core.geometry import Rect, intersects, ranges_overlap
from pocket_arcade.core.rng import RandomSource, random_int
from pocket_arcade.core.state import GamePhase, advance

logger = logging.getLogger(__name__)

# Scroll speed
MAX_SPEED = 9.5
SPEED_RAMP = 0.0028

# Physics
PIT_GRAVITY_FACTOR = 1.4      # Heavier fall once inside a pit
MIN_PIT_FALL_VELOCITY = 2.5
GROUND_TOLERANCE = 0.5
DESPAWN_MARGIN = 8

# Hazards
PIT_CHANCE = 0.3
BLOCK_HEIGHT = (58, 120)
BLOCK_WIDTH = (44, 70)
PIT_WIDTH = (64, 128)
HAZARD_OFFSET = (0, 40)
FIRST_HAZARD_DELAY = (70, 115)
HAZARD_INTERVAL = (66, 112)

# Pickups
PICKUP_SIZE = 44
PICKUP_OFFSET = (16, 90)
PICKUP_MARGIN = 26
PICKUP_ATTEMPTS = 12
PICKUP_MIN_Y = 24
FIRST_PICKUP_DELAY = (30, 60)
PICKUP_INTERVAL = (26, 52)

# Collision boxes: block hitbox inset and pit foot interval use
# different margins on purpose.
HITBOX_INSET_X = 20
HITBOX_INSET_TOP = 18
HITBOX_SHRINK_H = 24
FOOT_INSET_X = 18
FOOT_MIN_WIDTH = 8


class ObstacleKind(Enum):
    BLOCK = "block"
    PIT = "pit"


@dataclass(frozen=True)
class RunnerConfig:
    """World geometry and physics constants, fixed for a run."""
    width: int = 360
    height: int = 640
    ground_height: int = 120
    player_x: float = 56
    player_width: int = 92
    player_height: int = 148
    gravity: float = 0.62
    jump_velocity: float = -16.1
    base_speed: float = 4.4

    @property
    def ground_y(self) -> float:
        """Screen y of the ground surface."""
        return self.height - self.ground_height


@dataclass(frozen=True)
class Player:
    x: float
    y: float
    width: float
    height: float
    velocity_y: float = 0.0

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Obstacle:
    kind: ObstacleKind
    x: float
    y: float
    width: float
    height: float
    passed: bool = False

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Pickup:
    x: float
    y: float
    width: float = PICKUP_SIZE
    height: float = PICKUP_SIZE

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class RunnerState:
    """Complete runner snapshot for one tick."""
    config: RunnerConfig
    player: Player
    speed: float
    spawn_countdown: int
    pickup_spawn_countdown: int
    obstacles: tuple[Obstacle, ...] = ()
    pickups: tuple[Pickup, ...] = ()
    score: int = 0
    ticks: int = 0
    phase: GamePhase = field(default=GamePhase.RUNNING)

    @property
    def is_game_over(self) -> bool:
        return self.phase is GamePhase.ENDED

    @property
    def is_falling_into_pit(self) -> bool:
        return self.phase is GamePhase.FALLING_INTO_PIT

    @property
    def is_grounded(self) -> bool:
        return _on_ground(self.config, self.player.y)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _on_ground(config: RunnerConfig, y: float) -> bool:
    return y + config.player_height >= config.ground_y - GROUND_TOLERANCE


def create_initial_state(
    config: Optional[RunnerConfig] = None,
    *,
    rng: RandomSource,
) -> RunnerState:
    """Build a fresh run with the player standing on the ground."""
    config = config or RunnerConfig()
    return RunnerState(
        config=config,
        player=Player(
            x=config.player_x,
            y=config.ground_y - config.player_height,
            width=config.player_width,
            height=config.player_height,
        ),
        speed=config.base_speed,
        spawn_countdown=random_int(*FIRST_HAZARD_DELAY, rng),
        pickup_spawn_countdown=random_int(*FIRST_PICKUP_DELAY, rng),
    )


def restart(state: RunnerState, rng: RandomSource) -> RunnerState:
    """New run in the same world; score, hazards and counters reset."""
    logger.debug(f"Runner restart after {state.ticks} ticks, score {state.score}")
    return create_initial_state(state.config, rng=rng)


def jump(state: RunnerState) -> RunnerState:
    """Launch the player upwards. Ignored unless running and grounded."""
    if state.phase is not GamePhase.RUNNING:
        return state
    if not state.is_grounded:
        return state
    return replace(
        state,
        player=replace(state.player, velocity_y=state.config.jump_velocity),
    )


def spawn_hazard(config: RunnerConfig, rng: RandomSource) -> Obstacle:
    """New block or pit just past the right edge of the screen."""
    if rng() < PIT_CHANCE:
        width = random_int(*PIT_WIDTH, rng)
        return Obstacle(
            kind=ObstacleKind.PIT,
            x=config.width + random_int(*HAZARD_OFFSET, rng),
            y=config.ground_y,
            width=width,
            height=config.ground_height,
        )

    height = random_int(*BLOCK_HEIGHT, rng)
    width = random_int(*BLOCK_WIDTH, rng)
    return Obstacle(
        kind=ObstacleKind.BLOCK,
        x=config.width + random_int(*HAZARD_OFFSET, rng),
        y=config.ground_y - height,
        width=width,
        height=height,
    )


def can_place_pickup(x: float, size: float, obstacles: tuple[Obstacle, ...]) -> bool:
    """Check the pickup span, widened by a safety margin, is clear of hazards."""
    start = x - PICKUP_MARGIN
    end = x + size + PICKUP_MARGIN
    return not any(ranges_overlap(start, end, obs.x, obs.x + obs.width) for obs in obstacles)


def spawn_pickup(
    config: RunnerConfig,
    obstacles: tuple[Obstacle, ...],
    rng: RandomSource,
) -> Optional[Pickup]:
    """
    Try to place a pickup in one of two lanes above the ground.

    Gives up after a fixed number of attempts; spawning is best-effort.
    """
    low_lane = config.ground_y - _round_half_up(config.player_height * 0.6)
    high_lane = config.ground_y - _round_half_up(config.player_height * 1.12 * 1.2)
    lanes = (low_lane, high_lane)

    for _ in range(PICKUP_ATTEMPTS):
        lane = random_int(0, 1, rng)
        y = max(PICKUP_MIN_Y, lanes[lane])
        x = config.width + random_int(*PICKUP_OFFSET, rng)
        if not can_place_pickup(x, PICKUP_SIZE, obstacles):
            continue
        return Pickup(x=x, y=y)

    return None


def player_hitbox(player: Player) -> Rect:
    """Forgiving collision box, inset from the sprite box."""
    return Rect(
        player.x + HITBOX_INSET_X,
        player.y + HITBOX_INSET_TOP,
        player.width - HITBOX_INSET_X * 2,
        player.height - HITBOX_SHRINK_H,
    )


def _over_pit(player: Player, pit: Obstacle) -> bool:
    foot_x = player.x + FOOT_INSET_X
    foot_width = max(FOOT_MIN_WIDTH, player.width - FOOT_INSET_X * 2)
    return ranges_overlap(foot_x, foot_x + foot_width, pit.x, pit.x + pit.width)


def step(state: RunnerState, rng: RandomSource) -> RunnerState:
    """Advance the run by one fixed tick."""
    if state.is_game_over:
        return state

    config = state.config
    ticks = state.ticks + 1
    speed = min(MAX_SPEED, config.base_speed + ticks * SPEED_RAMP)
    falling = state.is_falling_into_pit

    # Vertical motion
    velocity_y = state.player.velocity_y
    y = state.player.y + velocity_y
    velocity_y += config.gravity * (PIT_GRAVITY_FACTOR if falling else 1.0)
    if not falling and y + config.player_height >= config.ground_y:
        y = config.ground_y - config.player_height
        velocity_y = 0.0

    # Scroll and despawn
    obstacles = [
        moved for moved in (replace(obs, x=obs.x - speed) for obs in state.obstacles)
        if moved.x + moved.width > -DESPAWN_MARGIN
    ]
    pickups = [
        moved for moved in (replace(p, x=p.x - speed) for p in state.pickups)
        if moved.x + moved.width > -DESPAWN_MARGIN
    ]

    # Spawning
    spawn_countdown = state.spawn_countdown - 1
    if spawn_countdown <= 0:
        obstacles.append(spawn_hazard(config, rng))
        spawn_countdown = random_int(*HAZARD_INTERVAL, rng)

    pickup_spawn_countdown = state.pickup_spawn_countdown - 1
    if pickup_spawn_countdown <= 0:
        pickup = spawn_pickup(config, tuple(obstacles), rng)
        if pickup is not None:
            pickups.append(pickup)
        pickup_spawn_countdown = random_int(*PICKUP_INTERVAL, rng)

    player = replace(state.player, y=y, velocity_y=velocity_y)
    hitbox = player_hitbox(player)
    next_state = replace(
        state,
        ticks=ticks,
        speed=speed,
        spawn_countdown=spawn_countdown,
        pickup_spawn_countdown=pickup_spawn_countdown,
        player=player,
        obstacles=tuple(obstacles),
        pickups=tuple(pickups),
    )

    # Pits only swallow a grounded player
    if not falling and _on_ground(config, y):
        if any(obs.kind is ObstacleKind.PIT and _over_pit(player, obs) for obs in obstacles):
            logger.debug(f"Runner fell into a pit at tick {ticks}")
            return replace(
                next_state,
                player=replace(player, y=y + 1, velocity_y=max(MIN_PIT_FALL_VELOCITY, velocity_y)),
                phase=advance(state.phase, GamePhase.FALLING_INTO_PIT),
            )

    if any(obs.kind is ObstacleKind.BLOCK and intersects(hitbox, obs.rect) for obs in obstacles):
        logger.debug(f"Runner hit a block at tick {ticks}, score {state.score}")
        return replace(next_state, phase=advance(state.phase, GamePhase.ENDED))

    if falling and y > config.height + config.player_height:
        logger.debug(f"Runner pit fall finished at tick {ticks}, score {state.score}")
        return replace(next_state, phase=advance(state.phase, GamePhase.ENDED))

    # Pickups sharing a column with a hazard are discarded, not collected
    collected = 0
    remaining = []
    for pickup in pickups:
        if any(ranges_overlap(pickup.x, pickup.x + pickup.width, obs.x, obs.x + obs.width)
               for obs in obstacles):
            continue
        if intersects(hitbox, pickup.rect):
            collected += 1
            continue
        remaining.append(pickup)

    marked = tuple(
        replace(obs, passed=True) if not obs.passed and obs.x + obs.width < player.x else obs
        for obs in obstacles
    )

    return replace(
        next_state,
        score=state.score + collected,
        obstacles=marked,
        pickups=tuple(remaining),
    )
