from dataclasses import replace

import pytest

from pocket_arcade.core.geometry import Rect
from pocket_arcade.core.rng import fixed, seeded, sequence
from pocket_arcade.core.state import GamePhase
from pocket_arcade.games import runner
from pocket_arcade.games.runner import Obstacle, ObstacleKind, Pickup


def block(x, y, width, height, passed=False):
    return Obstacle(ObstacleKind.BLOCK, x, y, width, height, passed)


def pit(state, x, width):
    config = state.config
    return Obstacle(ObstacleKind.PIT, x, config.ground_y, width, config.ground_height)


def test_initial_state_stands_on_ground(runner_state):
    config = runner_state.config
    assert runner_state.player.y == config.ground_y - config.player_height
    assert runner_state.player.x == config.player_x
    assert runner_state.is_grounded
    assert runner_state.score == 0
    assert runner_state.speed == config.base_speed
    assert runner_state.spawn_countdown == 70
    assert runner_state.pickup_spawn_countdown == 30
    assert runner_state.phase is GamePhase.RUNNING


def test_jump_sets_upward_velocity_when_grounded(runner_state):
    jumped = runner.jump(runner_state)
    assert jumped.player.velocity_y == runner_state.config.jump_velocity
    assert jumped.player.velocity_y < 0


def test_jump_ignored_in_the_air(runner_state):
    airborne = replace(runner_state, player=replace(runner_state.player, y=200, velocity_y=-3))
    assert runner.jump(airborne) is airborne


def test_jump_ignored_when_falling_or_over(runner_state):
    falling = replace(runner_state, phase=GamePhase.FALLING_INTO_PIT)
    ended = replace(runner_state, phase=GamePhase.ENDED)
    assert runner.jump(falling) is falling
    assert runner.jump(ended) is ended


def test_no_double_jump(runner_state):
    state = runner.step(runner.jump(runner_state), fixed(0))
    assert not state.is_grounded
    assert runner.jump(state) is state


def test_jump_lands_back_on_ground(quiet_runner):
    state = runner.jump(quiet_runner)
    for _ in range(80):
        state = runner.step(state, fixed(0))
    assert state.is_grounded
    assert state.player.velocity_y == 0
    assert state.player.y == quiet_runner.player.y


def test_speed_ramps_and_caps(runner_state):
    state = runner.step(runner_state, fixed(0))
    assert state.speed == pytest.approx(runner_state.config.base_speed + runner.SPEED_RAMP)

    late = runner.step(replace(runner_state, ticks=10_000), fixed(0))
    assert late.speed == runner.MAX_SPEED


def test_step_eventually_spawns_obstacles(runner_state):
    state = runner_state
    for _ in range(140):
        state = runner.step(state, fixed(0))
    assert len(state.obstacles) > 0


def test_spawns_block_with_sampled_dimensions(quiet_runner):
    state = replace(quiet_runner, spawn_countdown=1)
    next_state = runner.step(state, sequence([0.5, 0.0]))

    config = state.config
    assert next_state.obstacles == (block(config.width, config.ground_y - 58, 44, 58),)
    assert next_state.spawn_countdown == 66


def test_spawns_pit_below_ground(quiet_runner):
    state = replace(quiet_runner, spawn_countdown=1)
    next_state = runner.step(state, sequence([0.1, 0.0]))

    (hazard,) = next_state.obstacles
    assert hazard.kind is ObstacleKind.PIT
    assert hazard.width == 64
    assert hazard.y == state.config.ground_y
    assert hazard.height == state.config.ground_height


def test_block_collision_ends_game(runner_state):
    state = replace(runner_state, obstacles=(block(70, 430, 60, 100),))
    next_state = runner.step(state, fixed(0))
    assert next_state.is_game_over
    assert next_state.obstacles[0].x == pytest.approx(70 - next_state.speed)


def test_block_above_hitbox_does_not_collide(quiet_runner):
    state = replace(quiet_runner, obstacles=(block(70, 0, 60, 50),))
    assert not runner.step(state, fixed(0)).is_game_over


def test_step_after_game_over_is_identity(runner_state):
    ended = replace(runner_state, phase=GamePhase.ENDED)
    assert runner.step(ended, fixed(0)) is ended


def test_restart_resets_dynamic_state(runner_state):
    state = replace(runner_state, score=8, ticks=400, phase=GamePhase.ENDED,
                    obstacles=(block(120, 300, 44, 90),), pickups=(Pickup(200, 300),))
    reset = runner.restart(state, fixed(0))
    assert reset.score == 0
    assert reset.ticks == 0
    assert reset.obstacles == ()
    assert reset.pickups == ()
    assert reset.phase is GamePhase.RUNNING
    assert reset.config == state.config


def test_collecting_pickup_scores_and_removes_it(quiet_runner):
    player = quiet_runner.player
    state = replace(quiet_runner, pickups=(Pickup(player.x + 36, player.y + 40, 22, 22),))
    next_state = runner.step(state, fixed(0))
    assert next_state.score == 1
    assert next_state.pickups == ()


def test_pickup_sharing_column_with_obstacle_is_not_collectible(quiet_runner):
    player = quiet_runner.player
    state = replace(
        quiet_runner,
        obstacles=(block(85, 0, 30, 50),),
        pickups=(Pickup(player.x + 36, player.y + 40, 22, 22),),
    )
    next_state = runner.step(state, fixed(0))
    assert next_state.score == 0
    assert next_state.pickups == ()
    assert not next_state.is_game_over


def test_passing_obstacle_does_not_score(quiet_runner):
    state = replace(quiet_runner, obstacles=(block(-80, 300, 60, 80),))
    assert runner.step(state, fixed(0)).score == 0


def test_pickup_not_spawned_next_to_obstacle(quiet_runner):
    state = replace(quiet_runner, obstacles=(block(370, 300, 80, 100),), pickup_spawn_countdown=0)
    next_state = runner.step(state, fixed(0))
    assert next_state.pickups == ()
    assert next_state.pickup_spawn_countdown == 26


def test_pickup_spawns_in_lanes(quiet_runner):
    config = quiet_runner.config
    low = runner.step(replace(quiet_runner, pickup_spawn_countdown=1), fixed(0))
    assert low.pickups == (Pickup(config.width + 16, config.ground_y - 89),)

    high = runner.step(replace(quiet_runner, pickup_spawn_countdown=1), fixed(0.99))
    assert high.pickups == (Pickup(config.width + 90, config.ground_y - 199),)


def test_spawn_pickup_gives_up_when_blocked(runner_state):
    wall = (block(runner_state.config.width - 100, 0, 400, 10),)
    assert runner.spawn_pickup(runner_state.config, wall, seeded(3)) is None


def test_offscreen_objects_are_dropped(quiet_runner):
    state = replace(
        quiet_runner,
        obstacles=(block(-50, 0, 40, 50), block(-40, 0, 40, 50)),
        pickups=(Pickup(-60, 0, 44, 44),),
    )
    next_state = runner.step(state, fixed(0))
    assert len(next_state.obstacles) == 1
    assert next_state.pickups == ()


def test_obstacles_marked_passed_behind_player(quiet_runner):
    state = replace(quiet_runner, obstacles=(block(-40, 0, 40, 50), block(300, 0, 40, 50)))
    behind, ahead = runner.step(state, fixed(0)).obstacles
    assert behind.passed
    assert not ahead.passed


def test_player_hitbox_is_inset():
    player = runner.Player(x=56, y=372, width=92, height=148)
    assert runner.player_hitbox(player) == Rect(76, 390, 52, 124)


def test_grounded_player_over_pit_starts_falling(runner_state):
    state = replace(runner_state, obstacles=(pit(runner_state, 70, 90),))
    next_state = runner.step(state, fixed(0))
    assert next_state.is_falling_into_pit
    assert not next_state.is_game_over
    assert next_state.player.velocity_y == runner.MIN_PIT_FALL_VELOCITY
    assert next_state.player.y == runner_state.player.y + 1


def test_jumping_over_pit_is_safe(runner_state):
    airborne = replace(runner_state.player, y=runner_state.player.y - 80, velocity_y=-3)
    state = replace(runner_state, player=airborne, obstacles=(pit(runner_state, 70, 90),))
    next_state = runner.step(state, fixed(0))
    assert next_state.phase is GamePhase.RUNNING


def test_pit_fall_uses_heavier_gravity_without_ground_clamp(quiet_runner):
    sunk = replace(quiet_runner.player, y=quiet_runner.player.y + 10, velocity_y=3.0)
    state = replace(quiet_runner, player=sunk, phase=GamePhase.FALLING_INTO_PIT)
    next_state = runner.step(state, fixed(0))
    gravity = state.config.gravity * runner.PIT_GRAVITY_FACTOR
    assert next_state.is_falling_into_pit
    assert next_state.player.velocity_y == pytest.approx(3.0 + gravity)
    assert next_state.player.y == pytest.approx(sunk.y + 3.0)


def test_engine_operations_require_rng(runner_state):
    with pytest.raises(TypeError):
        runner.create_initial_state()
    with pytest.raises(TypeError):
        runner.step(runner_state)
    with pytest.raises(TypeError):
        runner.restart(runner_state)


def test_falling_into_pit_eventually_ends_game(runner_state):
    state = runner.step(replace(runner_state, obstacles=(pit(runner_state, 70, 90),)), fixed(0))
    assert state.is_falling_into_pit

    for _ in range(120):
        if state.is_game_over:
            break
        assert state.is_falling_into_pit
        assert runner.jump(state) is state
        state = runner.step(state, fixed(0))

    assert state.is_game_over
    assert state.player.y > state.config.height


def test_score_never_decreases_over_random_play():
    rng = seeded(2024)
    inputs = seeded(7)
    state = runner.create_initial_state(rng=rng)
    previous_phase = state.phase
    previous_score = 0

    for _ in range(3000):
        if state.is_game_over:
            break
        if inputs() < 0.05:
            state = runner.jump(state)
        state = runner.step(state, rng)

        assert state.score >= previous_score >= 0
        if previous_phase is GamePhase.FALLING_INTO_PIT:
            assert state.phase is not GamePhase.RUNNING
        previous_phase = state.phase
        previous_score = state.score
        assert len(state.obstacles) < 20


def test_replay_is_deterministic():
    def play(seed):
        rng = seeded(seed)
        state = runner.create_initial_state(rng=rng)
        for tick in range(500):
            if tick % 37 == 0:
                state = runner.jump(state)
            state = runner.step(state, rng)
        return state

    assert play(11) == play(11)
