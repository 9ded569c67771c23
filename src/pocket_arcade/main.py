"""
Main entry point for pocket_arcade.

Plays one autopilot game headlessly and reports the score and the rank
it would get on a fresh leaderboard. Useful for replaying a seed:

    python -m pocket_arcade runner --seed 42
"""

import argparse
import logging
import random
import sys
from typing import Optional

from pocket_arcade import autoplay
from pocket_arcade.config import Settings, get_settings
from pocket_arcade.core.events import Event, EventBus, EventType, arcade_event
from pocket_arcade.core.rng import seeded
from pocket_arcade.games import runner, snake
from pocket_arcade.scoring import Leaderboard
from pocket_arcade.session import GameSession, SessionResult, create_session

DEMO_PLAYER_ID = 1


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def _autopilot(session: GameSession) -> None:
    state = session.state
    if isinstance(state, runner.RunnerState):
        if autoplay.runner_should_jump(state):
            session.handle_input(Event(EventType.BUTTON_PRESS, source="autopilot"))
    elif isinstance(state, snake.SnakeState):
        direction = autoplay.snake_choose_direction(state)
        if direction is not state.pending_direction:
            session.handle_input(arcade_event(direction.name.lower(), source="autopilot"))


def play(game: str, settings: Settings, seed: Optional[int] = None,
         max_ticks: Optional[int] = None) -> SessionResult:
    """Run one autopilot game to completion (or the tick limit)."""
    logger = logging.getLogger(__name__)

    if seed is None:
        seed = random.SystemRandom().randrange(2**31)
    logger.info(f"Playing {game} with seed {seed}")

    event_bus = EventBus()
    event_bus.subscribe(
        EventType.SCORE_CHANGED,
        lambda event: logger.debug(f"Score {event.data['previous']} -> {event.data['score']}"),
    )

    session = create_session(game, event_bus, rng=seeded(seed), settings=settings)
    session.start()

    limit = max_ticks if max_ticks is not None else settings.max_ticks
    while not session.is_game_over and session.ticks < limit:
        _autopilot(session)
        session.tick()

    if session.result is None:
        logger.info(f"Tick limit {limit} reached")
        return SessionResult(game=game, score=session.state.score, ticks=session.ticks)
    return session.result


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Headless pocket_arcade autopilot run")
    parser.add_argument("game", nargs="?", choices=["runner", "snake"], default=settings.default_game)
    parser.add_argument("--seed", type=int, default=settings.seed, help="RNG seed for replay")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks")
    parser.add_argument("--debug", action="store_true", default=settings.debug)
    args = parser.parse_args(argv)

    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    try:
        result = play(args.game, settings, seed=args.seed, max_ticks=args.ticks)
        ranked = Leaderboard().submit(DEMO_PLAYER_ID, result.score, "autopilot",
                                      max_score=settings.max_score)
        if ranked is None:
            logger.error(f"Score {result.score} rejected by leaderboard")
            sys.exit(1)
        logger.info(
            f"{result.game}: score {result.score} after {result.ticks} ticks "
            f"(rank {ranked.rank}, best {ranked.best_score})"
        )
        for position, entry in enumerate(ranked.leaderboard.top_entries(settings.top_limit), start=1):
            logger.info(f"Top {position}: {entry.display_name} {entry.best_score}")
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
