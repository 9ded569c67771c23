"""
Best-score-per-player leaderboard.

This is the ranking side of the score contract: engines hand over a
final non-negative integer score, the leaderboard validates it, keeps
each player's best and reports the player's rank. Values are immutable;
every update returns a new ``Leaderboard``. Nothing here touches disk.
"""

from datetime import datetime, timezone
from typing import Any, Optional
import logging
import math

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

MAX_SCORE = 1_000_000
LEADERBOARD_VERSION = 1


def normalize_score(raw_score: Any, max_score: int = MAX_SCORE) -> Optional[int]:
    """
    Coerce an externally supplied score to a valid integer.

    Returns:
        The floored score, or None for non-numeric, non-finite, negative
        or out-of-range input
    """
    if isinstance(raw_score, bool):
        return None
    try:
        score = float(raw_score)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(score):
        return None
    normalized = math.floor(score)
    if normalized < 0 or normalized > max_score:
        return None
    return normalized


class LeaderboardEntry(BaseModel):
    """A player's best result."""

    model_config = ConfigDict(frozen=True)

    player_id: int
    display_name: str = ""
    best_score: int = Field(ge=0)
    updated_at: datetime


class RankResult(BaseModel):
    """Outcome of recording a score."""

    model_config = ConfigDict(frozen=True)

    leaderboard: "Leaderboard"
    rank: int
    previous_best: Optional[int] = None
    best_score: int
    is_new_record: bool


def _sort_key(entry: LeaderboardEntry) -> tuple[int, int]:
    return (-entry.best_score, entry.player_id)


class Leaderboard(BaseModel):
    """Immutable table of best scores, one entry per player."""

    model_config = ConfigDict(frozen=True)

    version: int = LEADERBOARD_VERSION
    updated_at: datetime = Field(
        default_factory=lambda: datetime.fromtimestamp(0, tz=timezone.utc)
    )
    entries: tuple[LeaderboardEntry, ...] = ()

    def upsert_best_score(
        self,
        player_id: int,
        score: int,
        display_name: str = "",
        now: Optional[datetime] = None,
    ) -> RankResult:
        """
        Record ``score`` for a player, keeping only their best.

        Args:
            player_id: Opaque player identity
            score: Already-validated non-negative score
            display_name: Name shown in tables (refreshed on every submit)
            now: Timestamp for the update, defaults to current UTC time

        Returns:
            RankResult with the new leaderboard and the player's rank
        """
        now = now or datetime.now(timezone.utc)
        entries = list(self.entries)
        index = next(
            (i for i, item in enumerate(entries) if item.player_id == player_id),
            None,
        )

        previous_best: Optional[int] = None
        is_new_record = True
        best = score

        if index is not None:
            previous_best = entries[index].best_score
            if previous_best >= score:
                is_new_record = False
                best = previous_best
            entries[index] = LeaderboardEntry(
                player_id=player_id,
                display_name=display_name or entries[index].display_name,
                best_score=best,
                updated_at=now,
            )
        else:
            entries.append(LeaderboardEntry(
                player_id=player_id,
                display_name=display_name,
                best_score=best,
                updated_at=now,
            ))

        board = Leaderboard(version=self.version, updated_at=now, entries=tuple(entries))
        ranked = sorted(entries, key=_sort_key)
        rank = next(i for i, item in enumerate(ranked, start=1) if item.player_id == player_id)

        if is_new_record:
            logger.info(f"New best for player {player_id}: {best} (rank {rank})")

        return RankResult(
            leaderboard=board,
            rank=rank,
            previous_best=previous_best,
            best_score=best,
            is_new_record=is_new_record,
        )

    def submit(
        self,
        player_id: int,
        raw_score: Any,
        display_name: str = "",
        now: Optional[datetime] = None,
        max_score: int = MAX_SCORE,
    ) -> Optional[RankResult]:
        """Validate an external score and record it. Returns None if rejected."""
        score = normalize_score(raw_score, max_score)
        if score is None:
            logger.warning(f"Rejected score {raw_score!r} from player {player_id}")
            return None
        return self.upsert_best_score(player_id, score, display_name, now)

    def top_entries(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Best scores first, ties broken by lower player id."""
        return sorted(self.entries, key=_sort_key)[:limit]

    def best_for(self, player_id: int) -> Optional[int]:
        """Best score recorded for a player, if any."""
        for entry in self.entries:
            if entry.player_id == player_id:
                return entry.best_score
        return None


RankResult.model_rebuild()
