"""Score ranking for finished games."""

from .leaderboard import Leaderboard, LeaderboardEntry, RankResult, normalize_score

__all__ = ["Leaderboard", "LeaderboardEntry", "RankResult", "normalize_score"]
