"""Leaderboard aggregation over completed-cycle counts.

Read-only: nothing here writes to storage.
"""

from __future__ import annotations

from dataclasses import dataclass

from khatmah.storage.interface import KhatmahStorage, UserSummary


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: int
    username: str
    display_name: str
    completed_count: int


def rank_users(users: list[UserSummary]) -> list[LeaderboardEntry]:
    """Sort by completed count descending, then username ascending, and number from 1."""
    ordered = sorted(users, key=lambda u: (-u.khatmah_count, u.username))
    return [
        LeaderboardEntry(
            rank=position,
            user_id=u.id,
            username=u.username,
            display_name=u.display_name,
            completed_count=u.khatmah_count,
        )
        for position, u in enumerate(ordered, start=1)
    ]


class LeaderboardAggregator:
    """Builds the ranked view of every user."""

    def __init__(self, storage: KhatmahStorage) -> None:
        self.storage = storage

    async def get_leaderboard(self) -> list[LeaderboardEntry]:
        """All users, including those with zero completions."""
        users = await self.storage.list_user_summaries()
        return rank_users(users)
