"""Leaderboard response schemas."""

from khatmah.schemas import CamelModel


class LeaderboardEntryResponse(CamelModel):
    rank: int
    id: int
    username: str
    display_name: str
    completed_count: int
