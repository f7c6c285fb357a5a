"""Leaderboard endpoint — public."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from khatmah.dependencies import get_aggregator
from khatmah.leaderboard.schemas import LeaderboardEntryResponse
from khatmah.leaderboard.service import LeaderboardAggregator

router = APIRouter(prefix="/api", tags=["Leaderboard"])


@router.get("/leaderboard", response_model=list[LeaderboardEntryResponse])
async def get_leaderboard(
    aggregator: LeaderboardAggregator = Depends(get_aggregator),
) -> list[LeaderboardEntryResponse]:
    """All users ranked by completed Khatmahs, ties by username."""
    entries = await aggregator.get_leaderboard()
    return [
        LeaderboardEntryResponse(
            rank=e.rank,
            id=e.user_id,
            username=e.username,
            display_name=e.display_name,
            completed_count=e.completed_count,
        )
        for e in entries
    ]
