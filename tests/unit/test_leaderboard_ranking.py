"""Leaderboard ordering and aggregation."""

from __future__ import annotations

import pytest

from khatmah.leaderboard.service import LeaderboardAggregator, rank_users
from khatmah.progress.tracker import ProgressTracker
from khatmah.storage.interface import UserSummary


def _summary(user_id: int, username: str, count: int) -> UserSummary:
    return UserSummary(id=user_id, username=username, display_name=username.title(), khatmah_count=count)


class TestRankUsers:
    def test_sorted_by_count_descending(self):
        entries = rank_users([_summary(1, "a", 1), _summary(2, "b", 5), _summary(3, "c", 3)])
        assert [e.username for e in entries] == ["b", "c", "a"]
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_ties_broken_by_username(self):
        entries = rank_users([_summary(1, "zaid", 2), _summary(2, "amina", 2), _summary(3, "maryam", 2)])
        assert [e.username for e in entries] == ["amina", "maryam", "zaid"]

    def test_zero_counts_included(self):
        entries = rank_users([_summary(1, "yusuf", 0), _summary(2, "bilal", 0)])
        assert [(e.username, e.completed_count) for e in entries] == [("bilal", 0), ("yusuf", 0)]

    def test_empty(self):
        assert rank_users([]) == []

    def test_input_order_irrelevant(self):
        users = [_summary(1, "a", 1), _summary(2, "b", 1), _summary(3, "c", 4)]
        assert rank_users(users) == rank_users(list(reversed(users)))


@pytest.mark.asyncio
class TestLeaderboardAggregator:
    async def test_includes_every_user(self, storage):
        for name in ("ahmed", "fatima", "omar"):
            await storage.create_user(username=name, password_hash="x", display_name=name.title())

        entries = await LeaderboardAggregator(storage).get_leaderboard()

        assert [e.username for e in entries] == ["ahmed", "fatima", "omar"]
        assert all(e.completed_count == 0 for e in entries)

    async def test_completion_moves_user_up(self, storage):
        ids = {}
        for name in ("ahmed", "fatima"):
            ids[name] = (await storage.create_user(username=name, password_hash="x", display_name=name)).id
        aggregator = LeaderboardAggregator(storage)
        tracker = ProgressTracker(storage)

        before = await aggregator.get_leaderboard()
        assert [e.username for e in before] == ["ahmed", "fatima"]

        for juz in range(1, 31):
            await tracker.update_reading(ids["fatima"], juz, True)
        await tracker.complete_khatmah(ids["fatima"])

        after = await aggregator.get_leaderboard()
        assert [e.username for e in after] == ["fatima", "ahmed"]
        counts_before = {e.username: e.completed_count for e in before}
        counts_after = {e.username: e.completed_count for e in after}
        assert counts_after["fatima"] == counts_before["fatima"] + 1
        assert counts_after["ahmed"] == counts_before["ahmed"]

    async def test_read_only(self, storage):
        user = await storage.create_user(username="ahmed", password_hash="x", display_name="Ahmed")
        await storage.upsert_reading(user.id, 4, True)

        await LeaderboardAggregator(storage).get_leaderboard()

        readings = await storage.get_readings(user.id)
        assert [r.juz_number for r in readings if r.is_completed] == [4]
        assert (await storage.get_user(user.id)).khatmah_count == 0
