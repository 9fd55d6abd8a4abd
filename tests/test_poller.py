"""Periodic stats refresh and session persistence."""

import asyncio

from conftest import FakeLeetCodeClient

from devtracker.errors import StatsUnavailableError
from devtracker.leetcode.merger import ProfileMerger
from devtracker.leetcode.models import ProfileStats
from devtracker.leetcode.poller import StatsPoller
from devtracker.leetcode.session import LeetCodeSession


class CountingMerger:
    """Merger stand-in that counts calls and can be told to fail."""

    def __init__(self, fail=False):
        self.calls = 0
        self.fail = fail

    async def fetch_stats(self, username, user_id=None, on_sync=None, today=None):
        self.calls += 1
        if self.fail:
            raise StatsUnavailableError("Could not fetch LeetCode stats")
        return ProfileStats(username=username, total_solved=self.calls)


async def test_fetches_immediately_then_on_interval():
    merger = CountingMerger()
    poller = StatsPoller(merger, "ada", interval=0.05)

    poller.start()
    await asyncio.sleep(0.01)
    assert merger.calls == 1
    assert poller.latest.total_solved == 1

    await asyncio.sleep(0.12)
    await poller.stop()

    assert merger.calls >= 2
    assert not poller.running


async def test_stop_cancels_polling():
    merger = CountingMerger()
    poller = StatsPoller(merger, "ada", interval=0.02)

    poller.start()
    await asyncio.sleep(0.01)
    await poller.stop()
    calls = merger.calls

    await asyncio.sleep(0.06)
    assert merger.calls == calls


async def test_start_is_idempotent():
    merger = CountingMerger()
    poller = StatsPoller(merger, "ada", interval=10)

    poller.start()
    poller.start()
    await asyncio.sleep(0.01)
    await poller.stop()

    assert merger.calls == 1


async def test_failures_keep_previous_stats():
    merger = CountingMerger()
    poller = StatsPoller(merger, "ada", interval=10)

    assert (await poller.refresh()).total_solved == 1

    merger.fail = True
    assert await poller.refresh() is None
    assert poller.latest.total_solved == 1
    assert "Could not fetch" in poller.last_error


class BrokenMerger:
    """Merger stand-in that fails with an unexpected error every time."""

    def __init__(self):
        self.calls = 0

    async def fetch_stats(self, username, user_id=None, on_sync=None, today=None):
        self.calls += 1
        raise AttributeError("'int' object has no attribute 'items'")


async def test_unexpected_errors_do_not_end_polling():
    merger = BrokenMerger()
    poller = StatsPoller(merger, "ada", interval=0.01)

    poller.start()
    await asyncio.sleep(0.08)

    assert poller.running
    assert merger.calls >= 2
    assert "no attribute 'items'" in poller.last_error

    await poller.stop()
    assert not poller.running


async def test_stop_tolerates_a_task_that_already_failed():
    poller = StatsPoller(CountingMerger(), "ada")

    async def crashed():
        raise RuntimeError("boom")

    poller._task = asyncio.create_task(crashed())
    await asyncio.sleep(0.01)

    await poller.stop()
    assert not poller.running


async def test_refresh_with_real_merger_remembers_username():
    session = LeetCodeSession()
    merger = ProfileMerger(FakeLeetCodeClient(primary={"totalSolved": 3}), session)

    stats = await StatsPoller(merger, "ada").refresh()

    assert stats.total_solved == 3
    assert session.username == "ada"


def test_session_round_trips_through_file(tmp_path):
    path = tmp_path / "nested" / "session.json"

    LeetCodeSession(str(path)).remember("ada")

    restored = LeetCodeSession(str(path))
    assert restored.username == "ada"

    restored.forget()
    assert not path.exists()
    assert LeetCodeSession(str(path)).username is None


def test_session_ignores_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{oops")

    assert LeetCodeSession(str(path)).username is None


def test_in_memory_session():
    session = LeetCodeSession()
    session.remember("ada")
    assert session.username == "ada"
