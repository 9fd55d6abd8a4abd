"""Merge LeetCode profile statistics from several unreliable providers."""

import asyncio
import inspect
import json
import logging
import math
from datetime import date
from typing import Any, Callable, Optional

from ..errors import ProviderError, StatsUnavailableError
from ..goals.streaks import calendar_streak
from .client import LeetCodeClient
from .models import TOTAL_FIELDS, ProfileStats
from .session import LeetCodeSession
from .sync import SubmissionReconciler

logger = logging.getLogger(__name__)


class ProfileMerger:
    """Builds one ProfileStats from the primary, alfa and fallback providers."""

    def __init__(
        self,
        client: LeetCodeClient,
        session: LeetCodeSession,
        reconciler: Optional[SubmissionReconciler] = None,
    ):
        """
        Initialize merger.

        Args:
            client: LeetCode provider client
            session: Where the last good username is remembered
            reconciler: Runs after a successful fetch when a user id is given
        """
        self.client = client
        self.session = session
        self.reconciler = reconciler
        self._sync_tasks: set[asyncio.Task] = set()

    async def fetch_stats(
        self,
        username: str,
        user_id: Optional[str] = None,
        on_sync: Optional[Callable[[], Any]] = None,
        today: Optional[date] = None,
    ) -> ProfileStats:
        """
        Fetch and merge stats for a username.

        Order:
        1. Primary provider sets the baseline totals
        2. alfa stats/profile/calendar run together; stats only backfill when
           step 1 failed, profile fills name (and avatar/ranking if empty),
           calendar gives the streak
        3. Fallback provider, only if there are still no totals

        Args:
            username: LeetCode username
            user_id: Tracker user to sync submissions into (optional)
            on_sync: Called when the background sync changed something
            today: Reference day for the streak

        Returns:
            Merged ProfileStats

        Raises:
            StatsUnavailableError: No provider returned usable totals
        """
        logger.info(f"Fetching LeetCode stats for {username}...")
        stats = ProfileStats(username=username, name=username)

        found = await self._apply_primary(stats, username)

        stats_result, profile_result, calendar_result = await asyncio.gather(
            self.client.get_alfa_stats(username),
            self.client.get_alfa_profile(username),
            self.client.get_alfa_calendar(username),
            return_exceptions=True,
        )
        if not found:
            found = self._apply_alfa_stats(stats, stats_result)
        self._apply_alfa_profile(stats, profile_result)
        self._apply_calendar(stats, calendar_result, today)

        if not found:
            found = await self._apply_fallback(stats, username)

        if not found:
            raise StatsUnavailableError(
                f"Could not fetch LeetCode stats for '{username}'. "
                "Username might be invalid."
            )

        logger.info(
            f"  {username}: {stats.total_solved}/{stats.total_questions} solved, "
            f"streak {stats.streak}"
        )

        self.session.remember(username)

        if user_id and self.reconciler:
            task = asyncio.create_task(self._sync_in_background(user_id, username, on_sync))
            self._sync_tasks.add(task)
            task.add_done_callback(self._sync_tasks.discard)

        return stats

    async def wait_for_sync(self):
        """Wait until background syncs started by fetch_stats finish."""
        if self._sync_tasks:
            await asyncio.gather(*self._sync_tasks, return_exceptions=True)

    async def _sync_in_background(
        self, user_id: str, username: str, on_sync: Optional[Callable[[], Any]]
    ):
        """Run the reconciler; call ``on_sync`` only if something changed."""
        try:
            changed = await self.reconciler.sync(user_id, username)
            if changed and on_sync:
                result = on_sync()
                if inspect.isawaitable(result):
                    await result
        except Exception:
            logger.exception(f"Background LeetCode sync failed for {username}")

    async def _apply_primary(self, stats: ProfileStats, username: str) -> bool:
        """Adopt totals, avatar and ranking from the primary provider."""
        try:
            data = await self.client.get_primary_stats(username)
        except ProviderError as e:
            logger.warning(f"Primary stats provider failed: {e}")
            return False

        if data.get("errors"):
            logger.warning(f"Primary stats provider returned errors: {data['errors']}")
            return False

        for key, field in TOTAL_FIELDS.items():
            setattr(stats, field, data.get(key) or 0)
        stats.avatar = data.get("avatar") or ""
        stats.ranking = data.get("ranking") or 0
        stats.acceptance_rate = data.get("acceptanceRate") or 0
        return True

    def _apply_alfa_stats(self, stats: ProfileStats, result) -> bool:
        """Backfill totals from alfa stats; recompute the acceptance rate."""
        if isinstance(result, BaseException):
            logger.warning(f"alfa stats failed: {result}")
            return False
        if result.get("totalSolved") is None:
            return False

        # Validate the whole payload before touching stats
        try:
            totals = {
                field: int(result[key])
                for key, field in TOTAL_FIELDS.items()
                if result.get(key) is not None
            }
            rate = self._acceptance_rate(result)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Malformed alfa stats: {e}")
            return False

        for field, value in totals.items():
            setattr(stats, field, value)
        if result.get("ranking"):
            stats.ranking = result["ranking"]
        if result.get("avatar"):
            stats.avatar = result["avatar"]
        if rate is not None:
            stats.acceptance_rate = rate
        return True

    def _acceptance_rate(self, data: dict) -> Optional[float]:
        """
        Accepted / total submissions for the "All" bucket, as a percentage.

        Falls back to an explicit ``acceptanceRate`` field.

        Raises:
            TypeError, ValueError, AttributeError: Malformed buckets or rate
        """
        total_buckets = data.get("totalSubmissions") or []
        if total_buckets:
            accepted_buckets = (data.get("matchedUserStats") or {}).get("acSubmissionNum") or []
            total = self._bucket(total_buckets, "All")
            accepted = self._bucket(accepted_buckets, "All")
            if total > 0:
                return math.floor(accepted / total * 100 + 0.5)
            return None

        if data.get("acceptanceRate"):
            return float(data["acceptanceRate"])
        return None

    def _bucket(self, buckets: list, difficulty: str) -> int:
        """Submission count of one difficulty bucket."""
        for bucket in buckets:
            if isinstance(bucket, dict) and bucket.get("difficulty") == difficulty:
                return int(bucket.get("submissions") or 0)
        return 0

    def _apply_alfa_profile(self, stats: ProfileStats, result):
        """Display name, and avatar/ranking when still missing."""
        if isinstance(result, BaseException):
            logger.warning(f"alfa profile failed: {result}")
            return
        if not result.get("username"):
            return

        stats.name = result.get("name") or result["username"]
        if not stats.avatar and result.get("avatar"):
            stats.avatar = result["avatar"]
        if not stats.ranking and result.get("ranking"):
            stats.ranking = result["ranking"]

    def _apply_calendar(self, stats: ProfileStats, result, today: Optional[date]):
        """Streak from the JSON-encoded submission calendar."""
        if isinstance(result, BaseException):
            logger.warning(f"alfa calendar failed: {result}")
            return

        raw = result.get("submissionCalendar")
        if not raw:
            return

        try:
            calendar = json.loads(raw) if isinstance(raw, str) else raw
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Invalid submission calendar: {e}")
            return

        if not isinstance(calendar, dict):
            logger.warning(f"Invalid submission calendar: expected object, got {type(calendar).__name__}")
            return

        stats.streak = calendar_streak(calendar, today)

    async def _apply_fallback(self, stats: ProfileStats, username: str) -> bool:
        """Last resort: leetcode-stats-api totals."""
        try:
            data = await self.client.get_fallback_stats(username)
        except ProviderError as e:
            logger.warning(f"Fallback stats provider failed: {e}")
            return False

        if data.get("status") != "success":
            logger.warning(f"Fallback stats provider: {data.get('message', 'no data')}")
            return False

        for key, field in TOTAL_FIELDS.items():
            setattr(stats, field, data.get(key) or 0)
        stats.acceptance_rate = data.get("acceptanceRate") or 0
        stats.ranking = data.get("ranking") or 0
        return True


async def demo_stats():
    """Demo: Fetch and print merged stats."""
    import os
    from dataclasses import asdict
    from dotenv import load_dotenv

    from ..config import settings

    load_dotenv()

    username = os.getenv("LEETCODE_USERNAME")

    if not username:
        print("Error: LEETCODE_USERNAME must be set in .env file")
        return

    async with LeetCodeClient(
        settings.leetcode_primary_url,
        settings.leetcode_alfa_url,
        settings.leetcode_fallback_url,
        timeout=settings.leetcode_timeout,
    ) as client:
        merger = ProfileMerger(client, LeetCodeSession())

        try:
            stats = await merger.fetch_stats(username)
        except StatsUnavailableError as e:
            print(f"Error: {e}")
            return

        print("\n" + "=" * 60)
        print("LEETCODE STATS")
        print("=" * 60 + "\n")

        for key, value in asdict(stats).items():
            print(f"  {key}: {value}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(demo_stats())
