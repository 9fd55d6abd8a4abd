"""Periodic LeetCode stats refresh."""

import asyncio
import logging
from typing import Any, Callable, Optional

from ..errors import StatsUnavailableError
from .merger import ProfileMerger
from .models import ProfileStats

logger = logging.getLogger(__name__)


class StatsPoller:
    """Fetches stats immediately, then every ``interval`` seconds until stopped."""

    def __init__(
        self,
        merger: ProfileMerger,
        username: str,
        interval: float = 300,
        user_id: Optional[str] = None,
        on_sync: Optional[Callable[[], Any]] = None,
    ):
        self.merger = merger
        self.username = username
        self.interval = interval
        self.user_id = user_id
        self.on_sync = on_sync

        self.latest: Optional[ProfileStats] = None
        self.last_error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start polling in the current event loop."""
        if self.running:
            return
        logger.info(f"Watching LeetCode stats for {self.username} every {self.interval}s")
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        """Cancel polling and wait for the task to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception(f"Stats polling for {self.username} had already failed")
        logger.info(f"Stopped watching LeetCode stats for {self.username}")

    async def refresh(self) -> Optional[ProfileStats]:
        """One fetch; keeps the previous stats if it fails for any reason."""
        try:
            stats = await self.merger.fetch_stats(
                self.username, user_id=self.user_id, on_sync=self.on_sync
            )
        except StatsUnavailableError as e:
            logger.warning(f"Stats refresh failed: {e}")
            self.last_error = str(e)
            return None
        except Exception as e:
            logger.exception(f"Unexpected error refreshing stats for {self.username}")
            self.last_error = f"Unexpected error: {e}"
            return None

        self.latest = stats
        self.last_error = None
        return stats

    async def _run(self):
        while True:
            await self.refresh()
            await asyncio.sleep(self.interval)
