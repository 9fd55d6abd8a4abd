"""HTTP client for the public LeetCode statistics providers."""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import aiohttp

from ..errors import ProviderError
from .models import Submission

logger = logging.getLogger(__name__)


class LeetCodeClient:
    """Async client for three unofficial LeetCode stats APIs."""

    def __init__(
        self,
        primary_url: str,
        alfa_url: str,
        fallback_url: str,
        timeout: float = 10.0,
    ):
        """
        Initialize LeetCode client.

        Args:
            primary_url: Aggregate stats API (faisalshohag)
            alfa_url: alfa-leetcode-api base (stats, profile, calendar, submissions)
            fallback_url: leetcode-stats-api base, used as last resort
            timeout: Seconds before any single request is abandoned
        """
        self.primary_url = primary_url.rstrip("/")
        self.alfa_url = alfa_url.rstrip("/")
        self.fallback_url = fallback_url.rstrip("/")
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        """Create the HTTP session on first use (needs a running loop)."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
        return self.session

    async def close(self):
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def get_json(self, url: str) -> dict:
        """
        GET a JSON object.

        Raises:
            ProviderError: Timeout, connection failure, non-2xx status or a
                body that is not a JSON object
        """
        logger.debug(f"GET {url}")
        session = self._get_session()

        try:
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    raise ProviderError(f"{url} returned HTTP {response.status}")
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ProviderError(f"{url} timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise ProviderError(f"{url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"{url} returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(f"{url} returned {type(data).__name__}, expected object")
        return data

    async def get_primary_stats(self, username: str) -> dict:
        """Aggregate stats, avatar and ranking from the primary provider."""
        return await self.get_json(f"{self.primary_url}/{quote(username, safe='')}")

    async def get_alfa_stats(self, username: str) -> dict:
        """Aggregate solved counts from alfa-leetcode-api."""
        return await self.get_json(f"{self.alfa_url}/{quote(username, safe='')}")

    async def get_alfa_profile(self, username: str) -> dict:
        """Profile metadata (name, avatar, ranking)."""
        return await self.get_json(
            f"{self.alfa_url}/userProfile/{quote(username, safe='')}"
        )

    async def get_alfa_calendar(self, username: str) -> dict:
        """Submission calendar; ``submissionCalendar`` is a JSON-encoded string."""
        return await self.get_json(
            f"{self.alfa_url}/submissionCalendar/{quote(username, safe='')}"
        )

    async def get_fallback_stats(self, username: str) -> dict:
        """Aggregate stats from leetcode-stats-api."""
        return await self.get_json(f"{self.fallback_url}/{quote(username, safe='')}")

    async def get_submissions(self, username: str, limit: int = 50) -> list[Submission]:
        """
        Recent submissions of any verdict, newest first.

        Args:
            username: LeetCode username
            limit: Maximum number of submissions to request

        Returns:
            Parsed submissions; malformed entries are skipped
        """
        data = await self.get_json(
            f"{self.alfa_url}/{quote(username, safe='')}/submission?limit={int(limit)}"
        )

        submissions = []
        for entry in data.get("submission") or []:
            try:
                submissions.append(Submission.from_payload(entry))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed submission {entry!r}: {e}")

        logger.debug(f"Fetched {len(submissions)} submissions for {username}")
        return submissions
