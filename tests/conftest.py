"""Shared fixtures."""

import os
import tempfile

# Keep the app module's default storage out of the working tree
_TMP = tempfile.mkdtemp(prefix="devtracker-tests-")
os.environ.setdefault("DATABASE_PATH", os.path.join(_TMP, "devtracker.db"))
os.environ.setdefault("LEETCODE_SESSION_PATH", os.path.join(_TMP, "session.json"))
os.environ.setdefault("HEATMAP_OUTPUT_DIR", os.path.join(_TMP, "static", "images"))

import pytest

from devtracker.errors import ProviderError
from devtracker.goals.problems import ProblemService
from devtracker.goals.scoring import ScoreKeeper
from devtracker.goals.service import GoalService
from devtracker.leetcode.models import Submission
from devtracker.tracker.database import TrackerDatabase


@pytest.fixture
def db(tmp_path):
    return TrackerDatabase(str(tmp_path / "tracker.db"))


@pytest.fixture
def keeper(db):
    return ScoreKeeper(db)


@pytest.fixture
def goal_service(db, keeper):
    return GoalService(db, keeper)


@pytest.fixture
def problem_service(db):
    return ProblemService(db)


@pytest.fixture
def profile(keeper):
    return keeper.create_profile("Ada")


def submission(slug, status="Accepted", timestamp=1700000000, title=None):
    """Submission the way the provider reports it."""
    return Submission(
        title=title or slug.replace("-", " ").title(),
        title_slug=slug,
        timestamp=timestamp,
        status_display=status,
        lang="python3",
    )


class FakeLeetCodeClient:
    """
    Stand-in for LeetCodeClient.

    Each endpoint returns the configured payload, or raises it when it is an
    exception. Missing endpoints raise ProviderError like an HTTP 404 would.
    """

    def __init__(self, **responses):
        self.responses = responses
        self.calls = []

    async def _respond(self, name, username):
        self.calls.append((name, username))
        response = self.responses.get(name, ProviderError(f"{name}: HTTP 404"))
        if isinstance(response, Exception):
            raise response
        return response

    async def get_primary_stats(self, username):
        return await self._respond("primary", username)

    async def get_alfa_stats(self, username):
        return await self._respond("alfa_stats", username)

    async def get_alfa_profile(self, username):
        return await self._respond("alfa_profile", username)

    async def get_alfa_calendar(self, username):
        return await self._respond("alfa_calendar", username)

    async def get_fallback_stats(self, username):
        return await self._respond("fallback", username)

    async def get_submissions(self, username, limit=50):
        self.calls.append(("submissions", username))
        response = self.responses.get("submissions", [])
        if isinstance(response, Exception):
            raise response
        # Provider order is newest first
        return list(response)[:limit]


@pytest.fixture
def fake_client():
    return FakeLeetCodeClient()
