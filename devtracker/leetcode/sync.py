"""Reconcile LeetCode submissions into tracked coding problems."""

import logging

from ..errors import ProviderError, StoreError
from ..tracker.database import TrackerDatabase
from ..tracker.models import Difficulty, ProblemStatus
from .client import LeetCodeClient
from .models import Submission

logger = logging.getLogger(__name__)

LEETCODE_SECTION = "LeetCode"


def canonical_link(slug: str) -> str:
    """Problem URL used as the dedup key."""
    return f"https://leetcode.com/problems/{slug}/"


class SubmissionReconciler:
    """Brings the LeetCode section of coding_problems up to date."""

    def __init__(self, client: LeetCodeClient, db: TrackerDatabase, limit: int = 50):
        """
        Initialize reconciler.

        Args:
            client: LeetCode provider client
            db: Tracker database
            limit: Number of recent submissions to fetch
        """
        self.client = client
        self.db = db
        self.limit = limit

    async def sync(self, user_id: str, username: str) -> bool:
        """
        Apply recent submissions to the user's LeetCode problems.

        Submissions are processed oldest first so a later Accepted can upgrade
        an earlier attempt in the same pass. Status never moves backwards.

        Args:
            user_id: Owning user
            username: LeetCode username

        Returns:
            True if any problem was inserted or upgraded
        """
        if not user_id or not username:
            return False

        try:
            submissions = await self.client.get_submissions(username, self.limit)
        except ProviderError as e:
            logger.warning(f"Submission fetch failed for {username}: {e}")
            return False

        if not submissions:
            return False

        rows = self.db.select(
            "coding_problems",
            eq={"user_id": user_id, "section_name": LEETCODE_SECTION},
        )
        known = {}
        for row in rows:
            if row["problem_link"]:
                known[row["problem_link"]] = ProblemStatus(row["status"])

        changes = 0
        for submission in reversed(submissions):
            link = canonical_link(submission.title_slug)
            status = ProblemStatus.SOLVED if submission.accepted else ProblemStatus.ATTEMPTED
            current = known.get(link)

            if current is not None and current.rank >= status.rank:
                continue

            try:
                if current is None:
                    self._insert(user_id, link, submission, status)
                elif not self._upgrade(user_id, link, submission, status):
                    logger.warning(f"Problem {submission.title} disappeared before upgrade")
                    known.pop(link, None)
                    continue
            except StoreError as e:
                logger.error(f"Error syncing problem {submission.title}: {e}")
                continue

            known[link] = status
            changes += 1

        logger.info(f"LeetCode sync for {username}: {changes} problem(s) changed")
        return changes > 0

    def _insert(
        self, user_id: str, link: str, submission: Submission, status: ProblemStatus
    ):
        """Track a problem seen for the first time."""
        self.db.insert(
            "coding_problems",
            {
                "user_id": user_id,
                "section_name": LEETCODE_SECTION,
                "problem_name": submission.title,
                "problem_link": link,
                # The submission list carries no difficulty
                "difficulty": Difficulty.MEDIUM,
                "status": status,
                "completed_at": (
                    submission.submitted_at if status == ProblemStatus.SOLVED else None
                ),
            },
        )
        logger.debug(f"  + {submission.title} ({status.value})")

    def _upgrade(
        self, user_id: str, link: str, submission: Submission, status: ProblemStatus
    ) -> int:
        """Move an existing problem forward to ``status``; returns rows changed."""
        values = {"status": status}
        if status == ProblemStatus.SOLVED:
            values["completed_at"] = submission.submitted_at

        count = self.db.update(
            "coding_problems",
            values,
            eq={
                "user_id": user_id,
                "section_name": LEETCODE_SECTION,
                "problem_link": link,
            },
        )
        logger.debug(f"  ^ {submission.title} -> {status.value}")
        return count
