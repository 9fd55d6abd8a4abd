"""Daily score aggregation and profile streak persistence."""

import logging
from datetime import date
from typing import Optional

from ..errors import NotFoundError
from ..tracker.database import TrackerDatabase, utcnow
from ..tracker.models import DailyGoal, DailyScore, Profile
from .streaks import Streak, calculate_streak

logger = logging.getLogger(__name__)


class ScoreKeeper:
    """Keeps daily_scores and profile streaks in step with goals."""

    def __init__(self, db: TrackerDatabase):
        """Initialize with the tracker database."""
        self.db = db

    def update_daily_score(
        self, user_id: str, day: date, goals: list[DailyGoal]
    ) -> DailyScore:
        """
        Recompute and store the score for one day.

        ``goals`` must be every goal the user has on ``day``; the stored row
        is replaced wholesale, never incremented.

        Args:
            user_id: Owning user
            day: Calendar day the goals belong to
            goals: Complete goal list for that day

        Returns:
            The stored DailyScore
        """
        completed = [goal for goal in goals if goal.is_completed]
        score = sum(goal.points for goal in completed)

        row = self.db.upsert(
            "daily_scores",
            {
                "user_id": user_id,
                "date": day,
                "score": score,
                "goals_completed": len(completed),
                "total_goals": len(goals),
            },
            on_conflict=("user_id", "date"),
        )

        logger.info(
            f"Daily score for {user_id} on {day}: {score} "
            f"({len(completed)}/{len(goals)} goals)"
        )
        return DailyScore(**row)

    def list_scores(self, user_id: str) -> list[DailyScore]:
        """All daily scores for a user, oldest first."""
        rows = self.db.select("daily_scores", eq={"user_id": user_id}, order_by="date")
        return [DailyScore(**row) for row in rows]

    def calculate_streak(self, user_id: str, today: Optional[date] = None) -> Streak:
        """Current and max streak from days with a positive score."""
        rows = self.db.select(
            "daily_scores",
            eq={"user_id": user_id},
            gt={"score": 0},
            order_by="date",
            descending=True,
        )
        return calculate_streak([row["date"] for row in rows], today)

    def update_profile_streaks(
        self, user_id: str, today: Optional[date] = None
    ) -> Streak:
        """Recalculate streaks and write them to the profile."""
        streak = self.calculate_streak(user_id, today)

        self.db.update(
            "profiles",
            {
                "current_streak": streak.current,
                "max_streak": streak.max,
                "updated_at": utcnow(),
            },
            eq={"id": user_id},
        )

        logger.debug(f"Streaks for {user_id}: current={streak.current} max={streak.max}")
        return streak

    def create_profile(self, full_name: str = "") -> Profile:
        """Create an empty profile."""
        row = self.db.insert(
            "profiles", {"full_name": full_name, "updated_at": utcnow()}
        )
        return Profile(**row)

    def get_profile(self, user_id: str) -> Profile:
        """Get profile by id."""
        rows = self.db.select("profiles", eq={"id": user_id})
        if not rows:
            raise NotFoundError(f"Profile not found: {user_id}")
        return Profile(**rows[0])
