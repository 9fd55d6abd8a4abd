"""Daily goal lifecycle: add, lock timer, completion, verification, retention."""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..errors import (
    GoalLockedError,
    NotFoundError,
    ValidationError,
    VerificationRequiredError,
)
from ..tracker.database import TrackerDatabase, utcnow
from ..tracker.models import DailyGoal, DailyScore, GoalCategory, GoalCreate
from .scoring import ScoreKeeper
from .streaks import Streak

logger = logging.getLogger(__name__)

# Categories that need a reported count before they can be ticked off
VERIFIED_CATEGORIES = (GoalCategory.CODING, GoalCategory.WEB_DEVELOPMENT)


@dataclass
class VerificationResult:
    """Outcome of a completion check."""

    passed: bool
    title: str
    message: str
    goal: Optional[DailyGoal] = None


class GoalService:
    """Creates and mutates daily goals and keeps scores in sync."""

    def __init__(
        self, db: TrackerDatabase, keeper: ScoreKeeper, retention_days: int = 7
    ):
        """
        Initialize goal service.

        Args:
            db: Tracker database
            keeper: Score keeper used after every change
            retention_days: Goals older than this many days are swept
        """
        self.db = db
        self.keeper = keeper
        self.retention_days = retention_days

    def list_goals(self, user_id: str, day: date) -> list[DailyGoal]:
        """All goals of a user on one day, in creation order."""
        rows = self.db.select(
            "daily_goals", eq={"user_id": user_id, "date": day}, order_by="created_at"
        )
        return [DailyGoal(**row) for row in rows]

    def get_goal(self, goal_id: str) -> DailyGoal:
        """Get goal by id."""
        rows = self.db.select("daily_goals", eq={"id": goal_id})
        if not rows:
            raise NotFoundError(f"Goal not found: {goal_id}")
        return DailyGoal(**rows[0])

    def add_goal(
        self, user_id: str, payload: GoalCreate, day: Optional[date] = None
    ) -> DailyGoal:
        """Validate and store a new goal for ``day`` (today by default)."""
        title = payload.title.strip()
        if not title:
            raise ValidationError("Goal title is required")
        if payload.points <= 0:
            raise ValidationError("Goal points must be a positive number")
        if payload.duration_minutes < 0:
            raise ValidationError("Goal duration cannot be negative")

        day = day or date.today()
        row = self.db.insert(
            "daily_goals",
            {
                "user_id": user_id,
                "title": title,
                "category": payload.category,
                "points": payload.points,
                "is_recurring": payload.is_recurring,
                "duration_minutes": payload.duration_minutes,
                "date": day,
            },
        )
        goal = DailyGoal(**row)
        logger.info(f"Added goal '{goal.title}' ({goal.points} pts) for {user_id}")

        self.refresh_day(user_id, day)
        return goal

    def remaining_seconds(self, goal: DailyGoal, now: Optional[datetime] = None) -> int:
        """Seconds left on the goal's lock timer (0 when unlocked)."""
        if not goal.started_at or not goal.duration_minutes:
            return 0

        now = now or utcnow()
        started_at = goal.started_at
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)

        end_time = started_at + timedelta(minutes=goal.duration_minutes)
        return max(0, math.ceil((end_time - now).total_seconds()))

    def start_goal(self, goal_id: str, now: Optional[datetime] = None) -> DailyGoal:
        """Start the lock timer."""
        goal = self.get_goal(goal_id)
        started_at = now or utcnow()
        self.db.update("daily_goals", {"started_at": started_at}, eq={"id": goal_id})
        logger.info(f"Started goal '{goal.title}' ({goal.duration_minutes} min lock)")
        return goal.model_copy(update={"started_at": started_at})

    def toggle_goal(self, goal_id: str, now: Optional[datetime] = None) -> DailyGoal:
        """
        Flip a goal's completion.

        Raises:
            GoalLockedError: The lock timer is still running
            VerificationRequiredError: Completing a category that needs a count
        """
        goal = self.get_goal(goal_id)

        remaining = self.remaining_seconds(goal, now)
        if remaining > 0:
            raise GoalLockedError(
                f"Goal '{goal.title}' is locked for another {remaining} seconds"
            )

        if not goal.is_completed and goal.category in VERIFIED_CATEGORIES:
            raise VerificationRequiredError(
                f"Goal '{goal.title}' needs verification before completion"
            )

        return self._set_completed(goal, not goal.is_completed, now)

    def verify_goal(
        self, goal_id: str, count: int, now: Optional[datetime] = None
    ) -> VerificationResult:
        """
        Check a reported count and complete the goal when it passes.

        Coding needs at least 3 problems; Web Development more than 3 lectures.
        """
        goal = self.get_goal(goal_id)

        remaining = self.remaining_seconds(goal, now)
        if remaining > 0:
            raise GoalLockedError(
                f"Goal '{goal.title}' is locked for another {remaining} seconds"
            )

        if goal.category == GoalCategory.CODING:
            if count >= 3:
                result = VerificationResult(
                    True,
                    "Fantastic Effort!",
                    "You've crushed those problems. Keep building that logic muscle!",
                )
            else:
                result = VerificationResult(
                    False,
                    "Almost there!",
                    "Push yourself a little more. Solve at least 3 questions to unlock this victory.",
                )
        elif goal.category == GoalCategory.WEB_DEVELOPMENT:
            if count > 3:
                result = VerificationResult(
                    True,
                    "Knowledge Unlocked!",
                    "You're leveling up your stack. Great dedication!",
                )
            else:
                result = VerificationResult(
                    False,
                    "Keep watching!",
                    "Dive deeper. Attend more than 3 lectures to truly grasp the concepts.",
                )
        else:
            result = VerificationResult(True, "Goal complete!", "Nice work.")

        if result.passed and not goal.is_completed:
            goal = self._set_completed(goal, True, now)

        result.goal = goal
        logger.info(f"Verification for '{goal.title}' with count={count}: {result.passed}")
        return result

    def _set_completed(
        self, goal: DailyGoal, completed: bool, now: Optional[datetime]
    ) -> DailyGoal:
        """Write completion state and recompute the day."""
        completed_at = (now or utcnow()) if completed else None
        self.db.update(
            "daily_goals",
            {"is_completed": completed, "completed_at": completed_at},
            eq={"id": goal.id},
        )
        self.refresh_day(goal.user_id, goal.date)
        return goal.model_copy(
            update={"is_completed": completed, "completed_at": completed_at}
        )

    def delete_goal(self, goal_id: str) -> None:
        """Delete a goal and recompute its day."""
        goal = self.get_goal(goal_id)
        self.db.delete("daily_goals", eq={"id": goal_id})
        logger.info(f"Deleted goal '{goal.title}'")
        self.refresh_day(goal.user_id, goal.date)

    def cleanup_old_goals(self, user_id: str, today: Optional[date] = None) -> int:
        """Delete goals dated before the retention window. Returns count."""
        today = today or date.today()
        cutoff = today - timedelta(days=self.retention_days)
        removed = self.db.delete(
            "daily_goals", eq={"user_id": user_id}, lt={"date": cutoff}
        )
        if removed:
            logger.info(f"Removed {removed} goals older than {cutoff} for {user_id}")
        return removed

    def refresh_day(
        self, user_id: str, day: date, today: Optional[date] = None
    ) -> tuple[DailyScore, Streak]:
        """Recompute the day's score from all its goals, then the streaks."""
        goals = self.list_goals(user_id, day)
        score = self.keeper.update_daily_score(user_id, day, goals)
        streak = self.keeper.update_profile_streaks(user_id, today)
        return score, streak
