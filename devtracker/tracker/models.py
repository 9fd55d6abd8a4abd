"""Tracker records stored in the backend."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class GoalCategory(str, Enum):
    """Daily goal categories."""

    CODING = "Coding"
    WEB_DEVELOPMENT = "Web Development"
    STUDY = "Study"
    HEALTH = "Health"
    READING = "Reading"
    GENERAL = "General"


class Difficulty(str, Enum):
    """Problem difficulty."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class ProblemStatus(str, Enum):
    """Problem status, ordered by progress."""

    UNSOLVED = "Unsolved"
    ATTEMPTED = "Attempted"
    SOLVED = "Solved"

    @property
    def rank(self) -> int:
        """Position in Unsolved < Attempted < Solved."""
        return _STATUS_RANK[self]


_STATUS_RANK = {
    ProblemStatus.UNSOLVED: 0,
    ProblemStatus.ATTEMPTED: 1,
    ProblemStatus.SOLVED: 2,
}


class Profile(BaseModel):
    """User profile with persisted streaks."""

    id: str
    full_name: str = ""
    avatar_url: Optional[str] = None
    current_streak: int = 0
    max_streak: int = 0
    total_score: int = 0
    leetcode_url: Optional[str] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class DailyGoal(BaseModel):
    """A task for one day, worth ``points`` when completed."""

    id: str
    user_id: str
    title: str
    category: GoalCategory = GoalCategory.GENERAL
    points: int
    is_completed: bool = False
    completed_at: Optional[dt.datetime] = None
    date: dt.date
    is_recurring: bool = False
    duration_minutes: int = 0  # lock duration, 0 = no lock
    started_at: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None


class GoalCreate(BaseModel):
    """Request body for a new goal."""

    title: str
    category: GoalCategory = GoalCategory.CODING
    points: int = 10
    is_recurring: bool = False
    duration_minutes: int = 60


class DailyScore(BaseModel):
    """Aggregate for one (user, date); recomputed from that day's goals."""

    id: str
    user_id: str
    date: dt.date
    score: int = 0
    goals_completed: int = 0
    total_goals: int = 0
    created_at: Optional[dt.datetime] = None


class CodingProblem(BaseModel):
    """A tracked coding problem."""

    id: str
    user_id: str
    section_name: str
    problem_name: str
    problem_link: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    status: ProblemStatus = ProblemStatus.UNSOLVED
    completed_at: Optional[dt.datetime] = None
    youtube_solution: Optional[str] = None
    resource_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class ProblemCreate(BaseModel):
    """Request body for a manually tracked problem."""

    section_name: str = "DSA Practice"
    problem_name: str
    problem_link: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    status: ProblemStatus = ProblemStatus.UNSOLVED
    youtube_solution: Optional[str] = None
    resource_url: Optional[str] = None
    notes: Optional[str] = None
