"""Manually tracked coding problems."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import NotFoundError, ValidationError
from ..tracker.database import TrackerDatabase, utcnow
from ..tracker.models import CodingProblem, ProblemCreate, ProblemStatus

logger = logging.getLogger(__name__)


@dataclass
class ProblemCounts:
    """Solved / attempted / total, as shown above the problem list."""

    solved: int = 0
    attempted: int = 0
    total: int = 0


class ProblemService:
    """Adds, updates and removes a user's coding problems."""

    def __init__(self, db: TrackerDatabase):
        self.db = db

    def list_problems(
        self, user_id: str, section_name: Optional[str] = None
    ) -> list[CodingProblem]:
        """Problems of a user, newest first, optionally for one section."""
        eq = {"user_id": user_id}
        if section_name:
            eq["section_name"] = section_name
        rows = self.db.select(
            "coding_problems", eq=eq, order_by="created_at", descending=True
        )
        return [CodingProblem(**row) for row in rows]

    def get_problem(self, problem_id: str) -> CodingProblem:
        """Get problem by id."""
        rows = self.db.select("coding_problems", eq={"id": problem_id})
        if not rows:
            raise NotFoundError(f"Problem not found: {problem_id}")
        return CodingProblem(**rows[0])

    def add_problem(
        self, user_id: str, payload: ProblemCreate, now: Optional[datetime] = None
    ) -> CodingProblem:
        """
        Track a new problem.

        Optional text fields are stored as NULL when blank. A problem added as
        Solved is stamped with ``completed_at``.
        """
        name = payload.problem_name.strip()
        section = payload.section_name.strip()
        if not name:
            raise ValidationError("Problem name is required")
        if not section:
            raise ValidationError("Section name is required")

        row = self.db.insert(
            "coding_problems",
            {
                "user_id": user_id,
                "section_name": section,
                "problem_name": name,
                "problem_link": _blank_to_none(payload.problem_link),
                "difficulty": payload.difficulty,
                "status": payload.status,
                "youtube_solution": _blank_to_none(payload.youtube_solution),
                "resource_url": _blank_to_none(payload.resource_url),
                "notes": _blank_to_none(payload.notes),
                "completed_at": (
                    (now or utcnow()) if payload.status == ProblemStatus.SOLVED else None
                ),
            },
        )
        problem = CodingProblem(**row)
        logger.info(f"Added problem '{problem.problem_name}' to {section} for {user_id}")
        return problem

    def set_status(
        self, problem_id: str, status: ProblemStatus, now: Optional[datetime] = None
    ) -> CodingProblem:
        """Change a problem's status; Solved stamps ``completed_at``, anything else clears it."""
        problem = self.get_problem(problem_id)
        completed_at = (now or utcnow()) if status == ProblemStatus.SOLVED else None

        count = self.db.update(
            "coding_problems",
            {"status": status, "completed_at": completed_at},
            eq={"id": problem_id},
        )
        if not count:
            raise NotFoundError(f"Problem not found: {problem_id}")

        logger.info(f"Problem '{problem.problem_name}': {problem.status.value} -> {status.value}")
        return problem.model_copy(update={"status": status, "completed_at": completed_at})

    def delete_problem(self, problem_id: str) -> None:
        """Stop tracking a problem."""
        if not self.db.delete("coding_problems", eq={"id": problem_id}):
            raise NotFoundError(f"Problem not found: {problem_id}")
        logger.info(f"Deleted problem {problem_id}")

    def counts(self, user_id: str) -> ProblemCounts:
        """Solved and attempted counts over all of a user's problems."""
        counts = ProblemCounts()
        for row in self.db.select("coding_problems", eq={"user_id": user_id}):
            counts.total += 1
            if row["status"] == ProblemStatus.SOLVED.value:
                counts.solved += 1
            elif row["status"] == ProblemStatus.ATTEMPTED.value:
                counts.attempted += 1
        return counts


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None
