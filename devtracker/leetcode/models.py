"""Data models for LeetCode provider payloads."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class ProfileStats:
    """Merged LeetCode profile statistics (never persisted)."""
    username: str
    name: str = ""
    avatar: str = ""
    ranking: int = 0
    streak: int = 0

    total_solved: int = 0
    total_questions: int = 0
    easy_solved: int = 0
    total_easy: int = 0
    medium_solved: int = 0
    total_medium: int = 0
    hard_solved: int = 0
    total_hard: int = 0
    acceptance_rate: float = 0.0


# Provider key -> ProfileStats attribute
TOTAL_FIELDS = {
    "totalSolved": "total_solved",
    "totalQuestions": "total_questions",
    "easySolved": "easy_solved",
    "totalEasy": "total_easy",
    "mediumSolved": "medium_solved",
    "totalMedium": "total_medium",
    "hardSolved": "hard_solved",
    "totalHard": "total_hard",
}


@dataclass
class Submission:
    """One entry of a user's recent submission list."""
    title: str
    title_slug: str
    timestamp: int  # epoch seconds
    status_display: str
    lang: Optional[str] = None

    @classmethod
    def from_payload(cls, data: dict) -> "Submission":
        """
        Build from a provider entry.

        Raises:
            KeyError, ValueError, TypeError: Entry is missing or has bad fields
        """
        slug = data["titleSlug"]
        if not slug:
            raise ValueError("empty titleSlug")
        return cls(
            title=data.get("title") or slug,
            title_slug=slug,
            timestamp=int(data["timestamp"]),
            status_display=data.get("statusDisplay", ""),
            lang=data.get("lang"),
        )

    @property
    def accepted(self) -> bool:
        """True when the verdict was Accepted."""
        return self.status_display == "Accepted"

    @property
    def submitted_at(self) -> datetime:
        """Submission time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)
