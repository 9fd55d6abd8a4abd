"""Remembers the LeetCode username between runs."""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class LeetCodeSession:
    """Last-used username, optionally persisted as a small JSON file."""

    def __init__(self, path: Optional[str] = None):
        """
        Initialize session.

        Args:
            path: JSON file to persist to; None keeps it in memory only
        """
        self.path = Path(path) if path else None
        self.username: Optional[str] = None
        self._load()

    def _load(self):
        """Read a previously saved username."""
        if not self.path or not self.path.exists():
            return

        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read LeetCode session from {self.path}: {e}")
            return

        self.username = data.get("username") or None
        if self.username:
            logger.info(f"Restored LeetCode username: {self.username}")

    def remember(self, username: str):
        """Store the username and persist it if a path is configured."""
        self.username = username
        if not self.path:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"username": username}))

    def forget(self):
        """Clear the stored username."""
        self.username = None
        if self.path and self.path.exists():
            self.path.unlink()
