"""SQLite table store backing profiles, goals, scores and problems."""

import logging
import sqlite3
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from ..errors import StoreError

logger = logging.getLogger(__name__)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        full_name TEXT NOT NULL DEFAULT '',
        avatar_url TEXT,
        current_streak INTEGER NOT NULL DEFAULT 0,
        max_streak INTEGER NOT NULL DEFAULT 0,
        total_score INTEGER NOT NULL DEFAULT 0,
        leetcode_url TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_goals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        category TEXT NOT NULL DEFAULT 'General',
        points INTEGER NOT NULL,
        is_completed INTEGER NOT NULL DEFAULT 0,
        completed_at TEXT,
        date TEXT NOT NULL,
        is_recurring INTEGER NOT NULL DEFAULT 0,
        duration_minutes INTEGER NOT NULL DEFAULT 0,
        started_at TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS coding_problems (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        section_name TEXT NOT NULL,
        problem_name TEXT NOT NULL,
        problem_link TEXT,
        difficulty TEXT NOT NULL DEFAULT 'Medium',
        status TEXT NOT NULL DEFAULT 'Unsolved',
        youtube_solution TEXT,
        resource_url TEXT,
        notes TEXT,
        completed_at TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS daily_scores (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        date TEXT NOT NULL,
        score INTEGER NOT NULL DEFAULT 0,
        goals_completed INTEGER NOT NULL DEFAULT 0,
        total_goals INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        UNIQUE (user_id, date)
    )
    """,
]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _to_sql(value: Any) -> Any:
    """Convert Python values into something SQLite stores."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Enum):
        return value.value
    return value


class TrackerDatabase:
    """Table-oriented store with equality/range filters, ordering and upsert."""

    def __init__(self, db_path: str = "data/devtracker.db"):
        """Initialize database."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._columns: dict[str, set[str]] = {}
        self._init_db()

    def _init_db(self):
        """Create database tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.commit()

            tables = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
            for (table,) in tables:
                info = conn.execute(f"PRAGMA table_info({table})").fetchall()
                self._columns[table] = {row[1] for row in info}

        logger.info(f"Database initialized at {self.db_path}")

    def _check(self, table: str, columns) -> None:
        """Reject table or column names that are not in the schema."""
        known = self._columns.get(table)
        if known is None:
            raise StoreError(f"Unknown table: {table}")
        unknown = [column for column in columns if column not in known]
        if unknown:
            raise StoreError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    def _where(self, table: str, eq=None, gt=None, lt=None) -> tuple[str, list]:
        """Build a WHERE clause from equality and range filters."""
        clauses = []
        params = []
        for operator, filters in (("=", eq), (">", gt), ("<", lt)):
            if not filters:
                continue
            self._check(table, filters)
            for column, value in filters.items():
                if value is None and operator == "=":
                    clauses.append(f"{column} IS NULL")
                    continue
                clauses.append(f"{column} {operator} ?")
                params.append(_to_sql(value))

        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _execute(self, sql: str, params) -> tuple[list[sqlite3.Row], int]:
        """Run one statement in its own connection; returns (rows, rowcount)."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.row_factory = sqlite3.Row
                cursor = conn.execute(sql, params)
                rows = cursor.fetchall()
                conn.commit()
                return rows, cursor.rowcount
        except sqlite3.Error as e:
            logger.error(f"Query failed: {sql.split()[0]} ... ({e})")
            raise StoreError(str(e)) from e

    def select(
        self,
        table: str,
        eq: Optional[dict] = None,
        gt: Optional[dict] = None,
        lt: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """Select rows matching every filter."""
        self._check(table, [])
        where, params = self._where(table, eq=eq, gt=gt, lt=lt)
        sql = f"SELECT * FROM {table}{where}"

        if order_by:
            self._check(table, [order_by])
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        rows, _ = self._execute(sql, params)
        return [dict(row) for row in rows]

    def _complete_record(self, table: str, record: dict) -> dict:
        """Fill generated id and created_at columns."""
        record = {key: _to_sql(value) for key, value in record.items()}
        columns = self._columns.get(table, set())
        if "id" in columns and not record.get("id"):
            record["id"] = str(uuid.uuid4())
        if "created_at" in columns and not record.get("created_at"):
            record["created_at"] = utcnow().isoformat()
        return record

    def insert(self, table: str, record: dict) -> dict:
        """Insert one row and return it as stored."""
        record = self._complete_record(table, record)
        self._check(table, record)

        columns = ", ".join(record)
        placeholders = ", ".join("?" for _ in record)
        self._execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            list(record.values()),
        )
        logger.debug(f"Inserted into {table}: {record.get('id')}")
        return record

    def update(self, table: str, values: dict, eq: dict) -> int:
        """Update rows matching ``eq``; returns the number of rows changed."""
        if not values:
            return 0
        if not eq:
            raise StoreError(f"Refusing to update every row of {table}")
        self._check(table, values)

        assignments = ", ".join(f"{column} = ?" for column in values)
        where, params = self._where(table, eq=eq)
        _, count = self._execute(
            f"UPDATE {table} SET {assignments}{where}",
            [_to_sql(value) for value in values.values()] + params,
        )
        return count

    def delete(self, table: str, eq: dict, lt: Optional[dict] = None) -> int:
        """Delete rows matching the filters; returns the number removed."""
        if not eq:
            raise StoreError(f"Refusing to delete every row of {table}")
        where, params = self._where(table, eq=eq, lt=lt)
        _, count = self._execute(f"DELETE FROM {table}{where}", params)
        return count

    def upsert(self, table: str, record: dict, on_conflict: tuple[str, ...]) -> dict:
        """
        Insert a row, or replace its non-key columns when ``on_conflict`` clashes.

        Args:
            table: Table name
            record: Full row to write
            on_conflict: Columns of the unique key to resolve against

        Returns:
            The stored row
        """
        record = self._complete_record(table, record)
        self._check(table, record)
        self._check(table, on_conflict)

        columns = ", ".join(record)
        placeholders = ", ".join("?" for _ in record)
        replaced = [
            column
            for column in record
            if column not in on_conflict and column not in ("id", "created_at")
        ]
        if replaced:
            action = "DO UPDATE SET " + ", ".join(
                f"{column} = excluded.{column}" for column in replaced
            )
        else:
            action = "DO NOTHING"

        self._execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT ({', '.join(on_conflict)}) {action}",
            list(record.values()),
        )

        rows = self.select(table, eq={column: record[column] for column in on_conflict})
        return rows[0]
