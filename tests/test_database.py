"""Tracker table store."""

from datetime import date

import pytest

from devtracker.errors import StoreError


def test_insert_fills_id_and_created_at(db):
    row = db.insert("profiles", {"full_name": "Ada"})

    assert row["id"]
    assert row["created_at"]
    assert db.select("profiles", eq={"id": row["id"]})[0]["full_name"] == "Ada"


def test_select_filters_order_and_limit(db):
    for day, score in (("2026-10-01", 5), ("2026-10-03", 0), ("2026-10-02", 12)):
        db.insert("daily_scores", {"user_id": "u1", "date": day, "score": score})
    db.insert("daily_scores", {"user_id": "u2", "date": "2026-10-04", "score": 7})

    rows = db.select(
        "daily_scores",
        eq={"user_id": "u1"},
        gt={"score": 0},
        order_by="date",
        descending=True,
    )
    assert [row["date"] for row in rows] == ["2026-10-02", "2026-10-01"]

    limited = db.select("daily_scores", eq={"user_id": "u1"}, order_by="date", limit=1)
    assert [row["date"] for row in limited] == ["2026-10-01"]


def test_dates_are_stored_as_iso_strings(db):
    db.insert("daily_scores", {"user_id": "u1", "date": date(2026, 10, 19)})
    assert db.select("daily_scores", eq={"date": date(2026, 10, 19)})[0]["date"] == "2026-10-19"


def test_upsert_replaces_non_key_columns(db):
    first = db.upsert(
        "daily_scores",
        {"user_id": "u1", "date": "2026-10-19", "score": 30, "goals_completed": 3, "total_goals": 3},
        on_conflict=("user_id", "date"),
    )
    second = db.upsert(
        "daily_scores",
        {"user_id": "u1", "date": "2026-10-19", "score": 5, "goals_completed": 1, "total_goals": 4},
        on_conflict=("user_id", "date"),
    )

    assert second["id"] == first["id"]
    assert (second["score"], second["goals_completed"], second["total_goals"]) == (5, 1, 4)
    assert len(db.select("daily_scores", eq={"user_id": "u1"})) == 1


def test_update_and_delete_return_row_counts(db):
    db.insert("daily_goals", {"user_id": "u1", "title": "a", "points": 1, "date": "2026-10-01"})
    db.insert("daily_goals", {"user_id": "u1", "title": "b", "points": 1, "date": "2026-10-10"})

    assert db.update("daily_goals", {"is_completed": True}, eq={"user_id": "u1"}) == 2
    assert all(row["is_completed"] == 1 for row in db.select("daily_goals"))

    assert db.delete("daily_goals", eq={"user_id": "u1"}, lt={"date": "2026-10-05"}) == 1
    assert [row["title"] for row in db.select("daily_goals")] == ["b"]


def test_unknown_table_or_column_is_rejected(db):
    with pytest.raises(StoreError):
        db.select("users")
    with pytest.raises(StoreError):
        db.select("profiles", eq={"name; DROP TABLE profiles": 1})
    with pytest.raises(StoreError):
        db.insert("profiles", {"nickname": "x"})


def test_unfiltered_update_and_delete_are_refused(db):
    with pytest.raises(StoreError):
        db.update("profiles", {"full_name": "x"}, eq={})
    with pytest.raises(StoreError):
        db.delete("profiles", eq={})


def test_constraint_violation_raises_store_error(db):
    db.insert("daily_scores", {"user_id": "u1", "date": "2026-10-19"})
    with pytest.raises(StoreError):
        db.insert("daily_scores", {"user_id": "u1", "date": "2026-10-19"})
