"""Performance heatmap."""

from datetime import date, timedelta
from pathlib import Path

from PIL import Image

from devtracker.dashboard.renderer import HeatmapRenderer, heatmap_days, score_level
from devtracker.tracker.models import DailyScore

TODAY = date(2026, 10, 19)


def score(day, value, completed, total):
    return DailyScore(
        id=str(day), user_id="u1", date=day, score=value, goals_completed=completed, total_goals=total
    )


def test_score_levels():
    assert score_level(None) == 0
    assert score_level(score(TODAY, 0, 0, 3)) == 0
    assert score_level(score(TODAY, 30, 3, 3)) == 4
    assert score_level(score(TODAY, 20, 8, 10)) == 3
    assert score_level(score(TODAY, 10, 5, 10)) == 2
    assert score_level(score(TODAY, 5, 4, 10)) == 1
    assert score_level(score(TODAY, 5, 1, 10)) == 1


def test_heatmap_covers_a_year_ending_today():
    days = heatmap_days([score(TODAY - timedelta(days=3), 10, 1, 1)], TODAY)

    assert len(days) == 366
    assert days[0].day == TODAY - timedelta(days=365)
    assert days[-1].day == TODAY
    active = [day for day in days if day.level]
    assert [(d.day, d.score, d.level) for d in active] == [(TODAY - timedelta(days=3), 10, 4)]


def test_render_writes_png(tmp_path):
    renderer = HeatmapRenderer(str(tmp_path / "images"))
    scores = [score(TODAY - timedelta(days=i), 10, 1, 2) for i in range(5)]

    filename, file_path = renderer.render(scores, TODAY)

    assert filename.startswith("heatmap-")
    assert Path(file_path).exists()
    with Image.open(file_path) as image:
        assert image.format == "PNG"
        assert image.width > 53 * (renderer.CELL + renderer.GAP)


def test_weeks_start_on_sunday(tmp_path):
    renderer = HeatmapRenderer(str(tmp_path))
    weeks = renderer._group_weeks(heatmap_days([], TODAY))

    assert all(len(week) == 7 for week in weeks[:-1])
    first_real = next(day for day in weeks[0] if day is not None)
    assert weeks[0].index(first_real) == (first_real.day.weekday() + 1) % 7
    assert sum(day is not None for week in weeks for day in week) == 366
