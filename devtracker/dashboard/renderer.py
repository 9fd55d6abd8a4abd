"""Performance heatmap renderer."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from devtracker.goals.streaks import calculate_streak
from devtracker.tracker.models import DailyScore

logger = logging.getLogger(__name__)

# Fill per level, 0 = no activity, 4 = every goal done
LEVEL_COLORS = {
    0: (45, 45, 52),
    1: (20, 83, 45),
    2: (21, 128, 61),
    3: (34, 197, 94),
    4: (74, 222, 128),
}

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


@dataclass
class HeatmapDay:
    """One cell of the heatmap."""
    day: date
    score: int = 0
    goals_completed: int = 0
    total_goals: int = 0
    level: int = 0


def score_level(score: Optional[DailyScore]) -> int:
    """
    Intensity level for a day.

    Returns:
        4 if every goal was completed, otherwise 3/2/1 by completion ratio
        (> 0.7, > 0.4, anything else), 0 with no score
    """
    if score is None or score.score <= 0:
        return 0
    if score.total_goals > 0 and score.goals_completed == score.total_goals:
        return 4
    if score.goals_completed > 0 and score.total_goals > 0:
        ratio = score.goals_completed / score.total_goals
        if ratio > 0.7:
            return 3
        if ratio > 0.4:
            return 2
        return 1
    return 0


def heatmap_days(
    scores: list[DailyScore], today: Optional[date] = None, days: int = 365
) -> list[HeatmapDay]:
    """One HeatmapDay per calendar day from ``today - days`` to ``today``."""
    today = today or date.today()
    by_day = {score.date: score for score in scores}

    result = []
    day = today - timedelta(days=days)
    while day <= today:
        score = by_day.get(day)
        result.append(
            HeatmapDay(
                day=day,
                score=score.score if score else 0,
                goals_completed=score.goals_completed if score else 0,
                total_goals=score.total_goals if score else 0,
                level=score_level(score),
            )
        )
        day += timedelta(days=1)
    return result


class HeatmapRenderer:
    """Renders a year of daily scores as a week-column heatmap image."""

    CELL = 12
    GAP = 3
    MARGIN = 30
    TOP = 90

    def __init__(self, output_dir: str = "static/images"):
        """
        Initialize renderer.

        Args:
            output_dir: Directory to save generated images
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.fonts = self._load_fonts()

    def _load_fonts(self) -> dict:
        """Load fonts for rendering."""
        fonts = {}

        font_paths = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/System/Library/Fonts/Helvetica.ttc",  # macOS
        ]

        try:
            for path in font_paths:
                if Path(path).exists():
                    fonts["header"] = ImageFont.truetype(path, 20)
                    fonts["normal"] = ImageFont.truetype(path, 14)
                    fonts["small"] = ImageFont.truetype(path, 11)
                    logger.info(f"Loaded fonts from {path}")
                    break
        except OSError as e:
            logger.warning(f"Could not load TrueType fonts: {e}, using default")
            fonts = {}

        if not fonts:
            default_font = ImageFont.load_default()
            fonts["header"] = default_font
            fonts["normal"] = default_font
            fonts["small"] = default_font

        return fonts

    def render(
        self, scores: list[DailyScore], today: Optional[date] = None, name: str = "heatmap"
    ) -> tuple[str, str]:
        """
        Render the heatmap.

        Args:
            scores: Daily scores of one user
            today: Last day shown (defaults to today)
            name: Filename prefix

        Returns:
            Tuple of (filename, file_path)
        """
        today = today or date.today()
        days = heatmap_days(scores, today)
        weeks = self._group_weeks(days)

        step = self.CELL + self.GAP
        width = self.MARGIN * 2 + 30 + len(weeks) * step
        height = self.TOP + 7 * step + 50

        logger.info(f"Rendering heatmap with {len(scores)} scores ({len(weeks)} weeks)")

        image = Image.new("RGB", (width, height), (17, 24, 39))
        draw = ImageDraw.Draw(image)

        self._draw_header(draw, days, today, width)
        self._draw_grid(draw, weeks)
        self._draw_legend(draw, width, height)

        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        filename = f"{name}-{timestamp}"
        file_path = self.output_dir / f"{filename}.png"

        image.save(file_path, "PNG")
        logger.info(f"Saved heatmap to {file_path}")

        return filename, str(file_path)

    def _group_weeks(self, days: list[HeatmapDay]) -> list[list[Optional[HeatmapDay]]]:
        """Split days into Sunday-first weeks, padding the first week."""
        weeks = []
        week: list[Optional[HeatmapDay]] = []

        for index, day in enumerate(days):
            day_of_week = (day.day.weekday() + 1) % 7  # Sunday=0

            if index == 0:
                week.extend([None] * day_of_week)

            week.append(day)

            if day_of_week == 6 or index == len(days) - 1:
                weeks.append(week)
                week = []

        return weeks

    def _draw_header(self, draw: ImageDraw, days: list[HeatmapDay], today: date, width: int):
        """Draw title and streak summary."""
        active = [day.day for day in days if day.level > 0]
        streak = calculate_streak(active, today)

        draw.text((self.MARGIN, 15), "Performance", fill="white", font=self.fonts["header"])

        summary = f"{len(active)} active days in the past year"
        draw.text((self.MARGIN, 45), summary, fill=(156, 163, 175), font=self.fonts["normal"])

        streak_text = f"Current streak: {streak.current}   Max streak: {streak.max}"
        bbox = draw.textbbox((0, 0), streak_text, font=self.fonts["normal"])
        text_width = bbox[2] - bbox[0]
        draw.text(
            (width - text_width - self.MARGIN, 45),
            streak_text,
            fill="white",
            font=self.fonts["normal"],
        )

    def _draw_grid(self, draw: ImageDraw, weeks: list[list[Optional[HeatmapDay]]]):
        """Draw one column per week, one row per weekday."""
        step = self.CELL + self.GAP
        left = self.MARGIN + 30

        for label, row in (("Mon", 1), ("Wed", 3), ("Fri", 5)):
            draw.text(
                (self.MARGIN, self.TOP + row * step),
                label,
                fill=(156, 163, 175),
                font=self.fonts["small"],
            )

        last_month = None
        for column, week in enumerate(weeks):
            x = left + column * step

            first = next((day for day in week if day is not None), None)
            if first and first.day.month != last_month:
                draw.text(
                    (x, self.TOP - 16),
                    MONTHS[first.day.month - 1],
                    fill=(156, 163, 175),
                    font=self.fonts["small"],
                )
                last_month = first.day.month

            for row, day in enumerate(week):
                if day is None:
                    continue
                y = self.TOP + row * step
                draw.rectangle(
                    [x, y, x + self.CELL, y + self.CELL], fill=LEVEL_COLORS[day.level]
                )

    def _draw_legend(self, draw: ImageDraw, width: int, height: int):
        """Draw the Less..More legend and update time."""
        y = height - 30
        x = width - self.MARGIN - 5 * (self.CELL + self.GAP) - 80

        draw.text((x, y), "Less", fill=(156, 163, 175), font=self.fonts["small"])
        x += 35
        for level in range(5):
            draw.rectangle([x, y, x + self.CELL, y + self.CELL], fill=LEVEL_COLORS[level])
            x += self.CELL + self.GAP
        draw.text((x + 5, y), "More", fill=(156, 163, 175), font=self.fonts["small"])

        time_text = f"Last update: {datetime.now().strftime('%H:%M')}"
        draw.text((self.MARGIN, y), time_text, fill=(156, 163, 175), font=self.fonts["small"])
