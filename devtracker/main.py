"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from .config import settings
from .dashboard.renderer import HeatmapRenderer
from .errors import (
    GoalLockedError,
    NotFoundError,
    StatsUnavailableError,
    StoreError,
    ValidationError,
)
from .goals.problems import ProblemService
from .goals.scoring import ScoreKeeper
from .goals.service import GoalService
from .leetcode.client import LeetCodeClient
from .leetcode.merger import ProfileMerger
from .leetcode.poller import StatsPoller
from .leetcode.session import LeetCodeSession
from .leetcode.sync import LEETCODE_SECTION, SubmissionReconciler
from .tracker.database import TrackerDatabase, utcnow
from .tracker.models import GoalCreate, ProblemCreate, ProblemStatus

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize components
db = TrackerDatabase(settings.database_path)
keeper = ScoreKeeper(db)
goal_service = GoalService(db, keeper, retention_days=settings.goal_retention_days)
problem_service = ProblemService(db)
renderer = HeatmapRenderer(settings.heatmap_output_dir)

leetcode_client = LeetCodeClient(
    settings.leetcode_primary_url,
    settings.leetcode_alfa_url,
    settings.leetcode_fallback_url,
    timeout=settings.leetcode_timeout,
)
leetcode_session = LeetCodeSession(settings.leetcode_session_path)
reconciler = SubmissionReconciler(leetcode_client, db, limit=settings.leetcode_sync_limit)
merger = ProfileMerger(leetcode_client, leetcode_session, reconciler)

# user_id -> running poller
pollers: dict[str, StatsPoller] = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    for poller in list(pollers.values()):
        await poller.stop()
    pollers.clear()
    await merger.wait_for_sync()
    await leetcode_client.close()


# Initialize FastAPI app
app = FastAPI(
    title="DevTracker",
    description="Daily goals, streaks and LeetCode progress tracking",
    version="1.0.0",
    lifespan=lifespan,
)

# Mount static files (renderer has created the directory)
app.mount(
    "/static",
    StaticFiles(directory=str(Path(settings.heatmap_output_dir).parent)),
    name="static",
)


class ProfileCreate(BaseModel):
    """Request body for a new profile."""

    full_name: str = ""


class VerifyRequest(BaseModel):
    """Reported count for a goal that needs verification."""

    count: int


class StatusUpdate(BaseModel):
    """New status for a tracked problem."""

    status: ProblemStatus


class WatchRequest(BaseModel):
    """Username to keep refreshing."""

    username: str


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(GoalLockedError)
async def goal_locked_handler(request: Request, exc: GoalLockedError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(StatsUnavailableError)
async def stats_unavailable_handler(request: Request, exc: StatsUnavailableError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500, content={"detail": "Something went wrong. Please try again."}
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "DevTracker",
        "version": "1.0.0",
        "endpoints": {
            "dashboard": "/api/users/{user_id}/dashboard",
            "goals": "/api/users/{user_id}/goals",
            "problems": "/api/users/{user_id}/problems",
            "streak": "/api/users/{user_id}/streak",
            "heatmap": "/api/users/{user_id}/heatmap",
            "leetcode": "/api/leetcode/{username}",
            "status": "/status",
        },
    }


@app.get("/status")
async def status():
    """Server status endpoint."""
    return {
        "status": "running",
        "version": "1.0.0",
        "timestamp": utcnow().isoformat(),
        "leetcode_username": leetcode_session.username,
        "watching": sorted(pollers),
    }


@app.post("/api/users")
async def create_user(payload: ProfileCreate):
    """Create a profile."""
    profile = keeper.create_profile(payload.full_name)
    logger.info(f"Created profile {profile.id}")
    return profile


@app.get("/api/users/{user_id}/dashboard")
async def dashboard(user_id: str):
    """
    Everything the dashboard shows on load.

    Sweeps goals older than the retention window first.
    """
    profile = keeper.get_profile(user_id)
    goal_service.cleanup_old_goals(user_id)

    return {
        "profile": profile,
        "goals": goal_service.list_goals(user_id, date.today()),
        "scores": keeper.list_scores(user_id),
        "problems": problem_service.list_problems(user_id),
        "problem_counts": asdict(problem_service.counts(user_id)),
    }


@app.get("/api/users/{user_id}/goals")
async def list_goals(user_id: str, day: Optional[date] = None):
    """Goals for a day (today by default)."""
    return goal_service.list_goals(user_id, day or date.today())


@app.post("/api/users/{user_id}/goals", status_code=201)
async def add_goal(user_id: str, payload: GoalCreate):
    """Add a goal for today."""
    return goal_service.add_goal(user_id, payload)


@app.post("/api/goals/{goal_id}/toggle")
async def toggle_goal(goal_id: str):
    """Complete or un-complete a goal."""
    return goal_service.toggle_goal(goal_id)


@app.post("/api/goals/{goal_id}/start")
async def start_goal(goal_id: str):
    """Start a goal's lock timer."""
    goal = goal_service.start_goal(goal_id)
    return {"goal": goal, "remaining_seconds": goal_service.remaining_seconds(goal)}


@app.post("/api/goals/{goal_id}/verify")
async def verify_goal(goal_id: str, payload: VerifyRequest):
    """Submit a count for a goal that needs verification."""
    return asdict(goal_service.verify_goal(goal_id, payload.count))


@app.delete("/api/goals/{goal_id}")
async def delete_goal(goal_id: str):
    """Delete a goal."""
    goal_service.delete_goal(goal_id)
    return {"status": "success", "message": "Goal deleted"}


@app.get("/api/users/{user_id}/problems")
async def list_problems(user_id: str, section: Optional[str] = None):
    """Tracked problems, newest first, with solved/attempted counts."""
    return {
        "problems": problem_service.list_problems(user_id, section),
        "counts": asdict(problem_service.counts(user_id)),
    }


@app.post("/api/users/{user_id}/problems", status_code=201)
async def add_problem(user_id: str, payload: ProblemCreate):
    """Track a problem by hand."""
    return problem_service.add_problem(user_id, payload)


@app.put("/api/problems/{problem_id}/status")
async def set_problem_status(problem_id: str, payload: StatusUpdate):
    """Mark a problem Solved, Attempted or Unsolved."""
    return problem_service.set_status(problem_id, payload.status)


@app.delete("/api/problems/{problem_id}")
async def delete_problem(problem_id: str):
    """Stop tracking a problem."""
    problem_service.delete_problem(problem_id)
    return {"status": "success", "message": "Problem deleted"}


@app.get("/api/users/{user_id}/streak")
async def streak(user_id: str):
    """Current and max streak, written back to the profile."""
    result = keeper.update_profile_streaks(user_id)
    return {"current": result.current, "max": result.max}


@app.get("/api/users/{user_id}/heatmap")
async def heatmap(user_id: str):
    """Render the performance heatmap PNG."""
    scores = keeper.list_scores(user_id)
    _, file_path = renderer.render(scores, name=f"heatmap-{user_id}")
    return FileResponse(file_path, media_type="image/png")


@app.get("/api/leetcode/{username}")
async def leetcode_stats(username: str, user_id: Optional[str] = None):
    """
    Merged LeetCode stats.

    With ``user_id`` the user's recent submissions are synced in the background.
    """
    if not username.strip():
        raise ValidationError("LeetCode username is required")

    stats = await merger.fetch_stats(username.strip(), user_id=user_id)
    return asdict(stats)


@app.post("/api/users/{user_id}/leetcode/sync")
async def leetcode_sync(user_id: str, username: Optional[str] = None):
    """Sync recent submissions into the LeetCode section now."""
    username = (username or leetcode_session.username or "").strip()
    if not username:
        raise ValidationError("LeetCode username is required")

    changed = await reconciler.sync(user_id, username)
    problems = db.select(
        "coding_problems", eq={"user_id": user_id, "section_name": LEETCODE_SECTION}
    )
    return {"changed": changed, "problems": len(problems)}


@app.post("/api/users/{user_id}/leetcode/watch")
async def start_watch(user_id: str, payload: WatchRequest):
    """Refresh stats for ``username`` every few minutes."""
    username = payload.username.strip()
    if not username:
        raise ValidationError("LeetCode username is required")

    existing = pollers.pop(user_id, None)
    if existing:
        await existing.stop()

    poller = StatsPoller(
        merger,
        username,
        interval=settings.leetcode_refresh_interval,
        user_id=user_id,
    )
    pollers[user_id] = poller
    poller.start()
    return {"status": "watching", "username": username}


@app.get("/api/users/{user_id}/leetcode/watch")
async def get_watch(user_id: str):
    """Latest stats from the running poller."""
    poller = pollers.get(user_id)
    if not poller:
        raise NotFoundError(f"Not watching LeetCode stats for {user_id}")

    return {
        "username": poller.username,
        "running": poller.running,
        "stats": asdict(poller.latest) if poller.latest else None,
        "error": poller.last_error,
    }


@app.delete("/api/users/{user_id}/leetcode/watch")
async def stop_watch(user_id: str):
    """Stop refreshing."""
    poller = pollers.pop(user_id, None)
    if poller:
        await poller.stop()
    return {"status": "stopped"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
