"""Application configuration."""

import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    database_path: str = os.getenv("DATABASE_PATH", "data/devtracker.db")
    goal_retention_days: int = int(os.getenv("GOAL_RETENTION_DAYS", "7"))

    # LeetCode providers
    leetcode_primary_url: str = os.getenv(
        "LEETCODE_PRIMARY_URL", "https://leetcode-api-faisalshohag.vercel.app"
    )
    leetcode_alfa_url: str = os.getenv(
        "LEETCODE_ALFA_URL", "https://alfa-leetcode-api.onrender.com"
    )
    leetcode_fallback_url: str = os.getenv(
        "LEETCODE_FALLBACK_URL", "https://leetcode-stats-api.herokuapp.com"
    )
    leetcode_timeout: float = float(os.getenv("LEETCODE_TIMEOUT", "10"))
    leetcode_sync_limit: int = int(os.getenv("LEETCODE_SYNC_LIMIT", "50"))
    leetcode_refresh_interval: int = int(
        os.getenv("LEETCODE_REFRESH_INTERVAL", "300")
    )  # 5 minutes
    leetcode_session_path: str = os.getenv(
        "LEETCODE_SESSION_PATH", "data/leetcode_session.json"
    )

    # Server
    server_host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    server_port: int = int(os.getenv("SERVER_PORT", "8000"))

    # Dashboard
    heatmap_output_dir: str = os.getenv("HEATMAP_OUTPUT_DIR", "static/images")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = False


settings = Settings()
