"""
Web Configuration - Centralized settings management
"""
import os
from pathlib import Path

from pydantic import BaseModel
from dotenv import load_dotenv

from ..db.base import DEFAULT_DATABASE_URL, DatabaseSettings

PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load the project .env file if present (real environment wins)
_project_env = PROJECT_ROOT / ".env"
if _project_env.exists():
    load_dotenv(_project_env)


def env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class AppConfig(BaseModel):
    """Application configuration with environment variable support"""

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    api_prefix: str = "/api"

    # Persistence
    database_url: str = DEFAULT_DATABASE_URL

    # Auth settings
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_in: int = 86400

    # Task listing
    tasks_per_page: int = 5
    # When False, GET /categories/{id}/tasks only lists the caller's own tasks
    category_tasks_all_owners: bool = False

    # Rate limits are process-wide, see web.limiter.RateLimitSettings

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables"""
        return cls(
            host=os.getenv("TASKBOARD_HOST", "127.0.0.1"),
            port=int(os.getenv("TASKBOARD_PORT", "8000")),
            debug=env_flag("TASKBOARD_DEBUG", "0"),
            api_prefix=os.getenv("TASKBOARD_API_PREFIX", "/api"),
            database_url=DatabaseSettings.from_env().url,
            jwt_secret=os.getenv("TASKBOARD_JWT_SECRET", "change-me"),
            jwt_algorithm=os.getenv("TASKBOARD_JWT_ALGORITHM", "HS256"),
            jwt_expires_in=int(os.getenv("TASKBOARD_JWT_EXPIRES_IN", "86400")),
            tasks_per_page=int(os.getenv("TASKBOARD_TASKS_PER_PAGE", "5")),
            category_tasks_all_owners=env_flag("TASKBOARD_CATEGORY_TASKS_ALL_OWNERS", "0"),
        )

    @property
    def database_path(self) -> Path:
        """SQLite file path; relative paths resolve against the project root."""
        path = DatabaseSettings(url=self.database_url).database_path
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


# Global config instance
config = AppConfig.from_env()
