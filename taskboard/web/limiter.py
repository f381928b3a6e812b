"""
Rate Limiter - SlowAPI configuration for API rate limiting

Route limits are attached by decorator at import time, so the limiter is
process-wide: its settings come from the environment (and the project .env)
only, and every app built by create_app() shares it.
"""
import os
from dataclasses import dataclass

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import env_flag


@dataclass(frozen=True)
class RateLimitSettings:
    enabled: bool = True
    default: str = "60/minute"
    auth: str = "10/minute"

    @classmethod
    def from_env(cls) -> "RateLimitSettings":
        return cls(
            enabled=env_flag("TASKBOARD_RATE_LIMIT_ENABLED", "1"),
            default=os.getenv("TASKBOARD_RATE_LIMIT_DEFAULT", cls.default),
            auth=os.getenv("TASKBOARD_RATE_LIMIT_AUTH", cls.auth),
        )


rate_limits = RateLimitSettings.from_env()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[rate_limits.default],
    enabled=rate_limits.enabled,
)
