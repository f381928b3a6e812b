"""
Database URL handling.

Only SQLite URLs are accepted:
- sqlite:///relative/path.db   (three slashes: relative to the project root)
- sqlite:////absolute/path.db  (four slashes: absolute)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse


DEFAULT_DATABASE_URL = "sqlite:///./data/taskboard.db"


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = DEFAULT_DATABASE_URL

    @classmethod
    def from_env(cls) -> "DatabaseSettings":
        return cls(url=os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL))

    @property
    def database_path(self) -> Path:
        return parse_database_url(self.url)


def parse_database_url(url: str) -> Path:
    """
    Resolve the SQLite file named by a database URL.

    Raises:
        ValueError: If the URL does not use the sqlite scheme
    """
    parsed = urlparse(url)
    if parsed.scheme != "sqlite":
        raise ValueError(f"Only sqlite URLs are supported, got: {url}")

    path = parsed.path
    path = path[1:] if path.startswith("//") else path.lstrip("/")
    return Path(path or ":memory:")
