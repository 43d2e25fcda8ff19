"""Settings resolved from the environment and an optional .env file."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return str(value)


def _as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        return normalized in {"1", "true", "yes", "on"}
    return default


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return default


class Settings:
    """Library settings resolved from environment variables."""

    DATABASE_URL: str = "sqlite:///sdatabase.db"
    LOG_LEVEL: str = "WARNING"
    VALIDATE: bool = True

    PG_PORT: int = 5432
    PG_CONNECT_TIMEOUT: int = 10

    @classmethod
    def refresh_from_env(cls) -> None:
        """Re-read every setting from the environment."""
        cls.DATABASE_URL = _as_str(os.getenv("SDB_DATABASE_URL"), "sqlite:///sdatabase.db")
        cls.LOG_LEVEL = _as_str(os.getenv("SDB_LOG_LEVEL"), "WARNING")
        cls.VALIDATE = _as_bool(os.getenv("SDB_VALIDATE"), True)
        cls.PG_PORT = _as_int(os.getenv("SDB_PG_PORT"), 5432)
        cls.PG_CONNECT_TIMEOUT = _as_int(os.getenv("SDB_PG_CONNECT_TIMEOUT"), 10)


Settings.refresh_from_env()


def setup_logging(level_override: Optional[str] = None) -> None:
    """Configure root logging using settings or override."""

    level_name = (level_override or Settings.LOG_LEVEL or "WARNING").upper()

    if level_name in {"NO", "NONE", "OFF"}:
        # Use a level above CRITICAL to ensure all logging is effectively disabled
        level = logging.CRITICAL + 10
    else:
        level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )

    logging.getLogger("sdatabase").setLevel(level)

    # Keep the driver's logger at INFO or higher to avoid chatty output
    logging.getLogger("psycopg").setLevel(max(level, logging.INFO))
