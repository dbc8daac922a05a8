"""Application settings.

Read once from the environment. Every value has a development default so
the service and its tests start without any configuration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "findyouth-dev-secret-change-me"


def _split_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass
class Settings:
    """Runtime configuration."""

    db_path: Path = Path("data/findyouth.db")
    storage_dir: Path = Path("storage")
    public_url: str = "http://localhost:8000"
    jwt_secret: str = DEV_JWT_SECRET
    token_expiration_minutes: int = 1440
    probe_timeout: float = 3.0
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )

    @property
    def storage_public_url(self) -> str:
        """Public base URL under which stored objects are served."""
        return f"{self.public_url.rstrip('/')}/storage"


def load_settings() -> Settings:
    """Build settings from FINDYOUTH_* environment variables."""
    settings = Settings()

    if "FINDYOUTH_DB_PATH" in os.environ:
        settings.db_path = Path(os.environ["FINDYOUTH_DB_PATH"])
    if "FINDYOUTH_STORAGE_DIR" in os.environ:
        settings.storage_dir = Path(os.environ["FINDYOUTH_STORAGE_DIR"])
    if "FINDYOUTH_PUBLIC_URL" in os.environ:
        settings.public_url = os.environ["FINDYOUTH_PUBLIC_URL"]
    if "FINDYOUTH_TOKEN_EXPIRATION_MINUTES" in os.environ:
        settings.token_expiration_minutes = int(os.environ["FINDYOUTH_TOKEN_EXPIRATION_MINUTES"])
    if "FINDYOUTH_PROBE_TIMEOUT" in os.environ:
        settings.probe_timeout = float(os.environ["FINDYOUTH_PROBE_TIMEOUT"])
    if "FINDYOUTH_CORS_ORIGINS" in os.environ:
        settings.cors_origins = _split_origins(os.environ["FINDYOUTH_CORS_ORIGINS"])

    settings.jwt_secret = os.environ.get("FINDYOUTH_JWT_SECRET", DEV_JWT_SECRET)
    if settings.jwt_secret == DEV_JWT_SECRET:
        logger.warning("FINDYOUTH_JWT_SECRET not set, using development secret")

    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings (cached)."""
    return load_settings()
