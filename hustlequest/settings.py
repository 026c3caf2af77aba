"""Application settings with JSON persistence.

Settings are stored at:
    ~/.hustlequest/settings.json

Environment variables win over the file:

    HUSTLEQUEST_STORAGE    memory | database
    DATABASE_URL           any SQLAlchemy URL; selects the database backend
    HUSTLEQUEST_LOG_LEVEL  DEBUG, INFO, ...

Usage::

    settings = load_settings()
    settings.default_user_id = "alex"
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .database.db import APP_DIR, DEFAULT_DATABASE_URL

logger = logging.getLogger(__name__)

SETTINGS_PATH = APP_DIR / "settings.json"

STORAGE_BACKENDS = ("memory", "database")


@dataclass
class Settings:
    """All deployment-level preferences."""

    # ── storage ───────────────────────────────────────────────────────
    storage_backend: str = "memory"        # memory | database
    database_url: str = DEFAULT_DATABASE_URL

    # ── users ─────────────────────────────────────────────────────────
    default_user_id: str = "default"

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"


def _apply_env(settings: Settings, env) -> Settings:
    url = env.get("DATABASE_URL", "").strip()
    if url:
        settings.database_url = url
        settings.storage_backend = "database"

    backend = env.get("HUSTLEQUEST_STORAGE", "").strip().lower()
    if backend:
        settings.storage_backend = backend

    level = env.get("HUSTLEQUEST_LOG_LEVEL", "").strip()
    if level:
        settings.log_level = level.upper()

    if settings.storage_backend not in STORAGE_BACKENDS:
        logger.warning(
            "Unknown storage backend %r, falling back to memory",
            settings.storage_backend,
        )
        settings.storage_backend = "memory"
    return settings


def load_settings(path: Path | None = None, env=None) -> Settings:
    """Load settings from disk and the environment, falling back to defaults."""
    path = path or SETTINGS_PATH
    env = os.environ if env is None else env

    settings = Settings()
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            settings = Settings(**filtered)
    except (OSError, ValueError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
    return _apply_env(settings, env)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
