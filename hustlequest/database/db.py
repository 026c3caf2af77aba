"""Database connection and session management."""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base

logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────────

APP_DIR = Path.home() / ".hustlequest"
DB_PATH = APP_DIR / "hustlequest.db"
DEFAULT_DATABASE_URL = f"sqlite:///{DB_PATH}"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def normalize_url(url: str) -> str:
    """Rewrite legacy ``postgres://`` URLs to the dialect name SQLAlchemy expects."""
    url = url.strip()
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def _build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(url, connect_args=connect_args, echo=False)


def _get_engine():
    global _engine
    if _engine is None:
        APP_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(DEFAULT_DATABASE_URL)
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point the module at *url*.  Called once at startup with the
    configured database URL, and by tests with an in-memory SQLite one."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = _build_engine(normalize_url(url))
    logger.debug("Database engine configured: backend=%s", _engine.url.get_backend_name())


def init_db() -> None:
    """Create all tables.  Safe to run repeatedly."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
