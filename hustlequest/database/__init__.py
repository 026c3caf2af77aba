"""Database package."""

from .db import configure_engine, get_session, init_db
from .models import (
    AchievementRow,
    ActionRow,
    ChallengeRow,
    FocusSessionRow,
    GameStateRow,
    TodoRow,
)

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "AchievementRow",
    "ActionRow",
    "ChallengeRow",
    "FocusSessionRow",
    "GameStateRow",
    "TodoRow",
]
