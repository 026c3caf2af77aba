"""Gamification package."""

from .actions import ACTION_XP_VALUES, ActionType
from .achievements import ACHIEVEMENTS, AchievementTracker, earned_keys
from .challenges import (
    CHALLENGE_ACTIONS,
    ChallengeTracker,
    apply_completion,
    time_remaining,
)
from .ledger import ActionLedger
from .progression import (
    LEAGUES,
    LEVEL_REQUIREMENTS,
    LEVEL_TITLES,
    MAX_LEVEL,
    League,
    league_for_level,
    level_for_xp,
    title_for_level,
    xp_for_level,
    xp_in_current_level,
    xp_to_next_level,
)
from .rollover import apply_rollover
from .sessions import SessionEngine, session_bonus
from .todos import TodoList
from .xp import XPEngine

__all__ = [
    "ACTION_XP_VALUES",
    "ActionType",
    "ACHIEVEMENTS",
    "AchievementTracker",
    "earned_keys",
    "CHALLENGE_ACTIONS",
    "ChallengeTracker",
    "apply_completion",
    "time_remaining",
    "ActionLedger",
    "LEAGUES",
    "LEVEL_REQUIREMENTS",
    "LEVEL_TITLES",
    "MAX_LEVEL",
    "League",
    "league_for_level",
    "level_for_xp",
    "title_for_level",
    "xp_for_level",
    "xp_in_current_level",
    "xp_to_next_level",
    "apply_rollover",
    "SessionEngine",
    "session_bonus",
    "TodoList",
    "XPEngine",
]
