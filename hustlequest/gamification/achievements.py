"""Achievements earned from focus-session history.

Catalog
-------
    first_session     First Focus Session   1+ completed session
    dm_master         DM Master             10+ actions per completed session on average
    loom_expert       Loom Expert           5+ actions per completed session on average
    speed_demon       Speed Demon           a completed session shorter than 10 minutes
    consistency_king  Consistency King      5+ completed sessions in the last 7 days

Persistence
-----------
Unlocks are stored through the storage backend.  ``AchievementTracker``
handles check-and-unlock: each achievement is recorded once per user.
Achievements are badges only and award no XP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Sequence

from ..records import Achievement, FocusSession, new_id
from ..storage.base import Clock, Storage

logger = logging.getLogger(__name__)


SPEED_DEMON_SECONDS = 10 * 60
CONSISTENCY_WINDOW = timedelta(days=7)
CONSISTENCY_SESSIONS = 5


# ── catalog ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AchievementDef:
    key: str
    title: str
    description: str
    # (completed sessions, now) -> earned?
    rule: Callable[[Sequence[FocusSession], datetime], bool]


def _average_actions(sessions: Sequence[FocusSession]) -> float:
    if not sessions:
        return 0.0
    return sum(s.actions_completed for s in sessions) / len(sessions)


ACHIEVEMENTS: list[AchievementDef] = [
    AchievementDef(
        "first_session", "First Focus Session",
        "Complete your first focus session",
        lambda done, now: len(done) >= 1,
    ),
    AchievementDef(
        "dm_master", "DM Master",
        "Average 10+ actions per completed session",
        lambda done, now: _average_actions(done) >= 10,
    ),
    AchievementDef(
        "loom_expert", "Loom Expert",
        "Average 5+ actions per completed session",
        lambda done, now: _average_actions(done) >= 5,
    ),
    AchievementDef(
        "speed_demon", "Speed Demon",
        "Complete a session shorter than 10 minutes",
        lambda done, now: any(s.duration_seconds < SPEED_DEMON_SECONDS for s in done),
    ),
    AchievementDef(
        "consistency_king", "Consistency King",
        "Complete 5 sessions in a week",
        lambda done, now: sum(
            1 for s in done if s.start_time > now - CONSISTENCY_WINDOW
        ) >= CONSISTENCY_SESSIONS,
    ),
]

ACHIEVEMENTS_BY_KEY = {a.key: a for a in ACHIEVEMENTS}


def earned_keys(sessions: Sequence[FocusSession], now: datetime) -> list[str]:
    """Keys of every achievement the session history qualifies for."""
    done = [s for s in sessions if s.completed and not s.is_open]
    return [a.key for a in ACHIEVEMENTS if a.rule(done, now)]


# ── tracker ──────────────────────────────────────────────────────────────


class AchievementTracker:
    """Checks eligibility and records unlocks."""

    def __init__(self, storage: Storage, *, clock: Clock = datetime.now) -> None:
        self._storage = storage
        self._clock = clock

    def check_and_unlock(self, user_id: str) -> list[Achievement]:
        """Unlock everything the user has earned but hasn't received yet.

        Returns only the newly unlocked achievements so the UI can
        announce them.
        """
        now = self._clock()
        with self._storage.atomic(user_id):
            existing = {a.type for a in self._storage.list_achievements(user_id)}
            sessions = self._storage.list_focus_sessions(user_id)

            new_unlocks: list[Achievement] = []
            for key in earned_keys(sessions, now):
                if key in existing:
                    continue
                definition = ACHIEVEMENTS_BY_KEY[key]
                achievement = Achievement(
                    id=new_id(),
                    user_id=user_id,
                    type=key,
                    title=definition.title,
                    description=definition.description,
                    unlocked_at=now,
                )
                self._storage.create_achievement(achievement)
                new_unlocks.append(achievement)

        for achievement in new_unlocks:
            logger.info("%s unlocked %s", user_id, achievement.title)
        return new_unlocks

    def achievements(self, user_id: str) -> list[Achievement]:
        return self._storage.list_achievements(user_id)
