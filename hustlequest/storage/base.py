"""Storage contract consumed by the engines.

Two backends implement it: :class:`~hustlequest.storage.memory.MemoryStorage`
and :class:`~hustlequest.storage.database.DatabaseStorage`.  One of them is
chosen at startup (see :func:`hustlequest.storage.create_storage`) and passed
to every engine.

Rules every backend follows
---------------------------
- ``get_*`` returns a *copy*, or ``None`` when nothing matches.  Turning a
  miss into :class:`~hustlequest.errors.NotFoundError` is the engines' job.
- ``get_user_progress`` creates the row on a miss, zeroed, reset date today.
- Lists come back newest first.
- ``atomic(user_id)`` serializes read-modify-write sequences per user key.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterator

from ..records import (
    Achievement,
    ActionEvent,
    ChallengeGoal,
    FocusSession,
    Todo,
    UserProgress,
)

Clock = Callable[[], datetime]


class UserLocks:
    """One re-entrant lock per user key, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)

    def get(self, user_id: str) -> threading.RLock:
        with self._guard:
            return self._locks[user_id]


class Storage(ABC):
    """Abstract persistence for progress, ledger, sessions, goals, todos."""

    def __init__(self, clock: Clock = datetime.now) -> None:
        self._clock = clock
        self._locks = UserLocks()

    def _today(self) -> date:
        return self._clock().date()

    def _new_progress(self, user_id: str) -> UserProgress:
        return UserProgress(user_id=user_id, last_reset_date=self._today())

    @contextmanager
    def atomic(self, user_id: str) -> Iterator[None]:
        """Hold the per-user lock for the whole block.  Re-entrant."""
        with self._locks.get(user_id):
            yield

    # ── progress ─────────────────────────────────────────────────────────

    @abstractmethod
    def get_user_progress(self, user_id: str) -> UserProgress: ...

    @abstractmethod
    def save_user_progress(self, progress: UserProgress) -> None: ...

    # ── ledger ───────────────────────────────────────────────────────────

    @abstractmethod
    def append_action_event(self, event: ActionEvent) -> None: ...

    @abstractmethod
    def query_action_events(
        self,
        user_id: str,
        *,
        on: date | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ActionEvent]:
        """Events for *user_id* filtered by calendar date and/or an
        inclusive timestamp window."""

    # ── focus sessions ───────────────────────────────────────────────────

    @abstractmethod
    def create_focus_session(self, session: FocusSession) -> None: ...

    @abstractmethod
    def get_focus_session(self, session_id: str) -> FocusSession | None: ...

    @abstractmethod
    def update_focus_session(self, session: FocusSession) -> None: ...

    @abstractmethod
    def list_focus_sessions(
        self, user_id: str, challenge_type: str | None = None,
    ) -> list[FocusSession]: ...

    # ── challenges ───────────────────────────────────────────────────────

    @abstractmethod
    def create_challenge_goal(self, goal: ChallengeGoal) -> None: ...

    @abstractmethod
    def get_challenge_goal(self, goal_id: str) -> ChallengeGoal | None: ...

    @abstractmethod
    def get_active_challenge_goal(self, user_id: str) -> ChallengeGoal | None: ...

    @abstractmethod
    def update_challenge_goal(self, goal: ChallengeGoal) -> None: ...

    @abstractmethod
    def list_challenge_goals(self, user_id: str) -> list[ChallengeGoal]: ...

    # ── todos ────────────────────────────────────────────────────────────

    @abstractmethod
    def create_todo(self, todo: Todo) -> None: ...

    @abstractmethod
    def get_todo(self, todo_id: str) -> Todo | None: ...

    @abstractmethod
    def list_todos(self, user_id: str) -> list[Todo]: ...

    @abstractmethod
    def update_todo(self, todo: Todo) -> None: ...

    @abstractmethod
    def delete_todo(self, todo_id: str) -> bool:
        """Delete the todo; return ``False`` if it did not exist."""

    # ── achievements ─────────────────────────────────────────────────────

    @abstractmethod
    def create_achievement(self, achievement: Achievement) -> None: ...

    @abstractmethod
    def list_achievements(self, user_id: str) -> list[Achievement]: ...
