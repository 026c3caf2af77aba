"""SQLAlchemy-backed storage.

Each call opens its own session through :func:`~hustlequest.database.db.get_session`
unless it runs inside :meth:`DatabaseStorage.atomic`, in which case every call
in the block shares one session and the block commits (or rolls back) once.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import fields
from datetime import date, datetime
from typing import Iterator

from ..database.db import get_session
from ..database.models import (
    AchievementRow,
    ActionRow,
    ChallengeRow,
    FocusSessionRow,
    GameStateRow,
    TodoRow,
)
from ..records import (
    Achievement,
    ActionEvent,
    ChallengeGoal,
    FocusSession,
    Todo,
    UserProgress,
)
from .base import Clock, Storage


def _to_record(row, cls):
    return cls(**{f.name: getattr(row, f.name) for f in fields(cls)})


def _copy_into(row, record) -> None:
    for f in fields(record):
        setattr(row, f.name, getattr(record, f.name))


def _to_row(record, row_cls):
    row = row_cls()
    _copy_into(row, record)
    return row


class DatabaseStorage(Storage):

    def __init__(self, clock: Clock = datetime.now) -> None:
        super().__init__(clock)
        self._local = threading.local()

    # ── session plumbing ─────────────────────────────────────────────────

    @contextmanager
    def _db(self):
        shared = getattr(self._local, "session", None)
        if shared is not None:
            yield shared
        else:
            with get_session() as db:
                yield db

    @contextmanager
    def atomic(self, user_id: str) -> Iterator[None]:
        """Per-user lock plus one shared transaction for the whole block."""
        with super().atomic(user_id):
            if getattr(self._local, "session", None) is not None:
                yield
                return
            with get_session() as db:
                self._local.session = db
                try:
                    yield
                finally:
                    self._local.session = None

    def _update(self, row_cls, record) -> None:
        with self._db() as db:
            row = db.get(row_cls, record.id)
            if row is None:
                raise LookupError(f"{row_cls.__tablename__} row {record.id!r} does not exist")
            _copy_into(row, record)

    # ── progress ─────────────────────────────────────────────────────────

    def get_user_progress(self, user_id: str) -> UserProgress:
        with self._db() as db:
            row = db.get(GameStateRow, user_id)
            if row is None:
                progress = self._new_progress(user_id)
                db.add(_to_row(progress, GameStateRow))
                db.flush()
                return progress
            return _to_record(row, UserProgress)

    def save_user_progress(self, progress: UserProgress) -> None:
        with self._db() as db:
            row = db.get(GameStateRow, progress.user_id)
            if row is None:
                db.add(_to_row(progress, GameStateRow))
                db.flush()
            else:
                _copy_into(row, progress)

    # ── ledger ───────────────────────────────────────────────────────────

    def append_action_event(self, event: ActionEvent) -> None:
        with self._db() as db:
            db.add(_to_row(event, ActionRow))
            db.flush()

    def query_action_events(
        self,
        user_id: str,
        *,
        on: date | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ActionEvent]:
        with self._db() as db:
            query = db.query(ActionRow).filter(ActionRow.user_id == user_id)
            if on is not None:
                query = query.filter(ActionRow.date == on)
            if since is not None:
                query = query.filter(ActionRow.timestamp >= since)
            if until is not None:
                query = query.filter(ActionRow.timestamp <= until)
            rows = query.order_by(ActionRow.timestamp.desc()).all()
            return [_to_record(r, ActionEvent) for r in rows]

    # ── focus sessions ───────────────────────────────────────────────────

    def create_focus_session(self, session: FocusSession) -> None:
        with self._db() as db:
            db.add(_to_row(session, FocusSessionRow))
            db.flush()

    def get_focus_session(self, session_id: str) -> FocusSession | None:
        with self._db() as db:
            row = db.get(FocusSessionRow, session_id)
            return _to_record(row, FocusSession) if row is not None else None

    def update_focus_session(self, session: FocusSession) -> None:
        self._update(FocusSessionRow, session)

    def list_focus_sessions(
        self, user_id: str, challenge_type: str | None = None,
    ) -> list[FocusSession]:
        with self._db() as db:
            query = db.query(FocusSessionRow).filter_by(user_id=user_id)
            if challenge_type is not None:
                query = query.filter_by(challenge_type=challenge_type)
            rows = query.order_by(FocusSessionRow.start_time.desc()).all()
            return [_to_record(r, FocusSession) for r in rows]

    # ── challenges ───────────────────────────────────────────────────────

    def create_challenge_goal(self, goal: ChallengeGoal) -> None:
        with self._db() as db:
            db.add(_to_row(goal, ChallengeRow))
            db.flush()

    def get_challenge_goal(self, goal_id: str) -> ChallengeGoal | None:
        with self._db() as db:
            row = db.get(ChallengeRow, goal_id)
            return _to_record(row, ChallengeGoal) if row is not None else None

    def get_active_challenge_goal(self, user_id: str) -> ChallengeGoal | None:
        with self._db() as db:
            row = (
                db.query(ChallengeRow)
                .filter_by(user_id=user_id, active=True)
                .first()
            )
            return _to_record(row, ChallengeGoal) if row is not None else None

    def update_challenge_goal(self, goal: ChallengeGoal) -> None:
        self._update(ChallengeRow, goal)

    def list_challenge_goals(self, user_id: str) -> list[ChallengeGoal]:
        with self._db() as db:
            rows = (
                db.query(ChallengeRow)
                .filter_by(user_id=user_id)
                .order_by(ChallengeRow.created_at.desc())
                .all()
            )
            return [_to_record(r, ChallengeGoal) for r in rows]

    # ── todos ────────────────────────────────────────────────────────────

    def create_todo(self, todo: Todo) -> None:
        with self._db() as db:
            db.add(_to_row(todo, TodoRow))
            db.flush()

    def get_todo(self, todo_id: str) -> Todo | None:
        with self._db() as db:
            row = db.get(TodoRow, todo_id)
            return _to_record(row, Todo) if row is not None else None

    def list_todos(self, user_id: str) -> list[Todo]:
        with self._db() as db:
            rows = (
                db.query(TodoRow)
                .filter_by(user_id=user_id)
                .order_by(TodoRow.created_at.desc())
                .all()
            )
            return [_to_record(r, Todo) for r in rows]

    def update_todo(self, todo: Todo) -> None:
        self._update(TodoRow, todo)

    def delete_todo(self, todo_id: str) -> bool:
        with self._db() as db:
            row = db.get(TodoRow, todo_id)
            if row is None:
                return False
            db.delete(row)
            return True

    # ── achievements ─────────────────────────────────────────────────────

    def create_achievement(self, achievement: Achievement) -> None:
        with self._db() as db:
            db.add(_to_row(achievement, AchievementRow))
            db.flush()

    def list_achievements(self, user_id: str) -> list[Achievement]:
        with self._db() as db:
            rows = (
                db.query(AchievementRow)
                .filter_by(user_id=user_id)
                .order_by(AchievementRow.unlocked_at.desc())
                .all()
            )
            return [_to_record(r, Achievement) for r in rows]
