"""In-process storage backed by plain dicts.

Used when no database is configured and throughout the test-suite.  There is
no rollback: if an operation fails halfway through an ``atomic`` block, the
writes made before the failure stay.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from ..records import (
    Achievement,
    ActionEvent,
    ChallengeGoal,
    FocusSession,
    Todo,
    UserProgress,
)
from .base import Clock, Storage


class MemoryStorage(Storage):

    def __init__(self, clock: Clock = datetime.now) -> None:
        super().__init__(clock)
        self._progress: dict[str, UserProgress] = {}
        self._actions: list[ActionEvent] = []
        self._sessions: dict[str, FocusSession] = {}
        self._goals: dict[str, ChallengeGoal] = {}
        self._todos: dict[str, Todo] = {}
        self._achievements: list[Achievement] = []

    # ── progress ─────────────────────────────────────────────────────────

    def get_user_progress(self, user_id: str) -> UserProgress:
        if user_id not in self._progress:
            self._progress[user_id] = self._new_progress(user_id)
        return replace(self._progress[user_id])

    def save_user_progress(self, progress: UserProgress) -> None:
        self._progress[progress.user_id] = replace(progress)

    # ── ledger ───────────────────────────────────────────────────────────

    def append_action_event(self, event: ActionEvent) -> None:
        self._actions.append(event)

    def query_action_events(
        self,
        user_id: str,
        *,
        on: date | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ActionEvent]:
        events = [
            e for e in self._actions
            if e.user_id == user_id
            and (on is None or e.date == on)
            and (since is None or e.timestamp >= since)
            and (until is None or e.timestamp <= until)
        ]
        return sorted(events, key=lambda e: e.timestamp, reverse=True)

    # ── focus sessions ───────────────────────────────────────────────────

    def create_focus_session(self, session: FocusSession) -> None:
        self._sessions[session.id] = replace(session)

    def get_focus_session(self, session_id: str) -> FocusSession | None:
        session = self._sessions.get(session_id)
        return replace(session) if session is not None else None

    def update_focus_session(self, session: FocusSession) -> None:
        self._sessions[session.id] = replace(session)

    def list_focus_sessions(
        self, user_id: str, challenge_type: str | None = None,
    ) -> list[FocusSession]:
        sessions = [
            replace(s) for s in self._sessions.values()
            if s.user_id == user_id
            and (challenge_type is None or s.challenge_type == challenge_type)
        ]
        return sorted(sessions, key=lambda s: s.start_time, reverse=True)

    # ── challenges ───────────────────────────────────────────────────────

    def create_challenge_goal(self, goal: ChallengeGoal) -> None:
        self._goals[goal.id] = replace(goal)

    def get_challenge_goal(self, goal_id: str) -> ChallengeGoal | None:
        goal = self._goals.get(goal_id)
        return replace(goal) if goal is not None else None

    def get_active_challenge_goal(self, user_id: str) -> ChallengeGoal | None:
        for goal in self._goals.values():
            if goal.user_id == user_id and goal.active:
                return replace(goal)
        return None

    def update_challenge_goal(self, goal: ChallengeGoal) -> None:
        self._goals[goal.id] = replace(goal)

    def list_challenge_goals(self, user_id: str) -> list[ChallengeGoal]:
        goals = [replace(g) for g in self._goals.values() if g.user_id == user_id]
        return sorted(goals, key=lambda g: g.created_at, reverse=True)

    # ── todos ────────────────────────────────────────────────────────────

    def create_todo(self, todo: Todo) -> None:
        self._todos[todo.id] = replace(todo)

    def get_todo(self, todo_id: str) -> Todo | None:
        todo = self._todos.get(todo_id)
        return replace(todo) if todo is not None else None

    def list_todos(self, user_id: str) -> list[Todo]:
        todos = [replace(t) for t in self._todos.values() if t.user_id == user_id]
        return sorted(todos, key=lambda t: t.created_at, reverse=True)

    def update_todo(self, todo: Todo) -> None:
        self._todos[todo.id] = replace(todo)

    def delete_todo(self, todo_id: str) -> bool:
        return self._todos.pop(todo_id, None) is not None

    # ── achievements ─────────────────────────────────────────────────────

    def create_achievement(self, achievement: Achievement) -> None:
        self._achievements.append(achievement)

    def list_achievements(self, user_id: str) -> list[Achievement]:
        found = [a for a in self._achievements if a.user_id == user_id]
        return sorted(found, key=lambda a: a.unlocked_at, reverse=True)
