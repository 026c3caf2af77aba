"""HustleQuest facade: what the route layer talks to.

Wires one storage backend into every engine and exposes each operation as a
method returning plain dicts, ready for JSON.  Build it once per process::

    quest = HustleQuest.from_settings(load_settings())
    quest.log_action("alex", "dm")
    quest.game_state("alex")

The engines stay reachable as attributes (``quest.xp``, ``quest.sessions``,
...) so a UI can connect to their signals.
"""

from __future__ import annotations

from datetime import date, datetime

from .gamification.achievements import AchievementTracker
from .gamification.challenges import ChallengeTracker, time_remaining
from .gamification.ledger import ActionLedger
from .gamification.sessions import SessionEngine
from .gamification.todos import TodoList
from .gamification.xp import XPEngine
from .settings import Settings
from .storage import create_storage
from .storage.base import Clock, Storage


class HustleQuest:

    def __init__(self, storage: Storage, *, clock: Clock = datetime.now) -> None:
        self.storage = storage
        self._clock = clock
        self.xp = XPEngine(storage, clock=clock)
        self.challenges = ChallengeTracker(storage, clock=clock)
        self.ledger = ActionLedger(storage, self.xp, self.challenges, clock=clock)
        self.sessions = SessionEngine(storage, self.xp, clock=clock)
        self.todos = TodoList(storage, self.xp, clock=clock)
        self.achievements = AchievementTracker(storage, clock=clock)

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Clock = datetime.now) -> "HustleQuest":
        return cls(create_storage(settings, clock), clock=clock)

    # ── game state ───────────────────────────────────────────────────────

    def game_state(self, user_id: str) -> dict:
        return self.xp.game_state(user_id)

    # ── actions ──────────────────────────────────────────────────────────

    def log_action(self, user_id: str, action_type: str) -> dict:
        return self.ledger.log(user_id, action_type).to_dict()

    def actions_today(self, user_id: str, on: date | None = None) -> list[dict]:
        return [e.to_dict() for e in self.ledger.actions_on(user_id, on)]

    def action_stats(self, user_id: str, days: int = 7) -> dict[str, int]:
        return self.ledger.stats_since(user_id, days)

    # ── focus sessions ───────────────────────────────────────────────────

    def start_session(
        self, user_id: str, challenge_type: str | None, duration_seconds: int,
    ) -> dict:
        return self.sessions.start_session(user_id, challenge_type, duration_seconds).to_dict()

    def end_session(self, session_id: str, actions_completed: int, completed: bool) -> dict:
        return self.sessions.end_session(session_id, actions_completed, completed).to_dict()

    def session_records(self, user_id: str) -> list[dict]:
        return [s.to_dict() for s in self.sessions.records(user_id)]

    # ── challenges ───────────────────────────────────────────────────────

    def _goal_dict(self, goal) -> dict:
        data = goal.to_dict()
        data["time_remaining_seconds"] = time_remaining(goal, self._clock())
        return data

    def create_challenge(
        self, user_id: str, challenge_type: str, target: int, time_limit_seconds: int,
    ) -> dict:
        goal = self.challenges.create_goal(user_id, challenge_type, target, time_limit_seconds)
        return self._goal_dict(goal)

    def active_challenge(self, user_id: str) -> dict | None:
        goal = self.challenges.active_goal(user_id)
        return self._goal_dict(goal) if goal is not None else None

    def start_challenge(self, goal_id: str) -> dict:
        return self._goal_dict(self.challenges.start_goal(goal_id))

    def stop_challenge(self, goal_id: str) -> dict:
        return self._goal_dict(self.challenges.stop_goal(goal_id))

    def update_challenge(self, goal_id: str, **changes) -> dict:
        return self._goal_dict(self.challenges.update_goal(goal_id, **changes))

    # ── todos ────────────────────────────────────────────────────────────

    def create_todo(self, user_id: str, title: str, xp_value: int) -> dict:
        return self.todos.create_todo(user_id, title, xp_value).to_dict()

    def list_todos(self, user_id: str) -> list[dict]:
        return [t.to_dict() for t in self.todos.todos(user_id)]

    def update_todo(
        self, todo_id: str, *, title: str | None = None, completed: bool | None = None,
    ) -> dict:
        return self.todos.update_todo(todo_id, title=title, completed=completed).to_dict()

    def delete_todo(self, todo_id: str) -> dict:
        self.todos.delete_todo(todo_id)
        return {"success": True}

    # ── achievements ─────────────────────────────────────────────────────

    def check_achievements(self, user_id: str) -> list[dict]:
        return [a.to_dict() for a in self.achievements.check_and_unlock(user_id)]

    def list_achievements(self, user_id: str) -> list[dict]:
        return [a.to_dict() for a in self.achievements.achievements(user_id)]
