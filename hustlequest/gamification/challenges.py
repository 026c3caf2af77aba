"""Sprint challenges: hit *target* actions of one type within a time limit.

Lifecycle
---------
created (inactive) → start → active ⇄ stop (paused) → completed (terminal)

A goal completes the moment ``current`` reaches ``target``, whichever write
path got it there.  :func:`apply_completion` runs on every write, so a stored
goal never has ``current >= target`` without ``completed``.

The countdown is data only: ``time_remaining_seconds`` is kept up to date on
pause, and :func:`time_remaining` reports the live value, but nothing here
expires a goal when it hits zero.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

from PyQt6.QtCore import QObject, pyqtSignal

from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..records import ChallengeGoal, new_id
from ..storage.base import Clock, Storage
from .actions import ActionType

logger = logging.getLogger(__name__)


# ── catalog ──────────────────────────────────────────────────────────────

# challenge type → the action type whose events advance it
CHALLENGE_ACTIONS: dict[str, str] = {
    f"{action.value}_sprint": action.value for action in ActionType
}

UPDATABLE_FIELDS = frozenset({
    "current", "target", "time_limit_seconds", "time_remaining_seconds",
})


# ── pure helpers ─────────────────────────────────────────────────────────


def apply_completion(goal: ChallengeGoal, now: datetime) -> bool:
    """Flip *goal* to completed if it has reached its target.

    Returns ``True`` only when this call completed it.
    """
    if goal.completed or goal.current < goal.target:
        return False
    goal.completed = True
    goal.active = False
    goal.completed_at = now
    return True


def time_remaining(goal: ChallengeGoal, now: datetime) -> int:
    """Seconds left on the clock; counts down only while the goal is active."""
    if not goal.active or goal.started_at is None:
        return goal.time_remaining_seconds
    elapsed = int((now - goal.started_at).total_seconds())
    return max(0, goal.time_remaining_seconds - elapsed)


# ── tracker ──────────────────────────────────────────────────────────────


class ChallengeTracker(QObject):
    """Creates, runs and advances challenge goals.

    Signals
    -------
    challenge_completed(data: dict)
        Emitted once per goal, when it reaches its target.  ``data`` is the
        goal's ``to_dict()``.
    """

    challenge_completed = pyqtSignal(object)

    def __init__(
        self,
        storage: Storage,
        *,
        clock: Clock = datetime.now,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._storage = storage
        self._clock = clock

    # ── plumbing ─────────────────────────────────────────────────────────

    def _get(self, goal_id: str) -> ChallengeGoal:
        goal = self._storage.get_challenge_goal(goal_id)
        if goal is None:
            raise NotFoundError("Challenge", goal_id)
        return goal

    @contextmanager
    def _editing(self, goal_id: str):
        """Yield a fresh copy of the goal under the user's lock, then run
        the completion check and save it."""
        user_id = self._get(goal_id).user_id
        with self._storage.atomic(user_id):
            goal = self._get(goal_id)
            edit = {"goal": goal, "completed_now": False}
            yield edit
            edit["completed_now"] = apply_completion(goal, self._clock())
            self._storage.update_challenge_goal(goal)

        if edit["completed_now"]:
            logger.info("%s completed %s (%d/%d)", goal.user_id, goal.type, goal.current, goal.target)
            self.challenge_completed.emit(goal.to_dict())

    # ── lifecycle ────────────────────────────────────────────────────────

    def create_goal(
        self,
        user_id: str,
        challenge_type: str,
        target: int,
        time_limit_seconds: int,
    ) -> ChallengeGoal:
        if challenge_type not in CHALLENGE_ACTIONS:
            raise ValidationError(
                f"Unknown challenge type {challenge_type!r}",
                {"type": challenge_type, "allowed": sorted(CHALLENGE_ACTIONS)},
            )
        if target <= 0:
            raise ValidationError("target must be positive", {"target": target})
        if time_limit_seconds < 0:
            raise ValidationError(
                "time limit cannot be negative",
                {"time_limit_seconds": time_limit_seconds},
            )

        goal = ChallengeGoal(
            id=new_id(),
            user_id=user_id,
            type=challenge_type,
            target=target,
            time_limit_seconds=time_limit_seconds,
            time_remaining_seconds=time_limit_seconds,
            created_at=self._clock(),
        )
        self._storage.create_challenge_goal(goal)
        logger.debug("Created %s goal %s for %s", challenge_type, goal.id, user_id)
        return goal

    def start_goal(self, goal_id: str) -> ChallengeGoal:
        with self._editing(goal_id) as edit:
            goal = edit["goal"]
            if goal.completed:
                raise InvalidStateError(
                    "Challenge is already completed", {"id": goal_id},
                )
            if not goal.active:
                other = self._storage.get_active_challenge_goal(goal.user_id)
                if other is not None and other.id != goal.id:
                    raise InvalidStateError(
                        "Another challenge is already active",
                        {"id": goal_id, "active_id": other.id},
                    )
                goal.active = True
                goal.started_at = self._clock()
        return goal

    def stop_goal(self, goal_id: str) -> ChallengeGoal:
        """Pause the goal, banking the time left.  Progress is kept."""
        with self._editing(goal_id) as edit:
            goal = edit["goal"]
            if goal.active:
                goal.time_remaining_seconds = time_remaining(goal, self._clock())
                goal.active = False
        return goal

    def increment_progress(self, goal_id: str, delta: int = 1) -> ChallengeGoal:
        with self._editing(goal_id) as edit:
            goal = edit["goal"]
            if goal.completed:
                raise InvalidStateError(
                    "Challenge is already completed", {"id": goal_id},
                )
            goal.current += delta
        return goal

    def update_goal(self, goal_id: str, **changes) -> ChallengeGoal:
        """Generic write path; completion is still checked afterwards."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                "Fields cannot be updated directly",
                {"fields": sorted(unknown)},
            )
        if "target" in changes and changes["target"] <= 0:
            raise ValidationError("target must be positive", {"target": changes["target"]})
        negative = sorted(
            name for name in ("current", "time_limit_seconds", "time_remaining_seconds")
            if name in changes and changes[name] < 0
        )
        if negative:
            raise ValidationError(
                "Fields cannot be negative",
                {"fields": negative},
            )
        with self._editing(goal_id) as edit:
            goal = edit["goal"]
            if goal.completed:
                raise InvalidStateError(
                    "Challenge is already completed", {"id": goal_id},
                )
            for name, value in changes.items():
                setattr(goal, name, value)
        return goal

    # ── ledger hook ──────────────────────────────────────────────────────

    def record_action(self, user_id: str, action_type: str) -> ChallengeGoal | None:
        """Advance the user's active goal if it tracks *action_type*."""
        with self._storage.atomic(user_id):
            goal = self._storage.get_active_challenge_goal(user_id)
            if goal is None or CHALLENGE_ACTIONS.get(goal.type) != action_type:
                return None
            return self.increment_progress(goal.id)

    # ── queries ──────────────────────────────────────────────────────────

    def get_goal(self, goal_id: str) -> ChallengeGoal:
        return self._get(goal_id)

    def active_goal(self, user_id: str) -> ChallengeGoal | None:
        return self._storage.get_active_challenge_goal(user_id)

    def goals(self, user_id: str) -> list[ChallengeGoal]:
        return self._storage.list_challenge_goals(user_id)
