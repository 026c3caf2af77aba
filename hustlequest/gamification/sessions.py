"""Focus sessions and their performance-based scoring.

States
------
OPEN    created by :meth:`SessionEngine.start_session`, counting actions
CLOSED  scored by :meth:`SessionEngine.end_session`; terminal

There is no cancel: ending always scores, even with zero actions.  Ending a
closed session raises instead of scoring twice.

XP Awards
---------
- Every action in the session:        5 XP
- First completed session of a type: +30 XP  (needs at least one action)
- New personal best:                 +50 XP  + 10 XP per action over the best
- Completed within 80% of the best:  +25 XP

"Best" is the most actions in any earlier closed session with the same
challenge type.  Sessions ended without completing count too, not just
completed ones.  Freeform sessions (no challenge type) only earn the
per-action XP.
"""

from __future__ import annotations

import logging
from datetime import datetime

from PyQt6.QtCore import QObject, pyqtSignal

from ..errors import InvalidStateError, NotFoundError, ValidationError
from ..records import FocusSession, new_id
from ..storage.base import Clock, Storage
from .challenges import CHALLENGE_ACTIONS
from .xp import XPEngine

logger = logging.getLogger(__name__)


# ── award constants (easy to tweak) ──────────────────────────────────────

PER_ACTION_XP = 5
FIRST_COMPLETION_BONUS = 30
NEW_RECORD_BASE = 50
RECORD_MARGIN_MULTIPLIER = 10
NEAR_RECORD_RATIO = 0.8
NEAR_RECORD_BONUS = 25


# ── scoring ──────────────────────────────────────────────────────────────


def base_xp(actions_completed: int) -> int:
    return actions_completed * PER_ACTION_XP


def session_bonus(
    actions_completed: int, completed: bool, prior_best: int | None,
) -> int:
    """Bonus XP for a session measured against the user's best.

    *prior_best* is ``None`` when there is no earlier closed session of the
    same type.  A tie with the best only pays the near-record bonus, and
    only for a completed session.
    """
    if prior_best is None:
        if completed and actions_completed > 0:
            return FIRST_COMPLETION_BONUS
        return 0
    if actions_completed > prior_best:
        return NEW_RECORD_BASE + (actions_completed - prior_best) * RECORD_MARGIN_MULTIPLIER
    if completed and actions_completed >= prior_best * NEAR_RECORD_RATIO:
        return NEAR_RECORD_BONUS
    return 0


# ── engine ───────────────────────────────────────────────────────────────


class SessionEngine(QObject):
    """Opens, closes and scores focus sessions.

    Signals
    -------
    session_ended(data: dict)
        Emitted after a session is closed and its XP applied.  Keys:
        everything in ``FocusSession.to_dict()`` plus ``total_xp``,
        ``new_record`` (bool) and ``bonuses`` (list of dicts).
    """

    session_ended = pyqtSignal(object)

    def __init__(
        self,
        storage: Storage,
        xp_engine: XPEngine,
        *,
        clock: Clock = datetime.now,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._storage = storage
        self._xp = xp_engine
        self._clock = clock

    # ── lifecycle ────────────────────────────────────────────────────────

    def start_session(
        self,
        user_id: str,
        challenge_type: str | None = None,
        duration_seconds: int = 25 * 60,
    ) -> FocusSession:
        if duration_seconds <= 0:
            raise ValidationError(
                "duration must be positive",
                {"duration_seconds": duration_seconds},
            )
        if challenge_type is not None and challenge_type not in CHALLENGE_ACTIONS:
            raise ValidationError(
                f"Unknown challenge type {challenge_type!r}",
                {"type": challenge_type, "allowed": sorted(CHALLENGE_ACTIONS)},
            )

        with self._storage.atomic(user_id):
            current = self.open_session(user_id)
            if current is not None:
                raise InvalidStateError(
                    "A focus session is already running",
                    {"user_id": user_id, "open_id": current.id},
                )
            session = FocusSession(
                id=new_id(),
                user_id=user_id,
                challenge_type=challenge_type,
                start_time=self._clock(),
                duration_seconds=duration_seconds,
            )
            self._storage.create_focus_session(session)

        logger.debug(
            "Started %s session %s for %s",
            challenge_type or "freeform", session.id, user_id,
        )
        return session

    def end_session(
        self, session_id: str, actions_completed: int, completed: bool,
    ) -> FocusSession:
        """Close the session and award its XP."""
        if actions_completed < 0:
            raise ValidationError(
                "actions_completed cannot be negative",
                {"actions_completed": actions_completed},
            )

        session = self._get(session_id)
        with self._storage.atomic(session.user_id):
            session = self._get(session_id)
            if not session.is_open:
                raise InvalidStateError(
                    "Focus session already ended", {"id": session_id},
                )

            # ── 1. base XP ───────────────────────────────────────────
            base = base_xp(actions_completed)
            bonuses: list[dict[str, object]] = [
                {"name": f"{actions_completed} actions", "amount": base},
            ]

            # ── 2. bonus against the personal best ───────────────────
            prior_best = self._prior_best(session)
            bonus = 0
            if session.challenge_type is not None:
                bonus = session_bonus(actions_completed, completed, prior_best)
            if bonus:
                bonuses.append({"name": _bonus_name(prior_best, actions_completed), "amount": bonus})

            # ── 3. close the session ─────────────────────────────────
            session.end_time = self._clock()
            session.actions_completed = actions_completed
            session.xp_earned = base
            session.bonus_xp = bonus
            session.completed = completed
            self._storage.update_focus_session(session)

            # ── 4. apply to user progress ────────────────────────────
            total = base + bonus
            if total > 0:
                self._xp.award(
                    session.user_id, total,
                    reason=f"Focus session +{total} XP", bonuses=bonuses,
                )

        new_record = prior_best is not None and actions_completed > prior_best
        logger.info(
            "Closed session %s for %s: %d actions, %d + %d XP%s",
            session.id, session.user_id, actions_completed, base, bonus,
            " (new record)" if new_record else "",
        )

        data = session.to_dict()
        data.update({
            "total_xp": total,
            "new_record": new_record,
            "bonuses": bonuses,
        })
        self.session_ended.emit(data)
        return session

    # ── queries ──────────────────────────────────────────────────────────

    def get_session(self, session_id: str) -> FocusSession:
        return self._get(session_id)

    def open_session(self, user_id: str) -> FocusSession | None:
        for session in self._storage.list_focus_sessions(user_id):
            if session.is_open:
                return session
        return None

    def records(self, user_id: str) -> list[FocusSession]:
        """Every session of the user, newest first."""
        return self._storage.list_focus_sessions(user_id)

    def personal_best(self, user_id: str, challenge_type: str) -> int | None:
        closed = [
            s.actions_completed
            for s in self._storage.list_focus_sessions(user_id, challenge_type)
            if not s.is_open
        ]
        return max(closed) if closed else None

    # ── helpers ──────────────────────────────────────────────────────────

    def _get(self, session_id: str) -> FocusSession:
        session = self._storage.get_focus_session(session_id)
        if session is None:
            raise NotFoundError("Focus session", session_id)
        return session

    def _prior_best(self, session: FocusSession) -> int | None:
        if session.challenge_type is None:
            return None
        return self.personal_best(session.user_id, session.challenge_type)


def _bonus_name(prior_best: int | None, actions_completed: int) -> str:
    if prior_best is None:
        return "First Completion"
    if actions_completed > prior_best:
        return "New Record!"
    return "Near Record"
