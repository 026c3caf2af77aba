"""Action ledger: append-only log of scored actions.

Recording an action does three things under one per-user atomic block:

1. append an immutable :class:`~hustlequest.records.ActionEvent`;
2. award its XP through :class:`~hustlequest.gamification.xp.XPEngine`;
3. advance the user's active challenge if it tracks this action type.

With the database backend the three writes commit together.  The memory
backend has no rollback, so a failure in step 2 or 3 leaves step 1 behind.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta

from ..errors import ValidationError
from ..records import ActionEvent, new_id
from ..storage.base import Clock, Storage
from .actions import ACTION_XP_VALUES, xp_value_for
from .challenges import ChallengeTracker
from .xp import XPEngine

logger = logging.getLogger(__name__)


class ActionLedger:
    """Records actions and answers per-day / trailing-window queries."""

    def __init__(
        self,
        storage: Storage,
        xp_engine: XPEngine,
        challenges: ChallengeTracker,
        *,
        clock: Clock = datetime.now,
    ) -> None:
        self._storage = storage
        self._xp = xp_engine
        self._challenges = challenges
        self._clock = clock

    # ── writes ───────────────────────────────────────────────────────────

    def record_action(self, user_id: str, action_type: str, xp_value: int) -> ActionEvent:
        """Append an event worth *xp_value* and apply its side effects.

        *action_type* is trusted; use :meth:`log` for unchecked input.
        """
        now = self._clock()
        event = ActionEvent(
            id=new_id(),
            user_id=user_id,
            type=action_type,
            xp_value=xp_value,
            timestamp=now,
            date=now.date(),
        )
        with self._storage.atomic(user_id):
            self._storage.append_action_event(event)
            self._xp.award(user_id, xp_value, reason=f"{action_type} +{xp_value} XP")
            self._challenges.record_action(user_id, action_type)

        logger.debug("Recorded %s for %s (+%d XP)", action_type, user_id, xp_value)
        return event

    def log(self, user_id: str, action_type: str) -> ActionEvent:
        """Record *action_type* at its fixed XP value."""
        xp_value = xp_value_for(action_type)
        if xp_value is None:
            raise ValidationError(
                f"Unknown action type {action_type!r}",
                {"type": action_type, "allowed": sorted(ACTION_XP_VALUES)},
            )
        return self.record_action(user_id, action_type, xp_value)

    # ── queries ──────────────────────────────────────────────────────────

    def actions_on(self, user_id: str, on: date | None = None) -> list[ActionEvent]:
        """Events logged on *on* (default: today), newest first."""
        if on is None:
            on = self._clock().date()
        return self._storage.query_action_events(user_id, on=on)

    def stats_since(self, user_id: str, days: int = 7) -> dict[str, int]:
        """Number of events per action type in ``[now - days, now]``."""
        now = self._clock()
        events = self._storage.query_action_events(
            user_id, since=now - timedelta(days=days), until=now,
        )
        return dict(Counter(e.type for e in events))
