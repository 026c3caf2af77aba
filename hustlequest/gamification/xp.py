"""XP awards for HustleQuest: the one path that mutates ``UserProgress``.

The action ledger, the session engine and the todo list all go through
:meth:`XPEngine.award`, so every award applies the daily rollover, bumps
``cumulative_xp`` and ``today_xp`` together and recomputes the level.

XP Event System
---------------
``XPEngine`` is a :class:`QObject` that emits two signals:

* **xp_awarded(data)** — amount, reason string, bonuses breakdown
* **level_up(data)**   — old level, new level, new title, league
"""

from __future__ import annotations

import logging
from datetime import datetime

from PyQt6.QtCore import QObject, pyqtSignal

from ..storage.base import Clock, Storage
from .progression import (
    league_for_level,
    level_for_xp,
    title_for_level,
    xp_in_current_level,
    xp_to_next_level,
)
from .rollover import apply_rollover, needs_rollover

logger = logging.getLogger(__name__)


class XPEngine(QObject):
    """Applies XP awards to a user's progress and reports level-ups.

    Signals
    -------
    xp_awarded(data: dict)
        Emitted after every non-zero award.  Keys:
        ``user_id``, ``amount``, ``reason``, ``bonuses`` (list of dicts),
        ``cumulative_xp``, ``today_xp``, ``level``, ``title``.
    level_up(data: dict)
        Emitted when the award crosses a level threshold.  Keys:
        ``user_id``, ``old_level``, ``new_level``, ``new_title``, ``league``.
    """

    xp_awarded = pyqtSignal(object)
    level_up = pyqtSignal(object)

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

    # ── main entry point ─────────────────────────────────────────────────

    def award(
        self,
        user_id: str,
        amount: int,
        *,
        reason: str = "",
        bonuses: list[dict] | None = None,
    ) -> dict:
        """Add *amount* XP to the user's totals and persist.

        Returns a dict with ``xp_earned``, ``level_up``, ``old_level``,
        ``new_level``, ``new_title`` and ``progress`` (the saved record).
        """
        with self._storage.atomic(user_id):
            progress = self._storage.get_user_progress(user_id)
            progress = apply_rollover(progress, self._clock().date())

            old_level = progress.current_level
            progress.cumulative_xp += amount
            progress.today_xp += amount
            progress.current_level = level_for_xp(progress.cumulative_xp)
            self._storage.save_user_progress(progress)

        leveled_up = progress.current_level > old_level
        new_title = title_for_level(progress.current_level)
        logger.debug(
            "Awarded %d XP to %s (%s): total=%d level=%d",
            amount, user_id, reason or "unspecified",
            progress.cumulative_xp, progress.current_level,
        )

        # ── emit signals ─────────────────────────────────────────────
        if amount:
            self.xp_awarded.emit({
                "user_id": user_id,
                "amount": amount,
                "reason": reason or f"+{amount} XP",
                "bonuses": list(bonuses or []),
                "cumulative_xp": progress.cumulative_xp,
                "today_xp": progress.today_xp,
                "level": progress.current_level,
                "title": new_title,
            })

        if leveled_up:
            logger.info(
                "%s reached level %d (%s)",
                user_id, progress.current_level, new_title,
            )
            self.level_up.emit({
                "user_id": user_id,
                "old_level": old_level,
                "new_level": progress.current_level,
                "new_title": new_title,
                "league": league_for_level(progress.current_level).to_dict(),
            })

        return {
            "xp_earned": amount,
            "level_up": leveled_up,
            "old_level": old_level,
            "new_level": progress.current_level,
            "new_title": new_title,
            "progress": progress,
        }

    # ── queries ──────────────────────────────────────────────────────────

    def game_state(self, user_id: str) -> dict:
        """Current progress plus everything the dashboard derives from it.

        Applies (and persists) the daily rollover first so a stale
        ``today_xp`` never reaches a caller.
        """
        with self._storage.atomic(user_id):
            progress = self._storage.get_user_progress(user_id)
            today = self._clock().date()
            if needs_rollover(progress, today):
                progress = apply_rollover(progress, today)
                self._storage.save_user_progress(progress)

        earned, needed = xp_in_current_level(progress.cumulative_xp)
        state = progress.to_dict()
        state.update({
            "title": title_for_level(progress.current_level),
            "league": league_for_level(progress.current_level).to_dict(),
            "xp_to_next_level": xp_to_next_level(progress.cumulative_xp),
            "level_progress": {"earned": earned, "needed": needed},
        })
        return state
