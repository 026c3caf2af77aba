"""Daily reset of the ``today_xp`` counter.

The only place a stored date is compared with the wall-clock date.  Run it
before any read or write that touches ``today_xp``.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from ..records import UserProgress


def needs_rollover(progress: UserProgress, today: date) -> bool:
    return progress.last_reset_date != today


def apply_rollover(progress: UserProgress, today: date) -> UserProgress:
    """Return *progress* with ``today_xp`` zeroed if *today* is a new day.

    Returns the same object when nothing changes, a copy otherwise.
    """
    if not needs_rollover(progress, today):
        return progress
    return replace(progress, today_xp=0, last_reset_date=today)
