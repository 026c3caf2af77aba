"""Plain records passed between the engines and the storage backends.

Every record is a dataclass that serializes to JSON-ready scalars via
``to_dict()`` so the route layer can hand it straight to a response.
Storage backends always return *copies*; mutate a record, then save it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from datetime import date, datetime


def new_id() -> str:
    return str(uuid.uuid4())


def _jsonable(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class _Record:
    """Mixin giving dataclass records a JSON-friendly ``to_dict``."""

    def to_dict(self) -> dict:
        return {f.name: _jsonable(getattr(self, f.name)) for f in fields(self)}


# ── progress ─────────────────────────────────────────────────────────────


@dataclass
class UserProgress(_Record):
    """The single mutable aggregate per user key."""

    user_id: str
    last_reset_date: date
    cumulative_xp: int = 0
    current_level: int = 1
    today_xp: int = 0


# ── ledger ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ActionEvent(_Record):
    """One scored action.  Never mutated after creation."""

    id: str
    user_id: str
    type: str
    xp_value: int
    timestamp: datetime
    date: date


# ── focus sessions ───────────────────────────────────────────────────────


@dataclass
class FocusSession(_Record):
    id: str
    user_id: str
    start_time: datetime
    duration_seconds: int
    challenge_type: str | None = None
    end_time: datetime | None = None
    actions_completed: int = 0
    xp_earned: int = 0
    bonus_xp: int = 0
    completed: bool = False

    @property
    def is_open(self) -> bool:
        return self.end_time is None


# ── challenges ───────────────────────────────────────────────────────────


@dataclass
class ChallengeGoal(_Record):
    id: str
    user_id: str
    type: str
    target: int
    time_limit_seconds: int
    time_remaining_seconds: int
    created_at: datetime
    current: int = 0
    active: bool = False
    completed: bool = False
    started_at: datetime | None = None
    completed_at: datetime | None = None


# ── todos & achievements ─────────────────────────────────────────────────


@dataclass
class Todo(_Record):
    id: str
    user_id: str
    title: str
    xp_value: int
    created_at: datetime
    completed: bool = False
    completed_at: datetime | None = None


@dataclass(frozen=True)
class Achievement(_Record):
    id: str
    user_id: str
    type: str
    title: str
    description: str
    unlocked_at: datetime = field(default_factory=datetime.now)
