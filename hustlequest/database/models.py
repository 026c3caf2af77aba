"""SQLAlchemy ORM models for HustleQuest.

Column attribute names mirror the fields of the records in
:mod:`hustlequest.records` so rows and records convert field-for-field.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Text
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class GameStateRow(Base):
    """One row per user key: XP totals and the daily counter."""

    __tablename__ = "game_state"

    user_id = Column(String(64), primary_key=True)
    cumulative_xp = Column(Integer, nullable=False, default=0)
    current_level = Column(Integer, nullable=False, default=1)
    today_xp = Column(Integer, nullable=False, default=0)
    last_reset_date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<GameState user={self.user_id} level={self.current_level} "
            f"xp={self.cumulative_xp} today={self.today_xp}>"
        )


class ActionRow(Base):
    """Append-only ledger of scored actions."""

    __tablename__ = "actions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # dm | loom | call | client | content | system
    xp_value = Column(Integer, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)
    date = Column(Date, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Action id={self.id} type={self.type} xp={self.xp_value}>"


class FocusSessionRow(Base):
    """A timed focus session; ``end_time`` stays NULL while it is open."""

    __tablename__ = "focus_sessions"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    challenge_type = Column(String(32), nullable=True)
    start_time = Column(DateTime, nullable=False, default=datetime.now)
    end_time = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=False)
    actions_completed = Column(Integer, nullable=False, default=0)
    xp_earned = Column(Integer, nullable=False, default=0)
    bonus_xp = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return (
            f"<FocusSession id={self.id} type={self.challenge_type} "
            f"completed={self.completed}>"
        )


class ChallengeRow(Base):
    """Sprint challenge: reach *target* actions of one type."""

    __tablename__ = "challenges"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(32), nullable=False)  # dm_sprint, loom_sprint, ...
    target = Column(Integer, nullable=False)
    current = Column(Integer, nullable=False, default=0)
    time_limit_seconds = Column(Integer, nullable=False)
    time_remaining_seconds = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=False)
    completed = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<Challenge id={self.id} type={self.type} "
            f"{self.current}/{self.target} active={self.active}>"
        )


class TodoRow(Base):
    __tablename__ = "todos"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(Text, nullable=False)
    xp_value = Column(Integer, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return f"<Todo id={self.id} completed={self.completed}>"


class AchievementRow(Base):
    __tablename__ = "achievements"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(32), nullable=False)  # achievement key
    title = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    unlocked_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return f"<Achievement user={self.user_id} type={self.type}>"
