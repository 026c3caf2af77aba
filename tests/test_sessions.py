"""Tests for focus sessions and their scoring.

Covers: the pure bonus tiers (first completion, new record, near record,
ties), session lifecycle, history selection by challenge type, XP applied to
progress, double-end protection, signals, and the end-to-end scenario.
"""

import pytest

from hustlequest.errors import InvalidStateError, NotFoundError, ValidationError
from hustlequest.gamification.sessions import (
    FIRST_COMPLETION_BONUS,
    NEAR_RECORD_BONUS,
    NEW_RECORD_BASE,
    PER_ACTION_XP,
    RECORD_MARGIN_MULTIPLIER,
    base_xp,
    session_bonus,
)

from helpers import SignalCollector


def _run(quest, clock, actions, completed=True, challenge_type="dm_sprint", user="alex"):
    """Start and end a session, moving the clock in between."""
    session = quest.sessions.start_session(user, challenge_type, 1500)
    clock.advance(minutes=25)
    result = quest.sessions.end_session(session.id, actions, completed)
    clock.advance(minutes=1)
    return result


# ═══════════════════════════════════════════════════════════════════════════
#  BONUS TIERS (pure)
# ═══════════════════════════════════════════════════════════════════════════


class TestSessionBonus:

    def test_constants(self):
        assert PER_ACTION_XP == 5
        assert FIRST_COMPLETION_BONUS == 30
        assert NEW_RECORD_BASE == 50
        assert RECORD_MARGIN_MULTIPLIER == 10
        assert NEAR_RECORD_BONUS == 25

    def test_base_xp(self):
        assert base_xp(10) == 50
        assert base_xp(0) == 0

    def test_first_completion(self):
        assert session_bonus(10, True, None) == 30

    def test_first_session_not_completed(self):
        assert session_bonus(10, False, None) == 0

    def test_first_session_zero_actions(self):
        assert session_bonus(0, True, None) == 0

    def test_new_record(self):
        assert session_bonus(15, True, 10) == 50 + 5 * 10

    def test_new_record_counts_even_if_stopped_early(self):
        assert session_bonus(11, False, 10) == 60

    def test_near_record_at_exact_ratio(self):
        assert session_bonus(8, True, 10) == 25

    def test_below_near_record(self):
        assert session_bonus(7, True, 10) == 0

    def test_near_record_requires_completion(self):
        assert session_bonus(9, False, 10) == 0

    def test_tie_completed_is_near_record(self):
        assert session_bonus(10, True, 10) == 25

    def test_tie_not_completed_is_zero(self):
        assert session_bonus(10, False, 10) == 0

    def test_best_of_zero(self):
        """Zero actions ties a zero best: near-record only when completed."""
        assert session_bonus(0, True, 0) == 25
        assert session_bonus(0, False, 0) == 0
        assert session_bonus(1, False, 0) == 60


# ═══════════════════════════════════════════════════════════════════════════
#  LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════


class TestLifecycle:

    def test_start_opens_session(self, quest, clock):
        session = quest.sessions.start_session("alex", "dm_sprint", 1500)
        assert session.is_open
        assert session.start_time == clock.now
        assert session.actions_completed == 0
        assert session.xp_earned == 0
        assert session.bonus_xp == 0
        assert session.completed is False

    def test_start_rejects_bad_duration(self, quest):
        with pytest.raises(ValidationError):
            quest.sessions.start_session("alex", None, 0)

    def test_start_rejects_unknown_challenge_type(self, quest):
        with pytest.raises(ValidationError) as info:
            quest.sessions.start_session("alex", "dm_sprnt", 1500)
        assert info.value.details["type"] == "dm_sprnt"
        assert quest.sessions.open_session("alex") is None

    def test_second_open_session_rejected(self, quest):
        first = quest.sessions.start_session("alex", None, 1500)
        with pytest.raises(InvalidStateError) as info:
            quest.sessions.start_session("alex", "dm_sprint", 1500)
        assert info.value.details["open_id"] == first.id

    def test_other_users_session_does_not_block(self, quest):
        quest.sessions.start_session("alex", None, 1500)
        assert quest.sessions.start_session("sam", None, 1500).is_open

    def test_end_closes_session(self, quest, clock):
        session = quest.sessions.start_session("alex", "dm_sprint", 1500)
        clock.advance(minutes=25)
        closed = quest.sessions.end_session(session.id, 10, True)

        assert not closed.is_open
        assert closed.end_time == clock.now
        stored = quest.sessions.get_session(session.id)
        assert stored == closed

    def test_end_unknown_session(self, quest):
        with pytest.raises(NotFoundError):
            quest.sessions.end_session("missing", 3, True)

    def test_end_twice_rejected(self, quest, clock):
        session = quest.sessions.start_session("alex", "dm_sprint", 1500)
        quest.sessions.end_session(session.id, 10, True)
        with pytest.raises(InvalidStateError):
            quest.sessions.end_session(session.id, 10, True)

    def test_end_twice_does_not_double_award(self, quest):
        session = quest.sessions.start_session("alex", "dm_sprint", 1500)
        quest.sessions.end_session(session.id, 10, True)
        with pytest.raises(InvalidStateError):
            quest.sessions.end_session(session.id, 10, True)
        assert quest.storage.get_user_progress("alex").cumulative_xp == 80

    def test_negative_actions_rejected(self, quest):
        session = quest.sessions.start_session("alex", None, 1500)
        with pytest.raises(ValidationError):
            quest.sessions.end_session(session.id, -1, True)
        assert quest.sessions.get_session(session.id).is_open

    def test_new_session_allowed_after_end(self, quest, clock):
        _run(quest, clock, 3)
        assert quest.sessions.start_session("alex", None, 600).is_open


# ═══════════════════════════════════════════════════════════════════════════
#  SCORING AGAINST HISTORY
# ═══════════════════════════════════════════════════════════════════════════


class TestScoring:

    def test_first_completed_session(self, quest, clock):
        closed = _run(quest, clock, 10)
        assert closed.xp_earned == 50
        assert closed.bonus_xp == 30
        assert quest.storage.get_user_progress("alex").cumulative_xp == 80

    def test_new_record_over_previous(self, quest, clock):
        _run(quest, clock, 10)
        closed = _run(quest, clock, 15)
        assert closed.bonus_xp == 100

    def test_near_record(self, quest, clock):
        _run(quest, clock, 10)
        assert _run(quest, clock, 8).bonus_xp == 25

    def test_below_near_record(self, quest, clock):
        _run(quest, clock, 10)
        assert _run(quest, clock, 7).bonus_xp == 0

    def test_best_is_max_of_history(self, quest, clock):
        _run(quest, clock, 10)
        _run(quest, clock, 4)
        closed = _run(quest, clock, 12)
        assert closed.bonus_xp == 50 + 2 * 10

    def test_stopped_sessions_count_as_history(self, quest, clock):
        _run(quest, clock, 6, completed=False)
        closed = _run(quest, clock, 6, completed=True)
        assert closed.bonus_xp == 25

    def test_history_is_per_challenge_type(self, quest, clock):
        _run(quest, clock, 10, challenge_type="dm_sprint")
        closed = _run(quest, clock, 4, challenge_type="loom_sprint")
        assert closed.bonus_xp == 30

    def test_history_is_per_user(self, quest, clock):
        _run(quest, clock, 10, user="sam")
        closed = _run(quest, clock, 4, user="alex")
        assert closed.bonus_xp == 30

    def test_freeform_session_has_no_bonus(self, quest, clock):
        closed = _run(quest, clock, 10, challenge_type=None)
        assert closed.xp_earned == 50
        assert closed.bonus_xp == 0

    def test_freeform_sessions_not_in_history(self, quest, clock):
        _run(quest, clock, 20, challenge_type=None)
        assert _run(quest, clock, 5).bonus_xp == 30

    def test_zero_actions_not_completed_awards_nothing(self, quest, clock):
        c = SignalCollector()
        quest.xp.xp_awarded.connect(c)
        closed = _run(quest, clock, 0, completed=False)
        assert closed.xp_earned == 0
        assert closed.bonus_xp == 0
        assert len(c) == 0
        assert quest.storage.get_user_progress("alex").cumulative_xp == 0

    def test_xp_added_to_today(self, quest, clock):
        _run(quest, clock, 10)
        progress = quest.storage.get_user_progress("alex")
        assert progress.today_xp == 80

    def test_records_newest_first(self, quest, clock):
        first = _run(quest, clock, 1)
        second = _run(quest, clock, 2)
        assert [s.id for s in quest.sessions.records("alex")] == [second.id, first.id]

    def test_personal_best(self, quest, clock):
        assert quest.sessions.personal_best("alex", "dm_sprint") is None
        _run(quest, clock, 9)
        _run(quest, clock, 3)
        assert quest.sessions.personal_best("alex", "dm_sprint") == 9


# ═══════════════════════════════════════════════════════════════════════════
#  SIGNALS
# ═══════════════════════════════════════════════════════════════════════════


class TestSignals:

    def test_session_ended_payload(self, quest, clock):
        c = SignalCollector()
        quest.sessions.session_ended.connect(c)

        _run(quest, clock, 10)
        _run(quest, clock, 12)

        assert len(c) == 2
        assert c[0]["total_xp"] == 80
        assert c[0]["new_record"] is False
        assert c[1]["new_record"] is True
        assert [b["name"] for b in c[1]["bonuses"]] == ["12 actions", "New Record!"]

    def test_xp_awarded_carries_bonus_breakdown(self, quest, clock):
        c = SignalCollector()
        quest.xp.xp_awarded.connect(c)
        _run(quest, clock, 10)
        amounts = {b["name"]: b["amount"] for b in c.last["bonuses"]}
        assert amounts == {"10 actions": 50, "First Completion": 30}


# ═══════════════════════════════════════════════════════════════════════════
#  END TO END
# ═══════════════════════════════════════════════════════════════════════════


class TestEndToEnd:

    def test_three_dms_then_sprint(self, quest, clock):
        for _ in range(3):
            quest.ledger.log("alex", "dm")
            clock.advance(minutes=2)

        progress = quest.storage.get_user_progress("alex")
        assert progress.cumulative_xp == 15
        assert progress.current_level == 1

        closed = _run(quest, clock, 20)
        assert closed.xp_earned == 100
        assert closed.bonus_xp == 30

        progress = quest.storage.get_user_progress("alex")
        assert progress.cumulative_xp == 145
        assert progress.current_level == 2
