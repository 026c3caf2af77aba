"""Tests for sprint challenges: lifecycle, completion check, countdown."""

from datetime import datetime, timedelta

import pytest

from hustlequest.errors import InvalidStateError, NotFoundError, ValidationError
from hustlequest.gamification.challenges import (
    CHALLENGE_ACTIONS,
    apply_completion,
    time_remaining,
)
from hustlequest.records import ChallengeGoal

from helpers import SignalCollector


def _goal(**kwargs):
    defaults = dict(
        id="g1",
        user_id="alex",
        type="dm_sprint",
        target=5,
        time_limit_seconds=600,
        time_remaining_seconds=600,
        created_at=datetime(2025, 3, 10, 9, 0),
    )
    defaults.update(kwargs)
    return ChallengeGoal(**defaults)


# ═══════════════════════════════════════════════════════════════════════════
#  PURE HELPERS
# ═══════════════════════════════════════════════════════════════════════════


class TestCatalog:

    def test_every_action_has_a_sprint(self):
        assert CHALLENGE_ACTIONS["dm_sprint"] == "dm"
        assert CHALLENGE_ACTIONS["loom_sprint"] == "loom"
        assert len(CHALLENGE_ACTIONS) == 6


class TestApplyCompletion:

    def test_below_target(self):
        goal = _goal(current=4, active=True)
        assert apply_completion(goal, datetime(2025, 3, 10)) is False
        assert goal.active is True

    def test_reaching_target(self):
        now = datetime(2025, 3, 10, 10)
        goal = _goal(current=5, active=True)
        assert apply_completion(goal, now) is True
        assert goal.completed is True
        assert goal.active is False
        assert goal.completed_at == now

    def test_already_completed_untouched(self):
        stamp = datetime(2025, 3, 9)
        goal = _goal(current=9, completed=True, completed_at=stamp)
        assert apply_completion(goal, datetime(2025, 3, 10)) is False
        assert goal.completed_at == stamp


class TestTimeRemaining:

    def test_inactive_reports_stored_value(self):
        goal = _goal(time_remaining_seconds=300)
        assert time_remaining(goal, datetime(2030, 1, 1)) == 300

    def test_active_counts_down(self):
        start = datetime(2025, 3, 10, 9, 0)
        goal = _goal(active=True, started_at=start)
        assert time_remaining(goal, start + timedelta(seconds=90)) == 510

    def test_never_negative(self):
        start = datetime(2025, 3, 10, 9, 0)
        goal = _goal(active=True, started_at=start)
        assert time_remaining(goal, start + timedelta(hours=2)) == 0


# ═══════════════════════════════════════════════════════════════════════════
#  LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════


class TestCreate:

    def test_defaults(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        assert goal.current == 0
        assert goal.active is False
        assert goal.completed is False
        assert goal.time_remaining_seconds == 3600
        assert goal.started_at is None

    def test_round_trip(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        assert quest.challenges.get_goal(goal.id) == goal

    def test_unknown_type(self, quest):
        with pytest.raises(ValidationError):
            quest.challenges.create_goal("alex", "nap_sprint", 3, 60)

    @pytest.mark.parametrize("target", [0, -1])
    def test_target_must_be_positive(self, quest, target):
        with pytest.raises(ValidationError):
            quest.challenges.create_goal("alex", "dm_sprint", target, 60)

    def test_negative_time_limit(self, quest):
        with pytest.raises(ValidationError):
            quest.challenges.create_goal("alex", "dm_sprint", 3, -5)


class TestStartStop:

    def test_start(self, quest, clock):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        started = quest.challenges.start_goal(goal.id)
        assert started.active is True
        assert started.started_at == clock.now
        assert quest.challenges.active_goal("alex").id == goal.id

    def test_start_unknown(self, quest):
        with pytest.raises(NotFoundError):
            quest.challenges.start_goal("missing")

    def test_start_while_another_active(self, quest):
        first = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        second = quest.challenges.create_goal("alex", "loom_sprint", 5, 3600)
        quest.challenges.start_goal(first.id)
        with pytest.raises(InvalidStateError):
            quest.challenges.start_goal(second.id)
        assert quest.challenges.active_goal("alex").id == first.id

    def test_start_already_active_is_noop(self, quest, clock):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        started = quest.challenges.start_goal(goal.id)
        clock.advance(minutes=5)
        again = quest.challenges.start_goal(goal.id)
        assert again.started_at == started.started_at

    def test_start_completed_rejected(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 1, 3600)
        quest.challenges.start_goal(goal.id)
        quest.challenges.increment_progress(goal.id)
        with pytest.raises(InvalidStateError):
            quest.challenges.start_goal(goal.id)

    def test_stop_pauses_and_keeps_progress(self, quest, clock):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        quest.challenges.start_goal(goal.id)
        quest.challenges.increment_progress(goal.id, 3)
        clock.advance(minutes=10)

        stopped = quest.challenges.stop_goal(goal.id)
        assert stopped.active is False
        assert stopped.completed is False
        assert stopped.current == 3
        assert stopped.time_remaining_seconds == 3000
        assert quest.challenges.active_goal("alex") is None

    def test_resume_continues_countdown(self, quest, clock):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        quest.challenges.start_goal(goal.id)
        clock.advance(minutes=10)
        quest.challenges.stop_goal(goal.id)
        clock.advance(hours=3)  # paused time does not count
        resumed = quest.challenges.start_goal(goal.id)
        clock.advance(minutes=5)
        assert time_remaining(resumed, clock.now) == 2700

    def test_stop_inactive_is_noop(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        stopped = quest.challenges.stop_goal(goal.id)
        assert stopped == goal


# ═══════════════════════════════════════════════════════════════════════════
#  PROGRESS & COMPLETION
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:

    def test_increment(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 20, 3600)
        quest.challenges.start_goal(goal.id)
        assert quest.challenges.increment_progress(goal.id).current == 1
        assert quest.challenges.increment_progress(goal.id, 4).current == 5

    def test_final_increment_completes_atomically(self, quest, clock):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 3, 3600)
        quest.challenges.start_goal(goal.id)
        quest.challenges.increment_progress(goal.id, 2)

        done = quest.challenges.increment_progress(goal.id)
        assert done.current == 3
        assert done.completed is True
        assert done.active is False
        assert done.completed_at == clock.now

        stored = quest.challenges.get_goal(goal.id)
        assert stored.completed is True
        assert stored.active is False

    def test_increment_completed_rejected(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 1, 3600)
        quest.challenges.start_goal(goal.id)
        quest.challenges.increment_progress(goal.id)
        with pytest.raises(InvalidStateError):
            quest.challenges.increment_progress(goal.id)
        assert quest.challenges.get_goal(goal.id).current == 1

    def test_increment_inactive_goal_can_complete(self, quest):
        """Completion does not depend on the goal being active."""
        goal = quest.challenges.create_goal("alex", "dm_sprint", 2, 3600)
        done = quest.challenges.increment_progress(goal.id, 2)
        assert done.completed is True
        assert done.active is False

    def test_direct_update_triggers_completion(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 10, 3600)
        quest.challenges.start_goal(goal.id)
        updated = quest.challenges.update_goal(goal.id, current=10)
        assert updated.completed is True
        assert updated.active is False

    def test_lowering_target_triggers_completion(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 10, 3600)
        quest.challenges.increment_progress(goal.id, 4)
        assert quest.challenges.update_goal(goal.id, target=4).completed is True

    def test_update_rejects_state_fields(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 10, 3600)
        with pytest.raises(ValidationError):
            quest.challenges.update_goal(goal.id, completed=True)

    @pytest.mark.parametrize("changes", [
        {"target": 0},
        {"target": -2},
        {"current": -3},
        {"time_limit_seconds": -1},
        {"time_remaining_seconds": -1},
    ])
    def test_update_rejects_invalid_values(self, quest, changes):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 5, 600)
        with pytest.raises(ValidationError):
            quest.challenges.update_goal(goal.id, **changes)
        assert quest.challenges.get_goal(goal.id) == goal

    def test_update_completed_rejected(self, quest):
        goal = quest.challenges.create_goal("alex", "dm_sprint", 1, 3600)
        quest.challenges.increment_progress(goal.id)
        with pytest.raises(InvalidStateError):
            quest.challenges.update_goal(goal.id, current=0)

    def test_completion_signal_once(self, quest):
        c = SignalCollector()
        quest.challenges.challenge_completed.connect(c)

        goal = quest.challenges.create_goal("alex", "dm_sprint", 2, 3600)
        quest.challenges.start_goal(goal.id)
        quest.challenges.increment_progress(goal.id)
        assert len(c) == 0
        quest.challenges.increment_progress(goal.id)

        assert len(c) == 1
        assert c.last["id"] == goal.id
        assert c.last["completed"] is True

    def test_goals_listed_newest_first(self, quest, clock):
        first = quest.challenges.create_goal("alex", "dm_sprint", 2, 3600)
        clock.advance(minutes=1)
        second = quest.challenges.create_goal("alex", "call_sprint", 2, 3600)
        assert [g.id for g in quest.challenges.goals("alex")] == [second.id, first.id]
