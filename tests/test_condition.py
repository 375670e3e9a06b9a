"""Tests for the Good/Bad condition state machine and its simulator.

Uses clock patching via uasim.domain.condition.utc_now.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from uasim.core.notifier import EventNotifier
from uasim.domain.condition import Condition
from uasim.domain.enums import ConditionState, EventType
from uasim.domain.event import ConditionEvent, Event
from uasim.simulation.simulators import ConditionSimulator
from uasim.store.address_space import AddressSpace, StaleHandleError

# ── Helpers ──────────────────────────────────────────────────────────────────

_BASE = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _patched_now(dt: datetime):
    """Freeze utc_now() at the condition module level."""
    return patch("uasim.domain.condition.utc_now", return_value=dt)


def _condition(**kw) -> Condition:
    params = {
        "node_id": "ns=1;s=DEV.MyCondition",
        "name": "MyCondition",
        "source_node_id": "ns=1;s=DEV",
        "good_message": "Good!",
        "bad_message": "Bad!",
    }
    params.update(kw)
    return Condition(**params)


# ── State machine ────────────────────────────────────────────────────────────


class TestCondition:
    def test_initial_state(self) -> None:
        cond = _condition()
        assert cond.state == ConditionState.GOOD
        assert cond.severity == 150
        assert cond.message == "Good!"
        assert cond.retain is True

    def test_default_messages_use_name(self) -> None:
        cond = Condition("ns=1;s=C", "MyCondition", "ns=1;s=DEV")
        assert cond.message == "MyCondition is Good!"
        cond.toggle()
        assert cond.message == "MyCondition is Bad!"

    def test_scenario_good_bad_good(self) -> None:
        with _patched_now(_BASE):
            cond = _condition()
        assert cond.time == _BASE

        with _patched_now(_BASE + timedelta(seconds=15)):
            cond.toggle()
        assert cond.message == "Bad!"
        assert cond.severity == 800
        assert cond.retain is True
        assert cond.time == _BASE + timedelta(seconds=15)

        with _patched_now(_BASE + timedelta(seconds=30)):
            cond.toggle()
        assert cond.message == "Good!"
        assert cond.severity == 150
        assert cond.retain is True
        assert cond.time == _BASE + timedelta(seconds=30)

    def test_strict_alternation(self) -> None:
        cond = _condition()
        states = [cond.state]
        for _ in range(7):
            states.append(cond.toggle())
        assert states == [ConditionState.GOOD, ConditionState.BAD] * 4

    def test_severity_rises_exactly_on_good_to_bad(self) -> None:
        cond = _condition()
        for _ in range(6):
            before_state, before_sev = cond.state, cond.severity
            cond.toggle()
            if before_state == ConditionState.GOOD:
                assert cond.severity > before_sev
            else:
                assert cond.severity < before_sev

    def test_state_message_severity_consistent(self) -> None:
        cond = _condition()
        for _ in range(4):
            cond.toggle()
            if cond.state == ConditionState.BAD:
                assert (cond.message, cond.severity) == ("Bad!", 800)
            else:
                assert (cond.message, cond.severity) == ("Good!", 150)

    def test_severity_bands_must_be_ordered(self) -> None:
        with pytest.raises(ValueError):
            _condition(good_severity=800, bad_severity=150)

    def test_snapshot_carries_current_fields(self) -> None:
        cond = _condition()
        cond.toggle()
        snap = cond.snapshot()
        assert isinstance(snap, ConditionEvent)
        assert snap.event_type == EventType.CONDITION
        assert snap.state == ConditionState.BAD
        assert snap.severity == 800
        assert snap.message == "Bad!"
        assert snap.retain is True
        assert snap.new_state is True
        assert snap.time == cond.time


# ── Simulator ────────────────────────────────────────────────────────────────


class TestConditionSimulator:
    def test_tick_toggles_and_raises_new_state_event(
        self, notifier: EventNotifier, received: list[Event],
    ) -> None:
        cond = _condition()
        sim = ConditionSimulator("cond", 15.0, cond, notifier)

        sim.tick()
        sim.tick()

        assert [e.message for e in received] == ["Bad!", "Good!"]
        assert [e.severity for e in received] == [800, 150]
        assert all(isinstance(e, ConditionEvent) and e.new_state for e in received)

    def test_tick_on_deleted_condition_raises_stale(self, notifier: EventNotifier) -> None:
        space = AddressSpace()
        cond = space.add(_condition())
        sim = ConditionSimulator("cond", 15.0, cond, notifier)
        space.delete(cond.node_id)
        with pytest.raises(StaleHandleError):
            sim.tick()
