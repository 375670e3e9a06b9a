"""Condition — a retained Good/Bad oscillator.

Severity and message are derived from the state and are only ever changed
together with it, so a Bad condition always carries the higher severity
band and the "bad" text.  Retain is set at creation and left alone.
"""

from __future__ import annotations

from datetime import datetime

from uasim.domain.enums import ConditionState
from uasim.domain.event import ConditionEvent
from uasim.foundation.clock import utc_now

_MAX_SEVERITY = 65535


class Condition:
    """A two-state condition owned by exactly one simulator."""

    __slots__ = (
        "node_id",
        "name",
        "source_node_id",
        "good_severity",
        "bad_severity",
        "good_message",
        "bad_message",
        "state",
        "severity",
        "message",
        "retain",
        "time",
        "deleted",
    )

    def __init__(
        self,
        node_id: str,
        name: str,
        source_node_id: str,
        good_severity: int = 150,
        bad_severity: int = 800,
        good_message: str | None = None,
        bad_message: str | None = None,
        retain: bool = True,
    ) -> None:
        if not 0 <= good_severity < bad_severity <= _MAX_SEVERITY:
            raise ValueError(
                f"{name}: need 0 <= good_severity < bad_severity <= {_MAX_SEVERITY}, "
                f"got {good_severity} / {bad_severity}"
            )
        self.node_id = node_id
        self.name = name
        self.source_node_id = source_node_id
        self.good_severity = good_severity
        self.bad_severity = bad_severity
        self.good_message = good_message or f"{name} is Good!"
        self.bad_message = bad_message or f"{name} is Bad!"
        self.retain = retain
        self.deleted = False

        self.state = ConditionState.GOOD
        self.severity = good_severity
        self.message = self.good_message
        self.time: datetime = utc_now()

    # ── Mutation ─────────────────────────────────────────────────────────

    def toggle(self) -> ConditionState:
        """Flip Good↔Bad, refresh severity, message and time; return the new state."""
        if self.state == ConditionState.GOOD:
            self.state = ConditionState.BAD
            self.severity = self.bad_severity
            self.message = self.bad_message
        else:
            self.state = ConditionState.GOOD
            self.severity = self.good_severity
            self.message = self.good_message
        self.time = utc_now()
        return self.state

    # ── Queries ──────────────────────────────────────────────────────────

    def snapshot(self, new_state: bool = True) -> ConditionEvent:
        """Event carrying the condition's current fields."""
        return ConditionEvent(
            source_node_id=self.node_id,
            source_name=self.name,
            severity=self.severity,
            message=self.message,
            time=self.time,
            state=self.state,
            retain=self.retain,
            new_state=new_state,
        )

    def summary(self) -> dict:
        return {
            "node_id": self.node_id,
            "name": self.name,
            "source_node_id": self.source_node_id,
            "state": self.state.value,
            "severity": self.severity,
            "message": self.message,
            "retain": self.retain,
            "time": self.time.isoformat(),
        }

    def __repr__(self) -> str:
        return f"Condition({self.name}, {self.state.value}, severity={self.severity})"
