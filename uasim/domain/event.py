"""Events — transient notifications handed to subscribers.

An event has no identity and is never stored by the engine.  It exists for
the duration of a notify call; subscribers that want to keep it must copy
what they need.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from uasim.domain.enums import ConditionState, EventType, LimitBand
from uasim.foundation.clock import utc_now


class Event(BaseModel):
    """Base event: who raised it, how urgent, what it says, and when."""

    event_type: EventType
    source_node_id: str = Field(..., min_length=1)
    source_name: str = Field(..., min_length=1)
    severity: int = Field(..., ge=0, le=65535)
    message: str
    time: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe dict for the subscription layer."""
        return self.model_dump(mode="json")


class ConditionEvent(Event):
    """Snapshot of a condition at the moment it was raised."""

    event_type: EventType = EventType.CONDITION
    state: ConditionState
    retain: bool
    new_state: bool = Field(
        True, description="True when raised for a transition, False for a re-assertion",
    )


class AlarmEvent(Event):
    """Snapshot of a limit alarm after a band transition."""

    event_type: EventType = EventType.LIMIT_ALARM
    input_node_id: str
    input_value: float
    band: LimitBand
    previous_band: Optional[LimitBand] = None
    active: bool
    retain: bool
