"""Non-exclusive limit alarm over one continuous input variable.

Band boundaries (thresholds lowlow ≤ low ≤ high ≤ highhigh):

    value <  lowlow            → LowLow
    lowlow <= value <  low     → Low
    low    <= value <= high    → Normal
    high   <  value <= highhigh → High
    value >  highhigh          → HighHigh

``classify`` is pure.  ``LimitAlarm.evaluate`` remembers only the band of
the previous evaluation and reports a transition when the band changes;
evaluating an unchanged band is a no-op.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, model_validator

from uasim.domain.enums import LimitBand
from uasim.domain.event import AlarmEvent
from uasim.foundation.clock import utc_now

# Severity carried by transition events, per band entered.
BAND_SEVERITY: dict[LimitBand, int] = {
    LimitBand.LOW_LOW: 800,
    LimitBand.LOW: 500,
    LimitBand.NORMAL: 100,
    LimitBand.HIGH: 500,
    LimitBand.HIGH_HIGH: 800,
}


def classify(
    value: float,
    low_low: float,
    low: float,
    high: float,
    high_high: float,
) -> LimitBand:
    """Return the band *value* falls into."""
    if value < low_low:
        return LimitBand.LOW_LOW
    if value < low:
        return LimitBand.LOW
    if value <= high:
        return LimitBand.NORMAL
    if value <= high_high:
        return LimitBand.HIGH
    return LimitBand.HIGH_HIGH


class LimitThresholds(BaseModel):
    """The four ordered limits of an alarm.  Fixed once constructed."""

    low_low: float
    low: float
    high: float
    high_high: float

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def limits_must_be_ordered(self) -> "LimitThresholds":
        if not self.low_low <= self.low <= self.high <= self.high_high:
            raise ValueError(
                "limits must satisfy low_low <= low <= high <= high_high, got "
                f"{self.low_low} / {self.low} / {self.high} / {self.high_high}"
            )
        return self

    def classify(self, value: float) -> LimitBand:
        return classify(value, self.low_low, self.low, self.high, self.high_high)


class LimitAlarm:
    """Stateful wrapper around ``classify`` that detects band transitions.

    The alarm starts armed, inactive and in the Normal band.
    """

    __slots__ = (
        "node_id",
        "name",
        "input_node_id",
        "thresholds",
        "retain",
        "band",
        "last_value",
        "time",
        "deleted",
    )

    def __init__(
        self,
        node_id: str,
        name: str,
        input_node_id: str,
        thresholds: LimitThresholds,
        retain: bool = True,
    ) -> None:
        self.node_id = node_id
        self.name = name
        self.input_node_id = input_node_id
        self.thresholds = thresholds
        self.retain = retain
        self.band = LimitBand.NORMAL
        self.last_value: float | None = None
        self.time: datetime = utc_now()
        self.deleted = False

    @property
    def active(self) -> bool:
        return self.band != LimitBand.NORMAL

    def evaluate(self, value: float) -> AlarmEvent | None:
        """Classify *value*; return a transition event if the band changed."""
        self.last_value = value
        band = self.thresholds.classify(value)
        if band == self.band:
            return None

        previous = self.band
        self.band = band
        self.time = utc_now()
        return AlarmEvent(
            source_node_id=self.node_id,
            source_name=self.name,
            severity=BAND_SEVERITY[band],
            message=self._message(),
            time=self.time,
            input_node_id=self.input_node_id,
            input_value=value,
            band=band,
            previous_band=previous,
            active=self.active,
            retain=self.retain,
        )

    def _message(self) -> str:
        if self.band == LimitBand.NORMAL:
            return f"{self.name} returned to Normal"
        return f"{self.name} is in {self.band.value} limit"

    def summary(self) -> dict:
        return {
            "node_id": self.node_id,
            "name": self.name,
            "input_node_id": self.input_node_id,
            "limits": self.thresholds.model_dump(),
            "band": self.band.value,
            "active": self.active,
            "retain": self.retain,
            "last_value": self.last_value,
            "time": self.time.isoformat(),
        }

    def __repr__(self) -> str:
        return f"LimitAlarm({self.name}, band={self.band.value})"
