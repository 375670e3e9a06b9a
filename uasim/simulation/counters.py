"""SawtoothCounter — a linear ramp that hard-resets to a floor.

The counter owns its value.  Anything else that needs the value (a
computed variable's getter, an external setter) goes through ``get`` and
``set`` on the same object instead of sharing a captured local.
"""

from __future__ import annotations


class SawtoothCounter:
    """Add *step* per advance; past the ceiling, jump to exactly *floor*.

    Args:
        start: Initial value.
        step: Amount added on every advance.
        floor: Value the counter resets to.
        ceiling: Upper bound of the ramp.
        reset_at_ceiling: If True the reset fires when the ceiling is
            reached (``>=``), otherwise only when it is exceeded (``>``).
    """

    __slots__ = ("start", "step", "floor", "ceiling", "reset_at_ceiling", "value", "wrap_count")

    def __init__(
        self,
        start: float,
        step: float,
        floor: float,
        ceiling: float,
        reset_at_ceiling: bool = False,
    ) -> None:
        if step <= 0:
            raise ValueError("step must be positive")
        if floor >= ceiling:
            raise ValueError("floor must be below ceiling")
        self.start = start
        self.step = step
        self.floor = floor
        self.ceiling = ceiling
        self.reset_at_ceiling = reset_at_ceiling
        self.value = start
        self.wrap_count = 0

    def _past_ceiling(self, value: float) -> bool:
        if self.reset_at_ceiling:
            return value >= self.ceiling
        return value > self.ceiling

    def advance(self) -> float:
        """Step once and return the new value."""
        value = self.value + self.step
        if self._past_ceiling(value):
            value = self.floor
            self.wrap_count += 1
        self.value = value
        return value

    def get(self) -> float:
        return self.value

    def set(self, value: float) -> None:
        self.value = value

    def reset(self) -> None:
        self.value = self.start
        self.wrap_count = 0

    def __repr__(self) -> str:
        return (
            f"SawtoothCounter(value={self.value}, step={self.step}, "
            f"floor={self.floor}, ceiling={self.ceiling})"
        )
