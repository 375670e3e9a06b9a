"""LimitAlarmMonitor — re-evaluates a limit alarm whenever its input changes.

Policy: the alarm is evaluated on every value change of its input variable
and an event is raised only when the classified band differs from the one
found by the previous evaluation.  An unchanged band is never re-raised.
"""

from __future__ import annotations

import logging

from uasim.core.notifier import EventNotifier
from uasim.domain.alarm import LimitAlarm
from uasim.domain.event import AlarmEvent
from uasim.domain.value import DataValue
from uasim.domain.variable import Variable
from uasim.store.address_space import ensure_live
from uasim.store.variable_store import VariableStore

logger = logging.getLogger(__name__)


class LimitAlarmMonitor:
    """Binds a LimitAlarm to the change notifications of its input variable."""

    def __init__(
        self,
        alarm: LimitAlarm,
        store: VariableStore,
        notifier: EventNotifier,
    ) -> None:
        self.alarm = alarm
        self._store = store
        self._notifier = notifier
        self._input = store.address_space.resolve_variable(alarm.input_node_id)
        store.add_listener(self._input.node_id, self._on_input_changed)

    def evaluate_now(self) -> AlarmEvent | None:
        """Evaluate against the input's current value (used when arming)."""
        return self._evaluate(self._store.read_handle(self._input))

    def _on_input_changed(self, variable: Variable, value: DataValue) -> None:
        self._evaluate(value)

    def _evaluate(self, value: DataValue) -> AlarmEvent | None:
        event = ensure_live(self.alarm).evaluate(float(value.value))
        if event is None:
            return None
        logger.info(
            "%s: %s → %s at %s",
            self.alarm.name,
            event.previous_band.value if event.previous_band else "-",
            event.band.value,
            event.input_value,
        )
        self._notifier.notify(event)
        return event
