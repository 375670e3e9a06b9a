"""Periodic simulators driven by the PeriodicScheduler.

Architectural rules:
    1. A simulator owns its state (counter, condition, toggle position) as
       fields.  No two simulators write the same variable.
    2. Node handles are passed in already resolved.  ``tick`` never looks a
       node up by id.
    3. ``tick`` is synchronous, bounded and does no I/O.  It may raise
       StaleHandleError; the scheduler turns that into a skipped tick.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from uasim.core.notifier import EventNotifier
from uasim.domain.condition import Condition
from uasim.domain.enums import DataType, EventType, StatusCode
from uasim.domain.event import Event
from uasim.domain.value import DataValue
from uasim.domain.variable import Variable
from uasim.simulation.counters import SawtoothCounter
from uasim.store.address_space import ensure_live
from uasim.store.variable_store import VariableStore

logger = logging.getLogger(__name__)


class Simulator(ABC):
    """Base class for everything the scheduler ticks."""

    def __init__(self, name: str, interval: float) -> None:
        self.name = name
        self.interval = interval

    @abstractmethod
    def tick(self) -> None:
        """Perform one bounded unit of work."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name}, every {self.interval}s)"


class SeverityEventSimulator(Simulator):
    """Sawtooth severity counter that raises a demo event on every tick.

    The counter also backs a computed variable (MySeverity); its getter and
    setter are the counter's ``get``/``set``, and this simulator publishes
    each step so the historian sees it.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        counter: SawtoothCounter,
        notifier: EventNotifier,
        event_source_id: str,
        event_source_name: str,
        store: VariableStore | None = None,
        variable: Variable | None = None,
    ) -> None:
        super().__init__(name, interval)
        self.counter = counter
        self._notifier = notifier
        self._source_id = event_source_id
        self._source_name = event_source_name
        self._store = store
        self._variable = variable

    def tick(self) -> None:
        if self._variable is not None:
            ensure_live(self._variable)
        count = self.counter.advance()
        if self._store is not None and self._variable is not None:
            self._store.publish_change(self._variable)
        severity = round(count)
        self._notifier.notify(Event(
            event_type=EventType.DEMO_EVENT,
            source_node_id=self._source_id,
            source_name=self._source_name,
            severity=severity,
            message=f"Severity at: {severity}",
        ))


class RampSimulator(Simulator):
    """Advances a computed, read-only variable and announces the change."""

    def __init__(
        self,
        name: str,
        interval: float,
        counter: SawtoothCounter,
        store: VariableStore,
        variable: Variable,
    ) -> None:
        super().__init__(name, interval)
        self.counter = counter
        self._store = store
        self._variable = variable

    def tick(self) -> None:
        ensure_live(self._variable)
        self.counter.advance()
        self._store.publish_change(self._variable)


class OverrideSimulator(Simulator):
    """Sawtooth percentage written through the ordinary store write path."""

    def __init__(
        self,
        name: str,
        interval: float,
        counter: SawtoothCounter,
        store: VariableStore,
        variable: Variable,
    ) -> None:
        super().__init__(name, interval)
        self.counter = counter
        self._store = store
        self._variable = variable

    def tick(self) -> None:
        ensure_live(self._variable)
        value = self.counter.advance()
        status = self._store.write_from_source(
            self._variable, DataValue(data_type=DataType.DOUBLE, value=value),
        )
        if status != StatusCode.GOOD:
            logger.warning("%s: %s rejected %s (%s)", self.name, self._variable.browse_name, value, status.value)


class StateToggleSimulator(Simulator):
    """Flips a state-machine variable between two texts, with its state id.

    Reads the current text through the store, so an external write that
    changes the state is picked up on the next tick.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        store: VariableStore,
        state_variable: Variable,
        id_variable: Variable,
        first_state: str,
        second_state: str,
    ) -> None:
        super().__init__(name, interval)
        self._store = store
        self._state = state_variable
        self._state_id = id_variable
        self.first_state = first_state
        self.second_state = second_state

    def tick(self) -> None:
        ensure_live(self._state_id)
        current = self._store.read_handle(self._state).value
        if current == self.first_state:
            text, number = self.second_state, 2
        else:
            text, number = self.first_state, 1
        self._store.write_from_source(
            self._state, DataValue(data_type=DataType.LOCALIZED_TEXT, value=text),
        )
        self._store.write_from_source(
            self._state_id, DataValue(data_type=DataType.NODE_ID, value=f"i={number}"),
        )


class ConditionSimulator(Simulator):
    """Toggles a condition Good↔Bad and raises it as a new-state event."""

    def __init__(
        self,
        name: str,
        interval: float,
        condition: Condition,
        notifier: EventNotifier,
    ) -> None:
        super().__init__(name, interval)
        self.condition = condition
        self._notifier = notifier

    def tick(self) -> None:
        ensure_live(self.condition).toggle()
        self._notifier.notify(self.condition.snapshot(new_state=True))
