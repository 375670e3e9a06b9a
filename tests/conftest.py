"""Shared fixtures: a small address space, store, historian and notifier."""

import pytest

from uasim.core.notifier import EventNotifier
from uasim.domain.enums import DataType, PermissionGroup
from uasim.domain.event import Event
from uasim.domain.variable import ValueRange, Variable
from uasim.store.address_space import AddressSpace
from uasim.store.historian import Historian
from uasim.store.variable_store import VariableStore

BOUNDED = "ns=1;s=Bounded"
FREE = "ns=1;s=Free"
TEXT = "ns=1;s=Text"
SECRET = "ns=1;s=Secret"


@pytest.fixture
def space() -> AddressSpace:
    space = AddressSpace()
    space.register_namespace("urn:uasim:test")
    space.add(Variable(
        BOUNDED, "Bounded", DataType.DOUBLE, 500.0,
        value_range=ValueRange(low=100.0, high=1000.0),
    ))
    space.add(Variable(FREE, "Free", DataType.INT32, 0))
    space.add(Variable(TEXT, "Text", DataType.LOCALIZED_TEXT, "Running"))
    space.add(Variable(
        SECRET, "Secret", DataType.INT32, 0, permission_group=PermissionGroup.RESTRICTED,
    ))
    return space


@pytest.fixture
def historian() -> Historian:
    return Historian(default_capacity=5)


@pytest.fixture
def store(space: AddressSpace, historian: Historian) -> VariableStore:
    return VariableStore(space, historian)


@pytest.fixture
def notifier() -> EventNotifier:
    return EventNotifier()


@pytest.fixture
def received(notifier: EventNotifier) -> list[Event]:
    """Every event the notifier delivers, in order."""
    events: list[Event] = []
    notifier.subscribe(events.append)
    return events
