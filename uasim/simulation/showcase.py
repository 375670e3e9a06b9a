"""Showcase server: address-space bootstrap plus simulator wiring.

``build_showcase`` creates every node, then runs a single resolution pass
that turns node ids into handles for the simulators.  A node id that does
not resolve raises NodeNotFoundError and startup stops there.

Nodes (own namespace, string ids):
    DEV.MySeverity          Double, [100, 1000], backed by the severity counter, historized
    DEV.MySecretVar         Int32, restricted permissions
    DEV.MyVar               Double, read-only ramp, input of the limit alarm
    DEV.MyCondition         Good/Bad condition, toggled every 15 s
    DEV.MyVarNonExclusiveLimitAlarm
    DEV.TestEvents.myEventNotifier   source of DemoEventType events
    SoftwareType.Model / Manufacturer / SoftwareRevision

Nodes (machine-tool namespace, numeric ids):
    ActiveProgram Name / NumberInList / State.CurrentState (+ Id)
    MachineryItemState CurrentState (+ Id)
    FeedOverride (sawtooth), SpindleOverride (EURange [60, 100]), Channel1.ChannelState
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from uasim.config import Settings
from uasim.core.notifier import EventNotifier
from uasim.core.scheduler import PeriodicScheduler
from uasim.domain import Condition, LimitAlarm, LimitThresholds, ValueRange, Variable
from uasim.domain.enums import DataType, PermissionGroup
from uasim.foundation.identifiers import node_id
from uasim.security.permissions import PermissionGate
from uasim.simulation.alarm_monitor import LimitAlarmMonitor
from uasim.simulation.counters import SawtoothCounter
from uasim.simulation.simulators import (
    ConditionSimulator,
    OverrideSimulator,
    RampSimulator,
    SeverityEventSimulator,
    StateToggleSimulator,
)
from uasim.store.address_space import AddressSpace
from uasim.store.historian import Historian
from uasim.store.variable_store import VariableStore

logger = logging.getLogger(__name__)

OWN_NAMESPACE = "urn:uasim:sample-server"
DI_NAMESPACE = "http://opcfoundation.org/UA/DI/"
MACHINE_TOOL_NAMESPACE = "http://example.com/ShowcaseMachineTool/"


class ShowcaseIds:
    """Node ids of the showcase nodes, computed from namespace indexes."""

    def __init__(self, own: int, machine_tool: int) -> None:
        self.model = node_id(own, "SoftwareType.Model")
        self.manufacturer = node_id(own, "SoftwareType.Manufacturer")
        self.software_revision = node_id(own, "SoftwareType.SoftwareRevision")

        self.event_notifier = node_id(own, "DEV.TestEvents.myEventNotifier")
        self.my_severity = node_id(own, "DEV.MySeverity")
        self.my_secret_var = node_id(own, "DEV.MySecretVar")
        self.my_var = node_id(own, "DEV.MyVar")
        self.my_condition = node_id(own, "DEV.MyCondition")
        self.my_alarm = node_id(own, "DEV.MyVarNonExclusiveLimitAlarm")

        self.program_name = node_id(machine_tool, 55186)
        self.program_number_in_list = node_id(machine_tool, 55185)
        self.program_state = node_id(machine_tool, 55188)
        self.program_state_id = node_id(machine_tool, 55190)
        self.machinery_state = node_id(machine_tool, 6011)
        self.machinery_state_id = node_id(machine_tool, 6012)
        self.feed_override = node_id(machine_tool, 55229)
        self.spindle_override = node_id(machine_tool, 55238)
        self.channel_state = node_id(machine_tool, 55233)


@dataclass
class ShowcaseServer:
    """Everything the application needs, built and wired."""

    address_space: AddressSpace
    ids: ShowcaseIds
    historian: Historian
    store: VariableStore
    notifier: EventNotifier
    scheduler: PeriodicScheduler
    alarm_monitors: list[LimitAlarmMonitor] = field(default_factory=list)

    async def start(self) -> None:
        for monitor in self.alarm_monitors:
            monitor.evaluate_now()
        await self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()


def build_showcase(settings: Settings, gate: PermissionGate | None = None) -> ShowcaseServer:
    """Create the address space, resolve handles and register simulators."""
    space = AddressSpace()
    own = space.register_namespace(OWN_NAMESPACE)
    space.register_namespace(DI_NAMESPACE)
    machine_tool = space.register_namespace(MACHINE_TOOL_NAMESPACE)
    ids = ShowcaseIds(own, machine_tool)

    historian = Historian(settings.historian_capacity)
    store = VariableStore(space, historian, gate)
    notifier = EventNotifier()
    scheduler = PeriodicScheduler()

    severity = SawtoothCounter(
        start=settings.severity_start,
        step=settings.severity_step,
        floor=settings.severity_floor,
        ceiling=settings.severity_ceiling,
    )
    ramp = SawtoothCounter(
        start=settings.ramp_start,
        step=settings.ramp_step,
        floor=settings.ramp_floor,
        ceiling=settings.ramp_ceiling,
        reset_at_ceiling=True,
    )
    override = SawtoothCounter(
        start=settings.override_start,
        step=settings.override_step,
        floor=settings.override_floor,
        ceiling=settings.override_ceiling,
    )

    _add_software_identification(space, ids, settings)
    _add_dev_nodes(space, ids, settings, severity, ramp)
    _add_machine_tool_nodes(space, ids, settings)
    historian.install(ids.my_severity, settings.historian_capacity)
    logger.info("Address space built with %d node(s)", len(space))

    # ── One-shot resolution: handles are cached from here on ────────────

    my_severity = space.resolve_variable(ids.my_severity)
    my_var = space.resolve_variable(ids.my_var)
    condition = space.resolve_condition(ids.my_condition)
    alarm = space.resolve_alarm(ids.my_alarm)
    feed_override = space.resolve_variable(ids.feed_override)

    scheduler.add(SeverityEventSimulator(
        "severity-events",
        settings.event_interval_seconds,
        severity,
        notifier,
        event_source_id=ids.event_notifier,
        event_source_name="myEventNotifier",
        store=store,
        variable=my_severity,
    ))
    scheduler.add(RampSimulator(
        "my-var-ramp", settings.ramp_interval_seconds, ramp, store, my_var,
    ))
    scheduler.add(ConditionSimulator(
        "my-condition", settings.condition_interval_seconds, condition, notifier,
    ))
    scheduler.add(OverrideSimulator(
        "feed-override", settings.override_interval_seconds, override, store, feed_override,
    ))
    scheduler.add(StateToggleSimulator(
        "program-state",
        settings.state_toggle_interval_seconds,
        store,
        space.resolve_variable(ids.program_state),
        space.resolve_variable(ids.program_state_id),
        first_state="Running",
        second_state="Ended",
    ))
    scheduler.add(StateToggleSimulator(
        "machinery-item-state",
        settings.state_toggle_interval_seconds,
        store,
        space.resolve_variable(ids.machinery_state),
        space.resolve_variable(ids.machinery_state_id),
        first_state="Executing",
        second_state="NotExecuting",
    ))

    monitors = [LimitAlarmMonitor(alarm, store, notifier)]

    return ShowcaseServer(
        address_space=space,
        ids=ids,
        historian=historian,
        store=store,
        notifier=notifier,
        scheduler=scheduler,
        alarm_monitors=monitors,
    )


# ── Node construction ────────────────────────────────────────────────────────


def _add_software_identification(space: AddressSpace, ids: ShowcaseIds, settings: Settings) -> None:
    space.add(Variable(ids.model, "Model", DataType.LOCALIZED_TEXT, settings.software_model))
    space.add(Variable(ids.manufacturer, "Manufacturer", DataType.LOCALIZED_TEXT, settings.manufacturer))
    space.add(Variable(ids.software_revision, "SoftwareRevision", DataType.STRING, settings.software_revision))


def _add_dev_nodes(
    space: AddressSpace,
    ids: ShowcaseIds,
    settings: Settings,
    severity: SawtoothCounter,
    ramp: SawtoothCounter,
) -> None:
    dev = node_id(space.namespace_index(OWN_NAMESPACE), "DEV")

    space.add(Variable(
        ids.my_severity,
        "MySeverity",
        DataType.DOUBLE,
        value_range=ValueRange(low=settings.severity_floor, high=settings.severity_ceiling),
        getter=severity.get,
        setter=severity.set,
        description=(
            f"Value must be between {settings.severity_floor:g} "
            f"and {settings.severity_ceiling:g}"
        ),
    ))
    space.add(Variable(
        ids.my_secret_var,
        "MySecretVar",
        DataType.INT32,
        0,
        description="Try change me!",
        permission_group=PermissionGroup.RESTRICTED,
    ))
    space.add(Variable(ids.my_var, "MyVar", DataType.DOUBLE, getter=ramp.get))

    space.add(Condition(
        ids.my_condition,
        "MyCondition",
        source_node_id=dev,
        good_severity=settings.condition_good_severity,
        bad_severity=settings.condition_bad_severity,
    ))
    space.add(LimitAlarm(
        ids.my_alarm,
        "MyVarNonExclusiveLimitAlarm",
        input_node_id=ids.my_var,
        thresholds=LimitThresholds(
            low_low=settings.alarm_low_low,
            low=settings.alarm_low,
            high=settings.alarm_high,
            high_high=settings.alarm_high_high,
        ),
        retain=True,
    ))


def _add_machine_tool_nodes(space: AddressSpace, ids: ShowcaseIds, settings: Settings) -> None:
    space.add(Variable(ids.program_name, "Name", DataType.STRING, "Program_1"))
    space.add(Variable(ids.program_number_in_list, "NumberInList", DataType.UINT16, 1))
    space.add(Variable(ids.program_state, "CurrentState", DataType.LOCALIZED_TEXT, "Running"))
    space.add(Variable(ids.program_state_id, "Id", DataType.NODE_ID, "i=1"))
    space.add(Variable(ids.machinery_state, "CurrentState", DataType.LOCALIZED_TEXT, "Executing"))
    space.add(Variable(ids.machinery_state_id, "Id", DataType.NODE_ID, "i=1"))
    space.add(Variable(
        ids.feed_override,
        "FeedOverride",
        DataType.DOUBLE,
        settings.override_start,
        value_range=ValueRange(low=0.0, high=settings.override_ceiling),
    ))
    space.add(Variable(
        ids.spindle_override,
        "SpindleOverride",
        DataType.DOUBLE,
        100.0,
        value_range=ValueRange(low=60.0, high=100.0),
    ))
    space.add(Variable(ids.channel_state, "ChannelState", DataType.INT32, 1))
