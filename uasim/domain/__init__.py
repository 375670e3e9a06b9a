from uasim.domain.alarm import LimitAlarm, LimitThresholds, classify
from uasim.domain.condition import Condition
from uasim.domain.event import AlarmEvent, ConditionEvent, Event
from uasim.domain.value import DataValue
from uasim.domain.variable import ValueRange, Variable

__all__ = [
    "AlarmEvent",
    "Condition",
    "ConditionEvent",
    "DataValue",
    "Event",
    "LimitAlarm",
    "LimitThresholds",
    "ValueRange",
    "Variable",
    "classify",
]
