"""Controlled enumerations for the uasim domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class DataType(str, Enum):
    """Built-in data types a variable may declare."""

    BOOLEAN = "Boolean"
    INT32 = "Int32"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    DOUBLE = "Double"
    STRING = "String"
    LOCALIZED_TEXT = "LocalizedText"
    DATE_TIME = "DateTime"
    NODE_ID = "NodeId"


class StatusCode(str, Enum):
    """Outcome of a read or write against the variable store."""

    GOOD = "Good"
    BAD_OUT_OF_RANGE = "BadOutOfRange"
    BAD_TYPE_MISMATCH = "BadTypeMismatch"
    BAD_NOT_WRITABLE = "BadNotWritable"
    BAD_NOT_READABLE = "BadNotReadable"
    BAD_USER_ACCESS_DENIED = "BadUserAccessDenied"

    @property
    def is_good(self) -> bool:
        return self is StatusCode.GOOD


class ConditionState(str, Enum):
    """The two states of an oscillating condition."""

    GOOD = "good"
    BAD = "bad"


class LimitBand(str, Enum):
    """The five threshold-delimited ranges of a limit alarm."""

    LOW_LOW = "LowLow"
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    HIGH_HIGH = "HighHigh"


class EventType(str, Enum):
    """Kinds of events the engine raises."""

    DEMO_EVENT = "DemoEventType"
    CONDITION = "ConditionEventType"
    LIMIT_ALARM = "NonExclusiveLimitAlarmType"


class Role(str, Enum):
    """Well-known roles a user may be granted."""

    ANONYMOUS = "Anonymous"
    AUTHENTICATED_USER = "AuthenticatedUser"
    OBSERVER = "Observer"
    OPERATOR = "Operator"
    ENGINEER = "Engineer"
    SUPERVISOR = "Supervisor"
    CONFIGURE_ADMIN = "ConfigureAdmin"
    SECURITY_ADMIN = "SecurityAdmin"


class PermissionGroup(str, Enum):
    """Named role/permission tables a node may be assigned to."""

    DEFAULT = "default"
    RESTRICTED = "restricted"


class Permission(str, Enum):
    """Operations a role may be granted on a node."""

    READ = "read"
    WRITE = "write"
