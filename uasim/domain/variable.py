"""Variable — an addressable value with a declared data type.

A variable is either *stored* (it owns its current value) or *computed*
(a getter supplies the value on every read).  A computed variable without a
setter cannot be written from outside; one with a setter hands accepted
values to whoever owns the backing state.

Variables do not validate writes themselves.  The VariableStore checks the
type tag, range and permissions, then calls ``assign``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel, model_validator

from uasim.domain.enums import DataType, PermissionGroup
from uasim.domain.value import DataValue
from uasim.foundation.clock import utc_now

Getter = Callable[[], Any]
Setter = Callable[[Any], None]


class ValueRange(BaseModel):
    """Inclusive engineering-unit range ``[low, high]``."""

    low: float
    high: float

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def low_must_not_exceed_high(self) -> "ValueRange":
        if self.low > self.high:
            raise ValueError(f"range low ({self.low}) exceeds high ({self.high})")
        return self

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


class Variable:
    """A mutable variable node.

    Thread-safety note:
        ``assign`` is only called by the VariableStore while it holds its
        lock.  Variables are not themselves locked.
    """

    __slots__ = (
        "node_id",
        "browse_name",
        "data_type",
        "value_range",
        "description",
        "permission_group",
        "deleted",
        "_value",
        "_source_timestamp",
        "_getter",
        "_setter",
    )

    def __init__(
        self,
        node_id: str,
        browse_name: str,
        data_type: DataType,
        value: Any = None,
        value_range: ValueRange | None = None,
        getter: Getter | None = None,
        setter: Setter | None = None,
        description: str = "",
        permission_group: PermissionGroup = PermissionGroup.DEFAULT,
    ) -> None:
        if getter is None and setter is not None:
            raise ValueError(f"{browse_name}: a setter requires a getter")
        if getter is None and value is None:
            raise ValueError(f"{browse_name}: stored variables need an initial value")

        self.node_id = node_id
        self.browse_name = browse_name
        self.data_type = data_type
        self.value_range = value_range
        self.description = description
        self.permission_group = permission_group
        self.deleted = False
        self._getter = getter
        self._setter = setter
        self._source_timestamp: datetime = utc_now()
        # Validates the initial value against the declared type.
        self._value: Any = (
            DataValue(data_type=data_type, value=value).value if getter is None else None
        )

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def is_computed(self) -> bool:
        return self._getter is not None

    @property
    def is_writable(self) -> bool:
        """False for computed variables that have no setter."""
        return self._getter is None or self._setter is not None

    @property
    def source_timestamp(self) -> datetime:
        return self._source_timestamp

    def current(self) -> DataValue:
        """The current value, tagged with this variable's data type."""
        if self._getter is not None:
            return DataValue(
                data_type=self.data_type,
                value=self._getter(),
                source_timestamp=utc_now(),
            )
        return DataValue(
            data_type=self.data_type,
            value=self._value,
            source_timestamp=self._source_timestamp,
        )

    def in_range(self, value: DataValue) -> bool:
        """True when there is no range, or *value* lies inside it."""
        if self.value_range is None:
            return True
        return self.value_range.contains(value.value)

    # ── Mutation ─────────────────────────────────────────────────────────

    def assign(self, value: DataValue) -> None:
        """Store *value* (or hand it to the setter) and bump the timestamp."""
        if self._setter is not None:
            self._setter(value.value)
        else:
            self._value = value.value
        self._source_timestamp = utc_now()

    def touch(self) -> None:
        """Mark a computed value as changed without writing it."""
        self._source_timestamp = utc_now()

    # ── Summary ──────────────────────────────────────────────────────────

    def summary(self) -> dict:
        current = self.current()
        return {
            "node_id": self.node_id,
            "browse_name": self.browse_name,
            "data_type": self.data_type.value,
            "value": current.model_dump(mode="json")["value"],
            "source_timestamp": self._source_timestamp.isoformat(),
            "range": self.value_range.model_dump() if self.value_range else None,
            "writable": self.is_writable,
            "description": self.description,
        }

    def __repr__(self) -> str:
        return f"Variable({self.node_id}, {self.browse_name}, {self.data_type.value})"
