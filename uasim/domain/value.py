"""DataValue — a scalar tagged with its declared data type.

The tag is checked when the value is constructed: a Double carrying a
string, or a UInt16 carrying -1, never gets as far as the store.  The only
conversions performed are lossless ones (int → float for Double, ISO text →
datetime for DateTime, node id spelling normalisation).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, model_validator

from uasim.domain.enums import DataType
from uasim.foundation.clock import ensure_utc
from uasim.foundation.identifiers import normalize_node_id

_INT_BOUNDS: dict[DataType, tuple[int, int]] = {
    DataType.INT32: (-(2**31), 2**31 - 1),
    DataType.UINT16: (0, 2**16 - 1),
    DataType.UINT32: (0, 2**32 - 1),
}


def _check(data_type: DataType, value: Any) -> Any:
    """Return *value* in its canonical Python form or raise ValueError."""
    if data_type == DataType.BOOLEAN:
        if not isinstance(value, bool):
            raise ValueError(f"Boolean expected, got {type(value).__name__}")
        return value

    if data_type in _INT_BOUNDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{data_type.value} expected, got {type(value).__name__}")
        lo, hi = _INT_BOUNDS[data_type]
        if not lo <= value <= hi:
            raise ValueError(f"{value} does not fit in {data_type.value}")
        return value

    if data_type == DataType.DOUBLE:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Double expected, got {type(value).__name__}")
        try:
            return float(value)
        except OverflowError:
            raise ValueError(f"{value} does not fit in Double") from None

    if data_type in (DataType.STRING, DataType.LOCALIZED_TEXT):
        if not isinstance(value, str):
            raise ValueError(f"{data_type.value} expected, got {type(value).__name__}")
        return value

    if data_type == DataType.DATE_TIME:
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if not isinstance(value, datetime):
            raise ValueError(f"DateTime expected, got {type(value).__name__}")
        return ensure_utc(value)

    if data_type == DataType.NODE_ID:
        if not isinstance(value, str):
            raise ValueError(f"NodeId expected, got {type(value).__name__}")
        return normalize_node_id(value)

    raise ValueError(f"unsupported data type {data_type!r}")


class DataValue(BaseModel):
    """An immutable, type-tagged scalar."""

    data_type: DataType
    value: Any
    source_timestamp: Optional[datetime] = None

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def value_must_match_data_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "data_type" not in data:
            return data
        try:
            data_type = DataType(data["data_type"])
        except ValueError:
            # Let the field validator report the unknown tag.
            return data
        return {**data, "data_type": data_type, "value": _check(data_type, data.get("value"))}

    def __str__(self) -> str:
        return f"{self.data_type.value}({self.value!r})"
