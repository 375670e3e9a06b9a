"""Historian — bounded in-memory time series per historized variable.

Each installed variable gets a FIFO of capacity N; once full the oldest
record is evicted on every append.  The VariableStore calls ``record``
after each successful mutation of a historized variable.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from uasim.foundation.clock import ensure_utc

logger = logging.getLogger(__name__)


class HistoricalRecord(BaseModel):
    """One ``{timestamp, value}`` sample."""

    timestamp: datetime
    value: Any

    model_config = {"frozen": True}


class Historian:
    """In-memory ring buffers keyed by node id.

    Args:
        default_capacity: Capacity used when ``install`` is called without one.
    """

    def __init__(self, default_capacity: int = 100) -> None:
        if default_capacity < 1:
            raise ValueError("default_capacity must be at least 1")
        self._default_capacity = default_capacity
        self._series: dict[str, deque[HistoricalRecord]] = {}

    def install(self, node_id: str, capacity: int | None = None) -> None:
        """Start historizing *node_id* with room for *capacity* records."""
        if capacity is None:
            capacity = self._default_capacity
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._series[node_id] = deque(maxlen=capacity)
        logger.info("Historizing %s (capacity=%d)", node_id, capacity)

    def is_historizing(self, node_id: str) -> bool:
        return node_id in self._series

    def capacity(self, node_id: str) -> int:
        series = self._series[node_id]
        assert series.maxlen is not None
        return series.maxlen

    def record(self, node_id: str, timestamp: datetime, value: Any) -> None:
        """Append a sample; the oldest one is dropped when the buffer is full."""
        series = self._series.get(node_id)
        if series is None:
            logger.debug("Ignoring sample for non-historized node %s", node_id)
            return
        series.append(HistoricalRecord(timestamp=timestamp, value=value))

    def read_raw(
        self,
        node_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        max_values: int | None = None,
    ) -> list[HistoricalRecord]:
        """Samples with ``start <= timestamp <= end``, oldest first.

        Naive bounds are taken as UTC.

        Raises:
            KeyError: If *node_id* is not historized.
            ValueError: If *max_values* is negative.
        """
        if max_values is not None and max_values < 0:
            raise ValueError("max_values must not be negative")
        start = ensure_utc(start) if start is not None else None
        end = ensure_utc(end) if end is not None else None
        records = [
            r for r in self._series[node_id]
            if (start is None or r.timestamp >= start)
            and (end is None or r.timestamp <= end)
        ]
        if max_values is not None:
            records = records[:max_values]
        return records
