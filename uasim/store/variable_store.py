"""Variable store: the read/write contract in front of the address space.

Design notes:
    - A threading.Lock guards every read/assign pair.  HTTP handlers may run
      in a worker thread while simulators tick on the event loop.
    - Validation failures are return values (StatusCode), never exceptions.
      A rejected write leaves the variable untouched and notifies nobody.
    - External writes (``write``) pass the permission gate first; simulator
      writes (``write_from_source``) skip it but are still type and range
      checked.
    - After a successful mutation the historian is fed and value-change
      listeners (the alarm engine) are called, outside the lock.  A failing
      listener is logged and does not undo the write.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from uasim.domain.enums import Role, StatusCode
from uasim.domain.value import DataValue
from uasim.domain.variable import Variable
from uasim.security.permissions import PermissionGate
from uasim.store.address_space import AddressSpace, ensure_live
from uasim.store.historian import Historian

logger = logging.getLogger(__name__)

ValueListener = Callable[[Variable, DataValue], None]


class VariableStore:
    """Reads and validated writes over the variables of an AddressSpace.

    Args:
        address_space: Where variables are resolved by node id.
        historian: Receives a sample after each mutation of a historized variable.
        gate: Permission gate for externally sourced reads and writes.
    """

    def __init__(
        self,
        address_space: AddressSpace,
        historian: Historian | None = None,
        gate: PermissionGate | None = None,
    ) -> None:
        self._space = address_space
        self._historian = historian
        self._gate = gate or PermissionGate()
        self._lock = threading.Lock()
        self._listeners: dict[str, list[ValueListener]] = {}

    @property
    def address_space(self) -> AddressSpace:
        return self._space

    @property
    def gate(self) -> PermissionGate:
        return self._gate

    # ── Listeners ────────────────────────────────────────────────────────

    def add_listener(self, node_id: str, listener: ValueListener) -> None:
        """Call *listener* after every successful change of *node_id*."""
        variable = self._space.resolve_variable(node_id)
        self._listeners.setdefault(variable.node_id, []).append(listener)

    # ── Reads ────────────────────────────────────────────────────────────

    def read(self, node_id: str) -> DataValue:
        """Current value of *node_id*.

        Raises:
            NodeNotFoundError: If no such variable exists.
        """
        return self.read_handle(self._space.resolve_variable(node_id))

    def read_handle(self, variable: Variable) -> DataValue:
        with self._lock:
            return ensure_live(variable).current()

    def read_as(self, node_id: str, roles: Iterable[Role]) -> tuple[StatusCode, DataValue | None]:
        """External read: the permission gate decides first."""
        variable = self._space.resolve_variable(node_id)
        if not self._gate.can_read(variable, roles):
            return StatusCode.BAD_USER_ACCESS_DENIED, None
        return StatusCode.GOOD, self.read_handle(variable)

    # ── Writes ───────────────────────────────────────────────────────────

    def write(
        self,
        node_id: str,
        value: DataValue,
        roles: Iterable[Role] = (Role.ANONYMOUS,),
    ) -> StatusCode:
        """Externally sourced write, subject to the permission gate.

        Raises:
            NodeNotFoundError: If no such variable exists.
        """
        variable = self._space.resolve_variable(node_id)
        roles = frozenset(roles)
        if not self._gate.can_write(variable, roles):
            logger.info(
                "Write to %s denied for roles %s",
                variable.browse_name,
                sorted(r.value for r in roles),
            )
            return StatusCode.BAD_USER_ACCESS_DENIED
        return self._commit(variable, value)

    def write_from_source(self, variable: Variable, value: DataValue) -> StatusCode:
        """Simulator write through a cached handle; no permission check.

        Raises:
            StaleHandleError: If the handle's node has been deleted.
        """
        return self._commit(variable, value)

    def publish_change(self, variable: Variable) -> None:
        """Announce that a computed variable's value moved.

        Raises:
            StaleHandleError: If the handle's node has been deleted.
        """
        with self._lock:
            ensure_live(variable).touch()
            current = variable.current()
        self._after_change(variable, current)

    # ── Internals ────────────────────────────────────────────────────────

    def _commit(self, variable: Variable, value: DataValue) -> StatusCode:
        with self._lock:
            ensure_live(variable)
            status = self._validate(variable, value)
            if not status.is_good:
                logger.info(
                    "Write to %s rejected: %s (%s)",
                    variable.browse_name,
                    status.value,
                    value,
                )
                return status
            variable.assign(value)
            current = variable.current()

        logger.debug("%s ← %s", variable.browse_name, current)
        self._after_change(variable, current)
        return StatusCode.GOOD

    @staticmethod
    def _validate(variable: Variable, value: DataValue) -> StatusCode:
        """Must be called while holding self._lock."""
        if not variable.is_writable:
            return StatusCode.BAD_NOT_WRITABLE
        if value.data_type != variable.data_type:
            return StatusCode.BAD_TYPE_MISMATCH
        if not variable.in_range(value):
            return StatusCode.BAD_OUT_OF_RANGE
        return StatusCode.GOOD

    def _after_change(self, variable: Variable, current: DataValue) -> None:
        if self._historian is not None and self._historian.is_historizing(variable.node_id):
            self._historian.record(
                variable.node_id,
                current.source_timestamp or variable.source_timestamp,
                current.value,
            )
        for listener in self._listeners.get(variable.node_id, ()):
            try:
                listener(variable, current)
            except Exception:
                logger.error(
                    "Value listener for %s failed", variable.browse_name, exc_info=True,
                )
