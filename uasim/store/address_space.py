"""In-memory address space: node registration and one-shot resolution.

Simulators resolve the node ids they need exactly once, at startup, and
keep the returned handles.  A failed resolution is a configuration error
and aborts startup.  A handle whose node is later deleted is *stale*; code
holding it calls ``ensure_live`` and gets a StaleHandleError instead of
silently mutating a detached object.
"""

from __future__ import annotations

import logging
from typing import TypeVar, Union

from uasim.domain.alarm import LimitAlarm
from uasim.domain.condition import Condition
from uasim.domain.variable import Variable
from uasim.foundation.identifiers import normalize_node_id

logger = logging.getLogger(__name__)

Node = Union[Variable, Condition, LimitAlarm]
N = TypeVar("N", Variable, Condition, LimitAlarm)


class NodeNotFoundError(LookupError):
    """Raised when a node id cannot be resolved to a node of the expected kind."""

    def __init__(self, node_id: str, kind: str = "node") -> None:
        self.node_id = node_id
        self.kind = kind
        super().__init__(f"{kind} '{node_id}' not found in address space")


class StaleHandleError(RuntimeError):
    """Raised when a previously resolved handle no longer refers to a live node."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"handle for '{node_id}' is stale (node was deleted)")


def ensure_live(node: N) -> N:
    """Return *node* unchanged, or raise StaleHandleError if it was deleted."""
    if node.deleted:
        raise StaleHandleError(node.node_id)
    return node


class AddressSpace:
    """Registry of variables, conditions and alarms keyed by node id.

    Usage:
        space = AddressSpace()
        ns = space.register_namespace("http://example.com/ShowcaseMachineTool/")
        space.add(Variable(node_id(ns, 55186), "Name", DataType.STRING, "Program_1"))

        handle = space.resolve_variable(node_id(ns, 55186))
    """

    def __init__(self) -> None:
        self._namespaces: list[str] = ["http://opcfoundation.org/UA/"]
        self._nodes: dict[str, Node] = {}

    # ── Namespaces ───────────────────────────────────────────────────────

    def register_namespace(self, uri: str) -> int:
        """Return the index of *uri*, adding it if it is new."""
        if uri not in self._namespaces:
            self._namespaces.append(uri)
            logger.debug("Registered namespace %d: %s", len(self._namespaces) - 1, uri)
        return self._namespaces.index(uri)

    def namespace_index(self, uri: str) -> int:
        try:
            return self._namespaces.index(uri)
        except ValueError:
            raise NodeNotFoundError(uri, "namespace") from None

    @property
    def namespaces(self) -> list[str]:
        return list(self._namespaces)

    # ── Registration ─────────────────────────────────────────────────────

    def add(self, node: N) -> N:
        """Register *node*; node ids must be unique."""
        key = normalize_node_id(node.node_id)
        if key in self._nodes:
            raise ValueError(f"duplicate node id '{key}'")
        node.node_id = key
        self._nodes[key] = node
        return node

    def delete(self, node_id: str) -> None:
        """Remove a node and invalidate every handle that points at it."""
        node = self._nodes.pop(normalize_node_id(node_id), None)
        if node is None:
            raise NodeNotFoundError(node_id)
        node.deleted = True
        logger.info("Deleted node %s", node_id)

    # ── Resolution ───────────────────────────────────────────────────────

    def find(self, node_id: str) -> Node | None:
        """Look up a node by id, or None.  Malformed ids also yield None."""
        try:
            return self._nodes.get(normalize_node_id(node_id))
        except ValueError:
            return None

    def resolve_variable(self, node_id: str) -> Variable:
        return self._resolve(node_id, Variable, "variable")

    def resolve_condition(self, node_id: str) -> Condition:
        return self._resolve(node_id, Condition, "condition")

    def resolve_alarm(self, node_id: str) -> LimitAlarm:
        return self._resolve(node_id, LimitAlarm, "alarm")

    def _resolve(self, node_id: str, kind: type[N], label: str) -> N:
        node = self.find(node_id)
        if not isinstance(node, kind):
            raise NodeNotFoundError(node_id, label)
        return node

    # ── Queries ──────────────────────────────────────────────────────────

    def variables(self) -> list[Variable]:
        return [n for n in self._nodes.values() if isinstance(n, Variable)]

    def conditions(self) -> list[Condition]:
        return [n for n in self._nodes.values() if isinstance(n, Condition)]

    def alarms(self) -> list[LimitAlarm]:
        return [n for n in self._nodes.values() if isinstance(n, LimitAlarm)]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return self.find(node_id) is not None
