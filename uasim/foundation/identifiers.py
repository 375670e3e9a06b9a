"""Node identifiers in the ``ns=<index>;i=<number>`` / ``ns=<index>;s=<name>`` form."""

from __future__ import annotations

import re

_NODE_ID_RE = re.compile(r"^(?:ns=(?P<ns>\d+);)?(?P<kind>[is])=(?P<ident>.+)$")


def node_id(namespace: int, identifier: int | str) -> str:
    """Build a canonical node id string.

    Numeric identifiers use the ``i=`` form, anything else ``s=``.
    Namespace 0 is written without the ``ns=`` prefix.
    """
    kind = "i" if isinstance(identifier, int) else "s"
    if namespace == 0:
        return f"{kind}={identifier}"
    return f"ns={namespace};{kind}={identifier}"


def parse_node_id(text: str) -> tuple[int, int | str]:
    """Split a node id string into ``(namespace, identifier)``.

    Raises:
        ValueError: If *text* is not a node id.
    """
    match = _NODE_ID_RE.match(text.strip())
    if match is None:
        raise ValueError(f"not a node id: {text!r}")
    namespace = int(match.group("ns") or 0)
    ident = match.group("ident")
    if match.group("kind") == "i":
        if not ident.isdigit():
            raise ValueError(f"numeric node id expected: {text!r}")
        return namespace, int(ident)
    return namespace, ident


def normalize_node_id(text: str) -> str:
    """Return the canonical spelling of *text* (e.g. ``ns=0;i=1`` → ``i=1``)."""
    return node_id(*parse_node_id(text))
