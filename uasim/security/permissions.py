"""Role/permission tables and the gate consulted for external access.

Simulators never go through the gate: it applies only to reads and writes
that arrive from outside the engine.
"""

from __future__ import annotations

from typing import Iterable

from uasim.domain.enums import Permission, PermissionGroup, Role
from uasim.domain.variable import Variable

PermissionTable = dict[PermissionGroup, dict[Permission, frozenset[Role]]]

_ALL_ROLES = frozenset(Role)
_ADMINS = frozenset({Role.CONFIGURE_ADMIN, Role.SECURITY_ADMIN})

DEFAULT_PERMISSIONS: PermissionTable = {
    PermissionGroup.DEFAULT: {
        Permission.READ: _ALL_ROLES,
        Permission.WRITE: _ALL_ROLES - {Role.OBSERVER},
    },
    PermissionGroup.RESTRICTED: {
        Permission.READ: _ADMINS | {Role.SUPERVISOR},
        Permission.WRITE: _ADMINS,
    },
}


class PermissionGate:
    """Decides whether a set of roles may read or write a variable."""

    def __init__(self, table: PermissionTable | None = None) -> None:
        self._table = table or DEFAULT_PERMISSIONS

    def allows(
        self,
        group: PermissionGroup,
        permission: Permission,
        roles: Iterable[Role],
    ) -> bool:
        granted = self._table.get(group, {}).get(permission, frozenset())
        return any(role in granted for role in roles)

    def can_read(self, variable: Variable, roles: Iterable[Role]) -> bool:
        return self.allows(variable.permission_group, Permission.READ, roles)

    def can_write(self, variable: Variable, roles: Iterable[Role]) -> bool:
        return self.allows(variable.permission_group, Permission.WRITE, roles)
