# app/core/permissions.py
"""
Authorization vocabulary: permission keys, the resolved Principal, the
tagged permission value type, and the declarative route -> requirement table.

Everything here is pure (no database, no FastAPI) so the whole
authorization surface can be enumerated and tested without HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from app.core.exceptions import AuthenticationRequired, AuthorizationDenied

# Permission keys referenced by the route table.
ALL = "all"
ALL_BINS = "all_bins"
ALL_USERS = "all_users"
TRANSFER_TICKETS = "transfer_tickets"

# Matrix sentinel handled through bin assignments, never stored as a grant.
BINS_ASSIGNED = "bins_assigned"


@dataclass(frozen=True)
class RoleScope:
    """One role assignment as seen by the resolver."""

    role_id: int
    bin_id: int | None


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller, resolved fresh for each request and passed
    explicitly to handlers and services.
    """

    id: int
    email: str
    account_id: int
    permissions: frozenset[str] = field(default_factory=frozenset)
    role_assignments: tuple[RoleScope, ...] = ()

    @property
    def is_superadmin(self) -> bool:
        return ALL in self.permissions

    def has_permission(self, key: str) -> bool:
        return self.is_superadmin or key in self.permissions

    def can_access_bin(self, bin_id: int) -> bool:
        """
        True if any assignment targets this bin, any assignment is global
        (bin NULL), or the caller is a superadmin.
        """
        if self.is_superadmin:
            return True
        return any(a.bin_id is None or a.bin_id == bin_id for a in self.role_assignments)


def flatten_permissions(permission_sets: Iterable[Any]) -> frozenset[str]:
    """
    Union of per-role permission arrays. Entries that are not arrays, and
    array items that are not strings, are ignored.
    """
    keys: set[str] = set()
    for perm_set in permission_sets:
        if not isinstance(perm_set, (list, tuple)):
            continue
        keys.update(k for k in perm_set if isinstance(k, str))
    return frozenset(keys)


@dataclass(frozen=True)
class PermissionRequirement:
    """
    Required-permission expression. An empty key tuple means "any
    authenticated caller"; otherwise at least one key must be held.
    `"all"` satisfies every requirement.
    """

    keys: tuple[str, ...] = ()

    @classmethod
    def authenticated(cls) -> "PermissionRequirement":
        return cls(())

    @classmethod
    def single(cls, key: str) -> "PermissionRequirement":
        return cls((key,))

    @classmethod
    def any_of(cls, keys: Iterable[str]) -> "PermissionRequirement":
        keys = tuple(keys)
        if not keys:
            raise ValueError("any_of requires at least one permission key")
        return cls(keys)

    def is_satisfied_by(self, permissions: frozenset[str] | set[str]) -> bool:
        if not self.keys:
            return True
        if ALL in permissions:
            return True
        return any(key in permissions for key in self.keys)

    def describe(self) -> str:
        if not self.keys:
            return "Authentication required"
        if len(self.keys) == 1:
            return f"Required permission: {self.keys[0]}"
        return f"Required one of: {', '.join(self.keys)}"


def check_requirement(principal: Principal | None, requirement: PermissionRequirement) -> Principal:
    """
    Gate decision. Missing principal is an authentication failure;
    a principal lacking the requirement is an authorization failure.
    """
    if principal is None:
        raise AuthenticationRequired()
    if not requirement.is_satisfied_by(principal.permissions):
        raise AuthorizationDenied(requirement.describe())
    return principal


AUTHENTICATED = PermissionRequirement.authenticated()

ROUTE_PERMISSIONS: dict[str, PermissionRequirement] = {
    # Dashboard
    "dashboard.stats": AUTHENTICATED,
    # Tickets
    "tickets.list": AUTHENTICATED,
    "tickets.create": AUTHENTICATED,
    "tickets.get": AUTHENTICATED,
    "tickets.update": AUTHENTICATED,
    "tickets.archive": AUTHENTICATED,
    "tickets.transfer": PermissionRequirement.single(TRANSFER_TICKETS),
    # Knowledge base
    "kb.list": AUTHENTICATED,
    "kb.create": AUTHENTICATED,
    "kb.get": AUTHENTICATED,
    "kb.delete": AUTHENTICATED,
    # Settings
    "settings.change_password": AUTHENTICATED,
    # Admin
    "admin.users": PermissionRequirement.single(ALL_USERS),
    "admin.update_role": PermissionRequirement.single(ALL_USERS),
    "admin.activity_logs": PermissionRequirement.single(ALL_USERS),
    "admin.user_stats": PermissionRequirement.single(ALL_USERS),
    # Accounts (superadmin only)
    "accounts.list": PermissionRequirement.single(ALL),
    "accounts.create": PermissionRequirement.single(ALL),
    "accounts.get": PermissionRequirement.single(ALL),
    "accounts.update": PermissionRequirement.single(ALL),
    "accounts.delete": PermissionRequirement.single(ALL),
    # Bins
    "bins.list": PermissionRequirement.any_of([ALL_BINS, ALL]),
    "bins.get": PermissionRequirement.any_of([ALL_BINS, ALL]),
    "bins.create": PermissionRequirement.single(ALL_BINS),
    "bins.update": PermissionRequirement.single(ALL_BINS),
    "bins.delete": PermissionRequirement.single(ALL_BINS),
    # Teams
    "teams.list": AUTHENTICATED,
    "teams.create": PermissionRequirement.single(ALL_BINS),
    "teams.update": PermissionRequirement.single(ALL_BINS),
    "teams.delete": PermissionRequirement.single(ALL_BINS),
    # User management
    "users.list": PermissionRequirement.single(ALL_USERS),
    "users.get": PermissionRequirement.single(ALL_USERS),
    "users.create": PermissionRequirement.single(ALL_USERS),
    "users.update": PermissionRequirement.single(ALL_USERS),
    "users.delete": PermissionRequirement.single(ALL_USERS),
    "users.reset_password": PermissionRequirement.single(ALL_USERS),
    "users.roles": PermissionRequirement.single(ALL_USERS),
    "users.assign_roles": PermissionRequirement.single(ALL_USERS),
    # Permissions matrix
    "permissions.definitions": AUTHENTICATED,
    "permissions.matrix_get": PermissionRequirement.single(ALL_USERS),
    "permissions.matrix_update": PermissionRequirement.single(ALL_USERS),
}


class PermissionValueType(str, Enum):
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class PermissionValue:
    """
    Tagged value of a direct permission grant. from_json/to_json are the
    only conversions between this type and the stored JSON.
    """

    value_type: PermissionValueType
    value: Any

    @classmethod
    def from_json(cls, raw: Any) -> "PermissionValue":
        # bool before anything else: bool is not a list/dict but is an int subclass
        if isinstance(raw, bool):
            return cls(PermissionValueType.BOOLEAN, raw)
        if isinstance(raw, (list, tuple)):
            return cls(PermissionValueType.ARRAY, list(raw))
        if isinstance(raw, dict):
            return cls(PermissionValueType.OBJECT, dict(raw))
        raise ValueError(f"Unsupported permission value: {raw!r} (expected boolean, array or object)")

    def to_json(self) -> Any:
        if self.value_type is PermissionValueType.ARRAY:
            return list(self.value)
        if self.value_type is PermissionValueType.OBJECT:
            return dict(self.value)
        return bool(self.value)
