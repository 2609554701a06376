"""Role hierarchy and dealer-scoping policy for the Dealer Portal.

Design:
  - Roles form a fixed total order (highest first):
      super_admin > admin > dealer_admin > dealer_user > readonly
  - `ROLE_HIERARCHY` maps each role to an integer rank. It is read-only,
    process-wide configuration; nothing mutates it at runtime.
  - Unknown, empty or non-string roles rank UNKNOWN_ROLE_LEVEL (-1), i.e.
    below every real role. This is never an error.
  - Platform roles (admin, super_admin) bypass dealer scoping entirely.
    Every other role only sees its own dealer.

Every function here is pure: no I/O, no exceptions, same inputs → same output.
"""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Any, Mapping


class UserRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    DEALER_ADMIN = "dealer_admin"
    DEALER_USER = "dealer_user"
    READONLY = "readonly"


# ── Ranks ───────────────────────────────────────────────────

UNKNOWN_ROLE_LEVEL = -1

ROLE_HIERARCHY: Mapping[str, int] = MappingProxyType({
    UserRole.READONLY.value: 0,
    UserRole.DEALER_USER.value: 1,
    UserRole.DEALER_ADMIN.value: 2,
    UserRole.ADMIN.value: 3,
    UserRole.SUPER_ADMIN.value: 4,
})

ADMIN_ROLES = frozenset({UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value})
DEALER_ROLES = frozenset({UserRole.DEALER_ADMIN.value, UserRole.DEALER_USER.value})


def _role_value(role: Any) -> str | None:
    if isinstance(role, UserRole):
        return role.value
    if isinstance(role, str) and role:
        return role
    return None


def parse_role(value: Any) -> UserRole | None:
    """Total lookup into the closed role enumeration (None for unknowns)."""
    key = _role_value(value)
    if key is None or key not in ROLE_HIERARCHY:
        return None
    return UserRole(key)


def get_role_level(role: Any) -> int:
    """Return the rank of `role`, or UNKNOWN_ROLE_LEVEL if it isn't a known role."""
    key = _role_value(role)
    if key is None:
        return UNKNOWN_ROLE_LEVEL
    return ROLE_HIERARCHY.get(key, UNKNOWN_ROLE_LEVEL)


# ── Predicates ──────────────────────────────────────────────

def has_role(actual_role: Any, required_role: Any) -> bool:
    """Check whether `actual_role` is at least `required_role`.

    Reflexive and transitive over the fixed order. An unknown required role
    ranks below everything, so any known actual role satisfies it.
    """
    return get_role_level(actual_role) >= get_role_level(required_role)


def is_admin(role: Any) -> bool:
    """True for platform roles (admin, super_admin)."""
    return has_role(role, UserRole.ADMIN)


def can_access_dealer(
    role: Any,
    principal_dealer_id: str | None,
    target_dealer_id: str | None,
) -> bool:
    """Check whether a principal may touch data owned by `target_dealer_id`.

    1. Platform admins → always (dealer ids are irrelevant).
    2. Tenant roles without a home dealer → never.
    3. Otherwise → exact match on dealer id.
    """
    if is_admin(role):
        return True
    if not principal_dealer_id:
        return False
    return principal_dealer_id == target_dealer_id


def assignable_roles(actor_role: Any) -> list[UserRole]:
    """Roles `actor_role` may grant to another user, highest first.

    Actors may only grant roles ranked at or below their own, so only a
    super_admin can mint another super_admin.
    """
    level = get_role_level(actor_role)
    if level == UNKNOWN_ROLE_LEVEL:
        return []
    return [r for r in UserRole if ROLE_HIERARCHY[r.value] <= level]


# ── Display metadata ────────────────────────────────────────

UNKNOWN_ROLE_LABEL = "Unknown"
DEFAULT_BADGE_COLOR = "bg-gray-100 text-gray-800"

ROLE_LABELS: Mapping[str, str] = MappingProxyType({
    UserRole.SUPER_ADMIN.value: "Super Admin",
    UserRole.ADMIN.value: "Admin",
    UserRole.DEALER_ADMIN.value: "Dealer Admin",
    UserRole.DEALER_USER.value: "Dealer User",
    UserRole.READONLY.value: "Read Only",
})

ROLE_BADGE_COLORS: Mapping[str, str] = MappingProxyType({
    UserRole.SUPER_ADMIN.value: "bg-purple-100 text-purple-800",
    UserRole.ADMIN.value: "bg-blue-100 text-blue-800",
    UserRole.DEALER_ADMIN.value: "bg-indigo-100 text-indigo-800",
    UserRole.DEALER_USER.value: "bg-green-100 text-green-800",
    UserRole.READONLY.value: DEFAULT_BADGE_COLOR,
})


def role_label(role: Any) -> str:
    key = _role_value(role)
    return ROLE_LABELS.get(key, UNKNOWN_ROLE_LABEL) if key else UNKNOWN_ROLE_LABEL


def role_badge_color(role: Any) -> str:
    key = _role_value(role)
    return ROLE_BADGE_COLORS.get(key, DEFAULT_BADGE_COLOR) if key else DEFAULT_BADGE_COLOR
