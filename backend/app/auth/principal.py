"""Principal and session state consumed by the authorization core.

The identity provider (JWT + users table) resolves a `SessionState` once per
request/render. Everything downstream reads it through `Permission`, which
answers "no" to every check while no principal is available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from app.auth import roles


@dataclass(frozen=True)
class Principal:
    """The authenticated actor for the current request."""

    role: str
    dealer_id: str | None = None
    user_id: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.role, roles.UserRole):
            object.__setattr__(self, "role", self.role.value)
        if not self.dealer_id:
            object.__setattr__(self, "dealer_id", None)


@dataclass(frozen=True)
class SessionState:
    principal: Principal | None = None
    is_loading: bool = False

    @classmethod
    def loading(cls) -> "SessionState":
        return cls(principal=None, is_loading=True)

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(principal=None, is_loading=False)

    @classmethod
    def authenticated(cls, principal: Principal) -> "SessionState":
        return cls(principal=principal, is_loading=False)

    @property
    def status(self) -> str:
        if self.is_loading:
            return "loading"
        return "authenticated" if self.principal else "unauthenticated"


def principal_from_claims(payload: dict[str, Any]) -> Principal | None:
    """Build a Principal from decoded access-token claims.

    Returns None for an empty payload (invalid/expired token) or anything
    that isn't an access token.
    """
    if not payload or payload.get("type") != "access" or not payload.get("sub"):
        return None
    return Principal(
        role=payload.get("role") or "",
        dealer_id=payload.get("dealer_id"),
        user_id=payload["sub"],
    )


class Permission:
    """Permission checks bound to one resolved session."""

    def __init__(self, session: SessionState):
        self._session = session
        self._principal = session.principal

    @property
    def is_loading(self) -> bool:
        return self._session.is_loading

    @property
    def role(self) -> str | None:
        return self._principal.role if self._principal else None

    @property
    def dealer_id(self) -> str | None:
        return self._principal.dealer_id if self._principal else None

    def has_role(self, min_role: Any) -> bool:
        if not self._principal:
            return False
        return roles.has_role(self._principal.role, min_role)

    def is_admin(self) -> bool:
        if not self._principal:
            return False
        return roles.is_admin(self._principal.role)

    def is_super_admin(self) -> bool:
        return self.role == roles.UserRole.SUPER_ADMIN.value

    def is_dealer_admin(self) -> bool:
        return self.role == roles.UserRole.DEALER_ADMIN.value

    def is_dealer_user(self) -> bool:
        # dealer admins are dealer users too
        return self.role in roles.DEALER_ROLES

    def can_access_dealer(self, target_dealer_id: str | None) -> bool:
        if not self._principal:
            return False
        return roles.can_access_dealer(
            self._principal.role, self._principal.dealer_id, target_dealer_id
        )
