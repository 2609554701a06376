"""Access guards: the render-side adapters over the role/dealer predicates.

Two guards share the same three states {LOADING, DENIED, GRANTED}:

  RequireRole     → imperative guard. Entering DENIED replaces the current
                    location (once) via a Navigator. DENIED renders nothing.
  PermissionGate  → conditional gate. DENIED renders a fallback instead;
                    it never navigates.

Neither guard raises for a missing or underprivileged principal. An
unresolved session is LOADING, an insufficient one is DENIED.

Usage:
    guard = RequireAdmin(navigator)
    await guard.resolve(session_provider)
    body = guard.render(session, admin_panel_html)

    gate = DealerAccessGate(dealer.id, fallback="<p>No access</p>")
    body = gate.render(session, dealer_html)
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Awaitable, Callable, Protocol

from app.auth.principal import Permission, SessionState
from app.auth.roles import UserRole
from app.config import settings

logger = logging.getLogger(__name__)

DEFAULT_LOADING = (
    '<div class="flex min-h-[200px] items-center justify-center" role="status">'
    '<div class="h-8 w-8 animate-spin rounded-full border-4 border-blue-600 '
    'border-t-transparent"></div></div>'
)


class AccessState(str, enum.Enum):
    LOADING = "loading"
    DENIED = "denied"
    GRANTED = "granted"


class Navigator(Protocol):
    def replace(self, target: str) -> None:
        """Replace the current location with `target`."""


SessionProvider = Callable[[], Awaitable[SessionState]]


# ── Imperative guard ────────────────────────────────────────

class RequireRole:
    """Redirect principals below `min_role` away from protected content.

    The redirect fires on the transition into DENIED and never again while
    the guard stays DENIED. It never fires while LOADING or after close().
    """

    def __init__(
        self,
        min_role: UserRole | str,
        navigator: Navigator,
        redirect_to: str | None = None,
        loading: Any = None,
    ):
        self.min_role = min_role
        self.navigator = navigator
        self.redirect_to = redirect_to or settings.default_redirect
        self.loading = DEFAULT_LOADING if loading is None else loading
        self.state = AccessState.LOADING
        self.redirected = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear the guard down. Pending resolutions will not navigate."""
        self._closed = True

    def evaluate(self, session: SessionState) -> AccessState:
        if self._closed:
            return self.state

        permission = Permission(session)
        if permission.is_loading:
            new_state = AccessState.LOADING
        elif permission.has_role(self.min_role):
            new_state = AccessState.GRANTED
        else:
            new_state = AccessState.DENIED

        entering_denied = (
            new_state is AccessState.DENIED and self.state is not AccessState.DENIED
        )
        self.state = new_state

        if entering_denied:
            logger.info(
                f"Role guard denied {permission.role!r} (requires {self._min_role_value}), "
                f"redirecting to {self.redirect_to}",
                extra={"role": permission.role, "min_role": self._min_role_value},
            )
            self.redirected = True
            self.navigator.replace(self.redirect_to)

        return new_state

    async def resolve(self, provider: SessionProvider) -> AccessState:
        """Await principal resolution, then evaluate.

        If the guard was closed while waiting, the result is dropped. A
        cancelled await propagates CancelledError without navigating.
        """
        session = await provider()
        if self._closed:
            logger.debug("Role guard closed before session resolved; dropping result")
            return self.state
        return self.evaluate(session)

    def output(self, content: Any) -> Any:
        """Render the current state without re-evaluating."""
        if self.state is AccessState.LOADING:
            return self.loading
        if self.state is AccessState.DENIED:
            return None
        return content

    def render(self, session: SessionState, content: Any) -> Any:
        self.evaluate(session)
        return self.output(content)

    @property
    def _min_role_value(self) -> str:
        return getattr(self.min_role, "value", self.min_role)


class RequireAdmin(RequireRole):
    def __init__(self, navigator: Navigator, redirect_to: str | None = None, loading: Any = None):
        super().__init__(UserRole.ADMIN, navigator, redirect_to, loading)


class RequireSuperAdmin(RequireRole):
    def __init__(self, navigator: Navigator, redirect_to: str | None = None, loading: Any = None):
        super().__init__(UserRole.SUPER_ADMIN, navigator, redirect_to, loading)


class RequireDealerAdmin(RequireRole):
    def __init__(self, navigator: Navigator, redirect_to: str | None = None, loading: Any = None):
        super().__init__(UserRole.DEALER_ADMIN, navigator, redirect_to, loading)


# ── Conditional gate ────────────────────────────────────────

class PermissionGate:
    """Render children or a fallback depending on the session.

    Checks run in order and the first failure wins:
    loading → require_admin → min_role → dealer_id.
    With no checks configured, every resolved session is granted.
    """

    def __init__(
        self,
        min_role: UserRole | str | None = None,
        require_admin: bool = False,
        dealer_id: str | None = None,
        loading: Any = None,
        fallback: Any = None,
    ):
        self.min_role = min_role
        self.require_admin = require_admin
        self.dealer_id = dealer_id
        self.loading = loading
        self.fallback = fallback

    def evaluate(self, session: SessionState) -> AccessState:
        permission = Permission(session)
        if permission.is_loading:
            return AccessState.LOADING
        if self.require_admin and not permission.is_admin():
            return AccessState.DENIED
        if self.min_role and not permission.has_role(self.min_role):
            return AccessState.DENIED
        if self.dealer_id and not permission.can_access_dealer(self.dealer_id):
            return AccessState.DENIED
        return AccessState.GRANTED

    def render(self, session: SessionState, children: Any) -> Any:
        state = self.evaluate(session)
        if state is AccessState.LOADING:
            return self.loading
        if state is AccessState.DENIED:
            return self.fallback
        return children


class AdminOnly(PermissionGate):
    def __init__(self, fallback: Any = None):
        super().__init__(require_admin=True, fallback=fallback)


class SuperAdminOnly(PermissionGate):
    def __init__(self, fallback: Any = None):
        super().__init__(min_role=UserRole.SUPER_ADMIN, fallback=fallback)


class DealerAccessGate(PermissionGate):
    def __init__(self, dealer_id: str, fallback: Any = None):
        super().__init__(dealer_id=dealer_id, fallback=fallback)
