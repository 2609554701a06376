"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_user        → decode JWT, load user from DB, return User
  get_principal           → Principal {role, dealer_id, user_id} of the current user
  require_role(...)       → restrict to a minimum role (hierarchy check)
  require_dealer_access   → restrict to principals who can see `dealer_id`
  get_session_state       → token-only SessionState for server-rendered pages
  require_page_auth       → redirect anonymous page requests to the login page

API dependencies fail with 401/403 JSON errors. Page dependencies redirect.
"""

import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import decode_token
from app.auth.principal import Principal, SessionState, principal_from_claims
from app.auth.revocation import TokenRevocation
from app.auth.roles import UserRole, can_access_dealer, has_role
from app.config import settings
from app.database import get_db
from app.middleware.exceptions import (
    DealerScopeError,
    PermissionDeniedError,
    RedirectRequired,
)
from app.models.user import User

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ── Core user dependency ────────────────────────────────────

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the JWT, load the user, and return it.

    Also stashes the decoded payload on the user object as `_token_payload`
    so downstream deps (logout) can read claims without re-decoding.
    """
    payload = decode_token(token)
    user_id: str | None = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise _unauthorized("Invalid or expired token")

    if await TokenRevocation.is_revoked(token):
        raise _unauthorized("Token has been revoked")
    if await TokenRevocation.is_user_revoked(user_id):
        raise _unauthorized("Session expired. Please log in again.")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise _unauthorized("User not found or inactive")

    user._token_payload = payload  # type: ignore[attr-defined]
    return user


async def get_principal(user: User = Depends(get_current_user)) -> Principal:
    """The authorization view of the current user.

    Built from the DB row rather than the token so role changes apply on the
    next request.
    """
    return Principal(role=user.role.value, dealer_id=user.dealer_id, user_id=user.id)


# ── Role-based access control ───────────────────────────────

def require_role(min_role: UserRole):
    """Dependency factory: restrict to `min_role` or anything above it.

    Usage:
        @router.post("/dealers")
        async def create_dealer(principal: Principal = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    async def _check(principal: Principal = Depends(get_principal)) -> Principal:
        if not has_role(principal.role, min_role):
            logger.info(
                f"Role check failed: {principal.role} < {min_role.value}",
                extra={"user_id": principal.user_id, "min_role": min_role.value},
            )
            raise PermissionDeniedError(f"Requires role: {min_role.value} or higher")
        return principal

    return _check


require_admin = require_role(UserRole.ADMIN)
require_super_admin = require_role(UserRole.SUPER_ADMIN)
require_dealer_admin = require_role(UserRole.DEALER_ADMIN)


# ── Dealer scoping ──────────────────────────────────────────

async def require_dealer_access(
    dealer_id: str,
    principal: Principal = Depends(get_principal),
) -> Principal:
    """Restrict a `/{dealer_id}` route to principals allowed to see that dealer."""
    if not can_access_dealer(principal.role, principal.dealer_id, dealer_id):
        logger.warning(
            f"Dealer scope violation: user {principal.user_id} -> dealer {dealer_id}",
            extra={"user_id": principal.user_id, "dealer_id": dealer_id},
        )
        raise DealerScopeError()
    return principal


# ── Page session (server-rendered views) ────────────────────

def _session_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(settings.access_token_cookie)


async def get_session_state(request: Request) -> SessionState:
    """Resolve the page session from the bearer header or session cookie.

    Never raises: a missing, invalid or revoked token, or a user whose
    sessions were all revoked, is an anonymous session.
    """
    token = _session_token(request)
    if not token:
        return SessionState.anonymous()

    principal = principal_from_claims(decode_token(token))
    if principal is None:
        return SessionState.anonymous()
    if await TokenRevocation.is_revoked(token):
        return SessionState.anonymous()
    if await TokenRevocation.is_user_revoked(principal.user_id):
        return SessionState.anonymous()
    return SessionState.authenticated(principal)


async def require_page_auth(
    session: SessionState = Depends(get_session_state),
) -> SessionState:
    """Send anonymous visitors to the login page."""
    if session.principal is None:
        raise RedirectRequired(settings.login_path)
    return session
