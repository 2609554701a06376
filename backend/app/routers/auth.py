"""Auth routes: login, refresh, logout, profile, role catalogue.

Route overview:
  POST /login    email + password login (also sets the page-session cookie)
  POST /refresh  exchange a refresh token for new access + refresh tokens
  POST /logout   revoke the current access token and clear the cookie
  GET  /me       return the current user profile
  GET  /roles    role hierarchy with labels and what the caller may assign
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, oauth2_scheme
from app.auth.jwt import create_access_token, create_refresh_token, decode_token
from app.auth.password import verify_password
from app.auth.revocation import TokenRevocation
from app.auth.roles import (
    ROLE_HIERARCHY,
    UserRole,
    assignable_roles,
    get_role_level,
    is_admin,
    role_badge_color,
    role_label,
)
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    RefreshRequest,
    RoleOut,
    TokenResponse,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def build_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role.value,
        role_label=role_label(user.role),
        role_level=get_role_level(user.role),
        status=user.status.value,
        dealer_id=user.dealer_id,
        is_admin=is_admin(user.role),
    )


def build_token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(
            user_id=user.id,
            role=user.role.value,
            dealer_id=user.dealer_id,
        ),
        refresh_token=create_refresh_token(user_id=user.id),
        user=build_user_out(user),
    )


def set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        settings.access_token_cookie,
        access_token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Look up and verify a user by credentials; raise 401/403 on failure."""
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt", extra={"email": email})
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")
    return user


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Email + password login. Returns JWTs carrying role and dealer."""
    user = await authenticate(db, body.email, body.password)
    tokens = build_token_response(user)
    set_session_cookie(response, tokens.access_token)
    return tokens


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Issue fresh tokens. Role and dealer are re-read from the DB."""
    payload = decode_token(body.refresh_token)
    user_id = payload.get("sub")
    if not user_id or payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if await TokenRevocation.is_user_revoked(user_id):
        raise HTTPException(status_code=401, detail="Session expired. Please log in again.")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    return build_token_response(user)


# ── POST /logout ─────────────────────────────────────────────

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(oauth2_scheme),
    user: User = Depends(get_current_user),
):
    payload: dict = getattr(user, "_token_payload", {})
    await TokenRevocation.revoke_token(token, float(payload.get("exp", 0)))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.access_token_cookie)
    return response


# ── GET /me ──────────────────────────────────────────────────

@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return build_user_out(user)


# ── GET /roles ───────────────────────────────────────────────

@router.get("/roles", response_model=list[RoleOut])
async def list_roles(user: User = Depends(get_current_user)):
    """Role catalogue, highest privilege first."""
    grantable = set(assignable_roles(user.role))
    ordered = sorted(UserRole, key=lambda r: ROLE_HIERARCHY[r.value], reverse=True)
    return [
        RoleOut(
            value=r,
            level=get_role_level(r),
            label=role_label(r),
            badge_color=role_badge_color(r),
            assignable=r in grantable,
        )
        for r in ordered
    ]
