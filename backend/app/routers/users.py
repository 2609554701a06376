"""User management for platform admins and dealer admins.

Endpoints:
    GET   /api/users                         List users (admins: all, dealer admins: own dealer)
    POST  /api/users                         Create a user
    POST  /api/users/{user_id}/deactivate    Deactivate a user and revoke their tokens

Rules:
  - Actors can only grant roles ranked at or below their own.
  - Platform roles (admin, super_admin) never carry a dealer_id;
    tenant roles always do.
  - Dealer admins only act inside their own dealer.
  - Nobody can deactivate a user who outranks them, or themselves.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import require_dealer_admin
from app.auth.password import hash_password
from app.auth.principal import Principal
from app.auth.revocation import TokenRevocation
from app.auth.roles import (
    UserRole,
    assignable_roles,
    can_access_dealer,
    get_role_level,
    is_admin,
)
from app.database import get_db
from app.middleware.exceptions import (
    BusinessLogicError,
    DealerScopeError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from app.models.dealer import Dealer
from app.models.user import User, UserStatus
from app.schemas.common import PaginatedResponse
from app.schemas.user import UserCreate, UserSummary

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PaginatedResponse[UserSummary])
async def list_users(
    role: UserRole | None = Query(None),
    user_status: UserStatus | None = Query(None, alias="status"),
    dealer_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_dealer_admin),
):
    filters = []
    if not is_admin(principal.role):
        # a tenant admin without a home dealer can see nobody
        if not principal.dealer_id:
            raise DealerScopeError()
        if dealer_id and not can_access_dealer(principal.role, principal.dealer_id, dealer_id):
            raise DealerScopeError()
        filters.append(User.dealer_id == principal.dealer_id)
    elif dealer_id:
        filters.append(User.dealer_id == dealer_id)

    if role:
        filters.append(User.role == role)
    if user_status:
        filters.append(User.status == user_status)

    total = (
        await db.execute(select(func.count()).select_from(User).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(User).where(*filters).order_by(User.created_at.desc()).limit(limit).offset(offset)
    )
    items = [UserSummary.model_validate(u) for u in result.scalars().all()]
    return PaginatedResponse[UserSummary](items=items, total=total, limit=limit, offset=offset)


@router.post("", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_dealer_admin),
):
    if body.role not in assignable_roles(principal.role):
        raise PermissionDeniedError(f"You cannot assign the role: {body.role.value}")

    dealer_id = body.dealer_id
    if is_admin(body.role):
        dealer_id = None
    else:
        if not dealer_id:
            # dealer admins create users in their own dealer by default
            dealer_id = principal.dealer_id
        if not dealer_id:
            raise BusinessLogicError("Dealer roles require a dealer_id", "DEALER_REQUIRED")
        if not can_access_dealer(principal.role, principal.dealer_id, dealer_id):
            raise DealerScopeError()
        if await db.get(Dealer, dealer_id) is None:
            raise ResourceNotFoundError("Dealer", dealer_id)

    existing = await db.execute(select(User).where(User.email == body.email))
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=body.email,
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        role=body.role,
        status=UserStatus.ACTIVE,
        dealer_id=dealer_id,
        created_by=principal.user_id,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info(
        f"User {user.email} ({user.role.value}) created by {principal.user_id}",
        extra={"user_id": user.id, "dealer_id": dealer_id},
    )
    return user


@router.post("/{user_id}/deactivate", response_model=UserSummary)
async def deactivate_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_dealer_admin),
):
    target = await db.get(User, user_id)
    if target is None:
        raise ResourceNotFoundError("User", user_id)
    if target.id == principal.user_id:
        raise BusinessLogicError("You cannot deactivate your own account", "SELF_DEACTIVATION")
    if not can_access_dealer(principal.role, principal.dealer_id, target.dealer_id):
        raise DealerScopeError()
    if get_role_level(target.role) > get_role_level(principal.role):
        raise PermissionDeniedError("Cannot deactivate a user with a higher role")

    target.status = UserStatus.INACTIVE
    await db.flush()
    await TokenRevocation.revoke_all_user_tokens(target.id)

    logger.info(
        f"User {target.id} deactivated by {principal.user_id}",
        extra={"user_id": target.id},
    )
    return target
