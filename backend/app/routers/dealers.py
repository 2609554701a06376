"""Dealer routes: every read and write is dealer-scoped.

Endpoints:
    GET    /api/dealers               List dealers (admins: all, tenants: their own)
    POST   /api/dealers               Create a dealer (admin)
    GET    /api/dealers/{dealer_id}   Dealer detail (dealer access required)
    PATCH  /api/dealers/{dealer_id}   Update a dealer (dealer_admin + dealer access)
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_principal, require_admin, require_dealer_access
from app.auth.principal import Principal
from app.auth.roles import UserRole, has_role, is_admin
from app.database import get_db
from app.middleware.exceptions import PermissionDeniedError, ResourceNotFoundError
from app.models.dealer import Dealer
from app.schemas.common import PaginatedResponse
from app.schemas.dealer import DealerCreate, DealerOut, DealerUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_dealer(db: AsyncSession, dealer_id: str) -> Dealer:
    dealer = await db.get(Dealer, dealer_id)
    if dealer is None:
        raise ResourceNotFoundError("Dealer", dealer_id)
    return dealer


@router.get("", response_model=PaginatedResponse[DealerOut])
async def list_dealers(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    query = select(Dealer)
    count_query = select(func.count()).select_from(Dealer)

    if not is_admin(principal.role):
        # no home dealer: nothing is visible
        query = query.where(Dealer.id == principal.dealer_id)
        count_query = count_query.where(Dealer.id == principal.dealer_id)

    total = (await db.execute(count_query)).scalar_one()
    result = await db.execute(query.order_by(Dealer.name).limit(limit).offset(offset))
    items = [DealerOut.model_validate(d) for d in result.scalars().all()]
    return PaginatedResponse[DealerOut](items=items, total=total, limit=limit, offset=offset)


@router.post("", response_model=DealerOut, status_code=status.HTTP_201_CREATED)
async def create_dealer(
    body: DealerCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    dealer = Dealer(code=body.code.upper(), name=body.name, status=body.status)
    db.add(dealer)
    await db.flush()
    logger.info(
        f"Dealer {dealer.code} created by {principal.user_id}",
        extra={"dealer_id": dealer.id, "user_id": principal.user_id},
    )
    return dealer


@router.get("/{dealer_id}", response_model=DealerOut)
async def get_dealer(
    dealer_id: str,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_dealer_access),
):
    return await _get_dealer(db, dealer_id)


@router.patch("/{dealer_id}", response_model=DealerOut)
async def update_dealer(
    dealer_id: str,
    body: DealerUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_dealer_access),
):
    if not has_role(principal.role, UserRole.DEALER_ADMIN):
        raise PermissionDeniedError("Requires role: dealer_admin or higher")
    if body.status is not None and not is_admin(principal.role):
        raise PermissionDeniedError("Only platform admins can change dealer status")

    dealer = await _get_dealer(db, dealer_id)
    for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(dealer, field, value)
    await db.flush()
    return dealer
