# coupon_claims/routers/claims.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_claims.core.config import settings
from coupon_claims.core.db import get_db
from coupon_claims.core.deps import get_client_ip
from coupon_claims.schemas.claims import ClaimIn, ClaimOut, LatestClaimOut
from coupon_claims.services.claims import (
    CooldownActive,
    CouponAlreadyClaimed,
    CouponNotFound,
    NoCouponsAvailable,
    claim_coupon,
    list_claims,
)
from coupon_claims.services.cooldown import format_countdown, get_cooldown

router = APIRouter(prefix="/claims", tags=["Claims"])


@router.get("", response_model=list[ClaimOut])
async def read_claims(db: AsyncSession = Depends(get_db)):
    return await list_claims(db)


@router.get("/latest", response_model=LatestClaimOut)
async def read_latest_claim(
    browser_id: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
) -> LatestClaimOut:
    status = await get_cooldown(db, browser_id=browser_id)
    return LatestClaimOut(
        claimed_at=status.last_claim_at,
        next_eligible_at=status.next_eligible_at,
        cooldown_active=status.active,
        remaining_seconds=status.remaining_seconds,
        time_left=format_countdown(status.remaining),
        cooldown_minutes=settings.CLAIM_COOLDOWN_MINUTES,
    )


@router.post("", response_model=ClaimOut, status_code=201)
async def create_claim(
    payload: ClaimIn,
    db: AsyncSession = Depends(get_db),
    ip_address: str = Depends(get_client_ip),
):
    try:
        return await claim_coupon(
            db,
            browser_id=payload.browser_id,
            ip_address=ip_address,
            coupon_id=payload.coupon_id,
        )
    except CooldownActive as e:
        raise HTTPException(
            status_code=429,
            detail=str(e),
            headers={"Retry-After": str(max(e.status.remaining_seconds, 1))},
        )
    except CouponNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (NoCouponsAvailable, CouponAlreadyClaimed) as e:
        raise HTTPException(status_code=409, detail=str(e))
