# coupon_claims/routers/coupons.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_claims.core.db import get_db
from coupon_claims.schemas.coupons import CouponOut
from coupon_claims.services.coupons import get_coupon, list_coupons

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.get("", response_model=list[CouponOut])
async def read_coupons(db: AsyncSession = Depends(get_db)):
    return await list_coupons(db)


@router.get("/{coupon_id}", response_model=CouponOut)
async def read_coupon(coupon_id: UUID, db: AsyncSession = Depends(get_db)):
    coupon = await get_coupon(db, coupon_id)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon
