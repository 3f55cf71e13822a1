# coupon_claims/schemas/claims.py
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from coupon_claims.schemas.coupons import CouponOut


class ClaimIn(BaseModel):
    browser_id: str = Field(min_length=1, max_length=128)
    # None = first unclaimed coupon in listing order
    coupon_id: UUID | None = None


class ClaimOut(BaseModel):
    id: UUID
    coupon_id: UUID
    browser_id: str
    ip_address: str
    claimed_at: datetime
    coupon: CouponOut

    class Config:
        from_attributes = True


class LatestClaimOut(BaseModel):
    claimed_at: datetime | None
    next_eligible_at: datetime | None
    cooldown_active: bool
    remaining_seconds: int
    time_left: str | None
    cooldown_minutes: int
