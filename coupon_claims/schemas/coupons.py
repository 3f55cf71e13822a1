# coupon_claims/schemas/coupons.py
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class CouponOut(BaseModel):
    id: UUID
    code: str
    description: str
    is_claimed: bool
    created_at: datetime

    class Config:
        from_attributes = True
