# coupon_claims/services/coupons.py
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_claims.models.coupon import Coupon


logger = logging.getLogger(__name__)


SEED_COUPONS: list[tuple[str, str]] = [
    ("SAVE10", "10% off your next purchase"),
    ("FREESHIP", "Free shipping on orders over $50"),
    ("SPRING25", "25% off spring collection"),
    ("WELCOME15", "15% off for new customers"),
    ("FLASH50", "50% off flash sale"),
]


def listing_order():
    # created_at ties (bulk seed) are broken by code so the order is stable
    return (Coupon.created_at.asc(), Coupon.code.asc())


async def list_coupons(db: AsyncSession) -> list[Coupon]:
    res = await db.execute(
        select(Coupon).order_by(*listing_order()).execution_options(populate_existing=True)
    )
    return list(res.scalars().all())


async def get_coupon(db: AsyncSession, coupon_id: UUID) -> Coupon | None:
    return await db.get(Coupon, coupon_id, populate_existing=True)


async def seed_coupons(
    db: AsyncSession,
    coupons: list[tuple[str, str]] | None = None,
) -> list[Coupon]:
    """
    Insert the promotional coupons once.
    Codes that already exist are skipped, so this is safe to run on every startup.
    """
    wanted = coupons if coupons is not None else SEED_COUPONS

    res = await db.execute(select(Coupon.code).where(Coupon.code.in_([code for code, _ in wanted])))
    existing = set(res.scalars().all())

    created: list[Coupon] = []
    try:
        for code, description in wanted:
            if code in existing:
                continue
            c = Coupon(code=code, description=description, is_claimed=False)
            db.add(c)
            created.append(c)
            existing.add(code)

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info("coupon seed finished", extra={"inserted": len(created)})
    return created
