# coupon_claims/services/claims.py
from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_claims.models.claim import COUPON_CLAIMED_ONCE, Claim
from coupon_claims.models.coupon import Coupon
from coupon_claims.services.cooldown import CooldownStatus, cooldown_message, get_cooldown, now_utc
from coupon_claims.services.coupons import listing_order


logger = logging.getLogger(__name__)


class ClaimError(Exception):
    pass


class NoCouponsAvailable(ClaimError):
    def __init__(self) -> None:
        super().__init__("No coupons available")


class CouponNotFound(ClaimError):
    def __init__(self, coupon_id: UUID) -> None:
        super().__init__(f"Coupon {coupon_id} not found")
        self.coupon_id = coupon_id


class CouponAlreadyClaimed(ClaimError):
    def __init__(self, coupon_id: UUID) -> None:
        super().__init__(f"Coupon {coupon_id} is already claimed")
        self.coupon_id = coupon_id


class CooldownActive(ClaimError):
    def __init__(self, status: CooldownStatus) -> None:
        super().__init__(cooldown_message())
        self.status = status


def _is_duplicate_claim(e: IntegrityError) -> bool:
    # postgres reports the constraint name, sqlite the column
    msg = str(e.orig)
    return COUPON_CLAIMED_ONCE in msg or ("UNIQUE" in msg and "claims.coupon_id" in msg)


async def _mark_claimed(db: AsyncSession, coupon_id: UUID) -> bool:
    """
    Compare-and-set: flip is_claimed only if it is still false.
    Returns False when another claimant got there first.
    """
    res = await db.execute(
        update(Coupon)
        .where(Coupon.id == coupon_id, Coupon.is_claimed.is_(False))
        .values(is_claimed=True)
        .execution_options(synchronize_session=False)
    )
    return res.rowcount == 1


async def _claim_first_available(db: AsyncSession, *, exclude: set[UUID] | None = None) -> UUID:
    stmt = select(Coupon.id).where(Coupon.is_claimed.is_(False)).order_by(*listing_order())
    if exclude:
        stmt = stmt.where(Coupon.id.not_in(exclude))

    res = await db.execute(stmt)
    for coupon_id in res.scalars().all():
        if await _mark_claimed(db, coupon_id):
            return coupon_id
    raise NoCouponsAvailable()


async def _claim_specific(db: AsyncSession, coupon_id: UUID) -> UUID:
    res = await db.execute(select(Coupon.id).where(Coupon.id == coupon_id))
    if res.scalar_one_or_none() is None:
        raise CouponNotFound(coupon_id)
    if not await _mark_claimed(db, coupon_id):
        raise CouponAlreadyClaimed(coupon_id)
    return coupon_id


async def claim_coupon(
    db: AsyncSession,
    *,
    browser_id: str,
    ip_address: str,
    coupon_id: UUID | None = None,
    now: datetime | None = None,
) -> Claim:
    """
    Claim one coupon for a browser.

    Atomic: the conditional coupon update and the claim insert share one
    transaction, so a coupon is never left claimed without its claim row.
    When no coupon is named, a coupon whose claim row already exists is
    skipped and the next unclaimed one is tried.
    """
    now = now or now_utc()

    status = await get_cooldown(db, browser_id=browser_id, now=now)
    if status.active:
        logger.info(
            "claim refused: cooldown active",
            extra={"browser_id": browser_id, "next_eligible_at": status.next_eligible_at},
        )
        raise CooldownActive(status)

    skipped: set[UUID] = set()
    while True:
        claimed_id: UUID | None = None
        try:
            if coupon_id is None:
                claimed_id = await _claim_first_available(db, exclude=skipped)
            else:
                claimed_id = await _claim_specific(db, coupon_id)

            claim = Claim(
                coupon_id=claimed_id,
                browser_id=browser_id,
                ip_address=ip_address,
                claimed_at=now,
            )
            db.add(claim)
            await db.commit()
            break

        except IntegrityError as e:
            await db.rollback()
            if not _is_duplicate_claim(e) or claimed_id is None:
                raise
            if coupon_id is not None:
                raise CouponAlreadyClaimed(coupon_id) from e
            logger.warning("coupon already has a claim row, trying the next one", extra={"coupon_id": claimed_id})
            skipped.add(claimed_id)
        except Exception:
            await db.rollback()
            raise

    res = await db.execute(
        select(Claim).where(Claim.id == claim.id).execution_options(populate_existing=True)
    )
    claim = res.scalar_one()

    logger.info(
        "coupon claimed",
        extra={"coupon_id": claim.coupon_id, "coupon_code": claim.coupon.code, "browser_id": browser_id},
    )
    return claim


async def list_claims(db: AsyncSession) -> list[Claim]:
    res = await db.execute(select(Claim).order_by(Claim.claimed_at.desc()))
    return list(res.scalars().all())
