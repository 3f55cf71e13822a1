from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coupon_claims.core.config import settings
from coupon_claims.models.claim import Claim


SCOPE_GLOBAL = "global"
SCOPE_BROWSER = "browser"


@dataclass(frozen=True)
class CooldownStatus:
    last_claim_at: datetime | None
    next_eligible_at: datetime | None
    remaining: timedelta

    @property
    def active(self) -> bool:
        return self.remaining > timedelta(0)

    @property
    def remaining_seconds(self) -> int:
        return int(self.remaining.total_seconds())


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # sqlite hands timestamps back naive; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def default_cooldown() -> timedelta:
    return timedelta(minutes=settings.CLAIM_COOLDOWN_MINUTES)


def cooldown_status(
    last_claim_at: datetime | None,
    now: datetime | None = None,
    cooldown: timedelta | None = None,
) -> CooldownStatus:
    """
    Cooldown window that follows a claim made at ``last_claim_at``.

    Claiming is refused while ``now - last_claim_at < cooldown``.
    """
    if last_claim_at is None:
        return CooldownStatus(last_claim_at=None, next_eligible_at=None, remaining=timedelta(0))

    now = as_utc(now or now_utc())
    last = as_utc(last_claim_at)
    next_eligible_at = last + (cooldown if cooldown is not None else default_cooldown())
    remaining = max(next_eligible_at - now, timedelta(0))

    return CooldownStatus(last_claim_at=last, next_eligible_at=next_eligible_at, remaining=remaining)


def cooldown_message(minutes: int | None = None) -> str:
    """'Please wait 1 hour between claims' for the default window."""
    minutes = settings.CLAIM_COOLDOWN_MINUTES if minutes is None else minutes
    if minutes % 60 == 0:
        hours = minutes // 60
        window = "1 hour" if hours == 1 else f"{hours} hours"
    else:
        window = "1 minute" if minutes == 1 else f"{minutes} minutes"
    return f"Please wait {window} between claims"


def format_countdown(remaining: timedelta) -> str | None:
    """'{m}m {s}s' until the next claim, or None once the wait is over."""
    total_ms = int(remaining.total_seconds() * 1000)
    if total_ms <= 0:
        return None
    minutes = total_ms // 60000
    seconds = (total_ms % 60000) // 1000
    return f"{minutes}m {seconds}s"


def scoped_browser_id(browser_id: str | None) -> str | None:
    """Browser id to filter on under the configured scope (None = all visitors)."""
    if settings.COOLDOWN_SCOPE == SCOPE_BROWSER:
        return browser_id
    return None


async def latest_claim_at(db: AsyncSession, *, browser_id: str | None = None) -> datetime | None:
    stmt = select(Claim.claimed_at).order_by(Claim.claimed_at.desc()).limit(1)
    if browser_id is not None:
        stmt = stmt.where(Claim.browser_id == browser_id)

    res = await db.execute(stmt)
    last = res.scalar_one_or_none()
    return as_utc(last) if last is not None else None


async def get_cooldown(
    db: AsyncSession,
    *,
    browser_id: str | None = None,
    now: datetime | None = None,
) -> CooldownStatus:
    last = await latest_claim_at(db, browser_id=scoped_browser_id(browser_id))
    return cooldown_status(last, now)
