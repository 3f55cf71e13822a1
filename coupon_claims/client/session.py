from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from coupon_claims.client.browser_id import BrowserIdStore
from coupon_claims.integrations.claims_api_client import ClaimsApiClient, ClaimsApiError
from coupon_claims.schemas.coupons import CouponOut
from coupon_claims.services.cooldown import as_utc, cooldown_message, format_countdown, now_utc


logger = logging.getLogger(__name__)


class ClaimOutcome(str, enum.Enum):
    SUCCESS = "success"
    NO_COUPONS = "no_coupons"
    COOLDOWN = "cooldown"
    IN_FLIGHT = "in_flight"
    FAILED = "failed"


@dataclass(frozen=True)
class Notification:
    level: str  # "success" | "error"
    message: str


class ClaimSession:
    """
    Client-side state of one visitor: loaded coupons, cooldown countdown,
    in-flight guard and transient notifications.

    Failures never propagate out of the public coroutines; they become
    error notifications and the session stays usable.
    """

    def __init__(
        self,
        api: ClaimsApiClient,
        browser_ids: BrowserIdStore,
        *,
        clock: Callable[[], datetime] = now_utc,
        countdown_interval: float = 1.0,
    ):
        self.api = api
        self.browser_ids = browser_ids
        self.clock = clock
        self.countdown_interval = countdown_interval
        self._countdown_task: asyncio.Task | None = None

        self.coupons: list[CouponOut] = []
        self.loading = True
        self.claiming = False
        self.next_claim_time: datetime | None = None
        self.time_left: str | None = None
        self.notifications: list[Notification] = []

    # -------------------------
    # Notifications
    # -------------------------
    def _notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def drain_notifications(self) -> list[Notification]:
        out, self.notifications = self.notifications, []
        return out

    # -------------------------
    # Listing
    # -------------------------
    def available(self) -> list[CouponOut]:
        return [c for c in self.coupons if not c.is_claimed]

    def claimed(self) -> list[CouponOut]:
        return [c for c in self.coupons if c.is_claimed]

    @property
    def can_claim(self) -> bool:
        return not (self.claiming or self.loading or self.time_left is not None)

    async def start(self) -> None:
        await self.load_coupons()
        await self.check_last_claim()

    async def load_coupons(self) -> None:
        try:
            self.coupons = await self.api.list_coupons()
        except Exception:
            logger.exception("failed to load coupons")
            self._notify("error", "Failed to load coupons")
        finally:
            self.loading = False

    # -------------------------
    # Cooldown
    # -------------------------
    async def check_last_claim(self) -> None:
        try:
            latest = await self.api.latest_claim(self.browser_ids.get())
        except Exception:
            logger.warning("failed to fetch latest claim", exc_info=True)
            return

        if latest.next_eligible_at is not None:
            self._set_next_claim_time(as_utc(latest.next_eligible_at))

    def _set_next_claim_time(self, value: datetime, now: datetime | None = None) -> None:
        self.next_claim_time = value
        self.update_time_left(now)
        if self.next_claim_time is None:
            return
        # a running ticker picks up the new deadline on its next pass
        if self._countdown_task is None or self._countdown_task.done():
            self._countdown_task = asyncio.create_task(self.run_countdown(self.countdown_interval))

    async def aclose(self) -> None:
        """Stop the countdown ticker."""
        task, self._countdown_task = self._countdown_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def update_time_left(self, now: datetime | None = None) -> None:
        if self.next_claim_time is None:
            return

        now = as_utc(now or self.clock())
        self.time_left = format_countdown(self.next_claim_time - now)
        if self.time_left is None:
            self.next_claim_time = None

    async def run_countdown(self, interval: float = 1.0) -> None:
        """Recompute the countdown every ``interval`` seconds until it clears."""
        while self.next_claim_time is not None:
            self.update_time_left()
            if self.next_claim_time is None:
                break
            await asyncio.sleep(interval)

    # -------------------------
    # Claim
    # -------------------------
    async def claim(self) -> ClaimOutcome:
        if self.claiming:
            return ClaimOutcome.IN_FLIGHT

        self.claiming = True
        try:
            return await self._claim()
        except ClaimsApiError as e:
            logger.warning("claim rejected: %s", e)
            if e.status_code == 429:
                await self.check_last_claim()
                self._notify("error", e.detail)
                return ClaimOutcome.COOLDOWN
            if e.status_code == 409 and e.detail == "No coupons available":
                self._notify("error", "No coupons available")
                return ClaimOutcome.NO_COUPONS
            self._notify("error", "Failed to claim coupon")
            return ClaimOutcome.FAILED
        except Exception:
            logger.exception("claim failed")
            self._notify("error", "Failed to claim coupon")
            return ClaimOutcome.FAILED
        finally:
            self.claiming = False

    async def _claim(self) -> ClaimOutcome:
        coupon = next(iter(self.available()), None)
        if coupon is None:
            self._notify("error", "No coupons available")
            return ClaimOutcome.NO_COUPONS

        browser_id = self.browser_ids.get()
        latest = await self.api.latest_claim(browser_id)
        now = as_utc(self.clock())
        if latest.next_eligible_at is not None and as_utc(latest.next_eligible_at) > now:
            self._set_next_claim_time(as_utc(latest.next_eligible_at), now)
            self._notify("error", cooldown_message(latest.cooldown_minutes))
            return ClaimOutcome.COOLDOWN

        browser_id = self.browser_ids.get_or_create()
        claim = await self.api.claim(browser_id=browser_id, coupon_id=coupon.id)

        self._notify("success", f"Claimed coupon: {claim.coupon.code}")
        await self.load_coupons()
        await self.check_last_claim()
        return ClaimOutcome.SUCCESS
