from coupon_claims.client.browser_id import BrowserIdStore
from coupon_claims.client.session import ClaimOutcome, ClaimSession, Notification

__all__ = ["BrowserIdStore", "ClaimOutcome", "ClaimSession", "Notification"]
