# coupon_claims/models/__init__.py
# Import all models here so SQLAlchemy registers them into Base.metadata.

from coupon_claims.models.coupon import Coupon  # noqa: F401
from coupon_claims.models.claim import Claim  # noqa: F401
