# coupon_claims/models/claim.py
from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID as PyUUID
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from coupon_claims.core.db import Base
from coupon_claims.models.coupon import Coupon

# a coupon is claimed at most once
COUPON_CLAIMED_ONCE = "uq_claims_coupon_id"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Claim(Base):
    __tablename__ = "claims"
    __table_args__ = (
        UniqueConstraint("coupon_id", name=COUPON_CLAIMED_ONCE),
    )

    id: Mapped[PyUUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    coupon_id: Mapped[PyUUID] = mapped_column(
        Uuid,
        ForeignKey("coupons.id"),
        nullable=False,
    )

    ip_address: Mapped[str] = mapped_column(Text, nullable=False)
    browser_id: Mapped[str] = mapped_column(Text, nullable=False)

    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_now_utc,
        server_default=func.now(),
    )

    coupon: Mapped[Coupon] = relationship(Coupon, lazy="selectin")


Index("ix_claims_claimed_at", Claim.claimed_at.desc())
Index("ix_claims_browser_claimed", Claim.browser_id, Claim.claimed_at.desc())
