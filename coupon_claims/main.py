import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# IMPORTANT:
# This imports ALL models so SQLAlchemy registers tables + FKs correctly
import coupon_claims.models  # noqa: F401

from coupon_claims.core.config import settings
from coupon_claims.core.db import SessionLocal, create_all
from coupon_claims.core.logging import configure_logging
from coupon_claims.services.cooldown import SCOPE_GLOBAL
from coupon_claims.services.coupons import seed_coupons

# Routers
from coupon_claims.routers.health import router as health_router
from coupon_claims.routers.coupons import router as coupons_router
from coupon_claims.routers.claims import router as claims_router

logger = logging.getLogger(__name__)


def _check_cooldown_scope() -> None:
    if settings.COOLDOWN_SCOPE == SCOPE_GLOBAL:
        logger.warning(
            "claim cooldown is global: one claim anywhere blocks every visitor for the window; "
            "set COOLDOWN_SCOPE=browser for a per-browser limit",
            extra={"scope": settings.COOLDOWN_SCOPE},
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    _check_cooldown_scope()

    await create_all()
    if settings.SEED_ON_STARTUP:
        async with SessionLocal() as db:
            await seed_coupons(db)

    yield


app = FastAPI(title="Coupon Claims", lifespan=lifespan)

# CORS for the browser front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)

# Coupons
app.include_router(coupons_router)

# Claims
app.include_router(claims_router)
