"""Test configuration: every test gets its own in-memory database."""
import os

# Keep the module-level engine away from a real file before the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEED_ON_STARTUP", "false")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

import coupon_claims.models  # noqa: F401
from coupon_claims.core.db import Base, get_db, make_engine
from coupon_claims.main import app
from coupon_claims.services.coupons import seed_coupons


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session_factory(anyio_backend):
    engine = make_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def _get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    try:
        yield factory
    finally:
        app.dependency_overrides.pop(get_db, None)
        await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(db):
    await seed_coupons(db)
    return db


@pytest.fixture
def asgi_transport():
    return httpx.ASGITransport(app=app)


@pytest.fixture
async def client(seeded, asgi_transport):
    async with httpx.AsyncClient(transport=asgi_transport, base_url="http://test") as c:
        yield c
