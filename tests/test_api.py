import pytest
from sqlalchemy import update

from coupon_claims.models.coupon import Coupon


@pytest.mark.anyio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_list_coupons_returns_seeded_in_order(client):
    r = await client.get("/coupons")
    assert r.status_code == 200
    body = r.json()
    assert len(body) == 5
    assert {c["code"] for c in body} == {"SAVE10", "FREESHIP", "SPRING25", "WELCOME15", "FLASH50"}
    assert all(c["is_claimed"] is False for c in body)
    created = [c["created_at"] for c in body]
    assert created == sorted(created)


@pytest.mark.anyio
async def test_get_coupon_and_missing(client):
    first = (await client.get("/coupons")).json()[0]

    r = await client.get(f"/coupons/{first['id']}")
    assert r.status_code == 200
    assert r.json()["code"] == first["code"]

    r = await client.get("/coupons/00000000-0000-0000-0000-000000000000")
    assert r.status_code == 404


@pytest.mark.anyio
async def test_latest_claim_without_claims(client):
    r = await client.get("/claims/latest")
    assert r.status_code == 200
    assert r.json() == {
        "claimed_at": None,
        "next_eligible_at": None,
        "cooldown_active": False,
        "remaining_seconds": 0,
        "time_left": None,
        "cooldown_minutes": 60,
    }


@pytest.mark.anyio
async def test_claim_then_listing_shows_four_unclaimed(client):
    r = await client.post("/claims", json={"browser_id": "browser-1"})
    assert r.status_code == 201
    claim = r.json()
    assert claim["browser_id"] == "browser-1"
    assert claim["ip_address"] == "client-ip"
    assert claim["coupon"]["is_claimed"] is True

    coupons = (await client.get("/coupons")).json()
    assert sum(not c["is_claimed"] for c in coupons) == 4
    assert [c["id"] for c in coupons if c["is_claimed"]] == [claim["coupon_id"]]

    claims = (await client.get("/claims")).json()
    assert len(claims) == 1
    assert claims[0]["coupon_id"] == claim["coupon_id"]


@pytest.mark.anyio
async def test_second_claim_within_hour_is_rate_limited(client):
    assert (await client.post("/claims", json={"browser_id": "browser-1"})).status_code == 201

    r = await client.post("/claims", json={"browser_id": "browser-2"})
    assert r.status_code == 429
    assert r.json()["detail"] == "Please wait 1 hour between claims"
    assert 3500 < int(r.headers["Retry-After"]) <= 3600

    latest = (await client.get("/claims/latest")).json()
    assert latest["cooldown_active"] is True
    assert latest["time_left"].startswith("59m") or latest["time_left"] == "60m 0s"
    assert len((await client.get("/claims")).json()) == 1


@pytest.mark.anyio
async def test_claim_specific_coupon(client):
    target = (await client.get("/coupons")).json()[2]
    r = await client.post("/claims", json={"browser_id": "browser-1", "coupon_id": target["id"]})
    assert r.status_code == 201
    assert r.json()["coupon"]["code"] == target["code"]


@pytest.mark.anyio
async def test_claim_when_all_claimed(client, seeded):
    await seeded.execute(update(Coupon).values(is_claimed=True))
    await seeded.commit()

    r = await client.post("/claims", json={"browser_id": "browser-1"})
    assert r.status_code == 409
    assert r.json()["detail"] == "No coupons available"
    assert (await client.get("/claims")).json() == []


@pytest.mark.anyio
async def test_claim_requires_browser_id(client):
    r = await client.post("/claims", json={"browser_id": ""})
    assert r.status_code == 422
