from __future__ import annotations

from uuid import UUID

import httpx

from coupon_claims.schemas.claims import ClaimOut, LatestClaimOut
from coupon_claims.schemas.coupons import CouponOut


class ClaimsApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"Claims API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class ClaimsApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    @staticmethod
    def _raise_for_status(r: httpx.Response) -> None:
        if r.is_success:
            return
        try:
            detail = r.json().get("detail", r.text)
        except (ValueError, AttributeError):
            detail = r.text
        raise ClaimsApiError(r.status_code, str(detail))

    async def list_coupons(self) -> list[CouponOut]:
        async with self._client() as client:
            r = await client.get("/coupons")
        self._raise_for_status(r)
        return [CouponOut.model_validate(item) for item in r.json()]

    async def latest_claim(self, browser_id: str | None = None) -> LatestClaimOut:
        params = {"browser_id": browser_id} if browser_id else None
        async with self._client() as client:
            r = await client.get("/claims/latest", params=params)
        self._raise_for_status(r)
        return LatestClaimOut.model_validate(r.json())

    async def claim(self, *, browser_id: str, coupon_id: UUID | None = None) -> ClaimOut:
        payload = {
            "browser_id": browser_id,
            "coupon_id": str(coupon_id) if coupon_id else None,
        }
        async with self._client() as client:
            r = await client.post("/claims", json=payload)
        self._raise_for_status(r)
        return ClaimOut.model_validate(r.json())
