from __future__ import annotations

from fastapi import Request

from coupon_claims.core.config import settings


def get_client_ip(request: Request) -> str:
    """
    Value stored in claims.ip_address.
    The placeholder is kept unless the deployment opts in to recording the peer address.
    """
    if settings.TRUST_CLIENT_IP and request.client and request.client.host:
        return request.client.host
    return settings.IP_PLACEHOLDER
