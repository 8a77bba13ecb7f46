"""Utilities for handling FastAPI requests."""

from typing import Final

from fastapi import Request

from .domain.constants import MAX_CLIENT_IP_LENGTH

UNKNOWN_CLIENT: Final = "Unknown"
MAX_USER_AGENT_LENGTH: Final = 512


def get_client_ip(request: Request) -> str:
    """Extract client IP address with proxy support.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address as string, cut to the stored column width. Returns
        "Unknown" if unable to determine.

    Notes:
        - Checks CF-Connecting-IP first (set by Cloudflare in front of the app)
        - Then the first entry of X-Forwarded-For (load balancers/proxies)
        - Then X-Real-IP (nginx proxy)
        - Finally request.client.host (direct connection)
    """
    return _resolve_client_ip(request)[:MAX_CLIENT_IP_LENGTH]


def _resolve_client_ip(request: Request) -> str:
    cf_ip: str | None = request.headers.get("CF-Connecting-IP")
    if cf_ip and cf_ip.strip():
        return cf_ip.strip()

    # Comma-separated list, first is original client
    forwarded_for: str | None = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip: str | None = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return str(request.client.host)

    return UNKNOWN_CLIENT


def get_user_agent(request: Request) -> str | None:
    """User-Agent header, truncated for storage."""
    user_agent = request.headers.get("user-agent")
    if not user_agent:
        return None
    return user_agent[:MAX_USER_AGENT_LENGTH]
