"""
HTTP Middleware

RateLimitMiddleware runs in front of every /api/ route:
1. Rejects oversized request bodies (413)
2. Rejects clients blocked for repeated violations (403)
3. Rejects clients over their per-path limit (429)
4. Attaches X-RateLimit-* headers to every checked response

Client IP extraction trusts forwarding headers ONLY when the direct peer is
listed in TRUSTED_PROXIES. Without trusted proxies configured, the
connection address is used as-is.
"""

import ipaddress
import logging
import math
from datetime import UTC, datetime

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from academy.core.config import settings
from academy.core.rate_limit import RateLimiter, RateLimitResult, config_for
from academy.core.session import now_ms

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

EXEMPT_PATHS = frozenset({"/api/health", "/api/status"})

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def parse_trusted_proxies(values: list[str]) -> list[IPNetwork]:
    """
    Parse IPs and CIDR ranges into networks.

    Raises:
        ValueError: If an entry is not a valid address or network
    """
    return [ipaddress.ip_network(value, strict=False) for value in values]


def _parse_ip(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return None


def _is_trusted(ip: str, trusted: list[IPNetwork]) -> bool:
    address = ipaddress.ip_address(ip)
    return any(address in network for network in trusted)


def get_client_ip(request: Request, trusted_proxies: list[IPNetwork]) -> str:
    """
    Determine the client address for rate limiting.

    When the peer is a trusted proxy, the client is taken from
    CF-Connecting-IP, then X-Real-IP, then the right-most X-Forwarded-For
    hop that is not itself a trusted proxy. Malformed values are skipped.

    Returns:
        The client IP, the raw peer address, or "unknown"
    """
    peer = request.client.host if request.client else None
    peer_ip = _parse_ip(peer)

    if peer_ip and trusted_proxies and _is_trusted(peer_ip, trusted_proxies):
        for header in ("cf-connecting-ip", "x-real-ip"):
            ip = _parse_ip(request.headers.get(header))
            if ip:
                return ip

        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            for hop in reversed(forwarded.split(",")):
                ip = _parse_ip(hop)
                if ip is None:
                    # A malformed hop breaks the chain of trust
                    break
                if not _is_trusted(ip, trusted_proxies):
                    return ip

    return peer_ip or peer or UNKNOWN_CLIENT


def format_reset_time(reset_time_ms: int) -> str:
    """Format an epoch ms timestamp as ISO-8601 UTC, e.g. 2024-01-01T00:00:00.000Z."""
    moment = datetime.fromtimestamp(reset_time_ms / 1000, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def retry_after_seconds(reset_time_ms: int, now: int) -> int:
    return max(0, math.ceil((reset_time_ms - now) / 1000))


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": format_reset_time(result.reset_time),
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-path, per-IP rate limiting for API routes.

    The limiter is read from ``app.state.rate_limiter`` on each request
    unless one is passed explicitly, so the lifespan can swap the store
    (e.g. to Redis) after startup.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: RateLimiter | None = None,
        *,
        enabled: bool | None = None,
        trusted_proxies: list[str] | None = None,
        max_request_bytes: int | None = None,
        clock=now_ms,
    ):
        super().__init__(app)
        self._limiter = limiter
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled
        self.trusted_proxies = parse_trusted_proxies(
            settings.trusted_proxies_list if trusted_proxies is None else trusted_proxies
        )
        self.max_request_bytes = (
            settings.max_request_bytes if max_request_bytes is None else max_request_bytes
        )
        self._clock = clock

    def _get_limiter(self, request: Request) -> RateLimiter:
        if self._limiter is not None:
            return self._limiter
        return request.app.state.rate_limiter

    def _content_length_error(self, request: Request) -> str | None:
        raw = request.headers.get("content-length")
        if raw is None:
            return None
        try:
            length = int(raw)
        except ValueError:
            return "Invalid Content-Length header"
        if length < 0:
            return "Invalid Content-Length header"
        if length > self.max_request_bytes:
            max_mb = self.max_request_bytes / 1024 / 1024
            return f"Request size exceeds maximum allowed size of {max_mb:g}MB"
        return None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path

        if not self.enabled or not path.startswith("/api/") or path in EXEMPT_PATHS:
            return await call_next(request)

        size_error = self._content_length_error(request)
        if size_error:
            return JSONResponse({"error": size_error}, status_code=413)

        client_ip = get_client_ip(request, self.trusted_proxies)
        config = config_for(path, request.method)
        result = await self._get_limiter(request).check(
            f"{path}:{client_ip}",
            config,
            client_ip=client_ip,
        )

        if not result.allowed:
            retry_after = retry_after_seconds(result.reset_time, self._clock())

            if result.blocked:
                return JSONResponse(
                    {
                        "error": "Access denied. Your IP has been temporarily blocked "
                        "due to repeated violations.",
                        "retryAfter": retry_after,
                    },
                    status_code=403,
                    headers={"Retry-After": str(retry_after)},
                )

            return JSONResponse(
                {
                    "error": "Too many requests. Please try again later.",
                    "retryAfter": retry_after,
                },
                status_code=429,
                headers={**rate_limit_headers(result), "Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers.update(rate_limit_headers(result))
        return response
