"""Caching middleware for dashboard responses."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable, Dict, List, Optional
import hashlib

from clipdash.services.logging_service import app_metrics
from clipdash.services.redis_service import RESPONSE_NAMESPACE, response_cache

# Headers recomputed by Starlette when the body is replayed
SKIPPED_HEADERS = {"content-length", "x-cache"}


def response_cache_key(request: Request) -> str:
    """
    Key a cached response by caller, path and query string.

    Metrics differ per user and role, so the Authorization header is part
    of the digest.
    """
    caller = request.headers.get("authorization", "anonymous")
    digest = hashlib.sha256(
        "\n".join((caller, request.url.path, request.url.query)).encode()
    ).hexdigest()
    return response_cache.key(RESPONSE_NAMESPACE, digest)


def _replay(entry: Dict, cache_status: str) -> Response:
    return Response(
        content=entry["body"],
        status_code=entry["status_code"],
        headers={**entry["headers"], "X-Cache": cache_status},
        media_type=entry["media_type"]
    )


class CacheMiddleware(BaseHTTPMiddleware):
    """
    Serve successful GET responses under the configured prefixes from Redis.

    Responses carry ``X-Cache: HIT`` or ``X-Cache: MISS``. Without Redis the
    request passes straight through.
    """

    def __init__(self, app, default_ttl: int = 300, cache_prefixes: Optional[List[str]] = None):
        super().__init__(app)
        self.default_ttl = default_ttl
        self.cache_prefixes = tuple(cache_prefixes or ["/api/metrics"])

    def _cacheable(self, request: Request) -> bool:
        return request.method == "GET" and request.url.path.startswith(self.cache_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._cacheable(request) or not response_cache.available():
            return await call_next(request)

        key = response_cache_key(request)
        entry = response_cache.get(key)
        app_metrics.increment_cache(hit=entry is not None)
        if entry is not None:
            return _replay(entry, "HIT")

        response = await call_next(request)
        if response.status_code != 200:
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        entry = {
            "body": body.decode("utf-8"),
            "status_code": response.status_code,
            "headers": {
                name: value for name, value in response.headers.items()
                if name.lower() not in SKIPPED_HEADERS
            },
            "media_type": response.media_type
        }
        response_cache.set(key, entry, ttl=self.default_ttl)

        return _replay(entry, "MISS")
