"""Request accounting and audit trail for money and moderation endpoints."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from clipdash.services.logging_service import app_logger, app_metrics

AUDITED_PREFIXES = ("/api/admin", "/api/payments", "/api/wallet")
WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class AuditLogMiddleware(BaseHTTPMiddleware):
    """
    Count every request and log writes under the audited prefixes.

    Payments, payouts and admin moderation move money or change what
    dashboards show, so each write there is logged with its outcome.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            app_metrics.increment_request(success=False)
            raise

        app_metrics.increment_request(success=response.status_code < 500)

        path = request.url.path
        if request.method in WRITE_METHODS and path.startswith(AUDITED_PREFIXES):
            app_logger.info(
                "audit",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
                client_ip=request.client.host if request.client else "unknown"
            )

        return response
