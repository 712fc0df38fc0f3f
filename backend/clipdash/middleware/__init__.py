"""Middleware modules for FastAPI application."""

from clipdash.middleware.cache_middleware import CacheMiddleware
from clipdash.middleware.audit_middleware import AuditLogMiddleware

__all__ = [
    "CacheMiddleware",
    "AuditLogMiddleware"
]
