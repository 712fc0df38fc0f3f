"""API routers."""

from clipdash.routers import accounts, admin, campaigns, export, health, metrics, payments, videos, wallet

__all__ = ["accounts", "admin", "campaigns", "export", "health", "metrics", "payments", "videos", "wallet"]
