"""
Error tracking with Sentry.

Request errors are picked up by the FastAPI integration. Background jobs
report through ``capture_exception`` since nothing else sees their failures.
"""

from typing import Optional, Dict, Any
import logging
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from clipdash.config import settings

logger = logging.getLogger(__name__)

# Probes and counters are polled constantly and never worth an event
QUIET_PATHS = ("/health", "/metrics")

# Raised on purpose to answer the client
EXPECTED_EXCEPTIONS = {"HTTPException", "RequestValidationError", "ProviderNotFoundError"}


def drop_expected_events(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """``before_send`` hook: return None for events that should not reach Sentry."""
    url = event.get("request", {}).get("url", "")
    if any(path in url for path in QUIET_PATHS):
        return None

    exception_types = {
        value.get("type") for value in event.get("exception", {}).get("values", [])
    }
    if exception_types & EXPECTED_EXCEPTIONS:
        return None

    return event


class ErrorTracker:
    """Sentry wrapper that degrades to logging when no DSN is configured."""

    def __init__(self, dsn: Optional[str] = None):
        dsn = settings.SENTRY_DSN if dsn is None else dsn
        self.sentry_enabled = bool(dsn) and self._init_sentry(dsn)

    def _init_sentry(self, dsn: str) -> bool:
        try:
            sentry_sdk.init(
                dsn=dsn,
                environment=settings.ENVIRONMENT,
                release=f"clipdash@{settings.APP_VERSION}",
                traces_sample_rate=0.1,
                integrations=[FastApiIntegration(), SqlalchemyIntegration()],
                before_send=drop_expected_events,
                send_default_pii=False
            )
        except Exception as e:
            logger.error(f"Sentry initialization failed: {e}")
            return False

        logger.info(f"Sentry error tracking enabled ({settings.ENVIRONMENT})")
        return True

    def capture_exception(
        self,
        exception: Exception,
        context: Optional[Dict[str, Dict[str, Any]]] = None,
        tags: Optional[Dict[str, str]] = None
    ):
        """
        Log an exception and forward it to Sentry when enabled.

        Args:
            exception: The exception to report
            context: Named context blocks, e.g. ``{"job": {"id": ...}}``
            tags: Searchable tags
        """
        logger.error(f"Exception captured: {exception}", exc_info=exception)

        if not self.sentry_enabled:
            return

        with sentry_sdk.new_scope() as scope:
            for name, block in (context or {}).items():
                scope.set_context(name, block)
            for name, value in (tags or {}).items():
                scope.set_tag(name, value)
            sentry_sdk.capture_exception(exception)

    def record_breadcrumb(self, message: str, category: str = "default", data: Optional[Dict[str, Any]] = None):
        if self.sentry_enabled:
            sentry_sdk.add_breadcrumb(message=message, category=category, data=data or {})


error_tracker = ErrorTracker()


def capture_exception(exception: Exception, **kwargs):
    error_tracker.capture_exception(exception, **kwargs)


def record_breadcrumb(message: str, **kwargs):
    error_tracker.record_breadcrumb(message, **kwargs)
