"""Structured logging and in-process application metrics."""

import logging
import json
import threading
from datetime import datetime
from typing import Dict, Any, Optional

from clipdash.platforms import PLATFORMS

ROOT_LOGGER = "clipdash"


class JsonFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Keyword context passed through StructuredLogger lands on the record as
    ``context`` and is merged into the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry.update(context)

        if record.exc_info:
            entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Send every ``clipdash.*`` logger through the JSON formatter.

    Safe to call more than once; handlers are only attached the first time.
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level.upper())
    root.propagate = False

    if root.handlers:
        return

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JsonFormatter())
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)


class StructuredLogger:
    """Logger taking event context as keyword arguments."""

    def __init__(self, name: str = ROOT_LOGGER):
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, context: Dict[str, Any], exc_info: bool = False):
        self.logger.log(level, message, extra={"context": context}, exc_info=exc_info)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs):
        """Log an error together with the exception being handled."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)


class ApplicationMetrics:
    """
    Counters for the /metrics endpoints.

    Requests, account syncs per platform, provider errors by mapped status
    and cache lookups. The scheduler thread and request handlers both
    write here, so updates hold a lock.
    """

    def __init__(self):
        self.start_time = datetime.utcnow()
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        with self._lock:
            self.metrics = {
                "requests": {"total": 0, "success": 0, "error": 0},
                "sync_runs": {
                    "total_runs": 0,
                    "by_platform": {
                        platform: {"success": 0, "failed": 0} for platform in PLATFORMS
                    }
                },
                "provider_errors": {},
                "cache": {"hits": 0, "misses": 0},
                "uptime_seconds": 0,
                "last_updated": datetime.utcnow().isoformat()
            }

    def increment_request(self, success: bool = True):
        with self._lock:
            requests = self.metrics["requests"]
            requests["total"] += 1
            requests["success" if success else "error"] += 1

    def increment_sync(self, platform: str, success: bool = True):
        """
        Count one account sync.

        Args:
            platform: Platform name
            success: Whether the account synced
        """
        with self._lock:
            by_platform = self.metrics["sync_runs"]["by_platform"]
            if platform in by_platform:
                by_platform[platform]["success" if success else "failed"] += 1

    def increment_sync_run(self):
        with self._lock:
            self.metrics["sync_runs"]["total_runs"] += 1

    def increment_provider_error(self, status_code: int):
        key = str(status_code)
        with self._lock:
            errors = self.metrics["provider_errors"]
            errors[key] = errors.get(key, 0) + 1

    def increment_cache(self, hit: bool = True):
        with self._lock:
            self.metrics["cache"]["hits" if hit else "misses"] += 1

    def get_metrics(self) -> Dict[str, Any]:
        with self._lock:
            now = datetime.utcnow()
            self.metrics["last_updated"] = now.isoformat()
            self.metrics["uptime_seconds"] = (now - self.start_time).total_seconds()
            return self.metrics

    def get_cache_hit_rate(self) -> float:
        """Cache hits as a percentage of lookups, 0 before any lookup."""
        cache = self.metrics["cache"]
        total = cache["hits"] + cache["misses"]
        if total == 0:
            return 0.0
        return (cache["hits"] / total) * 100

    def get_error_rate(self) -> float:
        requests = self.metrics["requests"]
        if requests["total"] == 0:
            return 0.0
        return (requests["error"] / requests["total"]) * 100


# Global instances
app_logger = StructuredLogger()
app_metrics = ApplicationMetrics()
