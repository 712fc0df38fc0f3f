"""Health check and monitoring endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from datetime import datetime
import copy
import psutil
import os

from clipdash.database import get_db, engine
from clipdash.services.redis_service import is_redis_available, get_redis_client
from clipdash.services.logging_service import app_metrics
from clipdash.services.scheduler_service import get_scheduler, get_job_status
from clipdash.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if application is running.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT
    }


@router.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness probe.

    The database is required. Redis and the scheduler are optional and only
    reported, since both can be switched off by configuration.
    """
    checks = {
        "database": False,
        "redis": is_redis_available(),
        "scheduler": False
    }
    errors = []

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        errors.append(f"Database: {str(e)}")

    scheduler = get_scheduler()
    checks["scheduler"] = bool(scheduler and scheduler.running)
    if settings.SCHEDULER_ENABLED and not checks["scheduler"]:
        errors.append("Scheduler: Not running")

    if not errors:
        return {
            "status": "ready",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat()
        }

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "not_ready",
            "checks": checks,
            "errors": errors,
            "timestamp": datetime.utcnow().isoformat()
        }
    )


@router.get("/health/live")
async def liveness_check():
    """Liveness probe; 200 while the process is alive."""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "pid": os.getpid()
    }


def _database_component(db: Session) -> dict:
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "type": engine.dialect.name}


def _redis_component() -> dict:
    if not is_redis_available():
        return {"status": "unavailable", "message": "Redis not configured or unreachable"}

    try:
        info = get_redis_client().info()
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
    return {
        "status": "healthy",
        "version": info.get("redis_version", "unknown"),
        "used_memory": info.get("used_memory_human", "unknown")
    }


def _scheduler_component() -> dict:
    scheduler = get_scheduler()
    if scheduler is None or not scheduler.running:
        return {
            "status": "unhealthy" if settings.SCHEDULER_ENABLED else "disabled",
            "running": False
        }
    return {
        "status": "healthy",
        "running": True,
        "active_jobs": len(scheduler.get_jobs()),
        "sync_job": get_job_status()
    }


def _system_snapshot() -> dict:
    try:
        return {
            "cpu_percent": psutil.cpu_percent(interval=None),
            "memory_percent": psutil.virtual_memory().percent,
            "disk_percent": psutil.disk_usage("/").percent,
            "process_count": len(psutil.pids())
        }
    except Exception as e:
        return {"error": f"Unable to gather system metrics: {str(e)}"}


@router.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Component-level health report.

    The overall status is ``degraded`` when the database is down or an
    enabled scheduler is not running. Redis only ever reports.
    """
    components = {
        "database": _database_component(db),
        "redis": _redis_component(),
        "scheduler": _scheduler_component(),
        "providers": {
            "scrapecreators": "configured" if settings.SCRAPECREATORS_API_KEY else "missing_api_key",
            "apify": "configured" if settings.APIFY_API_TOKEN else "missing_api_token"
        }
    }
    degraded = (
        components["database"]["status"] != "healthy"
        or components["scheduler"]["status"] == "unhealthy"
    )

    return {
        "status": "degraded" if degraded else "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "components": components,
        "system": _system_snapshot()
    }


@router.get("/metrics")
async def application_metrics():
    """
    Application metrics endpoint.

    Request, sync, provider error and cache counters since startup.
    """
    metrics = copy.deepcopy(app_metrics.get_metrics())

    metrics["cache"]["hit_rate_percent"] = app_metrics.get_cache_hit_rate()
    metrics["requests"]["error_rate_percent"] = app_metrics.get_error_rate()

    return metrics


@router.get("/metrics/prometheus", response_class=PlainTextResponse)
async def prometheus_metrics():
    """Metrics in Prometheus text format."""
    metrics = app_metrics.get_metrics()

    lines = [
        "# HELP http_requests_total Total HTTP requests",
        "# TYPE http_requests_total counter",
        f"http_requests_total {metrics['requests']['total']}",
        "# HELP http_requests_error Failed HTTP requests",
        "# TYPE http_requests_error counter",
        f"http_requests_error {metrics['requests']['error']}",
        "# HELP sync_runs_total Completed sync-all runs",
        "# TYPE sync_runs_total counter",
        f"sync_runs_total {metrics['sync_runs']['total_runs']}",
        "# HELP account_syncs_total Account syncs by platform and outcome",
        "# TYPE account_syncs_total counter",
    ]

    for platform, counts in metrics["sync_runs"]["by_platform"].items():
        lines.append(f'account_syncs_total{{platform="{platform}",outcome="success"}} {counts["success"]}')
        lines.append(f'account_syncs_total{{platform="{platform}",outcome="failed"}} {counts["failed"]}')

    lines.append("# HELP provider_errors_total Provider errors by mapped status code")
    lines.append("# TYPE provider_errors_total counter")
    for status_code, count in metrics["provider_errors"].items():
        lines.append(f'provider_errors_total{{status="{status_code}"}} {count}')

    lines.extend([
        "# HELP cache_hits Cache hits",
        "# TYPE cache_hits counter",
        f"cache_hits {metrics['cache']['hits']}",
        "# HELP cache_misses Cache misses",
        "# TYPE cache_misses counter",
        f"cache_misses {metrics['cache']['misses']}",
        "# HELP uptime_seconds Application uptime in seconds",
        "# TYPE uptime_seconds counter",
        f"uptime_seconds {metrics['uptime_seconds']}",
    ])

    return "\n".join(lines)
