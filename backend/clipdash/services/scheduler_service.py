"""APScheduler service for the periodic account sync."""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.executors.pool import ThreadPoolExecutor
from typing import Any, Dict, Optional
import logging

from clipdash.config import settings
from clipdash.database import SessionLocal
from clipdash.services.error_tracking import capture_exception, record_breadcrumb
from clipdash.services.sync_service import sync_all_accounts
from clipdash.services.video_metrics_service import sync_campaign_video_metrics

logger = logging.getLogger(__name__)
logging.getLogger("apscheduler").setLevel(logging.WARNING)

SYNC_JOB_ID = "sync_all_accounts"

# Process-wide scheduler, None while stopped
scheduler: Optional[BackgroundScheduler] = None


def get_scheduler() -> Optional[BackgroundScheduler]:
    """Get the global scheduler instance."""
    return scheduler


def sync_all_accounts_job():
    """
    Background job syncing every active account, then campaign video metrics.

    Campaign submissions read the content rows the account sync just
    refreshed, so they run in that order.
    """
    record_breadcrumb("Scheduled sync started", category="scheduler")
    db = SessionLocal()
    try:
        result = sync_all_accounts(db)
        if not result.get("success"):
            logger.error(f"Scheduled account sync failed: {result.get('error')}")
            return result

        metrics = sync_campaign_video_metrics(db)
        logger.info(
            f"Scheduled sync finished: {result['results']}, "
            f"campaign videos synced={metrics['synced']} failed={metrics['failed']}"
        )
        return result

    except Exception as e:
        logger.exception(f"Error in scheduled sync job: {e}")
        capture_exception(e, context={"job": {"id": SYNC_JOB_ID}}, tags={"component": "scheduler"})
        return None
    finally:
        db.close()


def _build_scheduler() -> BackgroundScheduler:
    """Thread-pool scheduler; overlapping runs of the sync job are coalesced."""
    return BackgroundScheduler(
        executors={"default": ThreadPoolExecutor(settings.SCHEDULER_EXECUTORS_DEFAULT_MAX_WORKERS)},
        job_defaults={
            "coalesce": settings.SCHEDULER_JOB_DEFAULTS_COALESCE,
            "max_instances": settings.SCHEDULER_JOB_DEFAULTS_MAX_INSTANCES
        },
        timezone="UTC"
    )


def start_scheduler():
    """Start the background scheduler with the periodic sync job, once per process."""
    global scheduler

    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled by configuration")
        return
    if scheduler is not None:
        return

    scheduler = _build_scheduler()
    scheduler.add_job(
        func=sync_all_accounts_job,
        trigger="interval",
        hours=settings.SYNC_INTERVAL_HOURS,
        id=SYNC_JOB_ID,
        replace_existing=True
    )
    scheduler.start()
    logger.info(f"Account sync scheduled every {settings.SYNC_INTERVAL_HOURS}h")


def shutdown_scheduler():
    global scheduler

    if scheduler is None:
        return
    scheduler.shutdown(wait=False)
    scheduler = None
    logger.info("Scheduler stopped")


def get_job_status(job_id: str = SYNC_JOB_ID) -> Dict[str, Any]:
    """Describe a scheduled job for the health endpoints."""
    job = scheduler.get_job(job_id) if scheduler is not None else None
    if job is None:
        return {"exists": False}

    return {
        "exists": True,
        "job_id": job.id,
        "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
        "trigger": str(job.trigger)
    }
