"""Account sync orchestration across Instagram, YouTube and TikTok."""

from typing import Callable, Dict, Optional
from sqlalchemy.orm import Session
from datetime import datetime
import logging
import time

from clipdash.config import settings, Settings
from clipdash.models.instagram_models import InstagramAccount
from clipdash.platforms import PLATFORMS
from clipdash.platforms.apify_api import ApifyAPI
from clipdash.platforms.errors import map_provider_error
from clipdash.platforms.scrapecreators_api import ScrapeCreatorsAPI
from clipdash.platforms.instagram.collector import InstagramCollector
from clipdash.platforms.tiktok.collector import TikTokCollector
from clipdash.platforms.youtube.collector import YouTubeCollector
from clipdash.services.account_service import ACCOUNT_MODELS
from clipdash.services.logging_service import app_metrics
from clipdash.services.redis_service import invalidate_metrics_cache

logger = logging.getLogger(__name__)


def build_scrapecreators_api(config: Settings = settings) -> ScrapeCreatorsAPI:
    return ScrapeCreatorsAPI(
        api_key=config.SCRAPECREATORS_API_KEY,
        base_url=config.SCRAPECREATORS_BASE_URL,
        timeout=config.PROVIDER_REQUEST_TIMEOUT_SECONDS
    )


def build_apify_api(config: Settings = settings) -> ApifyAPI:
    return ApifyAPI(
        api_token=config.APIFY_API_TOKEN,
        base_url=config.APIFY_BASE_URL,
        actor=config.APIFY_INSTAGRAM_ACTOR,
        poll_interval=config.APIFY_POLL_INTERVAL_SECONDS,
        max_wait=config.APIFY_MAX_WAIT_SECONDS,
        timeout=config.PROVIDER_REQUEST_TIMEOUT_SECONDS
    )


def build_collectors(config: Settings = settings) -> Dict:
    """Create one collector per platform wired to the configured providers."""
    scrapecreators = build_scrapecreators_api(config)
    return {
        "instagram": InstagramCollector(build_apify_api(config), results_limit=config.INSTAGRAM_RESULTS_LIMIT),
        "youtube": YouTubeCollector(scrapecreators),
        "tiktok": TikTokCollector(scrapecreators),
    }


def sync_account(db: Session, platform: str, account, collectors: Optional[Dict] = None) -> Dict:
    """
    Sync a single account.

    Args:
        db: Database session
        platform: instagram, youtube or tiktok
        account: Account row of the matching platform
        collectors: Optional collectors (defaults to build_collectors())

    Returns:
        Collector summary dict

    Raises:
        ProviderError: When the provider call fails
    """
    collectors = collectors or build_collectors()

    try:
        result = collectors[platform].collect(db, account)
    except Exception as e:
        status_code, _ = map_provider_error(e)
        app_metrics.increment_provider_error(status_code)
        app_metrics.increment_sync(platform, success=False)
        raise

    app_metrics.increment_sync(platform, success=True)
    invalidate_metrics_cache()
    return result


def sync_all_accounts(db: Session, collectors: Optional[Dict] = None) -> Dict:
    """
    Sync every active account on every platform.

    Accounts are processed one at a time, platform by platform. A failing
    account is counted and logged; it never stops the batch. There are no
    retries.

    Returns:
        {"success": True, "message": ..., "results": {platform: {"synced", "errors"}}}
        or {"success": False, "error": ...} when the batch itself fails
    """
    try:
        collectors = collectors or build_collectors()
        results = {}

        for platform in PLATFORMS:
            model = ACCOUNT_MODELS[platform]
            stats = {"synced": 0, "errors": 0}

            accounts = db.query(model).filter(
                model.is_active == True  # noqa: E712
            ).order_by(model.created_at).all()

            logger.info(f"Syncing {len(accounts)} {platform} accounts")

            for account in accounts:
                try:
                    result = collectors[platform].collect(db, account)
                except Exception as e:
                    status_code, message = map_provider_error(e)
                    app_metrics.increment_provider_error(status_code)
                    app_metrics.increment_sync(platform, success=False)
                    logger.error(f"Error syncing {platform} account {account.username}: {message}")
                    stats["errors"] += 1
                    continue

                if result:
                    stats["synced"] += 1
                    app_metrics.increment_sync(platform, success=True)
                else:
                    stats["errors"] += 1
                    app_metrics.increment_sync(platform, success=False)

            results[platform] = stats

        app_metrics.increment_sync_run()
        invalidate_metrics_cache()

        logger.info(f"Auto-sync completed: {results}")

        return {
            "success": True,
            "message": "Auto-sync completed",
            "results": results
        }

    except Exception as e:
        logger.exception(f"Auto-sync failed: {e}")
        return {
            "success": False,
            "error": str(e)
        }


def batch_sync_instagram(
    db: Session,
    collector: Optional[InstagramCollector] = None,
    delay_seconds: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep
) -> Dict:
    """
    Sync every active Instagram account, pausing between accounts.

    Args:
        db: Database session
        collector: Optional collector (defaults to the configured one)
        delay_seconds: Pause between accounts (defaults to BATCH_SYNC_DELAY_SECONDS)
        sleep: Sleep function

    Returns:
        Per-account outcome plus totals; success is True only when nothing failed
    """
    collector = collector or build_collectors()["instagram"]
    delay = settings.BATCH_SYNC_DELAY_SECONDS if delay_seconds is None else delay_seconds

    accounts = db.query(InstagramAccount).filter(
        InstagramAccount.is_active == True  # noqa: E712
    ).order_by(InstagramAccount.created_at).all()

    instagram = {"synced": 0, "errors": 0, "accounts": []}

    for index, account in enumerate(accounts):
        if index > 0 and delay:
            sleep(delay)

        try:
            collector.collect(db, account)
            instagram["synced"] += 1
            instagram["accounts"].append(account.username)
            app_metrics.increment_sync("instagram", success=True)
        except Exception as e:
            _, message = map_provider_error(e)
            logger.error(f"Batch sync failed for Instagram account {account.username}: {message}")
            instagram["errors"] += 1
            instagram["accounts"].append(f"{account.username} (error)")
            app_metrics.increment_sync("instagram", success=False)

    invalidate_metrics_cache()

    total_errors = instagram["errors"]
    message = (
        f"Synced {instagram['synced']} of {len(accounts)} accounts"
        if total_errors == 0
        else f"Synced {instagram['synced']} of {len(accounts)} accounts with {total_errors} errors"
    )

    return {
        "success": total_errors == 0,
        "message": message,
        "results": {"instagram": instagram},
        "totalAccounts": len(accounts),
        "totalSynced": instagram["synced"],
        "totalErrors": total_errors,
        "completedAt": datetime.utcnow().isoformat()
    }
