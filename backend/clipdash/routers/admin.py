"""Admin endpoints: account moderation, batch syncs and provider checks."""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.models.schemas import PendingAccountResponse, SyncAllResponse
from clipdash.middleware.auth import get_current_admin
from clipdash.platforms import PLATFORMS
from clipdash.routers.common import provider_errors, raise_for_error
from clipdash.services.approval_service import ApprovalService
from clipdash.services.sync_service import (
    batch_sync_instagram,
    build_apify_api,
    build_scrapecreators_api,
    sync_all_accounts
)

router = APIRouter()

DEFAULT_TEST_PROFILE = "https://www.instagram.com/instagram/"


def _check_platform(platform: str):
    if platform not in PLATFORMS:
        raise HTTPException(status_code=400, detail=f"Unsupported platform: {platform}")


# ============================================
# Account Approval
# ============================================

@router.get("/accounts/pending", response_model=List[PendingAccountResponse])
def list_pending_accounts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Accounts of every platform waiting for approval, oldest first."""
    return ApprovalService.list_pending_accounts(db)


@router.post("/accounts/{platform}/{account_id}/approve")
def approve_account(
    platform: str,
    account_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    _check_platform(platform)
    account, error = ApprovalService.approve_account(db, platform, account_id)
    raise_for_error(error)
    return {"success": True, "id": account.id, "approval_status": account.approval_status}


@router.post("/accounts/{platform}/{account_id}/reject")
def reject_account(
    platform: str,
    account_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    _check_platform(platform)
    account, error = ApprovalService.reject_account(db, platform, account_id)
    raise_for_error(error)
    return {"success": True, "id": account.id, "approval_status": account.approval_status}


# ============================================
# Batch Sync
# ============================================

@router.post("/sync-all", response_model=SyncAllResponse, response_model_exclude_none=True)
def sync_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """
    Sync every active account of every platform, one after another.

    Individual account failures are counted; only a failure of the batch
    itself answers 500.
    """
    result = sync_all_accounts(db)
    if not result["success"]:
        return JSONResponse(status_code=500, content=result)
    return result


@router.post("/batch-sync/instagram")
def batch_sync_instagram_accounts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Sync every active Instagram account through Apify, pausing between accounts."""
    return batch_sync_instagram(db)


# ============================================
# Provider Checks
# ============================================

@router.post("/test-apify")
def test_apify(
    profile_url: str = Query(default=DEFAULT_TEST_PROFILE),
    current_user: User = Depends(get_current_admin)
):
    """
    Run the Instagram actor on one profile and return what it scraped.

    Provider failures are answered with their mapped status and message.
    """
    with provider_errors("apify"):
        result = build_apify_api().run_instagram_scraper(profile_url, results_type="details", results_limit=5)
    return {"success": True, "profileUrl": profile_url, **result}


@router.get("/test-scrapecreators")
def test_scrapecreators(
    platform: str = Query(default="instagram"),
    username: str = Query(default="instagram"),
    resource: str = Query(default="profile", pattern="^(profile|videos)$"),
    current_user: User = Depends(get_current_admin)
):
    """Call one ScrapeCreators endpoint and return the raw response."""
    _check_platform(platform)
    api = build_scrapecreators_api()

    with provider_errors("scrapecreators"):
        if platform == "instagram":
            endpoint = "/v1/instagram/profile"
            data = api.instagram_profile(username)
        elif platform == "tiktok" and resource == "videos":
            endpoint = "/v3/tiktok/profile-videos"
            data = api.tiktok_videos(username)
        elif platform == "tiktok":
            endpoint = "/v1/tiktok/profile"
            data = api.tiktok_profile(username)
        elif resource == "videos":
            endpoint = "/v1/youtube/channel-videos"
            data = api.youtube_channel_videos(handle=username)
        else:
            endpoint = "/v1/youtube/channel"
            data = api.youtube_channel(handle=username)

    return {
        "success": True,
        "platform": platform,
        "username": username,
        "endpoint": endpoint,
        "data": data
    }
