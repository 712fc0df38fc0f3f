"""Tracked account endpoints, one router per platform."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.models.schemas import (
    AccountCreate,
    InstagramAccountResponse,
    TikTokAccountResponse,
    YouTubeAccountResponse,
    InstagramPostResponse,
    TikTokVideoResponse,
    YouTubeVideoResponse,
    InstagramHistoryResponse,
    TikTokHistoryResponse,
    YouTubeHistoryResponse
)
from clipdash.middleware.auth import get_current_user
from clipdash.routers.common import provider_errors, raise_for_error
from clipdash.services.account_service import AccountService
from clipdash.services.sync_service import sync_account

PLATFORM_SCHEMAS = {
    "instagram": (InstagramAccountResponse, InstagramPostResponse, InstagramHistoryResponse),
    "tiktok": (TikTokAccountResponse, TikTokVideoResponse, TikTokHistoryResponse),
    "youtube": (YouTubeAccountResponse, YouTubeVideoResponse, YouTubeHistoryResponse),
}


def build_account_router(platform: str) -> APIRouter:
    """
    Create the account router of one platform.

    Owners manage their own accounts; admins can reach every account.
    """
    account_schema, content_schema, history_schema = PLATFORM_SCHEMAS[platform]
    router = APIRouter()

    def load_account(db: Session, user: User, account_id: UUID):
        account = AccountService.get_account(db, user, platform, account_id)
        if not account:
            raise HTTPException(status_code=404, detail="Account not found")
        return account

    # ============================================
    # Account CRUD Operations
    # ============================================

    @router.post("", response_model=account_schema, status_code=201)
    def add_account(
        account_data: AccountCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        """
        Register an account for tracking.

        The account waits for admin approval before it counts toward client
        and campaign dashboards.
        """
        account, error = AccountService.add_account(db, current_user, platform, account_data.username)
        raise_for_error(error)
        return account

    @router.get("", response_model=List[account_schema])
    def list_accounts(
        include_inactive: bool = Query(default=False),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        return AccountService.list_accounts(db, current_user, platform, include_inactive)

    @router.get("/{account_id}", response_model=account_schema)
    def get_account(
        account_id: UUID,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        return load_account(db, current_user, account_id)

    @router.delete("/{account_id}", status_code=204)
    def deactivate_account(
        account_id: UUID,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        """Stop tracking an account. Stored content and history are kept."""
        _, error = AccountService.deactivate_account(db, current_user, platform, account_id)
        raise_for_error(error)
        return None

    # ============================================
    # Content and History
    # ============================================

    @router.get("/{account_id}/content", response_model=List[content_schema])
    def get_account_content(
        account_id: UUID,
        limit: int = Query(default=50, ge=1, le=200),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        account = load_account(db, current_user, account_id)
        return AccountService.get_account_content(db, account, platform, limit)

    @router.get("/{account_id}/history", response_model=List[history_schema])
    def get_account_history(
        account_id: UUID,
        days: int = Query(default=30, ge=1, le=365),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        account = load_account(db, current_user, account_id)
        return AccountService.get_metrics_history(db, account, platform, days)

    # ============================================
    # Sync
    # ============================================

    @router.post("/{account_id}/sync")
    def sync_one_account(
        account_id: UUID,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ):
        """
        Fetch fresh data for one account from its provider.

        Provider failures are answered with their mapped status and message.
        """
        account = load_account(db, current_user, account_id)
        with provider_errors("apify" if platform == "instagram" else "scrapecreators"):
            result = sync_account(db, platform, account)
        return {"success": True, **result}

    return router


instagram_router = build_account_router("instagram")
tiktok_router = build_account_router("tiktok")
youtube_router = build_account_router("youtube")
