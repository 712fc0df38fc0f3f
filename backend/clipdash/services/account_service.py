"""Tracked social account management."""

from sqlalchemy.orm import Session
from sqlalchemy import desc
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from clipdash.models.user import User
from clipdash.models.instagram_models import InstagramAccount, InstagramPost, InstagramMetricsHistory
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo, TikTokMetricsHistory
from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo, YouTubeMetricsHistory
from clipdash.services.redis_service import invalidate_metrics_cache
from clipdash.utils.parsers import clean_handle, extract_instagram_username, normalize_youtube_identifier

ACCOUNT_MODELS = {
    "instagram": InstagramAccount,
    "tiktok": TikTokAccount,
    "youtube": YouTubeAccount,
}

CONTENT_MODELS = {
    "instagram": (InstagramPost, InstagramPost.posted_at),
    "tiktok": (TikTokVideo, TikTokVideo.posted_at),
    "youtube": (YouTubeVideo, YouTubeVideo.published_at),
}

HISTORY_MODELS = {
    "instagram": InstagramMetricsHistory,
    "tiktok": TikTokMetricsHistory,
    "youtube": YouTubeMetricsHistory,
}


def normalize_username(platform: str, identifier: str) -> Tuple[str, dict]:
    """
    Turn user input into the stored username plus extra columns.

    Returns:
        (username, extra_fields)
    """
    if platform == "instagram":
        username = extract_instagram_username(identifier)
        return username, {"profile_url": f"https://www.instagram.com/{username}/"}
    if platform == "youtube":
        lookup = normalize_youtube_identifier(identifier)
        if "channelId" in lookup:
            return lookup["channelId"], {"channel_id": lookup["channelId"]}
        return lookup.get("handle") or lookup.get("url") or "", {}
    return clean_handle(identifier), {}


class AccountService:
    """Service for tracked account operations."""

    @staticmethod
    def add_account(db: Session, user: User, platform: str, identifier: str) -> Tuple[Optional[object], Optional[str]]:
        """
        Register an account for tracking, or reactivate a deactivated one.

        New accounts start pending admin approval.

        Returns:
            Tuple of (account, error_message)
        """
        model = ACCOUNT_MODELS.get(platform)
        if model is None:
            return None, f"Unsupported platform: {platform}"

        username, extra = normalize_username(platform, identifier or "")
        if not username:
            return None, "Username is required"

        existing = db.query(model).filter(
            model.user_id == user.id,
            model.username == username
        ).first()

        if existing:
            if existing.is_active:
                return None, f"Account {username} already exists"
            existing.is_active = True
            db.commit()
            invalidate_metrics_cache()
            db.refresh(existing)
            return existing, None

        account = model(
            user_id=user.id,
            username=username,
            is_active=True,
            approval_status="pending",
            **extra
        )

        db.add(account)
        db.commit()
        invalidate_metrics_cache()
        db.refresh(account)

        return account, None

    @staticmethod
    def list_accounts(db: Session, user: User, platform: str, include_inactive: bool = False) -> List:
        """Admins see every account, everyone else their own."""
        model = ACCOUNT_MODELS[platform]
        query = db.query(model)

        if not user.is_admin:
            query = query.filter(model.user_id == user.id)
        if not include_inactive:
            query = query.filter(model.is_active == True)  # noqa: E712

        return query.order_by(model.created_at).all()

    @staticmethod
    def get_account(db: Session, user: User, platform: str, account_id: UUID):
        """Fetch an account the user may access, or None."""
        model = ACCOUNT_MODELS[platform]
        query = db.query(model).filter(model.id == account_id)

        if not user.is_admin:
            query = query.filter(model.user_id == user.id)

        return query.first()

    @staticmethod
    def deactivate_account(db: Session, user: User, platform: str, account_id: UUID) -> Tuple[Optional[object], Optional[str]]:
        """Soft delete: the account stops syncing and leaves dashboards."""
        account = AccountService.get_account(db, user, platform, account_id)
        if not account:
            return None, "Account not found"

        account.is_active = False
        db.commit()
        invalidate_metrics_cache()
        db.refresh(account)

        return account, None

    @staticmethod
    def get_account_content(db: Session, account, platform: str, limit: int = 50) -> List:
        """Posts or videos of an account, newest first."""
        model, order_column = CONTENT_MODELS[platform]
        return db.query(model).filter(
            model.account_id == account.id
        ).order_by(desc(order_column), desc(model.created_at)).limit(limit).all()

    @staticmethod
    def get_metrics_history(db: Session, account, platform: str, days: int = 30) -> List:
        """Metrics snapshots of an account within the last `days` days, oldest first."""
        model = HISTORY_MODELS[platform]
        since = datetime.utcnow() - timedelta(days=days)
        return db.query(model).filter(
            model.account_id == account.id,
            model.recorded_at >= since
        ).order_by(model.recorded_at).all()
