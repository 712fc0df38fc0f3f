"""Admin approval of social accounts and campaign participants."""

from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from clipdash.models.user import User
from clipdash.models.instagram_models import InstagramAccount, InstagramPost
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo
from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo
from clipdash.models.campaign_models import CampaignParticipant
from clipdash.services.account_service import ACCOUNT_MODELS
from clipdash.services.redis_service import invalidate_metrics_cache

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

# Accounts and participants only leave the pending state, once
ALLOWED_TRANSITIONS = {
    PENDING: (APPROVED, REJECTED),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, ())


class ApprovalService:
    """Service for approval workflows."""

    @staticmethod
    def list_pending_accounts(db: Session) -> List[Dict]:
        """
        Pending accounts of all platforms in a single list, oldest first.

        Followers for YouTube are subscribers; content count is the number of
        stored posts or videos.
        """
        sources = (
            ("instagram", InstagramAccount, InstagramPost, "followers_count"),
            ("tiktok", TikTokAccount, TikTokVideo, "followers_count"),
            ("youtube", YouTubeAccount, YouTubeVideo, "subscribers_count"),
        )

        pending = []
        for platform, account_model, content_model, followers_field in sources:
            content_counts = dict(
                db.query(content_model.account_id, func.count(content_model.id))
                .group_by(content_model.account_id)
                .all()
            )

            rows = db.query(account_model, User.username).join(
                User, User.id == account_model.user_id
            ).filter(
                account_model.approval_status == PENDING,
                account_model.is_active == True  # noqa: E712
            ).all()

            for account, owner_username in rows:
                pending.append({
                    "platform": platform,
                    "id": account.id,
                    "username": account.username,
                    "display_name": account.display_name,
                    "profile_image_url": account.profile_image_url,
                    "followers_count": getattr(account, followers_field) or 0,
                    "content_count": content_counts.get(account.id, 0),
                    "owner_username": owner_username,
                    "created_at": account.created_at,
                })

        pending.sort(key=lambda item: item["created_at"])
        return pending

    @staticmethod
    def set_account_status(
        db: Session,
        platform: str,
        account_id: UUID,
        status: str
    ) -> Tuple[Optional[object], Optional[str]]:
        """
        Approve or reject a pending account.

        Returns:
            Tuple of (account, error_message)
        """
        model = ACCOUNT_MODELS.get(platform)
        if model is None:
            return None, f"Unsupported platform: {platform}"

        account = db.query(model).filter(model.id == account_id).first()
        if not account:
            return None, "Account not found"

        if not can_transition(account.approval_status, status):
            return None, f"Cannot change approval status from {account.approval_status} to {status}"

        account.approval_status = status
        db.commit()
        invalidate_metrics_cache()
        db.refresh(account)

        return account, None

    @staticmethod
    def approve_account(db: Session, platform: str, account_id: UUID) -> Tuple[Optional[object], Optional[str]]:
        return ApprovalService.set_account_status(db, platform, account_id, APPROVED)

    @staticmethod
    def reject_account(db: Session, platform: str, account_id: UUID) -> Tuple[Optional[object], Optional[str]]:
        return ApprovalService.set_account_status(db, platform, account_id, REJECTED)

    @staticmethod
    def set_participant_status(
        db: Session,
        participant_id: UUID,
        status: str,
        admin: User
    ) -> Tuple[Optional[CampaignParticipant], Optional[str]]:
        """Approve or reject a pending campaign participation request."""
        participant = db.query(CampaignParticipant).filter(CampaignParticipant.id == participant_id).first()
        if not participant:
            return None, "Participant not found"

        if not can_transition(participant.status, status):
            return None, f"Cannot change participant status from {participant.status} to {status}"

        participant.status = status
        participant.approved_at = datetime.utcnow()
        participant.approved_by = admin.id
        db.commit()
        invalidate_metrics_cache()
        db.refresh(participant)

        return participant, None

    @staticmethod
    def approve_participant(db: Session, participant_id: UUID, admin: User):
        return ApprovalService.set_participant_status(db, participant_id, APPROVED, admin)

    @staticmethod
    def reject_participant(db: Session, participant_id: UUID, admin: User):
        return ApprovalService.set_participant_status(db, participant_id, REJECTED, admin)
