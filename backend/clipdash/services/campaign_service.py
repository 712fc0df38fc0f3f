"""Campaign management, video submissions and campaign dashboards."""

from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from clipdash.models.user import User
from clipdash.models.campaign_models import (
    Campaign, CampaignOwner, CampaignParticipant, CampaignVideo, CompetitionPrize, CAMPAIGN_TYPES
)
from clipdash.analytics.earnings_calculator import EarningsCalculator
from clipdash.analytics.engagement_calculator import EngagementCalculator
from clipdash.platforms import PLATFORMS
from clipdash.utils.parsers import detect_platform, normalize_link

logger = logging.getLogger(__name__)

CAMPAIGN_FIELDS = (
    "name", "description", "image_url", "is_active", "platforms", "campaign_type",
    "payment_rate", "min_views", "max_paid_views", "prize_pool", "start_date", "end_date",
)


def _validate_campaign_fields(data: Dict) -> Optional[str]:
    campaign_type = data.get("campaign_type")
    if campaign_type is not None and campaign_type not in CAMPAIGN_TYPES:
        return f"Invalid campaign type: {campaign_type}"

    unknown = [p for p in (data.get("platforms") or []) if p not in PLATFORMS]
    if unknown:
        return f"Unsupported platform: {unknown[0]}"

    return None


def prize_map(db: Session, campaign_id: UUID) -> Dict[int, float]:
    """Prize amount by ranking position."""
    prizes = db.query(CompetitionPrize).filter(CompetitionPrize.campaign_id == campaign_id).all()
    return {prize.position: float(prize.prize_amount or 0) for prize in prizes}


def aggregate_by_creator(videos: List[CampaignVideo]) -> List[Dict]:
    """
    Group submissions by the creator who sent them.

    Returns:
        One dict per creator sorted by views descending, with 1-based positions
    """
    totals: Dict[UUID, Dict] = {}
    for video in videos:
        entry = totals.setdefault(video.submitted_by, {
            "user_id": video.submitted_by,
            "total_videos": 0,
            "total_views": 0,
            "total_likes": 0,
        })
        entry["total_videos"] += 1
        entry["total_views"] += video.views or 0
        entry["total_likes"] += video.likes or 0

    ranked = sorted(totals.values(), key=lambda item: item["total_views"], reverse=True)
    for position, entry in enumerate(ranked, start=1):
        entry["position"] = position

    return ranked


class CampaignService:
    """Service for campaign operations."""

    @staticmethod
    def create_campaign(
        db: Session,
        admin: User,
        data: Dict,
        owner_ids: Optional[List[UUID]] = None
    ) -> Tuple[Optional[Campaign], Optional[str]]:
        """
        Create a campaign.

        Args:
            db: Database session
            admin: Admin creating the campaign
            data: Campaign fields
            owner_ids: Client users that sponsor the campaign

        Returns:
            Tuple of (campaign, error_message)
        """
        error = _validate_campaign_fields(data)
        if error:
            return None, error

        if not data.get("name"):
            return None, "Campaign name is required"

        campaign = Campaign(
            created_by=admin.id,
            **{field: data[field] for field in CAMPAIGN_FIELDS if data.get(field) is not None}
        )
        db.add(campaign)
        db.flush()

        for owner_id in set(owner_ids or []):
            db.add(CampaignOwner(campaign_id=campaign.id, user_id=owner_id))

        db.commit()
        db.refresh(campaign)

        logger.info(f"Campaign created: {campaign.name}")
        return campaign, None

    @staticmethod
    def update_campaign(db: Session, campaign_id: UUID, data: Dict) -> Tuple[Optional[Campaign], Optional[str]]:
        """Update the fields present in `data`."""
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return None, "Campaign not found"

        error = _validate_campaign_fields(data)
        if error:
            return None, error

        for field in CAMPAIGN_FIELDS:
            if field in data and data[field] is not None:
                setattr(campaign, field, data[field])

        db.commit()
        db.refresh(campaign)

        return campaign, None

    @staticmethod
    def delete_campaign(db: Session, campaign_id: UUID) -> Optional[str]:
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return "Campaign not found"

        db.delete(campaign)
        db.commit()
        return None

    @staticmethod
    def get_campaign(db: Session, campaign_id: UUID) -> Optional[Campaign]:
        return db.query(Campaign).filter(Campaign.id == campaign_id).first()

    @staticmethod
    def list_campaigns(db: Session, active_only: bool = True) -> List[Campaign]:
        query = db.query(Campaign)
        if active_only:
            query = query.filter(Campaign.is_active == True)  # noqa: E712
        return query.order_by(Campaign.created_at.desc()).all()

    @staticmethod
    def request_participation(db: Session, user: User, campaign_id: UUID) -> Tuple[Optional[CampaignParticipant], Optional[str]]:
        """
        Ask to join a campaign. The request waits for admin approval.

        Returns:
            Tuple of (participant, error_message)
        """
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return None, "Campaign not found"

        if not campaign.is_active:
            return None, "Campaign is not active"

        existing = db.query(CampaignParticipant).filter(
            CampaignParticipant.campaign_id == campaign_id,
            CampaignParticipant.user_id == user.id
        ).first()

        if existing:
            return None, "Participation already requested"

        participant = CampaignParticipant(campaign_id=campaign_id, user_id=user.id, status="pending")
        db.add(participant)
        db.commit()
        db.refresh(participant)

        return participant, None

    @staticmethod
    def list_participants(db: Session, campaign_id: UUID, status: Optional[str] = None) -> List[CampaignParticipant]:
        query = db.query(CampaignParticipant).filter(CampaignParticipant.campaign_id == campaign_id)
        if status:
            query = query.filter(CampaignParticipant.status == status)
        return query.order_by(CampaignParticipant.applied_at).all()

    @staticmethod
    def submit_video(
        db: Session,
        user: User,
        campaign_id: UUID,
        video_link: str,
        platform: Optional[str] = None
    ) -> Tuple[Optional[CampaignVideo], Optional[str]]:
        """
        Submit a video link to a campaign.

        Only approved participants (or admins) may submit. The link's platform
        must be one the campaign accepts, and a link can be submitted once per
        campaign.

        Returns:
            Tuple of (video, error_message)
        """
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return None, "Campaign not found"

        if not user.is_admin:
            participant = db.query(CampaignParticipant).filter(
                CampaignParticipant.campaign_id == campaign_id,
                CampaignParticipant.user_id == user.id,
                CampaignParticipant.status == "approved"
            ).first()
            if not participant:
                return None, "Only approved participants can submit videos"

        video_link = (video_link or "").strip()
        detected = detect_platform(video_link)
        if not detected:
            return None, "Unsupported video link"

        if platform and platform != detected:
            return None, f"Link is not a {platform} video"

        allowed = campaign.platforms or list(PLATFORMS)
        if detected not in allowed:
            return None, f"Campaign does not accept {detected} videos"

        normalized = normalize_link(video_link)
        existing = db.query(CampaignVideo.video_link).filter(CampaignVideo.campaign_id == campaign_id).all()
        if any(normalize_link(link) == normalized for (link,) in existing):
            return None, "Video already submitted to this campaign"

        video = CampaignVideo(
            campaign_id=campaign_id,
            platform=detected,
            video_link=video_link,
            submitted_by=user.id,
            submitted_at=datetime.utcnow()
        )
        db.add(video)
        db.commit()
        db.refresh(video)

        return video, None

    @staticmethod
    def list_videos(db: Session, campaign_id: UUID, user: Optional[User] = None) -> List[CampaignVideo]:
        """Campaign submissions, newest first; limited to the user's own when given."""
        query = db.query(CampaignVideo).filter(CampaignVideo.campaign_id == campaign_id)
        if user is not None:
            query = query.filter(CampaignVideo.submitted_by == user.id)
        return query.order_by(CampaignVideo.submitted_at.desc()).all()

    @staticmethod
    def save_prizes(db: Session, campaign_id: UUID, prizes: List[Dict]) -> Tuple[Optional[List[CompetitionPrize]], Optional[str]]:
        """Replace the prize table of a campaign."""
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return None, "Campaign not found"

        positions = [prize["position"] for prize in prizes]
        if len(positions) != len(set(positions)):
            return None, "Duplicate prize position"

        db.query(CompetitionPrize).filter(CompetitionPrize.campaign_id == campaign_id).delete()
        for prize in prizes:
            db.add(CompetitionPrize(
                campaign_id=campaign_id,
                position=prize["position"],
                prize_amount=prize["prize_amount"]
            ))

        db.commit()
        return CampaignService.list_prizes(db, campaign_id), None

    @staticmethod
    def list_prizes(db: Session, campaign_id: UUID) -> List[CompetitionPrize]:
        return db.query(CompetitionPrize).filter(
            CompetitionPrize.campaign_id == campaign_id
        ).order_by(CompetitionPrize.position).all()

    @staticmethod
    def get_summary(db: Session, campaign_id: UUID) -> Dict:
        """Campaign-wide totals over every submission."""
        totals = db.query(
            func.coalesce(func.sum(CampaignVideo.views), 0),
            func.coalesce(func.sum(CampaignVideo.likes), 0),
            func.coalesce(func.sum(CampaignVideo.comments), 0),
            func.coalesce(func.sum(CampaignVideo.shares), 0),
            func.count(CampaignVideo.id)
        ).filter(CampaignVideo.campaign_id == campaign_id).one()

        total_views, total_likes, total_comments, total_shares, total_posts = (int(value or 0) for value in totals)

        total_clippers = db.query(func.count(CampaignParticipant.id)).filter(
            CampaignParticipant.campaign_id == campaign_id,
            CampaignParticipant.status == "approved"
        ).scalar() or 0

        return {
            "total_views": total_views,
            "total_likes": total_likes,
            "total_comments": total_comments,
            "total_shares": total_shares,
            "total_posts": total_posts,
            "total_clippers": total_clippers,
            "engagement_rate": EngagementCalculator.calculate_like_rate(total_likes, total_views),
        }

    @staticmethod
    def get_ranking(db: Session, campaign_id: UUID, limit: int = 20) -> List[Dict]:
        """
        Creators of a campaign ranked by views.

        Each entry carries the creator's profile, totals, position and the
        earnings the campaign's formula gives for those totals.
        """
        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return []

        videos = db.query(CampaignVideo).filter(CampaignVideo.campaign_id == campaign_id).all()
        ranking = aggregate_by_creator(videos)[:limit]
        prizes = prize_map(db, campaign_id)

        users = {
            user.id: user
            for user in db.query(User).filter(User.id.in_([entry["user_id"] for entry in ranking])).all()
        } if ranking else {}

        for entry in ranking:
            user = users.get(entry["user_id"])
            entry["username"] = user.username if user else None
            entry["avatar_url"] = user.avatar_url if user else None
            entry["estimated_earnings"] = EarningsCalculator.calculate_amount(
                campaign,
                entry["total_views"],
                entry["total_videos"],
                entry["position"],
                prizes
            )

        return ranking

    @staticmethod
    def get_platform_distribution(db: Session, campaign_id: UUID) -> List[Dict]:
        """Views and submission count per platform."""
        rows = db.query(
            CampaignVideo.platform,
            func.coalesce(func.sum(CampaignVideo.views), 0),
            func.count(CampaignVideo.id)
        ).filter(
            CampaignVideo.campaign_id == campaign_id
        ).group_by(CampaignVideo.platform).all()

        distribution = [
            {"platform": platform, "views": int(views or 0), "videos": count}
            for platform, views, count in rows
        ]
        distribution.sort(key=lambda item: item["views"], reverse=True)
        return distribution

    @staticmethod
    def calculate_amount(campaign: Campaign, views: int, videos: int, position: Optional[int] = None, prizes: Optional[Dict[int, float]] = None) -> float:
        return EarningsCalculator.calculate_amount(campaign, views, videos, position, prizes)
