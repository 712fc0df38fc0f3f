"""Dashboard metrics for creators, admins and campaign clients."""

from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from uuid import UUID
import logging

from clipdash.models.user import User
from clipdash.models.campaign_models import CampaignOwner, CampaignParticipant
from clipdash.models.instagram_models import InstagramAccount, InstagramPost
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo
from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo
from clipdash.analytics.engagement_calculator import EngagementCalculator
from clipdash.platforms import PLATFORMS

logger = logging.getLogger(__name__)

SOURCES = {
    "instagram": (InstagramAccount, InstagramPost),
    "tiktok": (TikTokAccount, TikTokVideo),
    "youtube": (YouTubeAccount, YouTubeVideo),
}


def _load_accounts(
    db: Session,
    user_ids: Optional[List[UUID]] = None,
    approved_only: bool = False
) -> Dict[str, List]:
    """Active accounts per platform, optionally limited to some owners and to approved ones."""
    accounts = {}
    for platform, (account_model, _) in SOURCES.items():
        query = db.query(account_model).filter(account_model.is_active == True)  # noqa: E712
        if user_ids is not None:
            query = query.filter(account_model.user_id.in_(user_ids))
        if approved_only:
            query = query.filter(account_model.approval_status == "approved")
        accounts[platform] = query.all()
    return accounts


def _load_content(db: Session, accounts: Dict[str, List]) -> Dict[str, List]:
    content = {}
    for platform, (_, content_model) in SOURCES.items():
        account_ids = [account.id for account in accounts[platform]]
        content[platform] = (
            db.query(content_model).filter(content_model.account_id.in_(account_ids)).all()
            if account_ids else []
        )
    return content


def _followers(platform: str, account) -> int:
    if platform == "youtube":
        return account.subscribers_count or 0
    return account.followers_count or 0


def _breakdown(
    accounts: Dict[str, List],
    content: Dict[str, List],
    include_channel_views: bool
) -> Dict[str, Dict[str, int]]:
    """
    Per-platform totals.

    TikTok likes add the profile-wide heart count to the per-video likes.
    With include_channel_views, YouTube views add the channels' lifetime
    views to the stored video views.
    """
    breakdown = EngagementCalculator.empty_platform_breakdown()

    for platform in PLATFORMS:
        entry = breakdown[platform]
        items = content[platform]

        entry["followers"] = sum(_followers(platform, account) for account in accounts[platform])
        entry["views"] = sum(item.views_count or 0 for item in items)
        entry["likes"] = sum(item.likes_count or 0 for item in items)
        entry["comments"] = sum(item.comments_count or 0 for item in items)
        entry["videos"] = len(items)

        if platform == "tiktok":
            entry["likes"] += sum(account.likes_count or 0 for account in accounts[platform])
        if platform == "youtube" and include_channel_views:
            entry["views"] += sum(account.total_views or 0 for account in accounts[platform])

    return breakdown


def _summarize(breakdown: Dict[str, Dict[str, int]], accounts: Dict[str, List]) -> Dict:
    totals = {key: sum(entry[key] for entry in breakdown.values()) for key in ("followers", "views", "likes", "comments", "videos")}

    accounts_count = {platform: len(accounts[platform]) for platform in PLATFORMS}
    accounts_count["total"] = sum(accounts_count.values())

    return {
        "totalFollowers": totals["followers"],
        "totalViews": totals["views"],
        "totalLikes": totals["likes"],
        "totalComments": totals["comments"],
        "totalVideos": totals["videos"],
        "engagementRate": EngagementCalculator.calculate_engagement_rate(
            totals["likes"], totals["comments"], totals["views"]
        ),
        "accountsCount": accounts_count,
        "platformBreakdown": breakdown,
    }


def empty_metrics() -> Dict:
    metrics = _summarize(
        EngagementCalculator.empty_platform_breakdown(),
        {platform: [] for platform in PLATFORMS}
    )
    metrics["topClippers"] = []
    return metrics


class MetricsService:
    """Service for dashboard metrics."""

    @staticmethod
    def get_social_metrics(db: Session, user: User) -> Dict:
        """
        Creator dashboard totals over active accounts.

        Admins see every account; everyone else sees their own, whatever
        their approval status.
        """
        accounts = _load_accounts(db, None if user.is_admin else [user.id])
        content = _load_content(db, accounts)
        return _summarize(_breakdown(accounts, content, include_channel_views=False), accounts)

    @staticmethod
    def get_platform_distribution(summary: Dict) -> List[Dict]:
        """Platforms that have any views or followers, from a metrics summary."""
        distribution = []
        for platform, entry in summary["platformBreakdown"].items():
            if not entry["views"] and not entry["followers"]:
                continue
            distribution.append({"platform": platform, **entry})
        return distribution

    @staticmethod
    def get_client_metrics(db: Session, client: User) -> Dict:
        """
        Metrics over the creators taking part in the client's campaigns.

        Only approved participants and their approved, active accounts count.
        """
        campaign_ids = [
            campaign_id for (campaign_id,) in
            db.query(CampaignOwner.campaign_id).filter(CampaignOwner.user_id == client.id).all()
        ]
        if not campaign_ids:
            return empty_metrics()

        clipper_ids = list({
            user_id for (user_id,) in
            db.query(CampaignParticipant.user_id).filter(
                CampaignParticipant.campaign_id.in_(campaign_ids),
                CampaignParticipant.status == "approved"
            ).all()
        })
        if not clipper_ids:
            return empty_metrics()

        accounts = _load_accounts(db, clipper_ids, approved_only=True)
        content = _load_content(db, accounts)

        metrics = _summarize(_breakdown(accounts, content, include_channel_views=True), accounts)
        metrics["topClippers"] = MetricsService._top_clippers(db, clipper_ids, accounts, content)
        return metrics

    @staticmethod
    def _top_clippers(
        db: Session,
        clipper_ids: List[UUID],
        accounts: Dict[str, List],
        content: Dict[str, List],
        limit: int = 5
    ) -> List[Dict]:
        """Each creator's best platform by views, top `limit` creators."""
        owner_by_account = {
            (platform, account.id): account.user_id
            for platform in PLATFORMS
            for account in accounts[platform]
        }

        per_user: Dict[UUID, Dict[str, Dict[str, int]]] = {}
        for platform in PLATFORMS:
            for account in accounts[platform]:
                stats = per_user.setdefault(account.user_id, {}).setdefault(platform, {"views": 0, "followers": 0})
                stats["followers"] += _followers(platform, account)
                if platform == "youtube":
                    stats["views"] += account.total_views or 0

            for item in content[platform]:
                user_id = owner_by_account[(platform, item.account_id)]
                per_user[user_id][platform]["views"] += item.views_count or 0

        users = {user.id: user for user in db.query(User).filter(User.id.in_(clipper_ids)).all()}

        clippers = []
        for user_id, platforms in per_user.items():
            best_platform, best = max(platforms.items(), key=lambda pair: pair[1]["views"])
            user = users.get(user_id)
            clippers.append({
                "user_id": user_id,
                "username": user.username if user else None,
                "avatar_url": user.avatar_url if user else None,
                "platform": best_platform,
                "views": best["views"],
                "followers": best["followers"],
            })

        clippers.sort(key=lambda item: item["views"], reverse=True)
        return clippers[:limit]
