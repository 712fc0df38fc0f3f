"""Database models."""

from clipdash.models.user import User, UserRole
from clipdash.models.instagram_models import InstagramAccount, InstagramPost, InstagramMetricsHistory
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo, TikTokMetricsHistory
from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo, YouTubeMetricsHistory
from clipdash.models.campaign_models import (
    Campaign,
    CampaignOwner,
    CampaignParticipant,
    CampaignVideo,
    CompetitionPrize,
    VideoMetricsHistory
)
from clipdash.models.wallet_models import CampaignPaymentRecord, UserWallet, WalletTransaction, PayoutRequest

__all__ = [
    "User", "UserRole",
    "InstagramAccount", "InstagramPost", "InstagramMetricsHistory",
    "TikTokAccount", "TikTokVideo", "TikTokMetricsHistory",
    "YouTubeAccount", "YouTubeVideo", "YouTubeMetricsHistory",
    "Campaign", "CampaignOwner", "CampaignParticipant", "CampaignVideo", "CompetitionPrize", "VideoMetricsHistory",
    "CampaignPaymentRecord", "UserWallet", "WalletTransaction", "PayoutRequest",
]
