"""Pydantic schemas for campaigns, participants and submissions."""

from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import date, datetime
from uuid import UUID

from clipdash.models.campaign_models import CAMPAIGN_TYPES
from clipdash.platforms import PLATFORMS


# ============================================
# Campaign Schemas
# ============================================

class CampaignBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    platforms: List[str] = Field(default_factory=lambda: list(PLATFORMS))
    campaign_type: str = "pay_per_view"
    payment_rate: float = Field(0, ge=0)
    min_views: int = Field(0, ge=0)
    max_paid_views: int = Field(0, ge=0)
    prize_pool: float = Field(0, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @validator('campaign_type')
    def campaign_type_known(cls, v):
        if v not in CAMPAIGN_TYPES:
            raise ValueError(f'campaign_type must be one of {", ".join(CAMPAIGN_TYPES)}')
        return v

    @validator('platforms')
    def platforms_known(cls, v):
        unknown = [p for p in (v or []) if p not in PLATFORMS]
        if unknown:
            raise ValueError(f'Unsupported platform: {unknown[0]}')
        return v


class CampaignCreate(CampaignBase):
    """Schema for creating a campaign; owner_ids are the sponsoring client users."""
    is_active: bool = True
    owner_ids: List[UUID] = Field(default_factory=list)


class CampaignUpdate(BaseModel):
    """Schema for updating a campaign; only fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    platforms: Optional[List[str]] = None
    campaign_type: Optional[str] = None
    payment_rate: Optional[float] = Field(None, ge=0)
    min_views: Optional[int] = Field(None, ge=0)
    max_paid_views: Optional[int] = Field(None, ge=0)
    prize_pool: Optional[float] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class CampaignResponse(CampaignBase):
    id: UUID
    is_active: bool
    platforms: Optional[List[str]] = None
    payment_rate: Optional[float] = None
    min_views: Optional[int] = None
    max_paid_views: Optional[int] = None
    prize_pool: Optional[float] = None
    created_by: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Participant Schemas
# ============================================

class ParticipantResponse(BaseModel):
    id: UUID
    campaign_id: UUID
    user_id: UUID
    status: str
    applied_at: datetime
    approved_at: Optional[datetime] = None
    approved_by: Optional[UUID] = None

    class Config:
        from_attributes = True


# ============================================
# Video Submission Schemas
# ============================================

class VideoSubmit(BaseModel):
    video_link: str = Field(..., min_length=1, max_length=500)
    platform: Optional[str] = Field(None, pattern="^(instagram|tiktok|youtube)$")


class CampaignVideoResponse(BaseModel):
    id: UUID
    campaign_id: UUID
    platform: str
    video_link: str
    submitted_by: UUID
    submitted_at: datetime
    verified: Optional[bool] = False
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    last_metrics_update: Optional[datetime] = None

    class Config:
        from_attributes = True


class VideoHistoryResponse(BaseModel):
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0
    recorded_at: date

    class Config:
        from_attributes = True


# ============================================
# Prize Schemas
# ============================================

class PrizeItem(BaseModel):
    position: int = Field(..., ge=1)
    prize_amount: float = Field(..., ge=0)

    class Config:
        from_attributes = True


class PrizesUpdate(BaseModel):
    prizes: List[PrizeItem]


# ============================================
# Dashboard Schemas
# ============================================

class CampaignSummary(BaseModel):
    total_views: int
    total_likes: int
    total_comments: int
    total_shares: int
    total_posts: int
    total_clippers: int
    engagement_rate: int


class RankingEntry(BaseModel):
    user_id: UUID
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    position: int
    total_videos: int
    total_views: int
    total_likes: int
    estimated_earnings: float


class PlatformDistributionEntry(BaseModel):
    platform: str
    views: int
    videos: int


class VideoMetricsSyncResponse(BaseModel):
    synced: int
    failed: int
    errors: List[str]


class AggregatedMetricsResponse(BaseModel):
    campaign_id: UUID
    total_videos: int
    matched_videos: int
    total_views: int
    total_likes: int
    total_comments: int
    total_shares: int
