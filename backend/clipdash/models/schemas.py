"""Pydantic schemas for users, tracked accounts and their content."""

from pydantic import BaseModel, Field, validator
from typing import Dict, List, Optional
from datetime import datetime
from uuid import UUID


# ============================================
# User Schemas
# ============================================

class UserResponse(BaseModel):
    """Schema for the current user's profile."""
    id: UUID
    email: str
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Account Schemas
# ============================================

class AccountCreate(BaseModel):
    """Schema for registering an account; username, handle, channel ID or profile URL."""
    username: str = Field(..., min_length=1, max_length=500)

    @validator('username')
    def username_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Username is required')
        return v.strip()


class AccountBase(BaseModel):
    id: UUID
    user_id: UUID
    username: str
    display_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_active: bool
    approval_status: str
    last_synced_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class InstagramAccountResponse(AccountBase):
    profile_url: Optional[str] = None
    bio: Optional[str] = None
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    total_views: int = 0
    scraped_posts_count: int = 0


class TikTokAccountResponse(AccountBase):
    bio: Optional[str] = None
    followers_count: int = 0
    following_count: int = 0
    likes_count: int = 0
    videos_count: int = 0


class YouTubeAccountResponse(AccountBase):
    channel_id: Optional[str] = None
    description: Optional[str] = None
    subscribers_count: int = 0
    videos_count: int = 0
    total_views: int = 0


class PendingAccountResponse(BaseModel):
    """Account waiting for admin approval, from any platform."""
    platform: str
    id: UUID
    username: str
    display_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    followers_count: int = 0
    content_count: int = 0
    owner_username: Optional[str] = None
    created_at: datetime


# ============================================
# Content Schemas
# ============================================

class InstagramPostResponse(BaseModel):
    id: UUID
    post_url: str
    post_type: Optional[str] = None
    thumbnail_url: Optional[str] = None
    caption: Optional[str] = None
    likes_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    shares_count: int = 0
    posted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TikTokVideoResponse(BaseModel):
    id: UUID
    video_id: str
    video_url: Optional[str] = None
    caption: Optional[str] = None
    thumbnail_url: Optional[str] = None
    views_count: int = 0
    likes_count: int = 0
    comments_count: int = 0
    shares_count: int = 0
    music_title: Optional[str] = None
    duration: Optional[int] = None
    posted_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class YouTubeVideoResponse(BaseModel):
    id: UUID
    video_id: str
    video_url: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    views_count: int = 0
    likes_count: int = 0
    comments_count: int = 0
    duration: Optional[str] = None
    is_short: bool = False
    published_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================
# Metrics History Schemas
# ============================================

class InstagramHistoryResponse(BaseModel):
    followers_count: int = 0
    likes_count: int = 0
    comments_count: int = 0
    views_count: int = 0
    recorded_at: datetime

    class Config:
        from_attributes = True


class TikTokHistoryResponse(BaseModel):
    followers_count: int = 0
    likes_count: int = 0
    recorded_at: datetime

    class Config:
        from_attributes = True


class YouTubeHistoryResponse(BaseModel):
    subscribers_count: int = 0
    views_count: int = 0
    likes_count: int = 0
    comments_count: int = 0
    recorded_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Sync Schemas
# ============================================

class PlatformSyncStats(BaseModel):
    synced: int = 0
    errors: int = 0
    accounts: Optional[List[str]] = None


class SyncAllResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    results: Optional[Dict[str, PlatformSyncStats]] = None


class VideoDetailsRequest(BaseModel):
    """Look up a video by URL, or by platform and id."""
    video_url: Optional[str] = None
    platform: Optional[str] = Field(None, pattern="^(instagram|tiktok|youtube)$")
    video_id: Optional[str] = None
    update_database: bool = False
