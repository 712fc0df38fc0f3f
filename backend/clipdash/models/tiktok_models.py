"""TikTok platform database models."""

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, BigInteger, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipdash.database import Base


class TikTokAccount(Base):
    """TikTok profile tracked for a creator."""
    __tablename__ = "tiktok_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "username", name="uq_tiktok_accounts_user_username"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    username = Column(String(255), nullable=False, index=True)
    display_name = Column(String(255))
    profile_image_url = Column(Text)
    bio = Column(Text)

    # Statistics
    followers_count = Column(BigInteger, default=0)
    following_count = Column(BigInteger, default=0)
    likes_count = Column(BigInteger, default=0)  # Hearts across the whole profile
    videos_count = Column(Integer, default=0)

    # Status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    approval_status = Column(String(20), default="pending", nullable=False, index=True)
    last_synced_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="tiktok_accounts")
    videos = relationship("TikTokVideo", back_populates="account", cascade="all, delete-orphan")
    history = relationship("TikTokMetricsHistory", back_populates="account", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<TikTokAccount(username='{self.username}', followers={self.followers_count})>"


class TikTokVideo(Base):
    """Video posted on a TikTok profile."""
    __tablename__ = "tiktok_videos"
    __table_args__ = (
        UniqueConstraint("account_id", "video_id", name="uq_tiktok_videos_account_video"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("tiktok_accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    video_id = Column(String(64), nullable=False, index=True)
    video_url = Column(String(500))
    caption = Column(Text)
    thumbnail_url = Column(Text)

    # Engagement metrics
    views_count = Column(BigInteger, default=0)
    likes_count = Column(BigInteger, default=0)
    comments_count = Column(BigInteger, default=0)
    shares_count = Column(BigInteger, default=0)

    music_title = Column(String(500))
    duration = Column(Integer)  # Seconds
    posted_at = Column(DateTime, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    account = relationship("TikTokAccount", back_populates="videos")

    def __repr__(self):
        return f"<TikTokVideo(video_id='{self.video_id}', views={self.views_count})>"


class TikTokMetricsHistory(Base):
    """Point-in-time snapshot written after each sync."""
    __tablename__ = "tiktok_metrics_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("tiktok_accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    followers_count = Column(BigInteger, default=0)
    likes_count = Column(BigInteger, default=0)

    recorded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    account = relationship("TikTokAccount", back_populates="history")
