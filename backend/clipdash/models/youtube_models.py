"""YouTube platform database models."""

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, BigInteger, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipdash.database import Base


class YouTubeAccount(Base):
    """YouTube channel tracked for a creator."""
    __tablename__ = "youtube_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "username", name="uq_youtube_accounts_user_username"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    username = Column(String(255), nullable=False, index=True)  # Handle, channel ID or URL as entered
    channel_id = Column(String(100))  # YouTube channel ID (UC...)
    display_name = Column(String(255))
    profile_image_url = Column(Text)
    description = Column(Text)  # Truncated to 500 characters

    # Statistics
    subscribers_count = Column(BigInteger, default=0)
    videos_count = Column(Integer, default=0)
    total_views = Column(BigInteger, default=0)  # Channel lifetime views

    # Status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    approval_status = Column(String(20), default="pending", nullable=False, index=True)
    last_synced_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="youtube_accounts")
    videos = relationship("YouTubeVideo", back_populates="account", cascade="all, delete-orphan")
    history = relationship("YouTubeMetricsHistory", back_populates="account", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<YouTubeAccount(username='{self.username}', subscribers={self.subscribers_count})>"


class YouTubeVideo(Base):
    """Video or short from a YouTube channel."""
    __tablename__ = "youtube_videos"
    __table_args__ = (
        UniqueConstraint("account_id", "video_id", name="uq_youtube_videos_account_video"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("youtube_accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    # Video identification
    video_id = Column(String(50), nullable=False, index=True)
    video_url = Column(String(500))

    # Video content
    title = Column(Text)
    description = Column(Text)
    thumbnail_url = Column(Text)

    # Engagement metrics
    views_count = Column(BigInteger, default=0)
    likes_count = Column(BigInteger, default=0)
    comments_count = Column(BigInteger, default=0)

    duration = Column(String(20))
    is_short = Column(Boolean, default=False)
    published_at = Column(DateTime, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    account = relationship("YouTubeAccount", back_populates="videos")

    def __repr__(self):
        return f"<YouTubeVideo(video_id='{self.video_id}', views={self.views_count})>"


class YouTubeMetricsHistory(Base):
    """Point-in-time snapshot written after each sync."""
    __tablename__ = "youtube_metrics_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("youtube_accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    subscribers_count = Column(BigInteger, default=0)
    views_count = Column(BigInteger, default=0)
    likes_count = Column(BigInteger, default=0)
    comments_count = Column(BigInteger, default=0)

    recorded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    account = relationship("YouTubeAccount", back_populates="history")
