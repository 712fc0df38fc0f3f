"""Instagram platform database models."""

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, ForeignKey, BigInteger, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipdash.database import Base


class InstagramAccount(Base):
    """Instagram profile tracked for a creator."""
    __tablename__ = "instagram_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "username", name="uq_instagram_accounts_user_username"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    username = Column(String(255), nullable=False, index=True)
    profile_url = Column(String(500))
    display_name = Column(String(255))
    profile_image_url = Column(Text)
    bio = Column(Text)

    # Statistics
    followers_count = Column(BigInteger, default=0)
    following_count = Column(BigInteger, default=0)
    posts_count = Column(Integer, default=0)
    total_views = Column(BigInteger, default=0)
    scraped_posts_count = Column(Integer, default=0)

    # Status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    approval_status = Column(String(20), default="pending", nullable=False, index=True)
    last_synced_at = Column(DateTime)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="instagram_accounts")
    posts = relationship("InstagramPost", back_populates="account", cascade="all, delete-orphan")
    history = relationship("InstagramMetricsHistory", back_populates="account", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<InstagramAccount(username='{self.username}', followers={self.followers_count})>"


class InstagramPost(Base):
    """Post or reel scraped from an Instagram profile."""
    __tablename__ = "instagram_posts"
    __table_args__ = (
        UniqueConstraint("account_id", "post_url", name="uq_instagram_posts_account_url"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("instagram_accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    post_url = Column(String(500), nullable=False, index=True)
    post_type = Column(String(20), default="post")  # post, video or carousel
    thumbnail_url = Column(Text)
    caption = Column(Text)

    # Engagement metrics
    likes_count = Column(BigInteger, default=0)
    comments_count = Column(BigInteger, default=0)
    views_count = Column(BigInteger, default=0)
    shares_count = Column(BigInteger, default=0)

    posted_at = Column(DateTime, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    account = relationship("InstagramAccount", back_populates="posts")

    def __repr__(self):
        return f"<InstagramPost(url='{self.post_url}', views={self.views_count})>"


class InstagramMetricsHistory(Base):
    """Point-in-time snapshot written after each sync."""
    __tablename__ = "instagram_metrics_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid, ForeignKey("instagram_accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    followers_count = Column(BigInteger, default=0)
    likes_count = Column(BigInteger, default=0)
    comments_count = Column(BigInteger, default=0)
    views_count = Column(BigInteger, default=0)

    recorded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    account = relationship("InstagramAccount", back_populates="history")

    def __repr__(self):
        return f"<InstagramMetricsHistory(account_id={self.account_id}, followers={self.followers_count})>"
