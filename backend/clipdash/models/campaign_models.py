"""Campaign, participant and submitted video models."""

from sqlalchemy import (
    Column, String, Integer, Text, Boolean, DateTime, Date, ForeignKey, BigInteger,
    Numeric, JSON, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipdash.database import Base


CAMPAIGN_TYPES = ("pay_per_view", "fixed", "competition_daily", "competition_monthly")
PARTICIPANT_STATUSES = ("pending", "approved", "rejected")


class Campaign(Base):
    """Paid campaign creators submit videos to."""
    __tablename__ = "campaigns"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    image_url = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    platforms = Column(JSON, default=list)  # Subset of instagram/tiktok/youtube

    # Payment configuration
    campaign_type = Column(String(30), default="pay_per_view", nullable=False)
    payment_rate = Column(Numeric(12, 2, asdecimal=False), default=0)  # Per 1000 views, or per video when fixed
    min_views = Column(BigInteger, default=0)
    max_paid_views = Column(BigInteger, default=0)  # 0 means uncapped
    prize_pool = Column(Numeric(12, 2, asdecimal=False), default=0)

    start_date = Column(DateTime)
    end_date = Column(DateTime)

    created_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owners = relationship("CampaignOwner", back_populates="campaign", cascade="all, delete-orphan")
    participants = relationship("CampaignParticipant", back_populates="campaign", cascade="all, delete-orphan")
    videos = relationship("CampaignVideo", back_populates="campaign", cascade="all, delete-orphan")
    prizes = relationship(
        "CompetitionPrize",
        back_populates="campaign",
        cascade="all, delete-orphan",
        order_by="CompetitionPrize.position"
    )

    def __repr__(self):
        return f"<Campaign(name='{self.name}', type='{self.campaign_type}')>"


class CampaignOwner(Base):
    """Client account that owns (sponsors) a campaign."""
    __tablename__ = "campaign_owners"
    __table_args__ = (
        UniqueConstraint("campaign_id", "user_id", name="uq_campaign_owners_campaign_user"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    campaign = relationship("Campaign", back_populates="owners")


class CampaignParticipant(Base):
    """Creator taking part in a campaign, gated by approval."""
    __tablename__ = "campaign_participants"
    __table_args__ = (
        UniqueConstraint("campaign_id", "user_id", name="uq_campaign_participants_campaign_user"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False, index=True)

    applied_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    approved_at = Column(DateTime)
    approved_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"))

    # Relationships
    campaign = relationship("Campaign", back_populates="participants")
    user = relationship("User", foreign_keys=[user_id])

    def __repr__(self):
        return f"<CampaignParticipant(campaign_id={self.campaign_id}, status='{self.status}')>"


class CampaignVideo(Base):
    """Video link a creator submitted to a campaign, with its latest metrics."""
    __tablename__ = "campaign_videos"
    __table_args__ = (
        UniqueConstraint("campaign_id", "video_link", name="uq_campaign_videos_campaign_link"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)
    video_link = Column(String(500), nullable=False)
    submitted_by = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    verified = Column(Boolean, default=False)

    # Engagement metrics, refreshed from synced platform content
    views = Column(BigInteger, default=0)
    likes = Column(BigInteger, default=0)
    comments = Column(BigInteger, default=0)
    shares = Column(BigInteger, default=0)
    last_metrics_update = Column(DateTime)

    # Relationships
    campaign = relationship("Campaign", back_populates="videos")
    submitter = relationship("User", foreign_keys=[submitted_by])
    history = relationship("VideoMetricsHistory", back_populates="video", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<CampaignVideo(link='{self.video_link}', views={self.views})>"


class CompetitionPrize(Base):
    """Prize paid to a ranking position in competition campaigns."""
    __tablename__ = "competition_prizes"
    __table_args__ = (
        UniqueConstraint("campaign_id", "position", name="uq_competition_prizes_campaign_position"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    prize_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    campaign = relationship("Campaign", back_populates="prizes")


class VideoMetricsHistory(Base):
    """Daily snapshot of a campaign video's metrics."""
    __tablename__ = "video_metrics_history"
    __table_args__ = (
        UniqueConstraint("video_id", "recorded_at", name="uq_video_metrics_history_video_day"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    video_id = Column(Uuid, ForeignKey("campaign_videos.id", ondelete="CASCADE"), nullable=False, index=True)
    views = Column(BigInteger, default=0)
    likes = Column(BigInteger, default=0)
    comments = Column(BigInteger, default=0)
    shares = Column(BigInteger, default=0)
    recorded_at = Column(Date, nullable=False)

    # Relationships
    video = relationship("CampaignVideo", back_populates="history")
