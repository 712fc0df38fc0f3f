"""
Pytest configuration and shared fixtures for the Clipdash backend tests.
"""

import os

# Settings are read at import time, so the environment is prepared first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test_jwt_secret_key_for_testing_only")
os.environ["REDIS_URL"] = ""
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SENTRY_DSN"] = ""
os.environ["ENVIRONMENT"] = "test"

import pytest
from typing import Generator, Dict
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import Mock

from clipdash.main import app
from clipdash.database import Base, get_db
from clipdash.models.user import User, UserRole
from clipdash.models.instagram_models import InstagramAccount, InstagramPost
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo
from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo
from clipdash.models.campaign_models import Campaign, CampaignParticipant, CampaignVideo
from clipdash.services.logging_service import app_metrics
from clipdash.utils.security import create_access_token


# Database setup
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(test_db: Session) -> TestClient:
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with zeroed application counters."""
    app_metrics.reset()
    yield


# User fixtures
def create_user(db: Session, email: str, username: str, role: str = None) -> User:
    user = User(
        email=email,
        username=username,
        full_name=username.title(),
        is_active=True,
        created_at=datetime.utcnow()
    )
    db.add(user)
    db.flush()
    if role:
        db.add(UserRole(user_id=user.id, role=role))
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User) -> Dict[str, str]:
    token = create_access_token(str(user.id), email=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(test_db: Session) -> User:
    """
    Create a regular creator.
    """
    return create_user(test_db, "creator@example.com", "creator")


@pytest.fixture
def test_user2(test_db: Session) -> User:
    """
    Create a second creator for multi-user tests.
    """
    return create_user(test_db, "creator2@example.com", "creator2")


@pytest.fixture
def admin_user(test_db: Session) -> User:
    return create_user(test_db, "admin@example.com", "admin", role="admin")


@pytest.fixture
def client_user(test_db: Session) -> User:
    """
    Create a campaign client (sponsor).
    """
    return create_user(test_db, "brand@example.com", "brand", role="client")


@pytest.fixture
def auth_headers(test_user: User) -> Dict[str, str]:
    """
    Create authentication headers with JWT token.
    """
    return headers_for(test_user)


@pytest.fixture
def auth_headers2(test_user2: User) -> Dict[str, str]:
    return headers_for(test_user2)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return headers_for(admin_user)


@pytest.fixture
def client_headers(client_user: User) -> Dict[str, str]:
    return headers_for(client_user)


# Platform entity fixtures
@pytest.fixture
def instagram_account(test_db: Session, test_user: User) -> InstagramAccount:
    """
    Create an approved Instagram account with two posts.
    """
    account = InstagramAccount(
        user_id=test_user.id,
        username="creator.ig",
        profile_url="https://www.instagram.com/creator.ig/",
        followers_count=1000,
        posts_count=2,
        approval_status="approved",
        created_at=datetime.utcnow()
    )
    test_db.add(account)
    test_db.flush()

    for i, shortcode in enumerate(["ABC123", "DEF456"]):
        test_db.add(InstagramPost(
            account_id=account.id,
            post_url=f"https://www.instagram.com/reel/{shortcode}/",
            post_type="video",
            likes_count=100 + i * 10,
            comments_count=10 + i,
            views_count=5000 + i * 1000,
            posted_at=datetime.utcnow() - timedelta(days=i)
        ))

    test_db.commit()
    test_db.refresh(account)
    return account


@pytest.fixture
def tiktok_account(test_db: Session, test_user: User) -> TikTokAccount:
    """
    Create an approved TikTok account with one video.
    """
    account = TikTokAccount(
        user_id=test_user.id,
        username="creator.tt",
        followers_count=2000,
        likes_count=30000,
        videos_count=1,
        approval_status="approved",
        created_at=datetime.utcnow()
    )
    test_db.add(account)
    test_db.flush()

    test_db.add(TikTokVideo(
        account_id=account.id,
        video_id="7300000000000000001",
        video_url="https://www.tiktok.com/@creator.tt/video/7300000000000000001",
        views_count=10000,
        likes_count=800,
        comments_count=40,
        shares_count=12,
        posted_at=datetime.utcnow()
    ))

    test_db.commit()
    test_db.refresh(account)
    return account


@pytest.fixture
def youtube_account(test_db: Session, test_user: User) -> YouTubeAccount:
    """
    Create an approved YouTube channel with one video.
    """
    account = YouTubeAccount(
        user_id=test_user.id,
        username="@creatoryt",
        channel_id="UC_test_channel_id",
        subscribers_count=500,
        videos_count=1,
        total_views=90000,
        approval_status="approved",
        created_at=datetime.utcnow()
    )
    test_db.add(account)
    test_db.flush()

    test_db.add(YouTubeVideo(
        account_id=account.id,
        video_id="dQw4w9WgXcQ",
        video_url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        title="Test Video",
        views_count=3000,
        likes_count=150,
        comments_count=20,
        published_at=datetime.utcnow()
    ))

    test_db.commit()
    test_db.refresh(account)
    return account


# Campaign fixtures
@pytest.fixture
def campaign(test_db: Session, admin_user: User) -> Campaign:
    """
    Create an active pay-per-view campaign paying 2.00 per 1000 views.
    """
    campaign = Campaign(
        name="Summer Clips",
        description="Clip the summer event",
        platforms=["instagram", "tiktok", "youtube"],
        campaign_type="pay_per_view",
        payment_rate=2.0,
        min_views=0,
        max_paid_views=0,
        is_active=True,
        created_by=admin_user.id,
        created_at=datetime.utcnow()
    )
    test_db.add(campaign)
    test_db.commit()
    test_db.refresh(campaign)
    return campaign


def add_participant(db: Session, campaign: Campaign, user: User, status: str = "approved") -> CampaignParticipant:
    participant = CampaignParticipant(campaign_id=campaign.id, user_id=user.id, status=status)
    db.add(participant)
    db.commit()
    db.refresh(participant)
    return participant


def add_video(
    db: Session,
    campaign: Campaign,
    user: User,
    link: str,
    platform: str = "tiktok",
    views: int = 0,
    likes: int = 0,
    submitted_at: datetime = None
) -> CampaignVideo:
    video = CampaignVideo(
        campaign_id=campaign.id,
        platform=platform,
        video_link=link,
        submitted_by=user.id,
        submitted_at=submitted_at or datetime.utcnow(),
        views=views,
        likes=likes
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    return video


@pytest.fixture
def approved_participant(test_db: Session, campaign: Campaign, test_user: User) -> CampaignParticipant:
    return add_participant(test_db, campaign, test_user)


# Mock services
@pytest.fixture
def mock_scheduler():
    """
    Mock APScheduler for tests.
    """
    mock = Mock()
    mock.add_job.return_value = Mock(id="test_job_id")
    mock.get_job.return_value = None
    mock.running = True
    return mock


@pytest.fixture
def make_participant(test_db: Session):
    """Factory adding a participant to a campaign."""
    def _make(campaign: Campaign, user: User, status: str = "approved") -> CampaignParticipant:
        return add_participant(test_db, campaign, user, status)
    return _make


@pytest.fixture
def make_video(test_db: Session):
    """Factory adding a submitted video to a campaign."""
    def _make(campaign: Campaign, user: User, link: str, **kwargs) -> CampaignVideo:
        return add_video(test_db, campaign, user, link, **kwargs)
    return _make
