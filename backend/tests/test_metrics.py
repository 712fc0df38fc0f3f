"""
Tests for creator, admin and client dashboard metrics.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from clipdash.models.user import User
from clipdash.models.campaign_models import Campaign, CampaignOwner
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo
from clipdash.services.metrics_service import MetricsService


@pytest.fixture
def all_accounts(instagram_account, tiktok_account, youtube_account):
    return instagram_account, tiktok_account, youtube_account


@pytest.fixture
def owned_campaign(test_db: Session, campaign: Campaign, client_user: User) -> Campaign:
    test_db.add(CampaignOwner(campaign_id=campaign.id, user_id=client_user.id))
    test_db.commit()
    return campaign


@pytest.mark.unit
class TestMetricsService:
    """Test dashboard aggregation."""

    def test_social_metrics(self, test_db: Session, test_user: User, all_accounts):
        metrics = MetricsService.get_social_metrics(test_db, test_user)

        assert metrics["totalFollowers"] == 3_500
        assert metrics["totalViews"] == 24_000
        # TikTok likes include the profile heart count
        assert metrics["totalLikes"] == 210 + 30_800 + 150
        assert metrics["totalComments"] == 81
        assert metrics["totalVideos"] == 4
        assert metrics["engagementRate"] == pytest.approx((31_160 + 81) / 24_000 * 100)
        assert metrics["accountsCount"] == {"instagram": 1, "tiktok": 1, "youtube": 1, "total": 3}
        assert metrics["platformBreakdown"]["youtube"]["views"] == 3_000

    def test_inactive_accounts_excluded(self, test_db: Session, test_user: User, tiktok_account: TikTokAccount):
        tiktok_account.is_active = False
        test_db.commit()

        metrics = MetricsService.get_social_metrics(test_db, test_user)

        assert metrics["totalFollowers"] == 0
        assert metrics["accountsCount"]["total"] == 0
        assert metrics["engagementRate"] == 0

    def test_users_only_count_their_accounts(
        self, test_db: Session, test_user2: User, admin_user: User, all_accounts
    ):
        assert MetricsService.get_social_metrics(test_db, test_user2)["totalViews"] == 0
        assert MetricsService.get_social_metrics(test_db, admin_user)["totalViews"] == 24_000

    def test_distribution_skips_empty_platforms(self, test_db: Session, test_user: User, tiktok_account: TikTokAccount):
        summary = MetricsService.get_social_metrics(test_db, test_user)

        distribution = MetricsService.get_platform_distribution(summary)

        assert [entry["platform"] for entry in distribution] == ["tiktok"]
        assert distribution[0]["views"] == 10_000
        assert distribution[0]["followers"] == 2_000

    def test_client_metrics(
        self,
        test_db: Session,
        test_user: User,
        test_user2: User,
        client_user: User,
        owned_campaign: Campaign,
        make_participant,
        all_accounts
    ):
        make_participant(owned_campaign, test_user)
        make_participant(owned_campaign, test_user2, status="pending")

        pending = TikTokAccount(user_id=test_user.id, username="pending.tt", followers_count=99_999)
        test_db.add(pending)
        test_db.flush()
        test_db.add(TikTokVideo(account_id=pending.id, video_id="7311111111111111111", views_count=1_000_000))
        test_db.commit()

        metrics = MetricsService.get_client_metrics(test_db, client_user)

        assert metrics["accountsCount"]["tiktok"] == 1
        assert metrics["totalFollowers"] == 3_500
        # Channel lifetime views count for clients
        assert metrics["platformBreakdown"]["youtube"]["views"] == 93_000
        assert metrics["topClippers"] == [{
            "user_id": test_user.id,
            "username": "creator",
            "avatar_url": None,
            "platform": "youtube",
            "views": 93_000,
            "followers": 500,
        }]

    def test_client_without_campaigns(self, test_db: Session, client_user: User, all_accounts):
        metrics = MetricsService.get_client_metrics(test_db, client_user)

        assert metrics["totalViews"] == 0
        assert metrics["accountsCount"]["total"] == 0
        assert metrics["topClippers"] == []

    def test_client_without_approved_participants(
        self, test_db: Session, client_user: User, test_user: User, owned_campaign: Campaign, make_participant
    ):
        make_participant(owned_campaign, test_user, status="pending")

        assert MetricsService.get_client_metrics(test_db, client_user)["topClippers"] == []


@pytest.mark.api
class TestMetricsEndpoints:
    """Test dashboard endpoints."""

    def test_social(self, client: TestClient, auth_headers: dict, all_accounts):
        response = client.get("/api/metrics/social", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["totalViews"] == 24_000

    def test_distribution(self, client: TestClient, auth_headers: dict, all_accounts):
        response = client.get("/api/metrics/distribution", headers=auth_headers)

        assert response.status_code == 200
        assert {entry["platform"] for entry in response.json()} == {"instagram", "tiktok", "youtube"}

    def test_client_dashboard(self, client: TestClient, client_headers: dict, owned_campaign: Campaign):
        response = client.get("/api/metrics/client", headers=client_headers)

        assert response.status_code == 200
        assert response.json()["topClippers"] == []

    def test_client_dashboard_forbidden_for_creators(self, client: TestClient, auth_headers: dict):
        response = client.get("/api/metrics/client", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Client access required"
