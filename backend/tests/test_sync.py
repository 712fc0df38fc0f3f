"""
Tests for account sync orchestration and the sync endpoints.
"""

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from unittest.mock import Mock, patch

from clipdash.models.user import User
from clipdash.models.instagram_models import InstagramAccount
from clipdash.models.tiktok_models import TikTokAccount
from clipdash.platforms.apify_api import ApifyAPI
from clipdash.platforms.errors import ProviderCreditsError, ProviderRateLimitError
from clipdash.services.logging_service import app_metrics
from clipdash.services.sync_service import batch_sync_instagram, sync_account, sync_all_accounts


def make_collectors(**overrides):
    collectors = {}
    for platform in ("instagram", "tiktok", "youtube"):
        collector = Mock()
        collector.collect.return_value = {"platform": platform}
        collectors[platform] = collector
    for platform, side_effect in overrides.items():
        collectors[platform].collect.side_effect = side_effect
    return collectors


def add_accounts(db: Session, user: User, model, usernames, **fields):
    accounts = []
    for username in usernames:
        account = model(user_id=user.id, username=username, **fields)
        db.add(account)
        accounts.append(account)
    db.commit()
    return accounts


@pytest.mark.unit
class TestSyncService:
    """Test sync orchestration."""

    def test_sync_all_counts_failures_without_stopping(self, test_db: Session, test_user: User):
        add_accounts(test_db, test_user, TikTokAccount, ["a", "b", "c"])
        add_accounts(test_db, test_user, InstagramAccount, ["ig"])
        add_accounts(test_db, test_user, InstagramAccount, ["gone"], is_active=False)

        collectors = make_collectors(tiktok=[
            {"platform": "tiktok"},
            ProviderRateLimitError("ScrapeCreators rate limit reached. Please try again later.", "scrapecreators"),
            {"platform": "tiktok"},
        ])

        result = sync_all_accounts(test_db, collectors)

        assert result["success"] is True
        assert result["message"] == "Auto-sync completed"
        assert result["results"]["tiktok"] == {"synced": 2, "errors": 1}
        assert result["results"]["instagram"] == {"synced": 1, "errors": 0}
        assert result["results"]["youtube"] == {"synced": 0, "errors": 0}
        assert collectors["tiktok"].collect.call_count == 3

        metrics = app_metrics.get_metrics()
        assert metrics["sync_runs"]["total_runs"] == 1
        assert metrics["sync_runs"]["by_platform"]["tiktok"] == {"success": 2, "failed": 1}
        assert metrics["provider_errors"] == {"429": 1}

    def test_sync_all_reports_batch_failure(self, test_db: Session):
        with patch("clipdash.services.sync_service.build_collectors", side_effect=RuntimeError("broken config")):
            result = sync_all_accounts(test_db)

        assert result == {"success": False, "error": "broken config"}

    def test_sync_account_reraises(self, test_db: Session, test_user: User):
        account = add_accounts(test_db, test_user, TikTokAccount, ["a"])[0]
        collectors = make_collectors(tiktok=ProviderCreditsError("ScrapeCreators credits exhausted. Please top up your account.", "scrapecreators"))

        with pytest.raises(ProviderCreditsError):
            sync_account(test_db, "tiktok", account, collectors)

        assert app_metrics.get_metrics()["provider_errors"] == {"402": 1}

    def test_batch_sync_instagram_pauses_between_accounts(self, test_db: Session, test_user: User):
        add_accounts(test_db, test_user, InstagramAccount, ["one", "two", "three"])
        collector = Mock()
        collector.collect.side_effect = [{}, Exception("Timeout waiting for Apify run"), {}]
        sleep = Mock()

        result = batch_sync_instagram(test_db, collector, delay_seconds=0.4, sleep=sleep)

        assert sleep.call_count == 2
        sleep.assert_called_with(0.4)
        assert result["success"] is False
        assert result["totalAccounts"] == 3
        assert result["totalSynced"] == 2
        assert result["totalErrors"] == 1
        assert result["results"]["instagram"]["accounts"] == ["one", "two (error)", "three"]
        assert result["message"] == "Synced 2 of 3 accounts with 1 errors"
        assert "completedAt" in result

    def test_batch_sync_without_accounts(self, test_db: Session):
        result = batch_sync_instagram(test_db, Mock(), delay_seconds=0, sleep=Mock())

        assert result["success"] is True
        assert result["totalAccounts"] == 0
        assert result["message"] == "Synced 0 of 0 accounts"


@pytest.mark.api
class TestSyncEndpoints:
    """Test sync endpoints and provider error responses."""

    def test_sync_own_account(self, client: TestClient, auth_headers: dict, tiktok_account: TikTokAccount):
        collectors = make_collectors()
        collectors["tiktok"].collect.return_value = {"platform": "tiktok", "new_videos": 3}

        with patch("clipdash.services.sync_service.build_collectors", return_value=collectors):
            response = client.post(f"/api/accounts/tiktok/{tiktok_account.id}/sync", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "platform": "tiktok", "new_videos": 3}

    @pytest.mark.parametrize("error, status_code", [
        (ProviderCreditsError("ScrapeCreators credits exhausted. Please top up your account.", "scrapecreators"), 402),
        (ProviderRateLimitError("ScrapeCreators rate limit reached. Please try again later.", "scrapecreators"), 429),
    ])
    def test_provider_errors_are_mapped(
        self, client: TestClient, auth_headers: dict, tiktok_account: TikTokAccount, error, status_code
    ):
        collectors = make_collectors(tiktok=error)

        with patch("clipdash.services.sync_service.build_collectors", return_value=collectors):
            response = client.post(f"/api/accounts/tiktok/{tiktok_account.id}/sync", headers=auth_headers)

        assert response.status_code == status_code
        assert response.json() == {"success": False, "error": error.message}

    def test_cannot_sync_someone_elses_account(
        self, client: TestClient, auth_headers2: dict, tiktok_account: TikTokAccount
    ):
        response = client.post(f"/api/accounts/tiktok/{tiktok_account.id}/sync", headers=auth_headers2)

        assert response.status_code == 404

    def test_sync_all_requires_admin(self, client: TestClient, auth_headers: dict):
        response = client.post("/api/admin/sync-all", headers=auth_headers)

        assert response.status_code == 403

    def test_sync_all(self, client: TestClient, admin_headers: dict, tiktok_account: TikTokAccount):
        with patch("clipdash.services.sync_service.build_collectors", return_value=make_collectors()):
            response = client.post("/api/admin/sync-all", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["results"]["tiktok"] == {"synced": 1, "errors": 0}
        assert "error" not in data

    def test_sync_all_failure_is_500(self, client: TestClient, admin_headers: dict):
        with patch("clipdash.services.sync_service.build_collectors", side_effect=RuntimeError("broken config")):
            response = client.post("/api/admin/sync-all", headers=admin_headers)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "broken config"}

    def test_batch_sync_instagram(self, client: TestClient, admin_headers: dict, instagram_account: InstagramAccount):
        collectors = make_collectors()

        with patch("clipdash.services.sync_service.build_collectors", return_value=collectors):
            response = client.post("/api/admin/batch-sync/instagram", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["totalSynced"] == 1
        assert data["results"]["instagram"]["accounts"] == ["creator.ig"]
        collectors["instagram"].collect.assert_called_once()

    def test_test_apify(self, client: TestClient, admin_headers: dict):
        api = Mock()
        api.run_instagram_scraper.return_value = {"runId": "r", "datasetId": "d", "items": [], "itemsCount": 0}

        with patch("clipdash.routers.admin.build_apify_api", return_value=api):
            response = client.post("/api/admin/test-apify", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["profileUrl"] == "https://www.instagram.com/instagram/"
        assert data["runId"] == "r"
        api.run_instagram_scraper.assert_called_once_with(
            "https://www.instagram.com/instagram/", results_type="details", results_limit=5
        )

    def test_test_apify_non_json_body(self, client: TestClient, admin_headers: dict):
        gateway_page = Mock(status_code=200, ok=True, text="<html>Bad gateway</html>")
        gateway_page.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
        session = Mock()
        session.request.return_value = gateway_page
        api = ApifyAPI("token", session=session, sleep=Mock())

        with patch("clipdash.routers.admin.build_apify_api", return_value=api):
            response = client.post("/api/admin/test-apify", headers=admin_headers)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Apify returned invalid JSON"}

    def test_test_apify_unexpected_failure_is_mapped(self, client: TestClient, admin_headers: dict):
        api = Mock()
        api.run_instagram_scraper.side_effect = RuntimeError("Apify credits exhausted for this month")

        with patch("clipdash.routers.admin.build_apify_api", return_value=api):
            response = client.post("/api/admin/test-apify", headers=admin_headers)

        assert response.status_code == 402
        assert response.json() == {"success": False, "error": "Provider credits exhausted"}

    def test_test_scrapecreators(self, client: TestClient, admin_headers: dict):
        api = Mock()
        api.tiktok_videos.return_value = {"aweme_list": []}

        with patch("clipdash.routers.admin.build_scrapecreators_api", return_value=api):
            response = client.get(
                "/api/admin/test-scrapecreators",
                headers=admin_headers,
                params={"platform": "tiktok", "username": "creator", "resource": "videos"}
            )

        assert response.status_code == 200
        assert response.json()["endpoint"] == "/v3/tiktok/profile-videos"
        api.tiktok_videos.assert_called_once_with("creator")
