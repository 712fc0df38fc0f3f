"""
Tests for single video lookups.
"""

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from unittest.mock import Mock, patch

from clipdash.models.instagram_models import InstagramPost
from clipdash.models.tiktok_models import TikTokVideo
from clipdash.models.youtube_models import YouTubeVideo
from clipdash.platforms.errors import ProviderRateLimitError
from clipdash.platforms.scrapecreators_api import ScrapeCreatorsAPI
from clipdash.services.video_details_service import (
    VideoDetailsService,
    normalize_instagram,
    normalize_tiktok,
    normalize_youtube
)


TIKTOK_PAYLOAD = {
    "aweme_detail": {
        "aweme_id": "7300000000000000001",
        "desc": "new caption",
        "share_url": "https://www.tiktok.com/@creator.tt/video/7300000000000000001",
        "statistics": {"play_count": 15000, "digg_count": 1200, "comment_count": 60, "share_count": 30},
        "video": {"cover": "https://img/cover.jpg", "duration": 21000},
        "author": {"unique_id": "creator.tt", "nickname": "Creator"},
        "create_time": 1700000000,
    }
}


def make_service(**api_returns):
    api = Mock()
    for method, value in api_returns.items():
        getattr(api, method).return_value = value
    resolver = Mock(return_value="https://www.tiktok.com/@creator.tt/video/7300000000000000001")
    return VideoDetailsService(api=api, resolver=resolver), api, resolver


@pytest.mark.unit
class TestNormalizers:
    """Test provider payload normalization."""

    def test_tiktok(self):
        details = normalize_tiktok(TIKTOK_PAYLOAD, "7300000000000000001")

        assert details["views_count"] == 15000
        assert details["shares_count"] == 30
        assert details["duration"] == 21
        assert details["caption"] == "new caption"
        assert details["author"]["username"] == "creator.tt"
        assert details["published_at"].year == 2023

    def test_instagram(self):
        details = normalize_instagram({
            "data": {
                "xdt_shortcode_media": {
                    "shortcode": "ABC123",
                    "display_url": "https://img/ig.jpg",
                    "video_view_count": 7000,
                    "edge_media_preview_like": {"count": 300},
                    "edge_media_to_parent_comment": {"count": 12},
                    "edge_media_to_caption": {"edges": [{"node": {"text": "hello"}}]},
                    "owner": {"username": "creator.ig"},
                }
            }
        }, "ABC123")

        assert details["video_url"] == "https://www.instagram.com/p/ABC123/"
        assert details["views_count"] == 7000
        assert details["likes_count"] == 300
        assert details["comments_count"] == 12
        assert details["caption"] == "hello"
        assert details["author"]["username"] == "creator.ig"

    def test_youtube(self):
        details = normalize_youtube({
            "id": "dQw4w9WgXcQ",
            "title": "Clip",
            "viewCountText": "1.5K views",
            "likeCountInt": 90,
            "commentCount": "7",
            "thumbnail": {"url": "https://img/yt.jpg"},
            "channel": {"handle": "@creatoryt", "title": "Creator YT"},
        }, "dQw4w9WgXcQ")

        assert details["views_count"] == 1500
        assert details["likes_count"] == 90
        assert details["comments_count"] == 7
        assert details["thumbnail_url"] == "https://img/yt.jpg"
        assert details["author"]["username"] == "creatoryt"


@pytest.mark.unit
class TestVideoDetailsService:
    """Test URL identification and stored content updates."""

    def test_identify(self):
        service, _, _ = make_service()

        assert service.identify("https://www.instagram.com/reel/ABC123/") == ("instagram", "ABC123")
        assert service.identify("https://youtube.com/shorts/abc_DEF-123") == ("youtube", "abc_DEF-123")
        assert service.identify(platform="tiktok", video_id="123") == ("tiktok", "123")

    @pytest.mark.parametrize("kwargs, message", [
        ({}, "Video URL or platform and video_id are required"),
        ({"url": "https://vimeo.com/123"}, "Could not detect platform from URL"),
        ({"url": "https://www.youtube.com/@channel"}, "Could not extract video ID from URL"),
    ])
    def test_identify_errors(self, kwargs, message):
        service, _, _ = make_service()

        with pytest.raises(ValueError, match=message):
            service.identify(**kwargs)

    def test_tiktok_short_link_is_resolved(self):
        service, api, resolver = make_service(tiktok_video=TIKTOK_PAYLOAD)

        details = service.fetch_video_details(url="https://vm.tiktok.com/ZMabc123/")

        resolver.assert_called_once_with("https://vm.tiktok.com/ZMabc123/")
        api.tiktok_video.assert_called_once_with("https://www.tiktok.com/@_/video/7300000000000000001")
        assert details["video_id"] == "7300000000000000001"

    def test_unresolvable_short_link(self):
        service, _, resolver = make_service()
        resolver.side_effect = requests.ConnectionError("offline")

        with pytest.raises(ValueError, match="Could not extract video ID"):
            service.fetch_video_details(url="https://vm.tiktok.com/ZMabc123/")

    def test_update_stored_tiktok(self, test_db: Session, tiktok_account):
        details = normalize_tiktok(TIKTOK_PAYLOAD, "7300000000000000001")

        assert VideoDetailsService.update_stored_content(test_db, details) == 1

        video = test_db.query(TikTokVideo).one()
        assert video.views_count == 15000
        assert video.caption == "new caption"

    def test_update_stored_instagram_by_shortcode(self, test_db: Session, instagram_account):
        details = {
            "platform": "instagram",
            "video_id": "ABC123",
            "views_count": 9000,
            "likes_count": 400,
            "comments_count": 30,
            "shares_count": 2,
            "thumbnail_url": None,
        }

        assert VideoDetailsService.update_stored_content(test_db, details) == 1

        post = test_db.query(InstagramPost).filter(InstagramPost.post_url.contains("ABC123")).one()
        assert post.views_count == 9000
        other = test_db.query(InstagramPost).filter(InstagramPost.post_url.contains("DEF456")).one()
        assert other.views_count == 6000

    def test_update_stored_youtube(self, test_db: Session, youtube_account):
        details = {
            "platform": "youtube",
            "video_id": "dQw4w9WgXcQ",
            "title": "Renamed",
            "views_count": 4000,
            "likes_count": 160,
            "comments_count": 21,
            "shares_count": 0,
        }

        assert VideoDetailsService.update_stored_content(test_db, details) == 1
        assert test_db.query(YouTubeVideo).one().title == "Renamed"


@pytest.mark.api
class TestVideoDetailsEndpoint:
    """Test POST /api/videos/details."""

    def test_details_and_update(self, client: TestClient, auth_headers: dict, tiktok_account):
        service, _, _ = make_service(tiktok_video=TIKTOK_PAYLOAD)

        with patch("clipdash.routers.videos.VideoDetailsService", wraps=VideoDetailsService) as service_class:
            service_class.return_value = service
            response = client.post(
                "/api/videos/details",
                headers=auth_headers,
                json={
                    "video_url": "https://www.tiktok.com/@creator.tt/video/7300000000000000001",
                    "update_database": True,
                }
            )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["views_count"] == 15000
        assert data["updated_rows"] == 1

    def test_bad_url(self, client: TestClient, auth_headers: dict):
        service, _, _ = make_service()

        with patch("clipdash.routers.videos.VideoDetailsService") as service_class:
            service_class.return_value = service
            response = client.post("/api/videos/details", headers=auth_headers, json={"video_url": "https://vimeo.com/1"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Could not detect platform from URL"

    def test_provider_error(self, client: TestClient, auth_headers: dict):
        service, api, _ = make_service()
        api.youtube_video.side_effect = ProviderRateLimitError(
            "ScrapeCreators rate limit reached. Please try again later.", "scrapecreators"
        )

        with patch("clipdash.routers.videos.VideoDetailsService") as service_class:
            service_class.return_value = service
            response = client.post(
                "/api/videos/details",
                headers=auth_headers,
                json={"platform": "youtube", "video_id": "dQw4w9WgXcQ"}
            )

        assert response.status_code == 429
        assert response.json()["success"] is False

    def test_non_json_provider_body(self, client: TestClient, auth_headers: dict):
        gateway_page = Mock(status_code=200, ok=True, text="<html>Bad gateway</html>")
        gateway_page.json.side_effect = requests.JSONDecodeError("Expecting value", "<html>", 0)
        session = Mock()
        session.get.return_value = gateway_page
        service = VideoDetailsService(api=ScrapeCreatorsAPI("key", session=session), resolver=Mock())

        with patch("clipdash.routers.videos.VideoDetailsService", return_value=service):
            response = client.post(
                "/api/videos/details",
                headers=auth_headers,
                json={"platform": "youtube", "video_id": "dQw4w9WgXcQ"}
            )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "ScrapeCreators returned invalid JSON"}

    def test_unexpected_failure_is_mapped(self, client: TestClient, auth_headers: dict):
        service, api, _ = make_service()
        api.youtube_video.side_effect = RuntimeError("Read timed out. (read timeout=30)")

        with patch("clipdash.routers.videos.VideoDetailsService", return_value=service):
            response = client.post(
                "/api/videos/details",
                headers=auth_headers,
                json={"platform": "youtube", "video_id": "dQw4w9WgXcQ"}
            )

        assert response.status_code == 408
        assert response.json() == {"success": False, "error": "Timeout waiting for the provider to respond"}
