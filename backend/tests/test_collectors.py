"""
Unit tests for the Instagram, TikTok and YouTube collectors.
"""

import pytest
from sqlalchemy.orm import Session
from unittest.mock import Mock

from clipdash.models.user import User
from clipdash.models.instagram_models import InstagramAccount, InstagramPost, InstagramMetricsHistory
from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo, TikTokMetricsHistory
from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo, YouTubeMetricsHistory
from clipdash.platforms.errors import ProviderAuthError, ProviderNotFoundError
from clipdash.platforms.instagram.collector import InstagramCollector, parse_post_item, parse_posts
from clipdash.platforms.tiktok.collector import TikTokCollector, parse_profile, parse_videos
from clipdash.platforms.youtube.collector import YouTubeCollector, parse_channel, parse_shorts


TIKTOK_PROFILE = {
    "user": {"uniqueId": "creator.tt", "nickname": "Creator", "avatarLarger": "https://img/avatar.jpg", "signature": "bio"},
    "stats": {"followerCount": 2500, "followingCount": 10, "heartCount": 40000, "videoCount": 2},
}

TIKTOK_VIDEOS = {
    "aweme_list": [
        {
            "aweme_id": "7300000000000000001",
            "desc": "first",
            "statistics": {"play_count": 12000, "digg_count": 900, "comment_count": 50, "share_count": 20},
            "video": {"cover": {"url_list": ["https://img/cover1.jpg"]}, "duration": 15000},
            "create_time": 1700000000,
        },
        {
            "aweme_id": "7300000000000000002",
            "desc": "second",
            "statistics": {"play_count": 3000, "digg_count": 100, "comment_count": 5, "share_count": 1},
            "video": {"cover": "https://img/cover2.jpg", "duration": 30},
            "create_time": 1700000500,
        },
        {"aweme_id": "7300000000000000002", "statistics": {}},
    ]
}


@pytest.mark.unit
@pytest.mark.platform
class TestInstagramParsing:
    """Test Apify item parsing."""

    def test_parse_reel(self):
        post = parse_post_item({
            "url": "https://www.instagram.com/reel/ABC123/",
            "type": "Video",
            "displayUrl": "https://img/1.jpg",
            "caption": "x" * 300,
            "likesCount": 10,
            "commentsCount": 2,
            "videoViewCount": 500,
            "timestamp": "2024-01-01T00:00:00.000Z",
        })

        assert post["post_type"] == "video"
        assert post["views_count"] == 500
        assert len(post["caption"]) == 200
        assert post["posted_at"].year == 2024

    def test_shortcode_fallback_and_types(self):
        assert parse_post_item({"shortCode": "XYZ", "type": "Sidecar"}) == parse_post_item(
            {"url": "https://www.instagram.com/p/XYZ/", "type": "Sidecar"}
        )
        assert parse_post_item({"shortCode": "XYZ", "type": "Sidecar"})["post_type"] == "carousel"
        assert parse_post_item({"shortCode": "XYZ", "type": "Image"})["post_type"] == "post"
        assert parse_post_item({"type": "Image"}) is None

    def test_duplicates_dropped(self):
        items = [{"url": "https://www.instagram.com/p/A/"}, {"url": "https://www.instagram.com/p/A/"}]
        assert len(parse_posts(items)) == 1


@pytest.mark.unit
@pytest.mark.platform
class TestInstagramCollector:
    """Test storing scraped Instagram posts."""

    def test_collect_upserts_posts_and_snapshot(self, test_db: Session, test_user: User):
        account = InstagramAccount(user_id=test_user.id, username="creator.ig")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.run_instagram_scraper.return_value = {
            "runId": "run-1",
            "items": [
                {
                    "url": "https://www.instagram.com/reel/A1/",
                    "type": "Video",
                    "likesCount": 10,
                    "commentsCount": 1,
                    "videoViewCount": 100,
                    "ownerFullName": "Creator IG",
                    "followersCount": 321,
                },
                {"url": "https://www.instagram.com/p/B2/", "likesCount": 5, "commentsCount": 0},
            ],
        }

        result = InstagramCollector(api, results_limit=50).collect(test_db, account)

        api.run_instagram_scraper.assert_called_once_with(
            "https://www.instagram.com/creator.ig/", results_type="posts", results_limit=50
        )
        assert result["posts_collected"] == 2
        assert result["new_posts"] == 2
        assert result["total_views"] == 100
        assert result["run_id"] == "run-1"

        test_db.refresh(account)
        assert account.display_name == "Creator IG"
        assert account.followers_count == 321
        assert account.scraped_posts_count == 2
        assert account.last_synced_at is not None
        assert test_db.query(InstagramMetricsHistory).count() == 1

        # A second scrape updates rows instead of duplicating them
        api.run_instagram_scraper.return_value["items"][0]["videoViewCount"] = 250
        result = InstagramCollector(api).collect(test_db, account)

        assert result["new_posts"] == 0
        assert test_db.query(InstagramPost).count() == 2
        assert result["total_views"] == 250

    def test_collect_failure_propagates(self, test_db: Session, test_user: User):
        account = InstagramAccount(user_id=test_user.id, username="creator.ig")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.run_instagram_scraper.side_effect = ProviderAuthError("Apify API token is invalid or expired", "apify")

        with pytest.raises(ProviderAuthError):
            InstagramCollector(api).collect(test_db, account)

        assert test_db.query(InstagramMetricsHistory).count() == 0


@pytest.mark.unit
@pytest.mark.platform
class TestTikTokCollector:
    """Test TikTok profile and video collection."""

    def test_parse_profile_and_videos(self):
        profile = parse_profile(TIKTOK_PROFILE, "fallback")
        assert profile["username"] == "creator.tt"
        assert profile["likes_count"] == 40000

        videos = parse_videos(TIKTOK_VIDEOS, "creator.tt")
        assert len(videos) == 2
        assert videos[0]["video_url"] == "https://www.tiktok.com/@creator.tt/video/7300000000000000001"
        assert videos[0]["thumbnail_url"] == "https://img/cover1.jpg"
        assert videos[0]["duration"] == 15
        assert videos[1]["thumbnail_url"] == "https://img/cover2.jpg"
        assert videos[1]["duration"] == 30

    def test_collect(self, test_db: Session, test_user: User):
        account = TikTokAccount(user_id=test_user.id, username="@creator.tt")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.tiktok_profile.return_value = TIKTOK_PROFILE
        api.tiktok_videos.return_value = TIKTOK_VIDEOS

        result = TikTokCollector(api).collect(test_db, account)

        api.tiktok_profile.assert_called_once_with("creator.tt")
        assert result["followers_count"] == 2500
        assert result["new_videos"] == 2
        assert test_db.query(TikTokVideo).count() == 2
        assert test_db.query(TikTokMetricsHistory).count() == 1

        test_db.refresh(account)
        assert account.likes_count == 40000
        assert account.display_name == "Creator"

    def test_video_failure_does_not_fail_sync(self, test_db: Session, test_user: User):
        account = TikTokAccount(user_id=test_user.id, username="creator.tt")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.tiktok_profile.return_value = TIKTOK_PROFILE
        api.tiktok_videos.side_effect = ProviderNotFoundError("ScrapeCreators: profile or content not found", "scrapecreators")

        result = TikTokCollector(api).collect(test_db, account)

        assert result["videos_collected"] == 0
        assert result["followers_count"] == 2500

    def test_profile_failure_propagates(self, test_db: Session, test_user: User):
        account = TikTokAccount(user_id=test_user.id, username="creator.tt")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.tiktok_profile.side_effect = ProviderNotFoundError("ScrapeCreators: profile or content not found", "scrapecreators")

        with pytest.raises(ProviderNotFoundError):
            TikTokCollector(api).collect(test_db, account)


@pytest.mark.unit
@pytest.mark.platform
class TestYouTubeCollector:
    """Test YouTube channel collection."""

    def test_parse_channel(self):
        channel = parse_channel(
            {
                "channelId": "UC123",
                "channel": "https://www.youtube.com/@chan",
                "name": "Chan",
                "avatar": {"image": {"sources": [{"url": "small"}, {"url": "large"}]}},
                "subscriberCountText": "1.2M subscribers",
                "videoCountText": "300 videos",
                "viewCountText": "45,678,901 views",
            },
            {"handle": "chan"},
            "chan"
        )

        assert channel["username"] == "chan"
        assert channel["profile_image_url"] == "large"
        assert channel["subscribers_count"] == 1_200_000
        assert channel["videos_count"] == 300
        assert channel["total_views"] == 45_678_901

    def test_parse_shorts(self):
        shorts = parse_shorts({"shorts": [{"videoId": "s1", "viewCount": "12K"}]})
        assert shorts[0]["is_short"] is True
        assert shorts[0]["views_count"] == 12_000

    def test_collect_merges_videos_and_shorts(self, test_db: Session, test_user: User):
        account = YouTubeAccount(user_id=test_user.id, username="@chan")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.youtube_channel.return_value = {"channelId": "UC123", "name": "Chan", "subscriberCount": 900, "viewCount": 5000}
        api.youtube_channel_videos.return_value = {"videos": [
            {"id": "v1", "title": "One", "viewCountInt": 1000, "likeCountInt": 50, "commentCountInt": 5},
            {"id": "s1", "title": "Short", "viewCountInt": 400, "likeCountInt": 20, "commentCountInt": 2},
        ]}
        api.youtube_channel_shorts.return_value = {"shorts": [{"videoId": "s1", "viewCount": 500, "likeCount": 25}]}

        result = YouTubeCollector(api).collect(test_db, account)

        api.youtube_channel.assert_called_once_with(handle="chan", channel_id=None, url=None)
        api.youtube_channel_videos.assert_called_once_with(channel_id="UC123", handle=None)
        assert result["channel_id"] == "UC123"
        assert result["videos_collected"] == 2
        assert test_db.query(YouTubeVideo).count() == 2

        short = test_db.query(YouTubeVideo).filter(YouTubeVideo.video_id == "s1").one()
        assert short.is_short is True
        assert short.video_url == "https://www.youtube.com/shorts/s1"
        assert short.views_count == 500

        history = test_db.query(YouTubeMetricsHistory).one()
        assert history.subscribers_count == 900
        assert history.likes_count == 75

    def test_collect_skips_videos_without_id(self, test_db: Session, test_user: User):
        account = YouTubeAccount(user_id=test_user.id, username="@chan")
        test_db.add(account)
        test_db.commit()

        api = Mock()
        api.youtube_channel.return_value = {"channelId": "UC123", "name": "Chan", "subscriberCount": 900}
        api.youtube_channel_videos.return_value = {"videos": [
            {"id": "v1", "title": "One", "viewCountInt": 1000, "likeCountInt": 50, "commentCountInt": 5},
            {"title": "Upcoming premiere", "viewCountInt": 999, "likeCountInt": 7, "commentCountInt": 1},
        ]}
        api.youtube_channel_shorts.return_value = {"shorts": []}

        result = YouTubeCollector(api).collect(test_db, account)

        assert result["videos_collected"] == 1
        assert [video.video_id for video in test_db.query(YouTubeVideo).all()] == ["v1"]
        assert test_db.query(YouTubeMetricsHistory).one().likes_count == 50
