"""TikTok data collection service (ScrapeCreators)."""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from clipdash.models.tiktok_models import TikTokAccount, TikTokVideo, TikTokMetricsHistory
from clipdash.platforms.scrapecreators_api import ScrapeCreatorsAPI
from clipdash.utils.parsers import to_int, parse_timestamp, clean_handle

logger = logging.getLogger(__name__)

VIDEO_LIMIT = 50


def _url_from(value) -> Optional[str]:
    """TikTok image fields are either a URL or {"url_list": [...]}."""
    if isinstance(value, dict):
        urls = value.get("url_list") or []
        return urls[0] if urls else None
    return value or None


def parse_profile(payload: Dict, username: str) -> Dict:
    """Normalize a profile response."""
    user = payload.get("user") or payload.get("userInfo", {}).get("user") or {}
    stats = payload.get("stats") or payload.get("statsV2") or payload.get("userInfo", {}).get("stats") or {}

    return {
        "username": user.get("uniqueId") or user.get("unique_id") or username,
        "display_name": user.get("nickname"),
        "profile_image_url": user.get("avatarLarger") or user.get("avatarMedium") or user.get("avatarThumb"),
        "bio": user.get("signature"),
        "followers_count": to_int(stats.get("followerCount") or stats.get("follower_count")),
        "following_count": to_int(stats.get("followingCount") or stats.get("following_count")),
        "likes_count": to_int(stats.get("heartCount") or stats.get("heart") or stats.get("diggCount")),
        "videos_count": to_int(stats.get("videoCount") or stats.get("video_count")),
    }


def parse_videos(payload: Dict, username: str) -> List[Dict]:
    """Normalize a profile-videos response, keeping at most VIDEO_LIMIT items."""
    raw_videos = payload.get("aweme_list") or payload.get("videos") or payload.get("data") or []
    videos = []
    seen = set()

    for video in raw_videos[:VIDEO_LIMIT]:
        video_id = str(video.get("aweme_id") or video.get("id") or "")
        if not video_id or video_id in seen:
            continue
        seen.add(video_id)

        statistics = video.get("statistics") or video.get("stats") or {}
        media = video.get("video") or {}
        music = video.get("music") or {}

        videos.append({
            "video_id": video_id,
            "video_url": f"https://www.tiktok.com/@{username}/video/{video_id}",
            "caption": video.get("desc") or video.get("description"),
            "thumbnail_url": _url_from(media.get("cover")) or _url_from(media.get("origin_cover")),
            "views_count": to_int(statistics.get("play_count") or statistics.get("playCount")),
            "likes_count": to_int(statistics.get("digg_count") or statistics.get("diggCount")),
            "comments_count": to_int(statistics.get("comment_count") or statistics.get("commentCount")),
            "shares_count": to_int(statistics.get("share_count") or statistics.get("shareCount")),
            "music_title": music.get("title"),
            # Durations arrive in milliseconds from the v3 endpoint
            "duration": _duration_seconds(media.get("duration") or video.get("duration")),
            "posted_at": parse_timestamp(video.get("create_time") or video.get("createTime")),
        })

    return videos


def _duration_seconds(value) -> Optional[int]:
    seconds = to_int(value)
    if not seconds:
        return None
    return seconds // 1000 if seconds > 1000 else seconds


class TikTokCollector:
    """Collects profile stats and recent videos for tracked TikTok accounts."""

    platform = "tiktok"

    def __init__(self, api: ScrapeCreatorsAPI):
        """
        Initialize TikTok collector.

        Args:
            api: ScrapeCreators client
        """
        self.api = api

    def collect(self, db: Session, account: TikTokAccount) -> Dict:
        """
        Refresh a TikTok account, upsert its videos and record a snapshot.

        A failure fetching videos is logged and does not fail the sync.

        Raises:
            ProviderError: Profile fetch failed (the session is rolled back)
        """
        username = clean_handle(account.username)

        try:
            profile = parse_profile(self.api.tiktok_profile(username), username)

            try:
                videos = parse_videos(self.api.tiktok_videos(username, count=30), username)
            except Exception as e:
                logger.warning(f"Could not fetch TikTok videos for {username}: {e}")
                videos = []

            new_videos = 0
            for video_data in videos:
                existing_video = db.query(TikTokVideo).filter(
                    TikTokVideo.account_id == account.id,
                    TikTokVideo.video_id == video_data["video_id"]
                ).first()

                if existing_video:
                    for field, value in video_data.items():
                        if value is not None and field != "posted_at":
                            setattr(existing_video, field, value)
                else:
                    db.add(TikTokVideo(account_id=account.id, **video_data))
                    new_videos += 1

            account.display_name = profile["display_name"] or account.display_name
            account.profile_image_url = profile["profile_image_url"] or account.profile_image_url
            account.bio = profile["bio"] if profile["bio"] is not None else account.bio
            account.followers_count = profile["followers_count"]
            account.following_count = profile["following_count"]
            account.likes_count = profile["likes_count"]
            account.videos_count = profile["videos_count"]
            account.last_synced_at = datetime.utcnow()

            db.add(TikTokMetricsHistory(
                account_id=account.id,
                followers_count=profile["followers_count"],
                likes_count=profile["likes_count"]
            ))

            db.commit()

            logger.info(f"Collected {len(videos)} TikTok videos ({new_videos} new) for @{username}")

            return {
                "platform": self.platform,
                "username": username,
                "followers_count": profile["followers_count"],
                "videos_collected": len(videos),
                "new_videos": new_videos
            }

        except Exception as e:
            logger.error(f"Error collecting TikTok account @{username}: {e}")
            db.rollback()
            raise
