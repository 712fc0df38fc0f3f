"""YouTube data collection service (ScrapeCreators)."""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from clipdash.models.youtube_models import YouTubeAccount, YouTubeVideo, YouTubeMetricsHistory
from clipdash.platforms.scrapecreators_api import ScrapeCreatorsAPI
from clipdash.utils.parsers import parse_count, parse_timestamp, truncate, normalize_youtube_identifier

logger = logging.getLogger(__name__)

VIDEO_LIMIT = 30
SHORTS_LIMIT = 20


def parse_channel(payload: Dict, identifier: Dict, fallback: str) -> Dict:
    """Normalize a channel response."""
    avatar_url = None
    sources = ((payload.get("avatar") or {}).get("image") or {}).get("sources") or []
    if sources:
        avatar_url = sources[-1].get("url") or sources[0].get("url")

    handle = payload.get("handle")
    if not isinstance(handle, str) and isinstance(payload.get("channel"), str):
        handle = payload["channel"].replace("http://www.youtube.com/@", "").replace("https://www.youtube.com/@", "")
    handle = handle or identifier.get("handle") or fallback

    description = payload.get("description")
    return {
        "channel_id": payload.get("channelId") or identifier.get("channelId"),
        "username": str(handle).lstrip("@"),
        "display_name": payload.get("name") or payload.get("title"),
        "profile_image_url": avatar_url,
        "description": truncate(description, 500) if isinstance(description, str) else None,
        "subscribers_count": parse_count(_pick(payload, "subscriberCount", "subscriberCountText")),
        "videos_count": parse_count(_pick(payload, "videoCount", "videoCountText")),
        "total_views": parse_count(_pick(payload, "viewCount", "viewCountText")),
    }


def _pick(payload: Dict, *keys):
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def parse_channel_videos(payload: Dict) -> List[Dict]:
    raw_videos = payload.get("videos") or (payload.get("data") or {}).get("videos") or []
    videos = []
    for video in raw_videos[:VIDEO_LIMIT]:
        description = video.get("description")
        thumbnail = video.get("thumbnail")
        videos.append({
            "video_id": video.get("id") or video.get("videoId") or "",
            "title": video.get("title") or "",
            "description": truncate(description, 500) if isinstance(description, str) else None,
            "thumbnail_url": thumbnail.get("url") if isinstance(thumbnail, dict) else thumbnail,
            "views_count": _count(video, "viewCountInt", "viewCountText"),
            "likes_count": _count(video, "likeCountInt", "likeCountText"),
            "comments_count": _count(video, "commentCountInt", "commentCountText"),
            "published_at": parse_timestamp(video.get("publishedTime") or video.get("publishDate")),
            "duration": _duration(video.get("lengthSeconds") or video.get("lengthText")),
            "is_short": video.get("type") == "short",
        })
    return videos


def parse_shorts(payload: Dict) -> List[Dict]:
    raw_shorts = payload.get("shorts") or (payload.get("data") or {}).get("shorts") or []
    shorts = []
    for short in raw_shorts[:SHORTS_LIMIT]:
        thumbnail = short.get("thumbnail")
        shorts.append({
            "video_id": short.get("videoId") or short.get("video_id") or short.get("id") or "",
            "title": short.get("title") or "",
            "description": None,
            "thumbnail_url": thumbnail.get("url") if isinstance(thumbnail, dict) else (thumbnail or short.get("thumbnailUrl")),
            "views_count": parse_count(_pick(short, "viewCount", "views", "view_count")),
            "likes_count": parse_count(_pick(short, "likeCount", "likes", "like_count")),
            "comments_count": parse_count(_pick(short, "commentCount", "comments", "comment_count")),
            "published_at": parse_timestamp(short.get("publishedAt") or short.get("published_at")),
            "duration": _duration(short.get("duration") or short.get("duration_seconds")),
            "is_short": True,
        })
    return shorts


def _count(video: Dict, int_key: str, text_key: str) -> int:
    if video.get(int_key) is not None:
        return parse_count(video[int_key])
    return parse_count(video.get(text_key))


def _duration(value) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def video_url_for(video_id: str, is_short: bool) -> str:
    if is_short:
        return f"https://www.youtube.com/shorts/{video_id}"
    return f"https://www.youtube.com/watch?v={video_id}"


class YouTubeCollector:
    """Collects channel stats, videos and shorts for tracked YouTube accounts."""

    platform = "youtube"

    def __init__(self, api: ScrapeCreatorsAPI):
        """
        Initialize YouTube collector.

        Args:
            api: ScrapeCreators client
        """
        self.api = api

    def fetch_channel(self, identifier: str) -> Dict:
        """
        Fetch channel details plus recent videos and shorts.

        Video and shorts lookups are best effort; only the channel lookup is fatal.

        Returns:
            Channel dict with "videos", "total_likes" and "total_comments"
        """
        lookup = normalize_youtube_identifier(identifier)
        channel = parse_channel(
            self.api.youtube_channel(
                handle=lookup.get("handle"),
                channel_id=lookup.get("channelId"),
                url=lookup.get("url")
            ),
            lookup,
            identifier
        )

        videos = []
        try:
            videos = parse_channel_videos(
                self.api.youtube_channel_videos(
                    channel_id=channel["channel_id"],
                    handle=None if channel["channel_id"] else lookup.get("handle")
                )
            )
        except Exception as e:
            logger.warning(f"Could not fetch YouTube videos for {identifier}: {e}")

        if channel["channel_id"]:
            try:
                videos.extend(parse_shorts(self.api.youtube_channel_shorts(channel["channel_id"], limit=SHORTS_LIMIT)))
            except Exception as e:
                logger.warning(f"Could not fetch YouTube shorts for {identifier}: {e}")

        # A video can appear in both listings; keep one row per id
        unique = {video["video_id"]: video for video in videos if video["video_id"]}
        channel["videos"] = list(unique.values())
        channel["total_likes"] = sum(video["likes_count"] for video in channel["videos"])
        channel["total_comments"] = sum(video["comments_count"] for video in channel["videos"])
        return channel

    def collect(self, db: Session, account: YouTubeAccount) -> Dict:
        """
        Refresh a YouTube account, upsert its videos and record a snapshot.

        Raises:
            ProviderError: Channel fetch failed (the session is rolled back)
        """
        identifier = account.channel_id or account.username

        try:
            channel = self.fetch_channel(identifier)

            new_videos = 0
            for video_data in channel["videos"]:
                video_data = dict(video_data, video_url=video_url_for(video_data["video_id"], video_data["is_short"]))

                existing_video = db.query(YouTubeVideo).filter(
                    YouTubeVideo.account_id == account.id,
                    YouTubeVideo.video_id == video_data["video_id"]
                ).first()

                if existing_video:
                    for field, value in video_data.items():
                        if value is not None:
                            setattr(existing_video, field, value)
                else:
                    db.add(YouTubeVideo(account_id=account.id, **video_data))
                    new_videos += 1

            account.channel_id = channel["channel_id"] or account.channel_id
            account.display_name = channel["display_name"] or account.display_name
            account.profile_image_url = channel["profile_image_url"] or account.profile_image_url
            account.description = channel["description"] if channel["description"] is not None else account.description
            account.subscribers_count = channel["subscribers_count"]
            account.videos_count = channel["videos_count"]
            account.total_views = channel["total_views"]
            account.last_synced_at = datetime.utcnow()

            db.add(YouTubeMetricsHistory(
                account_id=account.id,
                subscribers_count=channel["subscribers_count"],
                views_count=channel["total_views"],
                likes_count=channel["total_likes"],
                comments_count=channel["total_comments"]
            ))

            db.commit()

            logger.info(f"Collected {len(channel['videos'])} YouTube videos ({new_videos} new) for {identifier}")

            return {
                "platform": self.platform,
                "username": account.username,
                "channel_id": account.channel_id,
                "subscribers_count": channel["subscribers_count"],
                "videos_collected": len(channel["videos"]),
                "new_videos": new_videos
            }

        except Exception as e:
            logger.error(f"Error collecting YouTube account {identifier}: {e}")
            db.rollback()
            raise
