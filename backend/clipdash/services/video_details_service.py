"""Single-video lookups through ScrapeCreators."""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Callable, Dict, Optional
import logging

import requests

from clipdash.config import settings
from clipdash.models.instagram_models import InstagramPost
from clipdash.models.tiktok_models import TikTokVideo
from clipdash.models.youtube_models import YouTubeVideo
from clipdash.platforms.scrapecreators_api import ScrapeCreatorsAPI
from clipdash.utils.parsers import (
    detect_platform, extract_video_id, is_tiktok_short_link, parse_count, parse_timestamp, to_int
)

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; ClipdashBot/1.0)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def resolve_final_url(url: str) -> str:
    """Follow the redirects of a short link and return where it lands."""
    response = requests.get(
        url,
        headers=BROWSER_HEADERS,
        allow_redirects=True,
        timeout=settings.PROVIDER_REQUEST_TIMEOUT_SECONDS
    )
    return response.url or url


def _first(*values):
    for value in values:
        if value:
            return value
    return None


def _unwrap(payload: Dict) -> Dict:
    payload = payload or {}
    return payload.get("data") or payload


def normalize_tiktok(payload: Dict, video_id: str) -> Dict:
    video = _unwrap(payload)
    # Profile lookups nest the item under aweme_detail
    video = video.get("aweme_detail") or video
    stats = video.get("stats") or video.get("statistics") or {}
    author = video.get("author") or {}
    media = video.get("video") or {}
    username = _first(author.get("unique_id"), author.get("uniqueId"))

    duration = to_int(_first(media.get("duration"), video.get("duration")))
    if duration > 1000:
        duration //= 1000

    return {
        "platform": "tiktok",
        "video_id": str(_first(video.get("aweme_id"), video.get("id"), video_id)),
        "video_url": _first(
            video.get("share_url"),
            f"https://www.tiktok.com/@{username or 'user'}/video/{video_id}"
        ),
        "title": None,
        "caption": _first(video.get("desc"), video.get("description")),
        "thumbnail_url": _first(media.get("cover"), media.get("originCover"), video.get("cover")),
        "views_count": to_int(_first(stats.get("playCount"), stats.get("play_count"), video.get("play_count"))),
        "likes_count": to_int(_first(stats.get("diggCount"), stats.get("digg_count"), video.get("digg_count"))),
        "comments_count": to_int(_first(stats.get("commentCount"), stats.get("comment_count"), video.get("comment_count"))),
        "shares_count": to_int(_first(stats.get("shareCount"), stats.get("share_count"), video.get("share_count"))),
        "duration": duration or None,
        "published_at": parse_timestamp(_first(video.get("createTime"), video.get("create_time"))),
        "author": {
            "username": username,
            "display_name": author.get("nickname"),
            "avatar_url": _first(author.get("avatarLarger"), author.get("avatar_larger")),
        },
    }


def normalize_instagram(payload: Dict, shortcode: str) -> Dict:
    post = _unwrap(payload)
    post = post.get("xdt_shortcode_media") or post
    owner = post.get("owner") or {}
    caption_edges = (post.get("edge_media_to_caption") or {}).get("edges") or []
    caption = caption_edges[0].get("node", {}).get("text") if caption_edges else post.get("caption")

    return {
        "platform": "instagram",
        "video_id": _first(post.get("shortcode"), shortcode),
        "video_url": _first(post.get("url"), f"https://www.instagram.com/p/{shortcode}/"),
        "title": None,
        "caption": caption,
        "thumbnail_url": _first(post.get("display_url"), post.get("thumbnail_url"), post.get("thumbnail_src")),
        "views_count": to_int(_first(post.get("video_view_count"), post.get("video_play_count"), post.get("play_count"))),
        "likes_count": to_int(_first(
            (post.get("edge_media_preview_like") or {}).get("count"),
            (post.get("edge_liked_by") or {}).get("count"),
            post.get("like_count")
        )),
        "comments_count": to_int(_first(
            (post.get("edge_media_to_comment") or {}).get("count"),
            (post.get("edge_media_to_parent_comment") or {}).get("count"),
            post.get("comment_count")
        )),
        "shares_count": to_int(post.get("share_count")),
        "duration": to_int(post.get("video_duration")) or None,
        "published_at": parse_timestamp(post.get("taken_at_timestamp")),
        "author": {
            "username": owner.get("username"),
            "display_name": owner.get("full_name"),
            "avatar_url": owner.get("profile_pic_url"),
        },
    }


def normalize_youtube(payload: Dict, video_id: str) -> Dict:
    video = _unwrap(payload)
    channel = video.get("channel") or {}
    handle = _first(channel.get("handle"), channel.get("custom_url"), video.get("channelHandle")) or ""
    thumbnail = video.get("thumbnail")
    avatar = channel.get("thumbnail") or channel.get("avatar")

    return {
        "platform": "youtube",
        "video_id": _first(video.get("id"), video.get("videoId"), video_id),
        "video_url": f"https://www.youtube.com/watch?v={video_id}",
        "title": video.get("title"),
        "caption": video.get("description"),
        "thumbnail_url": thumbnail.get("url") if isinstance(thumbnail, dict) else thumbnail,
        "views_count": parse_count(_first(video.get("viewCountInt"), video.get("viewCount"), video.get("viewCountText"))),
        "likes_count": parse_count(_first(video.get("likeCountInt"), video.get("likeCount"), video.get("likeCountText"))),
        "comments_count": parse_count(_first(video.get("commentCountInt"), video.get("commentCount"), video.get("commentCountText"))),
        "shares_count": 0,
        "duration": _first(video.get("durationFormatted"), video.get("duration"), video.get("lengthSeconds")),
        "published_at": parse_timestamp(_first(video.get("publishDate"), video.get("publishedAt"), video.get("uploadDate"))),
        "author": {
            "username": handle.replace("@", "").replace("/", "") or None,
            "display_name": _first(channel.get("title"), channel.get("name"), video.get("channelTitle")),
            "avatar_url": avatar.get("url") if isinstance(avatar, dict) else avatar,
        },
    }


class VideoDetailsService:
    """Look up one video or post and optionally refresh its stored row."""

    def __init__(
        self,
        api: Optional[ScrapeCreatorsAPI] = None,
        resolver: Callable[[str], str] = resolve_final_url
    ):
        self.api = api or ScrapeCreatorsAPI(
            api_key=settings.SCRAPECREATORS_API_KEY,
            base_url=settings.SCRAPECREATORS_BASE_URL,
            timeout=settings.PROVIDER_REQUEST_TIMEOUT_SECONDS
        )
        self.resolver = resolver

    def identify(self, url: Optional[str] = None, platform: Optional[str] = None, video_id: Optional[str] = None):
        """
        Work out (platform, video_id) from a URL or from explicit values.

        Raises:
            ValueError: When neither yields a supported platform and id
        """
        if not url and not (platform and video_id):
            raise ValueError("Video URL or platform and video_id are required")

        if url:
            url = url.strip()
            platform = detect_platform(url)
            if not platform:
                raise ValueError("Could not detect platform from URL")

            if platform == "tiktok" and is_tiktok_short_link(url):
                try:
                    url = self.resolver(url)
                except requests.RequestException as e:
                    logger.warning(f"Could not resolve TikTok short link {url}: {e}")

            video_id = extract_video_id(url, platform)
            if not video_id:
                raise ValueError("Could not extract video ID from URL")

        return platform, video_id

    def fetch_video_details(
        self,
        url: Optional[str] = None,
        platform: Optional[str] = None,
        video_id: Optional[str] = None
    ) -> Dict:
        """
        Fetch normalized details of a single video.

        Raises:
            ValueError: Unsupported URL or missing id
            ProviderError: When ScrapeCreators fails
        """
        platform, video_id = self.identify(url, platform, video_id)

        if platform == "tiktok":
            payload = self.api.tiktok_video(f"https://www.tiktok.com/@_/video/{video_id}")
            return normalize_tiktok(payload, video_id)
        if platform == "instagram":
            payload = self.api.instagram_post(video_id)
            return normalize_instagram(payload, video_id)
        if platform == "youtube":
            payload = self.api.youtube_video(f"https://www.youtube.com/watch?v={video_id}")
            return normalize_youtube(payload, video_id)

        raise ValueError(f"Unsupported platform: {platform}")

    @staticmethod
    def update_stored_content(db: Session, details: Dict) -> int:
        """
        Write fetched metrics onto stored content rows.

        Instagram posts match on the post URL (or its shortcode); TikTok and
        YouTube videos match on video_id.

        Returns:
            Number of rows updated
        """
        platform = details["platform"]
        video_id = details["video_id"]
        now = datetime.utcnow()

        if platform == "instagram":
            rows = [
                post for post in db.query(InstagramPost).filter(
                    InstagramPost.post_url.contains(f"/{video_id}")
                ).all()
                if extract_video_id(post.post_url, "instagram") == video_id
            ]
            for post in rows:
                post.views_count = details["views_count"]
                post.likes_count = details["likes_count"]
                post.comments_count = details["comments_count"]
                post.shares_count = details["shares_count"]
                if details.get("thumbnail_url"):
                    post.thumbnail_url = details["thumbnail_url"]
                post.updated_at = now

        elif platform == "tiktok":
            rows = db.query(TikTokVideo).filter(TikTokVideo.video_id == video_id).all()
            for video in rows:
                video.views_count = details["views_count"]
                video.likes_count = details["likes_count"]
                video.comments_count = details["comments_count"]
                video.shares_count = details["shares_count"]
                if details.get("caption"):
                    video.caption = details["caption"]
                video.updated_at = now

        else:
            rows = db.query(YouTubeVideo).filter(YouTubeVideo.video_id == video_id).all()
            for video in rows:
                video.views_count = details["views_count"]
                video.likes_count = details["likes_count"]
                video.comments_count = details["comments_count"]
                if details.get("title"):
                    video.title = details["title"]
                if details.get("thumbnail_url"):
                    video.thumbnail_url = details["thumbnail_url"]
                video.updated_at = now

        db.commit()
        return len(rows)
