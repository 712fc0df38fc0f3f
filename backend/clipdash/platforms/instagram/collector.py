"""Instagram data collection service (Apify Instagram scraper)."""

from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from clipdash.models.instagram_models import InstagramAccount, InstagramPost, InstagramMetricsHistory
from clipdash.platforms.apify_api import ApifyAPI
from clipdash.utils.parsers import to_int, parse_timestamp, truncate, extract_instagram_username

logger = logging.getLogger(__name__)


def _first(item: Dict, *keys):
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


def parse_post_item(item: Dict) -> Optional[Dict]:
    """
    Map one Apify dataset item to post fields.

    Returns:
        Post dict, or None when the item has no URL
    """
    post_url = _first(item, "url", "postUrl", "permalink", "link", "shortCodeUrl")
    if not post_url and item.get("shortCode"):
        post_url = f"https://www.instagram.com/p/{item['shortCode']}/"
    if not post_url:
        return None

    item_type = str(item.get("type") or item.get("productType") or "").lower()
    if "video" in item_type or "reel" in item_type or item.get("isVideo"):
        post_type = "video"
    elif "sidecar" in item_type or "carousel" in item_type:
        post_type = "carousel"
    else:
        post_type = "post"

    return {
        "post_url": post_url,
        "post_type": post_type,
        "thumbnail_url": _first(item, "displayUrl", "thumbnailUrl", "thumbnailSrc", "imageUrl"),
        "caption": truncate(item.get("caption"), 200),
        "likes_count": to_int(_first(item, "likesCount", "likes", "likeCount")),
        "comments_count": to_int(_first(item, "commentsCount", "comments", "commentCount")),
        "views_count": to_int(_first(item, "videoViewCount", "videoPlayCount", "viewsCount", "viewCount")),
        "posted_at": parse_timestamp(_first(item, "timestamp", "takenAtTimestamp", "takenAt")),
    }


def parse_posts(items: List[Dict]) -> List[Dict]:
    """Parse dataset items, dropping duplicates by post URL."""
    posts = []
    seen = set()
    for item in items or []:
        post = parse_post_item(item)
        if not post or post["post_url"] in seen:
            continue
        seen.add(post["post_url"])
        posts.append(post)
    return posts


class InstagramCollector:
    """Collects profile stats and posts for tracked Instagram accounts."""

    platform = "instagram"

    def __init__(self, api: ApifyAPI, results_limit: int = 200):
        """
        Initialize Instagram collector.

        Args:
            api: Apify client
            results_limit: Maximum posts to scrape per profile
        """
        self.api = api
        self.results_limit = results_limit

    def collect(self, db: Session, account: InstagramAccount) -> Dict:
        """
        Scrape an account and store its posts and a metrics snapshot.

        Args:
            db: Database session
            account: Account to refresh

        Returns:
            Collection summary dict

        Raises:
            ProviderError: Scraping failed (the session is rolled back)
        """
        username = extract_instagram_username(account.profile_url or account.username)
        profile_url = account.profile_url or f"https://www.instagram.com/{username}/"

        try:
            result = self.api.run_instagram_scraper(
                profile_url,
                results_type="posts",
                results_limit=self.results_limit
            )
            items = result["items"]
            posts = parse_posts(items)

            new_posts = 0
            for post_data in posts:
                existing_post = db.query(InstagramPost).filter(
                    InstagramPost.account_id == account.id,
                    InstagramPost.post_url == post_data["post_url"]
                ).first()

                if existing_post:
                    for field, value in post_data.items():
                        if value is not None:
                            setattr(existing_post, field, value)
                else:
                    db.add(InstagramPost(account_id=account.id, **post_data))
                    new_posts += 1

            db.flush()

            # Totals come from everything stored, not just this scrape
            total_views, stored_posts = db.query(
                func.coalesce(func.sum(InstagramPost.views_count), 0),
                func.count(InstagramPost.id)
            ).filter(InstagramPost.account_id == account.id).one()

            owner = items[0] if items else {}
            account.display_name = owner.get("ownerFullName") or owner.get("ownerUsername") or account.display_name
            account.profile_image_url = owner.get("ownerProfilePicUrl") or owner.get("profilePicUrl") or account.profile_image_url
            account.bio = owner.get("biography") or account.bio
            if owner.get("followersCount") is not None:
                account.followers_count = to_int(owner.get("followersCount"))
            if owner.get("followsCount") is not None:
                account.following_count = to_int(owner.get("followsCount"))
            if owner.get("postsCount") is not None:
                account.posts_count = to_int(owner.get("postsCount"))
            account.total_views = int(total_views)
            account.scraped_posts_count = int(stored_posts)
            account.last_synced_at = datetime.utcnow()

            db.add(InstagramMetricsHistory(
                account_id=account.id,
                followers_count=account.followers_count or 0,
                likes_count=sum(p["likes_count"] for p in posts),
                comments_count=sum(p["comments_count"] for p in posts),
                views_count=int(total_views)
            ))

            db.commit()

            logger.info(f"Collected {len(posts)} Instagram posts ({new_posts} new) for {username}")

            return {
                "platform": self.platform,
                "username": username,
                "posts_collected": len(posts),
                "new_posts": new_posts,
                "total_views": int(total_views),
                "run_id": result.get("runId")
            }

        except Exception as e:
            logger.error(f"Error collecting Instagram account {username}: {e}")
            db.rollback()
            raise
