"""Refresh campaign video metrics from synced platform content."""

from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging

from clipdash.models.campaign_models import CampaignVideo, VideoMetricsHistory
from clipdash.models.instagram_models import InstagramPost
from clipdash.models.tiktok_models import TikTokVideo
from clipdash.models.youtube_models import YouTubeVideo
from clipdash.utils.parsers import extract_video_id, normalize_link

logger = logging.getLogger(__name__)

ContentIndex = Tuple[Dict[str, Dict], Dict[Tuple[str, str], Dict]]


def _metrics(views, likes, comments, shares) -> Dict[str, int]:
    return {
        "views": views or 0,
        "likes": likes or 0,
        "comments": comments or 0,
        "shares": shares or 0,
    }


def build_content_index(db: Session) -> ContentIndex:
    """
    Index synced content by normalized link and by (platform, video id).

    Returns:
        (by_link, by_video_id)
    """
    by_link: Dict[str, Dict] = {}
    by_video_id: Dict[Tuple[str, str], Dict] = {}

    for post in db.query(InstagramPost).all():
        metrics = _metrics(post.views_count, post.likes_count, post.comments_count, post.shares_count)
        by_link[normalize_link(post.post_url)] = metrics
        shortcode = extract_video_id(post.post_url, "instagram")
        if shortcode:
            by_video_id[("instagram", shortcode)] = metrics

    for video in db.query(TikTokVideo).all():
        metrics = _metrics(video.views_count, video.likes_count, video.comments_count, video.shares_count)
        if video.video_url:
            by_link[normalize_link(video.video_url)] = metrics
        by_video_id[("tiktok", video.video_id)] = metrics

    for video in db.query(YouTubeVideo).all():
        metrics = _metrics(video.views_count, video.likes_count, video.comments_count, 0)
        if video.video_url:
            by_link[normalize_link(video.video_url)] = metrics
        by_video_id[("youtube", video.video_id)] = metrics

    return by_link, by_video_id


def find_metrics(video: CampaignVideo, index: ContentIndex) -> Optional[Dict]:
    """Metrics of the synced content a submission points to, by link first and then by id."""
    by_link, by_video_id = index

    metrics = by_link.get(normalize_link(video.video_link))
    if metrics is not None:
        return metrics

    video_id = extract_video_id(video.video_link, video.platform)
    if video_id:
        return by_video_id.get((video.platform, video_id))
    return None


def record_daily_history(db: Session, video: CampaignVideo, metrics: Dict) -> VideoMetricsHistory:
    """Insert or overwrite today's snapshot of a campaign video."""
    today = datetime.utcnow().date()
    history = db.query(VideoMetricsHistory).filter(
        VideoMetricsHistory.video_id == video.id,
        VideoMetricsHistory.recorded_at == today
    ).first()

    if history is None:
        history = VideoMetricsHistory(video_id=video.id, recorded_at=today)
        db.add(history)

    history.views = metrics["views"]
    history.likes = metrics["likes"]
    history.comments = metrics["comments"]
    history.shares = metrics["shares"]
    return history


def sync_campaign_video_metrics(db: Session, campaign_id: Optional[UUID] = None) -> Dict:
    """
    Copy synced content metrics onto campaign submissions.

    Args:
        db: Database session
        campaign_id: Limit to one campaign (all campaigns when None)

    Returns:
        {"synced": int, "failed": int, "errors": [str]}
    """
    index = build_content_index(db)

    query = db.query(CampaignVideo)
    if campaign_id is not None:
        query = query.filter(CampaignVideo.campaign_id == campaign_id)
    videos = query.all()

    synced = 0
    errors: List[str] = []
    now = datetime.utcnow()

    for video in videos:
        metrics = find_metrics(video, index)
        if metrics is None:
            errors.append(f"No synced metrics for {video.video_link}")
            continue

        video.views = metrics["views"]
        video.likes = metrics["likes"]
        video.comments = metrics["comments"]
        video.shares = metrics["shares"]
        video.last_metrics_update = now
        video.verified = True
        record_daily_history(db, video, metrics)
        synced += 1

    db.commit()

    logger.info(f"Campaign video metrics synced: {synced} updated, {len(errors)} unmatched")
    return {"synced": synced, "failed": len(errors), "errors": errors}


def get_aggregated_metrics(db: Session, campaign_id: UUID) -> Dict:
    """Summed submission metrics of a campaign plus how many matched synced content."""
    index = build_content_index(db)
    videos = db.query(CampaignVideo).filter(CampaignVideo.campaign_id == campaign_id).all()

    totals = {"views": 0, "likes": 0, "comments": 0, "shares": 0}
    matched = 0

    for video in videos:
        metrics = find_metrics(video, index)
        if metrics is None:
            continue
        matched += 1
        for key in totals:
            totals[key] += metrics[key]

    return {
        "campaign_id": campaign_id,
        "total_videos": len(videos),
        "matched_videos": matched,
        "total_views": totals["views"],
        "total_likes": totals["likes"],
        "total_comments": totals["comments"],
        "total_shares": totals["shares"],
    }


def get_video_history(db: Session, video_id: UUID, days: Optional[int] = None) -> List[VideoMetricsHistory]:
    """Daily snapshots of a campaign video, oldest first."""
    query = db.query(VideoMetricsHistory).filter(VideoMetricsHistory.video_id == video_id)
    if days:
        since = datetime.utcnow().date() - timedelta(days=days)
        query = query.filter(VideoMetricsHistory.recorded_at >= since)
    return query.order_by(VideoMetricsHistory.recorded_at).all()
