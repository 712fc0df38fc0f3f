"""Engagement rate calculator for dashboard metrics."""

from typing import Dict


class EngagementCalculator:
    """Engagement formulas shared by the creator, client and campaign dashboards."""

    @staticmethod
    def calculate_engagement_rate(likes: int, comments: int, views: int) -> float:
        """Calculate engagement rate.

        Formula: (likes + comments) / views × 100

        Args:
            likes: Number of likes
            comments: Number of comments
            views: Number of views

        Returns:
            Engagement rate as percentage, 0 when there are no views
        """
        if not views:
            return 0.0

        return ((likes + comments) / views) * 100

    @staticmethod
    def calculate_like_rate(likes: int, views: int) -> int:
        """Campaign engagement: likes / views × 100, rounded to a whole percent."""
        if not views:
            return 0

        return round((likes / views) * 100)

    @staticmethod
    def empty_platform_breakdown() -> Dict[str, Dict[str, int]]:
        return {
            platform: {"followers": 0, "views": 0, "likes": 0, "comments": 0, "videos": 0}
            for platform in ("instagram", "tiktok", "youtube")
        }
