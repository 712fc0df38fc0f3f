"""Campaign earnings formulas."""

from typing import Dict, Optional


COMPETITION_TYPES = ("competition_daily", "competition_monthly")


class EarningsCalculator:
    """Calculate what a creator earns from a campaign."""

    @staticmethod
    def pay_per_view(views: int, rate: float, min_views: int = 0, max_paid_views: int = 0) -> float:
        """Calculate pay-per-view earnings.

        Formula: min(views, max_paid_views) / 1000 × rate, paid only once
        views reach min_views. A max_paid_views of 0 means no cap.

        Args:
            views: Views accumulated in the period
            rate: Payment per 1000 views
            min_views: Views required before anything is paid
            max_paid_views: Cap on paid views (0 for uncapped)

        Returns:
            Amount rounded to cents
        """
        if views < (min_views or 0):
            return 0.0

        eligible_views = min(views, max_paid_views) if max_paid_views else views
        return round((eligible_views / 1000) * (rate or 0), 2)

    @staticmethod
    def fixed(videos: int, rate: float) -> float:
        """Flat rate per submitted video."""
        return round((rate or 0) * videos, 2)

    @staticmethod
    def competition(position: Optional[int], prizes: Dict[int, float]) -> float:
        """Prize configured for the ranking position, 0 without one."""
        if position is None:
            return 0.0
        return float(prizes.get(position, 0) or 0)

    @classmethod
    def calculate_amount(
        cls,
        campaign,
        views: int,
        videos: int,
        position: Optional[int] = None,
        prizes: Optional[Dict[int, float]] = None
    ) -> float:
        """
        Calculate earnings for a campaign according to its type.

        Args:
            campaign: Campaign row (campaign_type, payment_rate, min_views, max_paid_views)
            views: Creator's views in the period
            videos: Creator's submitted videos in the period
            position: Creator's ranking position (1-based)
            prizes: Mapping of position to prize amount

        Returns:
            Amount owed to the creator
        """
        campaign_type = campaign.campaign_type or "pay_per_view"

        if campaign_type == "pay_per_view":
            return cls.pay_per_view(
                views,
                campaign.payment_rate or 0,
                campaign.min_views or 0,
                campaign.max_paid_views or 0
            )
        if campaign_type in COMPETITION_TYPES:
            return cls.competition(position, prizes or {})
        if campaign_type == "fixed":
            return cls.fixed(videos, campaign.payment_rate or 0)
        return 0.0
