"""Analytics engine modules for dashboards and campaign earnings."""

from clipdash.analytics.engagement_calculator import EngagementCalculator
from clipdash.analytics.earnings_calculator import EarningsCalculator

__all__ = ["EngagementCalculator", "EarningsCalculator"]
