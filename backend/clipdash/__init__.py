"""Creator analytics and campaign payouts API."""

__version__ = "1.0.0"
