"""Scraping provider clients and per-platform collectors."""

PLATFORMS = ("instagram", "youtube", "tiktok")
