"""
Unit tests for count, timestamp and link parsing helpers.
"""

import pytest
from datetime import datetime

from clipdash.utils.parsers import (
    parse_count,
    to_int,
    parse_timestamp,
    truncate,
    normalize_link,
    clean_handle,
    extract_instagram_username,
    normalize_youtube_identifier,
    detect_platform,
    is_tiktok_short_link,
    extract_video_id
)


@pytest.mark.unit
class TestParseCount:
    """Test compact count parsing."""

    def test_numbers_pass_through(self):
        assert parse_count(1234) == 1234
        assert parse_count(12.6) == 13

    def test_suffixes(self):
        assert parse_count("1.2M") == 1_200_000
        assert parse_count("15K views") == 15_000
        assert parse_count("3B") == 3_000_000_000

    def test_portuguese_units(self):
        assert parse_count("1,5 mil") == 1_500
        assert parse_count("2 mi inscritos") == 2_000_000

    def test_thousands_separators(self):
        assert parse_count("1,234,567") == 1_234_567
        assert parse_count("12,345 subscribers") == 12_345

    def test_unparseable_is_zero(self):
        assert parse_count(None) == 0
        assert parse_count("") == 0
        assert parse_count("views") == 0
        assert parse_count(True) == 0

    def test_to_int(self):
        assert to_int("42") == 42
        assert to_int("4.9") == 4
        assert to_int("n/a") == 0
        assert to_int(None) == 0


@pytest.mark.unit
class TestParseTimestamp:
    """Test timestamp parsing into naive UTC."""

    def test_epoch_seconds_and_milliseconds(self):
        expected = datetime(2023, 11, 14, 22, 13, 20)
        assert parse_timestamp(1700000000) == expected
        assert parse_timestamp(1700000000000) == expected
        assert parse_timestamp("1700000000") == expected

    def test_iso_strings(self):
        assert parse_timestamp("2024-01-01T00:00:00Z") == datetime(2024, 1, 1)
        assert parse_timestamp("2024-01-01T03:00:00+03:00") == datetime(2024, 1, 1)

    def test_invalid_values(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None
        assert parse_timestamp("yesterday") is None

    def test_truncate(self):
        assert truncate("abcdef", 3) == "abc"
        assert truncate(None, 3) is None


@pytest.mark.unit
class TestLinks:
    """Test link normalization and id extraction."""

    def test_normalize_link(self):
        assert normalize_link("https://www.TikTok.com/@a/video/123?is_from_webapp=1") == "tiktok.com/@a/video/123"
        assert normalize_link("http://instagram.com/reel/ABC/") == "instagram.com/reel/abc"
        assert normalize_link(None) == ""

    def test_normalized_links_match_across_variants(self):
        assert normalize_link("https://www.instagram.com/p/XyZ/#top") == normalize_link("instagram.com/p/xyz")

    def test_handles(self):
        assert clean_handle("  @creator ") == "creator"
        assert extract_instagram_username("https://www.instagram.com/creator.ig/") == "creator.ig"
        assert extract_instagram_username("@creator.ig") == "creator.ig"

    def test_youtube_identifier(self):
        assert normalize_youtube_identifier("https://youtube.com/@chan") == {"url": "https://youtube.com/@chan"}
        assert normalize_youtube_identifier("UC_x5XG1OV2P6uZZ5FSM9Ttw") == {"channelId": "UC_x5XG1OV2P6uZZ5FSM9Ttw"}
        assert normalize_youtube_identifier("@chan") == {"handle": "chan"}
        assert normalize_youtube_identifier("  ") == {}

    def test_detect_platform(self):
        assert detect_platform("https://vm.tiktok.com/ZMabc/") == "tiktok"
        assert detect_platform("https://www.instagram.com/reel/ABC/") == "instagram"
        assert detect_platform("https://youtu.be/dQw4w9WgXcQ") == "youtube"
        assert detect_platform("https://example.com/video") is None

    def test_tiktok_short_links(self):
        assert is_tiktok_short_link("https://vm.tiktok.com/ZMabc/")
        assert is_tiktok_short_link("https://www.tiktok.com/t/ZTabc/")
        assert not is_tiktok_short_link("https://www.tiktok.com/@a/video/7300000000000000001")

    def test_extract_video_id(self):
        assert extract_video_id("https://www.tiktok.com/@a/video/7300000000000000001?lang=en") == "7300000000000000001"
        assert extract_video_id("https://www.tiktok.com/share?item_id=7300000000000000002") == "7300000000000000002"
        assert extract_video_id("https://www.instagram.com/reel/ABC123/") == "ABC123"
        assert extract_video_id("https://www.instagram.com/p/DEF456/?igsh=x") == "DEF456"
        assert extract_video_id("https://youtu.be/dQw4w9WgXcQ") == "dQw4w9WgXcQ"
        assert extract_video_id("https://www.youtube.com/shorts/abc123def45") == "abc123def45"
        assert extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10") == "dQw4w9WgXcQ"
        assert extract_video_id("https://www.youtube.com/@chan") is None
