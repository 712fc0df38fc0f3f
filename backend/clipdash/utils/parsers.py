"""Parsing helpers for provider payloads and social media links."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlparse, parse_qs


_COUNT_WORDS = re.compile(
    r"(subscribers?|inscritos|visualiza[cç][oõ]es|views?|v[ií]deos?)",
    re.IGNORECASE
)
_COUNT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(mil|mi|k|m|b)?(?![a-z])", re.IGNORECASE)
_THOUSANDS_COMMA = re.compile(r",(\d{3})(?!\d)")

_MULTIPLIERS = {
    "k": 1_000,
    "mil": 1_000,
    "m": 1_000_000,
    "mi": 1_000_000,
    "b": 1_000_000_000,
}


def parse_count(value: Any) -> int:
    """Parse a provider count such as 1234, "1.2M", "15K views" or "1,5 mil".

    Args:
        value: Number or compact count text

    Returns:
        Integer count, 0 when nothing can be parsed
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(round(value))

    text = _COUNT_WORDS.sub("", str(value)).strip().lower()
    if not text:
        return 0

    # "1,234,567" is a thousands separator, "1,5" is a decimal comma
    while _THOUSANDS_COMMA.search(text):
        text = _THOUSANDS_COMMA.sub(r"\1", text)
    text = text.replace(",", ".")

    match = _COUNT_PATTERN.search(text)
    if match:
        number = float(match.group(1))
        suffix = (match.group(2) or "").lower()
        return int(round(number * _MULTIPLIERS.get(suffix, 1)))

    digits = re.sub(r"\D", "", text)
    return int(digits) if digits else 0


def to_int(value: Any) -> int:
    """Convert a numeric-ish value to int, 0 when not a number."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse epoch seconds (or milliseconds) or an ISO-8601 string into naive UTC."""
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())

    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e12 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    return None


def truncate(text: Optional[str], length: int) -> Optional[str]:
    if text is None:
        return None
    return text[:length]


# ============================================
# Links and handles
# ============================================

def normalize_link(link: Optional[str]) -> str:
    """Canonical form of a content URL used to join submissions with synced content."""
    if not link:
        return ""
    normalized = link.strip().lower()
    normalized = re.sub(r"^https?://", "", normalized)
    normalized = re.sub(r"^www\.", "", normalized)
    normalized = re.split(r"[?#]", normalized, maxsplit=1)[0]
    return normalized.rstrip("/")


def clean_handle(value: Optional[str]) -> str:
    """Strip whitespace and a leading @ from a handle."""
    if not value:
        return ""
    return value.strip().lstrip("@").strip()


def extract_instagram_username(value: Optional[str]) -> str:
    """Get the username from an Instagram profile URL or a raw handle."""
    if not value:
        return ""
    match = re.search(r"instagram\.com/([^/?#]+)", value)
    username = match.group(1) if match else value
    return username.replace("@", "").replace("/", "").strip()


def normalize_youtube_identifier(value: Optional[str]) -> Dict[str, str]:
    """Work out which lookup parameter a YouTube identifier maps to.

    Returns:
        One of {"url": ...}, {"channelId": ...} or {"handle": ...}; empty for blank input
    """
    if not value or not value.strip():
        return {}
    identifier = value.strip()
    if re.match(r"^https?://", identifier, re.IGNORECASE):
        return {"url": identifier}
    if re.match(r"^UC[\w-]{20,30}$", identifier):
        return {"channelId": identifier}
    return {"handle": identifier.lstrip("@")}


def detect_platform(url: Optional[str]) -> Optional[str]:
    """Detect the platform a content URL belongs to."""
    if not url:
        return None
    lowered = url.lower()
    if "tiktok.com" in lowered:
        return "tiktok"
    if "instagram.com" in lowered:
        return "instagram"
    if "youtube.com" in lowered or "youtu.be" in lowered:
        return "youtube"
    return None


def is_tiktok_short_link(url: Optional[str]) -> bool:
    """Short share links must be resolved before an id can be extracted."""
    if not url:
        return False
    host = (urlparse(url if "://" in url else f"https://{url}").hostname or "").lower()
    if host in ("vm.tiktok.com", "vt.tiktok.com", "m.tiktok.com"):
        return True
    return bool(re.search(r"tiktok\.com/t/", url, re.IGNORECASE))


def extract_video_id(url: Optional[str], platform: Optional[str] = None) -> Optional[str]:
    """Extract the platform video/post id from a content URL."""
    if not url:
        return None
    platform = platform or detect_platform(url)
    parsed = urlparse(url if "://" in url else f"https://{url}")
    query = parse_qs(parsed.query)

    if platform == "tiktok":
        match = re.search(r"/(?:video|v)/(\d{8,25})", parsed.path)
        if match:
            return match.group(1)
        for key in ("item_id", "share_item_id", "video_id", "aweme_id"):
            if query.get(key):
                return query[key][0]
        return None

    if platform == "instagram":
        match = re.search(r"/(?:p|reels?)/([^/?#]+)", parsed.path)
        return match.group(1) if match else None

    if platform == "youtube":
        host = (parsed.hostname or "").lower()
        if host.endswith("youtu.be"):
            video_id = parsed.path.strip("/").split("/")[0]
            return video_id or None
        match = re.search(r"/shorts/([^/?#]+)", parsed.path)
        if match:
            return match.group(1)
        if query.get("v"):
            return query["v"][0]
        return None

    return None
