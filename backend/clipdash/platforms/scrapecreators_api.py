"""ScrapeCreators API client for Instagram, TikTok and YouTube public data."""

import logging
from typing import Any, Dict, Optional

import requests

from clipdash.platforms.errors import ProviderConfigError, ProviderTimeoutError, ProviderError, error_for_status

logger = logging.getLogger(__name__)

PROVIDER = "scrapecreators"


class ScrapeCreatorsAPI:
    """Client for the ScrapeCreators REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.scrapecreators.com",
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """Initialize the ScrapeCreators client.

        Args:
            api_key: ScrapeCreators API key
            base_url: API root
            timeout: Per-request timeout in seconds
            session: Optional requests session (tests inject a mock)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict:
        """
        Perform a GET request against the API.

        Args:
            path: Endpoint path, e.g. "/v1/tiktok/profile"
            params: Query parameters; None values are dropped

        Returns:
            Decoded JSON body

        Raises:
            ProviderError: On configuration, network or HTTP failures
        """
        if not self.api_key:
            raise ProviderConfigError("SCRAPECREATORS_API_KEY is not configured", PROVIDER)

        query = {key: value for key, value in (params or {}).items() if value is not None}

        try:
            response = self.session.get(
                f"{self.base_url}{path}",
                params=query,
                headers={"x-api-key": self.api_key},
                timeout=self.timeout
            )
        except requests.Timeout:
            raise ProviderTimeoutError("Timeout calling ScrapeCreators API", PROVIDER)
        except requests.RequestException as e:
            raise ProviderError(f"ScrapeCreators request failed: {e}", PROVIDER)

        if not response.ok:
            logger.warning(f"ScrapeCreators {path} returned {response.status_code}")
            raise error_for_status(PROVIDER, response.status_code, response.text or "")

        try:
            return response.json()
        except ValueError:
            logger.warning(f"ScrapeCreators {path} returned a non-JSON body")
            raise ProviderError("ScrapeCreators returned invalid JSON", PROVIDER)

    # ============================================
    # Instagram
    # ============================================

    def instagram_profile(self, handle: str) -> Dict:
        return self.get("/v1/instagram/profile", {"handle": handle})

    def instagram_post(self, shortcode: str) -> Dict:
        return self.get("/v1/instagram/post", {"shortcode": shortcode})

    # ============================================
    # TikTok
    # ============================================

    def tiktok_profile(self, handle: str) -> Dict:
        return self.get("/v1/tiktok/profile", {"handle": handle})

    def tiktok_videos(self, handle: str, count: int = 30) -> Dict:
        return self.get("/v3/tiktok/profile-videos", {"handle": handle, "count": count})

    def tiktok_video(self, url: str) -> Dict:
        return self.get("/v1/tiktok/video", {"url": url})

    # ============================================
    # YouTube
    # ============================================

    def youtube_channel(
        self,
        handle: Optional[str] = None,
        channel_id: Optional[str] = None,
        url: Optional[str] = None
    ) -> Dict:
        """Fetch channel details by handle, channel ID or channel URL."""
        return self.get("/v1/youtube/channel", {"handle": handle, "channelId": channel_id, "url": url})

    def youtube_channel_videos(self, channel_id: Optional[str] = None, handle: Optional[str] = None) -> Dict:
        return self.get("/v1/youtube/channel-videos", {"channelId": channel_id, "handle": handle})

    def youtube_channel_shorts(self, channel_id: str, limit: int = 20) -> Dict:
        return self.get("/v1/youtube/channel/shorts/simple", {"channelId": channel_id, "limit": limit})

    def youtube_video(self, url: str) -> Dict:
        return self.get("/v1/youtube/video", {"url": url})
