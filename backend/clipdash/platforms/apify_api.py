"""Apify API client for running the Instagram scraper actor."""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from clipdash.platforms.errors import (
    ProviderConfigError,
    ProviderError,
    ProviderRunError,
    ProviderTimeoutError,
    error_for_status
)

logger = logging.getLogger(__name__)

PROVIDER = "apify"
FAILED_STATUSES = ("FAILED", "ABORTED", "TIMED-OUT")


class ApifyAPI:
    """Client for starting actor runs and reading their datasets."""

    def __init__(
        self,
        api_token: str,
        base_url: str = "https://api.apify.com/v2",
        actor: str = "apify~instagram-scraper",
        poll_interval: float = 5,
        max_wait: float = 120,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the Apify client.

        Args:
            api_token: Apify API token
            base_url: API root
            actor: Actor identifier in "user~name" form
            poll_interval: Seconds between run status checks
            max_wait: Seconds to wait for a run before giving up
            timeout: Per-request timeout in seconds
            session: Optional requests session
            sleep: Sleep function used between polls
            clock: Monotonic clock used to enforce max_wait
        """
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.actor = actor
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.timeout = timeout
        self.session = session or requests.Session()
        self.sleep = sleep
        self.clock = clock

    def _request(self, method: str, path: str, params: Optional[Dict] = None, json: Optional[Dict] = None) -> Any:
        if not self.api_token:
            raise ProviderConfigError("APIFY_API_TOKEN is not configured", PROVIDER)

        query = {"token": self.api_token}
        query.update(params or {})

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                params=query,
                json=json,
                timeout=self.timeout
            )
        except requests.Timeout:
            raise ProviderTimeoutError("Timeout calling Apify API", PROVIDER)
        except requests.RequestException as e:
            raise ProviderError(f"Apify request failed: {e}", PROVIDER)

        if not response.ok:
            logger.warning(f"Apify {method} {path} returned {response.status_code}")
            raise error_for_status(PROVIDER, response.status_code, response.text or "")

        try:
            return response.json()
        except ValueError:
            logger.warning(f"Apify {path} returned a non-JSON body")
            raise ProviderError("Apify returned invalid JSON", PROVIDER)

    def start_run(self, run_input: Dict) -> Dict:
        """Start an actor run and return the run object."""
        payload = self._request("POST", f"/acts/{self.actor}/runs", json=run_input)
        run = payload.get("data") or {}
        if not run.get("id"):
            raise ProviderError("Apify did not return a run id", PROVIDER)
        logger.info(f"Started Apify run {run['id']} for actor {self.actor}")
        return run

    def get_run(self, run_id: str) -> Dict:
        payload = self._request("GET", f"/actor-runs/{run_id}")
        return payload.get("data") or {}

    def get_dataset_items(self, dataset_id: str) -> List[Dict]:
        items = self._request("GET", f"/datasets/{dataset_id}/items", params={"clean": "true"})
        return items if isinstance(items, list) else []

    def wait_for_run(self, run_id: str) -> str:
        """
        Poll a run until it finishes.

        Sleeps poll_interval seconds before every status check and gives up
        after max_wait seconds. There is no backoff and no cancellation.

        Args:
            run_id: Apify run ID

        Returns:
            Default dataset ID of the succeeded run

        Raises:
            ProviderRunError: Run failed, was aborted or timed out on Apify's side
            ProviderTimeoutError: Run did not finish within max_wait
        """
        started = self.clock()

        while self.clock() - started < self.max_wait:
            self.sleep(self.poll_interval)

            run = self.get_run(run_id)
            status = run.get("status")

            if status == "SUCCEEDED":
                dataset_id = run.get("defaultDatasetId")
                if not dataset_id:
                    raise ProviderRunError("Apify run succeeded without a dataset", PROVIDER)
                return dataset_id

            if status in FAILED_STATUSES:
                raise ProviderRunError(f"Apify run {status.lower()}", PROVIDER)

            logger.debug(f"Apify run {run_id} status: {status}")

        raise ProviderTimeoutError(
            f"Timeout waiting for Apify run to complete (max {int(self.max_wait)}s)",
            PROVIDER
        )

    def run_instagram_scraper(
        self,
        profile_url: str,
        results_type: str = "posts",
        results_limit: int = 200
    ) -> Dict:
        """
        Scrape an Instagram profile with the configured actor.

        Args:
            profile_url: Full Instagram profile URL
            results_type: "posts" or "details"
            results_limit: Maximum items to scrape

        Returns:
            Dict with runId, datasetId, items and itemsCount
        """
        run = self.start_run({
            "directUrls": [profile_url],
            "resultsType": results_type,
            "resultsLimit": results_limit,
            "searchType": "user",
            "searchLimit": 1
        })

        dataset_id = self.wait_for_run(run["id"])
        items = self.get_dataset_items(dataset_id)

        logger.info(f"Apify run {run['id']} returned {len(items)} items for {profile_url}")

        return {
            "runId": run["id"],
            "datasetId": dataset_id,
            "items": items,
            "itemsCount": len(items)
        }
