"""
Tier 1: Apify Facebook Ads Library actor.

A scrape is an asynchronous remote job: start a run, poll its status until it
reaches a terminal state, then read the run's default dataset. A run that
fails, aborts, times out or is cancelled only fails this tier.
"""
from __future__ import annotations

import asyncio
from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from adinsightmap.config import Settings
from adinsightmap.core.Types import Platform

from .base import AdImage, FetchError, ImageProvider

logger = getLogger(__name__)

APIFY_API_BASE = "https://api.apify.com/v2"


class JobStatus(Enum):
    READY = "READY"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    TIMED_OUT = "TIMED-OUT"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.ABORTED, JobStatus.TIMED_OUT)

    @classmethod
    def parse(cls, raw: Any) -> 'JobStatus':
        try:
            return cls(str(raw).upper())
        except ValueError:
            # Apify also reports TIMING-OUT / ABORTING; treat as still running.
            return cls.RUNNING


@ImageProvider.register("apify")
class ApifyScraperService(ImageProvider):

    def __init__(
        self,
        api_token: Optional[str],
        actor_id: str = "curious_coder/facebook-ads-library-scraper",
        poll_interval: float = 2.0,
        max_wait_seconds: float = 60.0,
        count: int = 10,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = APIFY_API_BASE,
    ) -> None:
        self.api_token = api_token
        self.actor_id = actor_id
        self.poll_interval = poll_interval
        self.max_wait_seconds = max_wait_seconds
        self.count = count
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._cancelled = asyncio.Event()

    @classmethod
    def from_settings(cls, settings: Settings) -> 'ApifyScraperService':
        return cls(
            api_token=settings.apify_api_token,
            actor_id=settings.apify_actor_id,
            poll_interval=settings.apify_poll_interval,
            max_wait_seconds=settings.apify_max_wait_seconds,
            count=settings.ad_fetch_count,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)

    @property
    def max_attempts(self) -> int:
        if self.poll_interval <= 0:
            return max(1, int(self.max_wait_seconds))
        return max(1, int(self.max_wait_seconds / self.poll_interval))

    def cancel(self) -> None:
        """Abort any poll loop in progress; it reports TIMED_OUT."""
        self._cancelled.set()

    # ------------------------------------------------------------------
    # Tier entry point
    # ------------------------------------------------------------------

    async def _fetch_images(self, brand_name: str) -> List[AdImage]:
        self._cancelled.clear()
        logger.info(f"Starting Apify scraper for '{brand_name}'")

        async with self._session() as client:
            run_id = await self.start_actor_run(client, brand_name, self.count)
            status, dataset_id = await self.wait_for_completion(client, run_id)
            if status != JobStatus.SUCCEEDED:
                raise FetchError(f"Apify run {run_id} ended as {status.value}")
            items = await self.fetch_dataset_items(client, dataset_id)

        logger.info(f"Apify returned {len(items)} ads for '{brand_name}'")
        return self.transform_items(items, brand_name)

    # ------------------------------------------------------------------
    # Job lifecycle
    # ------------------------------------------------------------------

    async def start_actor_run(self, client: httpx.AsyncClient, brand_name: str, count: int) -> str:
        actor_path = self.actor_id.replace("/", "~")
        payload = {
            "urls": [{"url": f"https://www.facebook.com/{quote(brand_name)}"}],
            "scrapePageAds.activeStatus": "all",
            "count": count,
        }
        response = await client.post(
            f"{self.base_url}/acts/{actor_path}/runs",
            params={"token": self.api_token},
            json=payload,
        )
        if response.status_code >= 400:
            raise FetchError(f"Apify API error: {response.status_code} - {response.text}")

        run_id = response.json()["data"]["id"]
        logger.debug(f"Apify run started: {run_id}")
        return run_id

    async def wait_for_completion(self, client: httpx.AsyncClient, run_id: str) -> Tuple[JobStatus, Optional[str]]:
        """
        Poll the run until it is terminal.

        Returns (status, dataset_id). The number of polls is bounded by
        max_wait_seconds / poll_interval; running out of polls, or a call to
        cancel(), yields TIMED_OUT.
        """
        max_attempts = self.max_attempts

        for attempt in range(max_attempts):
            if self._cancelled.is_set():
                logger.info(f"Apify run {run_id} polling cancelled")
                return JobStatus.TIMED_OUT, None

            response = await client.get(
                f"{self.base_url}/actor-runs/{run_id}",
                params={"token": self.api_token},
            )
            if response.status_code >= 400:
                raise FetchError(f"Failed to check run status: {response.status_code}")

            data = response.json()["data"]
            status = JobStatus.parse(data.get("status"))
            logger.debug(f"Apify run status: {status.value} ({attempt + 1}/{max_attempts})")

            if status.is_terminal:
                return status, data.get("defaultDatasetId")

            if await self._sleep_or_cancel(self.poll_interval):
                logger.info(f"Apify run {run_id} polling cancelled")
                return JobStatus.TIMED_OUT, None

        logger.warning(f"Apify run {run_id} timed out after {self.max_wait_seconds}s")
        return JobStatus.TIMED_OUT, None

    async def fetch_dataset_items(self, client: httpx.AsyncClient, dataset_id: Optional[str]) -> List[Dict[str, Any]]:
        if not dataset_id:
            raise FetchError("Apify run succeeded without a dataset")
        response = await client.get(
            f"{self.base_url}/datasets/{dataset_id}/items",
            params={"token": self.api_token},
        )
        if response.status_code >= 400:
            raise FetchError(f"Failed to fetch dataset: {response.status_code}")
        items = response.json()
        return items if isinstance(items, list) else []

    @staticmethod
    def transform_items(items: List[Dict[str, Any]], brand_name: str) -> List[AdImage]:
        images = []
        for item in items:
            url = item.get("ad_snapshot_url")
            if not url:
                continue
            description = item.get("ad_creative_body") or f"{brand_name} - {item.get('page_name') or 'Facebook Ad'}"
            images.append(AdImage(url=url, description=description, platform=Platform.FACEBOOK))
        return images

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _sleep_or_cancel(self, seconds: float) -> bool:
        """Sleep for *seconds*; return True early if cancel() was called."""
        if seconds <= 0:
            await asyncio.sleep(0)
            return self._cancelled.is_set()
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def _session(self):
        if self._client is not None:
            return _Borrowed(self._client)
        return httpx.AsyncClient(timeout=30.0)


class _Borrowed:
    """Async context wrapper that leaves an injected client open."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def __aenter__(self) -> httpx.AsyncClient:
        return self.client

    async def __aexit__(self, *exc_info) -> None:
        return None
