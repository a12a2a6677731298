"""
Tier 3: Meta Ad Library search API.

Single request per brand; pagination cursors in the response are ignored.
"""
from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, List, Optional

import httpx

from adinsightmap.config import Settings
from adinsightmap.core.Types import Platform

from .base import AdImage, FetchError, ImageProvider

logger = getLogger(__name__)

META_ADS_ARCHIVE_URL = "https://graph.facebook.com/v18.0/ads_archive"
MAX_DESCRIPTION_LENGTH = 100


@ImageProvider.register("meta")
class MetaAdsClient(ImageProvider):

    def __init__(
        self,
        access_token: Optional[str],
        limit: int = 10,
        country: str = "KR",
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = META_ADS_ARCHIVE_URL,
    ) -> None:
        self.access_token = access_token
        self.limit = limit
        self.country = country
        self.base_url = base_url
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> 'MetaAdsClient':
        return cls(access_token=settings.meta_access_token, limit=settings.ad_fetch_count)

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    async def _fetch_images(self, brand_name: str) -> List[AdImage]:
        return await self.search_ads(brand_name, self.limit)

    async def search_ads(self, brand_name: str, limit: int = 10) -> List[AdImage]:
        params = {
            "access_token": self.access_token,
            "search_terms": brand_name,
            "ad_reached_countries": self.country,
            "ad_active_status": "ALL",
            "limit": str(limit),
            "fields": "id,ad_snapshot_url,ad_creative_link_captions,page_name,ad_creative_body",
        }
        logger.info(f"Meta Ad Library search for '{brand_name}'")

        if self._client is not None:
            response = await self._client.get(self.base_url, params=params)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.get(self.base_url, params=params)

        if response.status_code >= 400:
            raise FetchError(f"Meta API Error: {response.status_code} {response.text}")

        ads = (response.json() or {}).get("data") or []
        if not ads:
            logger.warning(f"No Meta ads found for '{brand_name}'")
            return []

        logger.info(f"Meta API: {len(ads)} ads found")
        return [
            AdImage(url=ad["ad_snapshot_url"], description=describe_ad(ad), platform=Platform.META)
            for ad in ads
            if ad.get("ad_snapshot_url")
        ]


def describe_ad(ad: Dict[str, Any]) -> str:
    """Creative body > first link caption > page name > fixed fallback."""
    body = ad.get("ad_creative_body")
    if body:
        if len(body) > MAX_DESCRIPTION_LENGTH:
            return body[:MAX_DESCRIPTION_LENGTH] + "..."
        return body

    captions = ad.get("ad_creative_link_captions") or []
    if captions:
        return captions[0]

    if ad.get("page_name"):
        return f"{ad['page_name']}의 광고"

    return "광고 설명 없음"
