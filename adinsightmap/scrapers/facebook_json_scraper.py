"""
Tier 2: static corpus of real Facebook ad-library URLs shipped as JSON.

The file is read at most once per provider; a missing or malformed file is
cached as an empty corpus so the chain simply falls through.
"""
from __future__ import annotations

import json
import os
import random
from logging import getLogger
from typing import Any, Dict, List, Optional

from adinsightmap.config import Settings
from adinsightmap.core.Types import Platform

from .base import AdImage, ImageProvider

logger = getLogger(__name__)


@ImageProvider.register("facebook_json")
class FacebookJsonScraperService(ImageProvider):

    def __init__(self, path: str, count: int = 10, rng: Optional[random.Random] = None) -> None:
        self.path = path
        self.count = count
        self._rng = rng or random.Random()
        self._ads_cache: Optional[List[Dict[str, Any]]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> 'FacebookJsonScraperService':
        return cls(path=settings.facebook_ads_json, count=settings.ad_fetch_count)

    def load_ads(self) -> List[Dict[str, Any]]:
        if self._ads_cache is not None:
            return self._ads_cache

        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                records = json.load(fh)
            if not isinstance(records, list):
                raise ValueError("top-level JSON value is not an array")
            self._ads_cache = [r for r in records if isinstance(r, dict) and r.get("ad_library_url")]
            logger.info(f"Loaded {len(self._ads_cache)} Facebook ads from {os.path.abspath(self.path)}")
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to load Facebook ads JSON '{self.path}': {exc}")
            self._ads_cache = []
        return self._ads_cache

    async def _fetch_images(self, brand_name: str) -> List[AdImage]:
        all_ads = self.load_ads()
        if not all_ads:
            logger.warning("No ads available in JSON corpus")
            return []

        selected = self._rng.sample(all_ads, min(self.count, len(all_ads)))
        logger.info(f"Selected {len(selected)} Facebook ads from JSON for '{brand_name}'")
        return [
            AdImage(url=ad["ad_library_url"], description=f"Facebook Ad - {brand_name}", platform=Platform.FACEBOOK)
            for ad in selected
        ]
