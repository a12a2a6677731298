"""
AdFetchChain: ordered fallback over ImageProviders.

Tiers are tried strictly in order and the first one that succeeds with a
non-empty result wins; later tiers are never called. Errors, empty results
and unconfigured tiers all fall through. fetch_images() never raises.
"""
from __future__ import annotations

from logging import getLogger
from typing import Iterable, List, Optional, Sequence

from adinsightmap.config import Settings

from .base import AdImage, FetchResult, FetchStatus, ImageProvider

logger = getLogger(__name__)


class AdFetchChain:

    def __init__(self, providers: Iterable[ImageProvider]) -> None:
        self.providers: List[ImageProvider] = list(providers)

    @classmethod
    def from_settings(cls, settings: Settings, tiers: Optional[Sequence[str]] = None) -> 'AdFetchChain':
        """Build providers by registered name, in the configured tier order."""
        providers = []
        for tier_name in tiers or settings.ad_fetch_tiers:
            provider_cls = ImageProvider.lookup(tier_name)
            providers.append(provider_cls.from_settings(settings))
        logger.info(f"Ad fetch chain: {' -> '.join(p.name for p in providers)}")
        return cls(providers)

    async def fetch_images(self, brand_name: str) -> List[AdImage]:
        for provider in self.providers:
            result = await self._try(provider, brand_name)
            if result.is_success:
                logger.info(f"Found {len(result.images)} ads for '{brand_name}' via {provider.name}")
                return result.images

            if result.status == FetchStatus.SKIPPED:
                logger.debug(f"Skipping {provider.name}: {result.error}")
            elif result.status == FetchStatus.EMPTY:
                logger.warning(f"{provider.name} returned no ads for '{brand_name}', falling through")
            else:
                logger.warning(f"{provider.name} failed for '{brand_name}' ({result.error}), falling through")

        logger.warning(f"All fetch tiers exhausted for '{brand_name}'")
        return []

    async def fetch_image_urls(self, brand_name: str) -> List[str]:
        return [image.url for image in await self.fetch_images(brand_name)]

    @staticmethod
    async def _try(provider: ImageProvider, brand_name: str) -> FetchResult:
        # Providers built on ImageProvider already convert failures into
        # results; this catches anything a custom provider lets escape.
        try:
            return await provider.fetch(brand_name)
        except Exception as exc:
            logger.exception(f"Provider {provider.name} raised out of fetch()")
            return FetchResult.failed(str(exc))
