"""
Tier 4: synthetic ads. Always available, so the chain never comes back empty
unless every tier has been replaced.
"""
from __future__ import annotations

import asyncio
import random
from logging import getLogger
from typing import List, Optional, Tuple

from adinsightmap.config import Settings
from adinsightmap.core.Types import Platform

from .base import AdImage, ImageProvider

logger = getLogger(__name__)

MOCK_IMAGE_URLS = [
    "https://images.unsplash.com/photo-1557821552-17105176677c?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1542744173-8e7e53415bb0?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1552581234-26160f608093?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1556761175-b413da4baf72?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1553877522-43269d4ea984?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1563986768609-322da13575f3?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1507537362848-9c7e70b7b5c1?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1556155092-490a1ba16284?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1557804506-669a67965ba0?w=800&h=600&fit=crop",
    "https://images.unsplash.com/photo-1553484771-371a605b060b?w=800&h=600&fit=crop",
]

DESCRIPTION_TEMPLATES = [
    "{brand}의 신제품 출시 캠페인 - 감각적인 비주얼과 강렬한 CTA",
    "{brand} 브랜드 이미지 광고 - 미니멀한 디자인과 고급스러운 톤",
    "{brand} 프로모션 배너 - 할인율 강조 및 긴급성 메시지",
    "{brand} 라이프스타일 광고 - 타겟층 공감 이미지",
    "{brand} 제품 상세 광고 - 기능 및 혜택 중심",
    "{brand} 시즌 마케팅 - 계절감 있는 컬러와 메시지",
    "{brand} 리타겟팅 광고 - 직접적인 구매 유도",
]

MOCK_PLATFORMS = [Platform.META, Platform.GOOGLE, Platform.NAVER, Platform.MOCK]

MIN_COUNT = 5
MAX_COUNT = 10


@ImageProvider.register("mock")
class MockScraperService(ImageProvider):

    def __init__(self, delay_range: Tuple[float, float] = (0.5, 1.0), rng: Optional[random.Random] = None) -> None:
        self.delay_range = delay_range
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: Settings) -> 'MockScraperService':
        return cls(delay_range=settings.mock_delay_range)

    async def _fetch_images(self, brand_name: str) -> List[AdImage]:
        low, high = self.delay_range
        if high > 0:
            await asyncio.sleep(self._rng.uniform(low, high))

        count = self._rng.randint(MIN_COUNT, MAX_COUNT)
        logger.info(f"Using mock ads for '{brand_name}' ({count})")
        return [
            AdImage(
                url=MOCK_IMAGE_URLS[i % len(MOCK_IMAGE_URLS)],
                description=generate_mock_description(brand_name, i),
                platform=self._rng.choice(MOCK_PLATFORMS),
            )
            for i in range(count)
        ]


def generate_mock_description(brand_name: str, index: int) -> str:
    return DESCRIPTION_TEMPLATES[index % len(DESCRIPTION_TEMPLATES)].format(brand=brand_name)
