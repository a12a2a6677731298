"""
Provider contract for the ad-image fetch chain.

Every tier is an ImageProvider. ``fetch()`` never raises: it wraps the
concrete ``_fetch_images()`` and turns its outcome into a FetchResult, so the
chain driver only has to look at the status to decide whether to fall
through.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from logging import getLogger
from typing import Callable, Dict, List, Optional, Type

from adinsightmap.core.Types import Platform

logger = getLogger(__name__)


@dataclass(frozen=True)
class AdImage:
    url: str
    description: str
    platform: Platform


class FetchError(Exception):
    """Raised inside a provider when its upstream call fails."""


class FetchStatus(Enum):
    OK = auto()
    EMPTY = auto()     # tier worked but had nothing for this brand
    ERROR = auto()     # tier raised
    SKIPPED = auto()   # tier not configured (e.g. missing credential)


@dataclass
class FetchResult:
    status: FetchStatus
    images: List[AdImage] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok(cls, images: List[AdImage]) -> 'FetchResult':
        if not images:
            return cls(FetchStatus.EMPTY)
        return cls(FetchStatus.OK, list(images))

    @classmethod
    def failed(cls, error: str) -> 'FetchResult':
        return cls(FetchStatus.ERROR, error=error)

    @classmethod
    def skipped(cls, reason: str) -> 'FetchResult':
        return cls(FetchStatus.SKIPPED, error=reason)

    @property
    def is_success(self) -> bool:
        return self.status == FetchStatus.OK


class ImageProvider(ABC):
    """Base class for one fetch tier."""

    name: str = "provider"

    _provider_registry: Dict[str, Type['ImageProvider']] = {}

    @classmethod
    def register(cls, provider_name: str) -> Callable[[Type['ImageProvider']], Type['ImageProvider']]:
        def decorator(provider_cls: Type['ImageProvider']) -> Type['ImageProvider']:
            if provider_name in cls._provider_registry:
                raise ValueError(f"Image provider '{provider_name}' is already registered")
            provider_cls.name = provider_name
            cls._provider_registry[provider_name] = provider_cls
            return provider_cls
        return decorator

    @classmethod
    def registered(cls) -> Dict[str, Type['ImageProvider']]:
        return dict(cls._provider_registry)

    @classmethod
    def lookup(cls, provider_name: str) -> Type['ImageProvider']:
        try:
            return cls._provider_registry[provider_name]
        except KeyError:
            raise ValueError(
                f"Unknown image provider '{provider_name}'. "
                f"Known: {', '.join(sorted(cls._provider_registry))}"
            ) from None

    @classmethod
    def from_settings(cls, settings) -> 'ImageProvider':
        raise NotImplementedError(f"{cls.__name__} cannot be built from settings")

    @property
    def is_configured(self) -> bool:
        return True

    async def fetch(self, brand_name: str) -> FetchResult:
        if not self.is_configured:
            return FetchResult.skipped(f"{self.name} is not configured")
        try:
            images = await self._fetch_images(brand_name)
        except Exception as exc:
            logger.warning(f"{self.name} failed for '{brand_name}': {exc}")
            return FetchResult.failed(str(exc) or type(exc).__name__)
        return FetchResult.ok(images)

    @abstractmethod
    async def _fetch_images(self, brand_name: str) -> List[AdImage]:
        ...
