"""
Runtime configuration read from the environment (and a project-root .env).

Missing credentials are not errors: the fetch tier or LLM call that needs
them is skipped or reported as an upstream failure at call time.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TIERS = ("apify", "facebook_json", "meta", "mock")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got '{raw}'")


def _env_list(name: str, default: Tuple[str, ...]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    apify_api_token: Optional[str] = None
    apify_actor_id: str = "curious_coder/facebook-ads-library-scraper"
    apify_poll_interval: float = 2.0
    apify_max_wait_seconds: float = 60.0

    meta_access_token: Optional[str] = None

    groq_api_key: Optional[str] = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_model: str = "llama-3.3-70b-versatile"

    facebook_ads_json: str = os.path.join("data", "facebook-ads.json")
    ad_fetch_tiers: List[str] = field(default_factory=lambda: list(DEFAULT_TIERS))
    ad_fetch_count: int = 10
    mock_delay_range: Tuple[float, float] = (0.5, 1.0)

    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            apify_api_token=os.getenv("APIFY_API_TOKEN") or None,
            apify_actor_id=os.getenv("APIFY_ACTOR_ID", cls.apify_actor_id),
            apify_poll_interval=_env_float("APIFY_POLL_INTERVAL", cls.apify_poll_interval),
            apify_max_wait_seconds=_env_float("APIFY_MAX_WAIT_SECONDS", cls.apify_max_wait_seconds),
            meta_access_token=os.getenv("META_ACCESS_TOKEN") or None,
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            groq_base_url=os.getenv("GROQ_BASE_URL", cls.groq_base_url),
            groq_model=os.getenv("GROQ_MODEL", cls.groq_model),
            facebook_ads_json=os.getenv("FACEBOOK_ADS_JSON", cls.facebook_ads_json),
            ad_fetch_tiers=_env_list("AD_FETCH_TIERS", DEFAULT_TIERS),
            ad_fetch_count=int(_env_float("AD_FETCH_COUNT", cls.ad_fetch_count)),
            mock_delay_range=(
                _env_float("MOCK_DELAY_MIN_MS", 500) / 1000,
                _env_float("MOCK_DELAY_MAX_MS", 1000) / 1000,
            ),
            cors_origins=_env_list("CORS_ORIGINS", ("*",)),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
