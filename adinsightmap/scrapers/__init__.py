"""
Ad image sourcing.

Tier priority (default, see AD_FETCH_TIERS):
    1. apify            Apify actor scraping the Facebook ads library per brand
    2. facebook_json    static JSON corpus of real ad-library URLs
    3. meta             Meta Ad Library search API (needs META_ACCESS_TOKEN)
    4. mock             synthetic ads, always available

Importing this package registers every built-in tier with ImageProvider.
"""

from .base import AdImage, FetchError, FetchResult, FetchStatus, ImageProvider
from .apify_scraper import ApifyScraperService, JobStatus
from .facebook_json_scraper import FacebookJsonScraperService
from .meta_ads_client import MetaAdsClient
from .mock_scraper import MockScraperService
from .ad_fetch_chain import AdFetchChain

__all__ = [
    "AdFetchChain",
    "AdImage",
    "ApifyScraperService",
    "FacebookJsonScraperService",
    "FetchError",
    "FetchResult",
    "FetchStatus",
    "ImageProvider",
    "JobStatus",
    "MetaAdsClient",
    "MockScraperService",
]
