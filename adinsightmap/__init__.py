"""AdInsightMap: competitor ad-insight graph service."""

__version__ = "0.1.0"
