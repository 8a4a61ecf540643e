"""
Utilities package for PUN price data retrieval.

This package contains the bundle scraper, the archive decoder and the
dataset cache.
"""

from .archive import ArchiveDecoder
from .cache_utils import DatasetCache, daily_key, monthly_key
from .scraping import BrowserRetrievalController, BundleFetcher

__all__ = [
    'ArchiveDecoder',
    'BrowserRetrievalController',
    'BundleFetcher',
    'DatasetCache',
    'daily_key',
    'monthly_key',
]
