"""
Scraping package for PUN bundle retrieval.

This package contains the browser automation that downloads price bundles
from the GME portal.
"""

from .gme_scraper import BrowserRetrievalController, BundleFetcher

__all__ = ['BrowserRetrievalController', 'BundleFetcher']
