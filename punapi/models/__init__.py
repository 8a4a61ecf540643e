"""
Models package for API data structures.
"""

from .price_models import PriceRecord, DailyDataset
from .response_models import APIInfo, CacheStats, HealthResponse

__all__ = [
    "PriceRecord",
    "DailyDataset",
    "APIInfo",
    "CacheStats",
    "HealthResponse",
]
