"""
Configuration package for application settings.
"""

from .settings import ApplicationConfig, APIConfig, CacheConfig, RetrievalConfig

__all__ = [
    "ApplicationConfig",
    "APIConfig",
    "CacheConfig",
    "RetrievalConfig",
]
