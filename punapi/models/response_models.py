"""
Response models for API endpoints.
"""

from pydantic import BaseModel


class CacheStats(BaseModel):
    """Model for dataset cache statistics."""
    entries: int
    hits: int
    misses: int
    ttl_seconds: int


class APIInfo(BaseModel):
    """Model for API information."""
    message: str
    version: str
    endpoints: dict
    cache: CacheStats


class HealthResponse(BaseModel):
    """Model for health check response."""
    status: str
    service: str
