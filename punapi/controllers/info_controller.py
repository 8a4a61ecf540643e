"""
Controller for API information and health endpoints.
"""

from .base_controller import BaseController
from ..models import APIInfo, CacheStats, HealthResponse


class InfoController(BaseController):
    """Controller for API information and health endpoints."""

    def __init__(self, service, version: str = "1.0.0"):
        self.version = version
        super().__init__(service)

    def _setup_routes(self):
        """Setup routes for API info and health."""

        @self.router.get("/info", response_model=APIInfo, tags=["System Information"])
        def get_api_info():
            """API information with cache statistics."""
            return APIInfo(
                message="PUN API",
                version=self.version,
                endpoints={
                    "pun": "/?time=YYYY-MM-DD HH:MM - PUN for one hour",
                    "month": "/month?time=YYYY-MM-DD HH:MM - Monthly average PUN",
                    "health": "/health - Health check",
                },
                cache=CacheStats(**self.service.cache.stats()),
            )

        @self.router.get("/health", response_model=HealthResponse, tags=["System Information"])
        def health_check():
            """Health check endpoint."""
            return HealthResponse(
                status="healthy",
                service="punapi"
            )
