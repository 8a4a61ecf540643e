"""
This module creates and configures the FastAPI application for the PUN API.

The API exposes the Italian PUN (Prezzo Unico Nazionale) published by
mercatoelettrico.org. The portal has no public API, so prices are downloaded
with a headless browser on demand and cached for an hour.

Routes:
    - /: PUN for one hour, plain text
    - /month: Monthly average PUN, plain text
    - /info, /health: System information
    - /docs: Interactive Swagger UI documentation
"""

import logging

from fastapi import FastAPI

from .config import ApplicationConfig
from .controllers import PunApiController
from .services import PunService
from .utils import ArchiveDecoder, BrowserRetrievalController, DatasetCache


def create_service(config: ApplicationConfig) -> PunService:
    """Wire the retrieval controller, decoder and cache into a PunService."""
    return PunService(
        fetcher=BrowserRetrievalController(config.retrieval),
        cache=DatasetCache(ttl_seconds=config.cache.ttl_seconds),
        decoder=ArchiveDecoder(),
        timezone=config.api.timezone,
    )


def create_app(config: ApplicationConfig = None, service: PunService = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration, read from the environment if omitted
        service: Pre-built query service, built from config if omitted

    Returns:
        FastAPI: Configured application instance
    """
    config = config or ApplicationConfig.from_environment()
    service = service or create_service(config)

    app = FastAPI(
        title=config.api.title,
        description=config.api.description,
        version=config.api.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "PUN",
                "description": "Hourly PUN and monthly average, as plain text"
            },
            {
                "name": "System Information",
                "description": "API health, version info, and cache status endpoints"
            },
        ]
    )
    app.state.config = config
    app.state.pun_service = service

    app.include_router(PunApiController(service, version=config.api.version).router)

    return app


def main():
    import uvicorn

    config = ApplicationConfig.from_environment()
    logging.basicConfig(
        level=getattr(logging, config.api.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger(__name__).info(
        f"Starting server on {config.api.listen_address}")
    uvicorn.run(
        create_app(config),
        host=config.api.host,
        port=config.api.port,
    )


if __name__ == "__main__":
    main()
