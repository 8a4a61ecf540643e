"""
Application configuration settings.

The configuration is built once at startup and handed to each component
constructor; nothing reads it from module globals afterwards.
"""

import os
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class RetrievalConfig(BaseModel):
    """Browser retrieval settings."""

    timeout: float = 120.0  # overall deadline in seconds
    show_browser: bool = False
    chrome_path: Optional[str] = None
    proxy: Optional[str] = None
    disable_gpu: bool = False
    debug: bool = False


class CacheConfig(BaseModel):
    """Dataset cache settings."""

    ttl_seconds: int = 3600


class APIConfig(BaseModel):
    """API configuration settings."""

    title: str = "PUN API"
    description: str = "HTTP API exposing the Italian PUN (Prezzo Unico Nazionale) from mercatoelettrico.org"
    version: str = "1.0.0"
    listen_address: str = ":8080"
    timezone: str = "Europe/Rome"
    log_level: str = "INFO"

    @property
    def host(self) -> str:
        return self._split_listen_address()[0]

    @property
    def port(self) -> int:
        return self._split_listen_address()[1]

    def _split_listen_address(self) -> Tuple[str, int]:
        host, _, port = self.listen_address.rpartition(":")
        if not port.isdigit():
            raise ValueError(
                f"Invalid listen address '{self.listen_address}', expected host:port")
        return host.strip("[]") or "0.0.0.0", int(port)


def _env_bool(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


class ApplicationConfig(BaseModel):
    """Main application configuration."""

    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @classmethod
    def from_environment(cls, env_file: Optional[str] = None) -> 'ApplicationConfig':
        """Create configuration from PUNAPI_* environment variables"""
        load_dotenv(env_file or Path.cwd() / '.env')
        config = cls()

        if os.getenv('PUNAPI_TIMEOUT'):
            config.retrieval.timeout = float(os.getenv('PUNAPI_TIMEOUT'))

        for attr, name in (('show_browser', 'PUNAPI_SHOW_BROWSER'),
                           ('disable_gpu', 'PUNAPI_DISABLE_GPU'),
                           ('debug', 'PUNAPI_DEBUG')):
            flag = _env_bool(name)
            if flag is not None:
                setattr(config.retrieval, attr, flag)

        if os.getenv('PUNAPI_CHROME_PATH'):
            config.retrieval.chrome_path = os.getenv('PUNAPI_CHROME_PATH')

        if os.getenv('PUNAPI_PROXY'):
            config.retrieval.proxy = os.getenv('PUNAPI_PROXY')

        if os.getenv('PUNAPI_CACHE_TTL'):
            config.cache.ttl_seconds = int(os.getenv('PUNAPI_CACHE_TTL'))

        if os.getenv('PUNAPI_LISTEN_ADDRESS'):
            config.api.listen_address = os.getenv('PUNAPI_LISTEN_ADDRESS')

        if os.getenv('PUNAPI_TIMEZONE'):
            config.api.timezone = os.getenv('PUNAPI_TIMEZONE')

        if os.getenv('PUNAPI_LOG_LEVEL'):
            config.api.log_level = os.getenv('PUNAPI_LOG_LEVEL')

        return config
