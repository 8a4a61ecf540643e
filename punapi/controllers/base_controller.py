"""
Base controller interface for API endpoints.

Concrete controllers receive the PunService they need through the
constructor and register their routes on self.router in _setup_routes().
Errors raised by the service layer are turned into plain-text responses by
handle_exception(), using the HTTP status carried by each PunError subclass.

Usage:
    ```python
    class MyController(BaseController):
        def _setup_routes(self):
            @self.router.get("/my-endpoint")
            def my_endpoint():
                return {"message": "Hello World"}
    ```
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from ..exceptions import PunError
from ..services import PunService


class BaseController(ABC):
    """
    Abstract base controller for consistent API endpoint patterns.

    Attributes:
        router (APIRouter): FastAPI router instance for endpoint registration
        service (PunService): Query service shared by all requests
    """

    def __init__(self, service: PunService):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__module__)
        self.router = APIRouter()
        self._setup_routes()

    @abstractmethod
    def _setup_routes(self):
        """Setup routes for this controller."""
        pass

    def handle_exception(self, e: PunError, context: Optional[str] = None) -> PlainTextResponse:
        """
        Convert a service error into a plain-text response.

        Args:
            e (PunError): The error raised by the service layer
            context (Optional[str]): Prefix describing the failed operation

        Returns:
            PlainTextResponse: status from e.status_code, body with the message
        """
        error_message = f"{context}: {str(e)}" if context else str(e)
        self.logger.error(error_message)
        return PlainTextResponse(error_message, status_code=e.status_code)
