"""
Controllers package for API endpoint handlers.
"""

from fastapi import APIRouter

from .base_controller import BaseController
from .info_controller import InfoController
from .pun_controller import PunController
from ..services import PunService


class PunApiController:
    """Aggregate controller that combines the info and PUN controllers."""

    def __init__(self, service: PunService, version: str = "1.0.0"):
        self.router = APIRouter()
        self.info_controller = InfoController(service, version=version)
        self.pun_controller = PunController(service)
        self.router.include_router(self.info_controller.router)
        self.router.include_router(self.pun_controller.router)


__all__ = [
    "BaseController",
    "InfoController",
    "PunController",
    "PunApiController",
]
