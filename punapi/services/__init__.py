"""
Services package for business logic layer.
"""

from .pun_service import PunService, format_price

__all__ = [
    "PunService",
    "format_price",
]
