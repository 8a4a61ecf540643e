"""
Archive package for decoding downloaded price bundles.
"""

from .decoder import ArchiveDecoder, encode_price, parse_price

__all__ = ['ArchiveDecoder', 'encode_price', 'parse_price']
