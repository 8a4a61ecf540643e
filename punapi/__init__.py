"""
PUN API: HTTP access to the Italian PUN (Prezzo Unico Nazionale).
"""

__version__ = "1.0.0"
