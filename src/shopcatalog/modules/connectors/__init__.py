"""Connectors (upstream stores)."""

from __future__ import annotations

from .sanity import SanityConnector
from .swell import CommerceProduct, StockInfo, SwellConnector

__all__ = [
    "CommerceProduct",
    "SanityConnector",
    "StockInfo",
    "SwellConnector",
]
