"""shopcatalog: product aggregation and caching for the storefront."""

from __future__ import annotations

__version__ = "0.1.0"
