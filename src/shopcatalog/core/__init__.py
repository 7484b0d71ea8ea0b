"""Core primitives: config, cache, limiter, results, exceptions."""

from .cache import CacheEntry, TTLCache
from .config import Config, get_core_config, set_core_config
from .exceptions import (
    CommerceStoreError,
    ConfigurationError,
    ContentStoreError,
    ShopCatalogError,
    UpstreamError,
)
from .limiter import ConcurrencyLimiter, create_limit
from .result import Degraded, Result

__all__ = [
    "CacheEntry",
    "TTLCache",
    "Config",
    "get_core_config",
    "set_core_config",
    "ShopCatalogError",
    "ConfigurationError",
    "UpstreamError",
    "ContentStoreError",
    "CommerceStoreError",
    "ConcurrencyLimiter",
    "create_limit",
    "Degraded",
    "Result",
]
