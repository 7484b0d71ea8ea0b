"""Modular configuration system for shopcatalog."""

from .base import (
    PLACEHOLDER_WEEK,
    get_bool_env,
    get_env,
    get_int_env,
)
from .catalog import (
    CatalogConfig,
    CatalogLimits,
)
from .main import (
    Config,
    get_core_config,
    set_core_config,
)
from .providers import (
    SanityConfig,
    SwellConfig,
    WebhookConfig,
)

__all__ = [
    # Main classes
    "Config",
    # Main functions
    "get_core_config",
    "set_core_config",
    # Base utilities
    "get_env",
    "get_bool_env",
    "get_int_env",
    "PLACEHOLDER_WEEK",
    # Provider configs
    "SanityConfig",
    "SwellConfig",
    "WebhookConfig",
    # Catalog configs
    "CatalogConfig",
    "CatalogLimits",
]
