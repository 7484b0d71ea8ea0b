"""Main configuration class that combines all config modules."""

import logging
import tomllib
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .base import get_bool_env, get_env, get_int_env
from .catalog import CatalogConfig
from .providers import SanityConfig, SwellConfig, WebhookConfig

logger = logging.getLogger(__name__)

DEFAULT_TOML_NAME = "settings.toml"


class Config(BaseModel):
    """Main configuration class for shopcatalog.

    Configuration is loaded from multiple sources in priority order:
    1. Environment variables
    2. TOML configuration file
    3. Default values
    """

    model_config = ConfigDict(extra="ignore")

    # Core settings
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"

    # Sub-configurations
    sanity: SanityConfig = Field(default_factory=SanityConfig)
    swell: SwellConfig = Field(default_factory=SwellConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)

    loaded_from: list[Path] = Field(default_factory=list)

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() in {"development", "dev"}

    @property
    def content_ttl(self) -> float:
        return self.catalog.content_ttl_dev if self.is_development else self.catalog.content_ttl

    @property
    def static_ttl(self) -> float:
        return self.catalog.static_ttl_dev if self.is_development else self.catalog.static_ttl

    @property
    def batch_timeout(self) -> float:
        if self.is_development:
            return self.catalog.batch_timeout_dev
        return self.catalog.batch_timeout

    @classmethod
    def load(cls, config_path: Path | str | None = None) -> "Config":
        """Load configuration from files and environment."""
        load_dotenv()

        core_config_path = get_env("SHOPCATALOG_CORE_CONFIG_PATH")
        toml_path = (
            Path(config_path)
            if config_path
            else Path(core_config_path or DEFAULT_TOML_NAME).resolve()
        )

        config = cls()
        if toml_path.exists():
            try:
                with open(toml_path, "rb") as f:
                    toml_data = tomllib.load(f)

                config_dict = config.model_dump()
                for key, value in toml_data.items():
                    if isinstance(value, dict) and isinstance(config_dict.get(key), dict):
                        config_dict[key].update(value)
                    else:
                        config_dict[key] = value
                config = cls.model_validate(config_dict)
                config.loaded_from.append(toml_path)
            except Exception as e:
                logger.warning("Failed to load TOML config from %s: %s", toml_path, e)

        config._apply_env_overrides()
        return config

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to config."""
        if env := get_env("SHOPCATALOG_ENV"):
            self.environment = env

        # Sanity configuration
        if project_id := get_env("SANITY_PROJECT_ID"):
            self.sanity.project_id = project_id
        if dataset := get_env("SANITY_DATASET"):
            self.sanity.dataset = dataset
        if api_version := get_env("SANITY_API_VERSION"):
            self.sanity.api_version = api_version
        if token := get_env("SANITY_API_TOKEN"):
            self.sanity.token = token
        use_cdn = get_bool_env("SANITY_USE_CDN")
        if use_cdn is not None:
            self.sanity.use_cdn = use_cdn

        # Swell configuration
        if store_id := get_env("SWELL_STORE_ID"):
            self.swell.store_id = store_id
        if public_key := get_env("SWELL_PUBLIC_KEY"):
            self.swell.public_key = public_key

        # Catalog configuration
        if width := get_int_env("SHOPCATALOG_COMMERCE_CONCURRENCY"):
            self.catalog.commerce_concurrency = max(1, width)

        if secret := get_env("CACHE_WEBHOOK_SECRET"):
            self.webhook.secret = secret

        # Debug/Logging
        if debug_val := get_bool_env("SHOPCATALOG_DEBUG"):
            self.debug = debug_val
        if log_level := get_env("SHOPCATALOG_LOG_LEVEL"):
            self.log_level = log_level


# ---- Global config management ----

_GLOBAL_CONFIG: Config | None = None


def get_core_config() -> Config:
    """Return process-global core config."""
    global _GLOBAL_CONFIG
    if _GLOBAL_CONFIG is None:
        _GLOBAL_CONFIG = Config.load()
    return _GLOBAL_CONFIG


def set_core_config(config: Config | None) -> None:
    """Set (or reset with ``None``) the global core config."""
    global _GLOBAL_CONFIG
    _GLOBAL_CONFIG = config
