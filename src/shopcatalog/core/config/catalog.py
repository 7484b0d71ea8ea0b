"""Catalog (aggregation + cache) configuration."""

from pydantic import BaseModel, ConfigDict, Field


class CatalogLimits(BaseModel):
    model_config = ConfigDict(extra="ignore")

    featured: int = 10
    new_products: int = 12
    search: int = 20
    max_weeks: int = 8


class CatalogConfig(BaseModel):
    """TTLs, concurrency and timeouts for the product catalog.

    TTLs are seconds. Development values are shorter so editorial changes
    show up quickly while working locally.
    """

    model_config = ConfigDict(extra="ignore")

    content_ttl: float = 5 * 60
    static_ttl: float = 15 * 60
    content_ttl_dev: float = 30
    static_ttl_dev: float = 60

    commerce_concurrency: int = Field(default=5, ge=1)

    batch_timeout: float = 8.0
    batch_timeout_dev: float = 3.0

    limits: CatalogLimits = Field(default_factory=CatalogLimits)
