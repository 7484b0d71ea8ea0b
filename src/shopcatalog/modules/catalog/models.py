"""Catalog data models consumed by page rendering and REST handlers."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ArchiveType = Literal["artist", "label", "genre", "format", "week", "tag"]

ARCHIVE_TYPES: tuple[str, ...] = ("artist", "label", "genre", "format", "week", "tag")


class MergedProduct(BaseModel):
    """Content record merged with its commerce record.

    ``id`` is the commerce id when enrichment succeeded, otherwise the
    content store ``_id``; ``content_id`` is always the content ``_id``.
    ``sanity_content`` keeps the raw content record so
    consumers can recover fields this model does not carry.
    """

    model_config = ConfigDict(extra="ignore")

    # Identity
    id: str
    content_id: str = ""
    sku: str
    slug: str
    product_slug: str = ""
    commerce_id: str | None = None

    # Commercial
    price: float = 0.0
    currency: str = "USD"
    stock_level: int = 0
    stock_purchasable: bool = False
    stock_tracking: bool = False
    stock_status: str | None = None
    variants: dict[str, Any] | None = None

    # Editorial
    name: str = "Untitled"
    title: str = "Untitled"
    description: str = ""
    short_description: str = ""
    artist: str = ""
    label: str = ""
    format: str = ""
    genre: str = ""
    category: str = ""
    country: str = ""
    released: str = ""
    catalog: str = ""
    tags: list[Any] = Field(default_factory=list)
    main_image: dict[str, Any] | None = None
    additional_images: list[Any] | None = None
    gallery: list[Any] | None = None
    image_url: str | None = None
    tracklist: list[Any] = Field(default_factory=list)
    in_mixtapes: list[Any] = Field(default_factory=list)
    order_rank: str | None = None
    menu_order: int | None = None

    # Condition
    media: str | None = None
    sleeve: str | None = None
    notes: str | None = None

    # Provenance
    week: str = ""
    display_week: str | None = None
    featured: bool = False
    sanity_content: dict[str, Any] = Field(default_factory=dict)

    @property
    def in_stock(self) -> bool:
        return self.stock_level > 0

    @property
    def identity_keys(self) -> set[str]:
        """Every id this product is known by (content, commerce and merged)."""
        return {key for key in (self.id, self.content_id, self.commerce_id) if key}


class ProductsWithBreakdown(BaseModel):
    products: list[MergedProduct] = Field(default_factory=list)
    weeks_used: list[str] = Field(default_factory=list)
    week_breakdown: dict[str, int] = Field(default_factory=dict)


class ProductSearchResult(BaseModel):
    products: list[MergedProduct] = Field(default_factory=list)
    total: int = 0
    pages: int = 0
    current_page: int = 1
    actual_name: str | None = None


class BatchProducts(BaseModel):
    featured: list[MergedProduct] = Field(default_factory=list)
    new: list[MergedProduct] = Field(default_factory=list)


__all__ = [
    "ARCHIVE_TYPES",
    "ArchiveType",
    "BatchProducts",
    "MergedProduct",
    "ProductSearchResult",
    "ProductsWithBreakdown",
]
