"""
Swell Commerce Store Connector.

Server-side client for the Swell REST API: single product lookup by id, slug
or SKU, paginated listing and stock checks. Product payloads are normalized
into ``CommerceProduct`` (price, stock, variants and condition fields).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from shopcatalog.core.config import Config, SwellConfig
from shopcatalog.core.exceptions import CommerceStoreError, ConfigurationError

logger = logging.getLogger(__name__)


class CommerceProduct(BaseModel):
    """Normalized commerce product (authoritative for price and stock)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    slug: str = ""
    sku: str | None = None
    name: str = ""
    price: float = 0.0
    currency: str = "USD"
    description: str = ""
    stock_level: int = 0
    stock_purchasable: bool = False
    stock_tracking: bool = False
    stock_status: str | None = None
    # Record condition (vinyl grading)
    media: str | None = None
    sleeve: str | None = None
    notes: str | None = None
    images: list[dict[str, Any]] = Field(default_factory=list)
    variants: dict[str, Any] | None = None
    options: list[dict[str, Any]] = Field(default_factory=list)
    date_created: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CommerceProduct":
        """Build from a raw Swell product payload.

        Condition fields come from ``content.condition[0]`` first, then from
        ``attributes`` (``media_condition``, ``sleeve_condition``,
        ``condition_notes``).
        """
        content = payload.get("content") or {}
        condition_list = content.get("condition") or []
        condition = condition_list[0] if condition_list and isinstance(condition_list[0], dict) else {}
        attributes = payload.get("attributes") or {}

        return cls(
            id=str(payload.get("id") or ""),
            slug=payload.get("slug") or "",
            sku=payload.get("sku"),
            name=payload.get("name") or "",
            price=payload.get("price") or 0,
            currency=payload.get("currency") or "USD",
            description=payload.get("description") or "",
            stock_level=payload.get("stock_level") or 0,
            stock_purchasable=bool(payload.get("stock_purchasable")),
            stock_tracking=bool(payload.get("stock_tracking")),
            stock_status=payload.get("stock_status"),
            media=condition.get("media") or attributes.get("media_condition"),
            sleeve=condition.get("sleeve") or attributes.get("sleeve_condition"),
            notes=condition.get("notes") or attributes.get("condition_notes"),
            images=payload.get("images") or [],
            variants=payload.get("variants"),
            options=payload.get("options") or [],
            date_created=payload.get("date_created"),
        )


class StockInfo(BaseModel):
    stock_level: int = 0
    stock_purchasable: bool = False
    price: float | None = None


class SwellConnector:
    """Connector for the Swell REST API.

    Usage:
        connector = SwellConnector(config=config)
        product = await connector.get_product("6560f0...")  # None if 404
    """

    def __init__(
        self,
        *,
        config: Config | None = None,
        settings: SwellConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if settings is None:
            if config is None:
                from shopcatalog.core.config import get_core_config

                config = get_core_config()
            settings = config.swell

        if not settings.store_id:
            raise ConfigurationError("Swell store id not configured")
        if not settings.public_key:
            raise ConfigurationError("Swell public key not configured")

        self.settings = settings
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.public_key}",
            "Content-Type": "application/json",
        }

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``endpoint``; ``None`` on 404, ``CommerceStoreError`` otherwise."""
        url = f"{self.settings.base_url}/{endpoint}"
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, headers=self._headers())
            else:
                async with httpx.AsyncClient(timeout=self.settings.timeout) as client:
                    response = await client.get(url, params=params, headers=self._headers())
        except httpx.TimeoutException as e:
            raise CommerceStoreError("Swell request timeout") from e
        except httpx.HTTPError as e:
            raise CommerceStoreError(f"Swell request error: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise CommerceStoreError(
                f"Swell API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise CommerceStoreError("Swell returned invalid JSON") from e

    async def get_product(self, id_or_slug: str) -> CommerceProduct | None:
        """Fetch one product by id, slug or SKU; ``None`` when not found."""
        data = await self._get(f"products/{id_or_slug}")
        if not data or not isinstance(data, dict):
            return None
        return CommerceProduct.from_payload(data)

    async def list_products(
        self,
        *,
        limit: int = 50,
        page: int = 1,
        search: str | None = None,
        sort: str | None = None,
        category: str | None = None,
    ) -> list[CommerceProduct]:
        params: dict[str, Any] = {"limit": limit, "page": page}
        if search:
            params["search"] = search
        if sort:
            params["sort"] = sort
        if category:
            params["category"] = category

        data = await self._get("products", params=params)
        results = (data or {}).get("results") or []
        logger.debug("Swell returned %d products (page=%d)", len(results), page)
        return [CommerceProduct.from_payload(p) for p in results if isinstance(p, dict)]

    async def check_stock(self, product_id: str, variant_id: str | None = None) -> StockInfo:
        """Stock for a product, or for one of its variants when it exists.

        Unknown products report zero stock; transport errors propagate.
        """
        product = await self.get_product(product_id)
        if product is None:
            return StockInfo()

        if variant_id and product.variants:
            for variant in product.variants.get("results") or []:
                if variant.get("id") == variant_id:
                    return StockInfo(
                        stock_level=variant.get("stock_level") or 0,
                        stock_purchasable=bool(variant.get("stock_purchasable")),
                        price=variant.get("price") or product.price,
                    )

        return StockInfo(
            stock_level=product.stock_level,
            stock_purchasable=product.stock_purchasable,
            price=product.price,
        )


__all__ = ["CommerceProduct", "StockInfo", "SwellConnector"]
