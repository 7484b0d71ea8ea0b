"""Shared fakes for the two upstream stores."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

import pytest

from shopcatalog.core.cache import TTLCache
from shopcatalog.core.config import Config, set_core_config
from shopcatalog.core.exceptions import CommerceStoreError
from shopcatalog.modules.catalog import build_catalog
from shopcatalog.modules.connectors.swell import CommerceProduct

# Tuesday of week 48, 2025 -> current token "4825".
FIXED_NOW = datetime(2025, 11, 25, 12, 0)


def make_record(
    record_id: str,
    week: str | list[str] = "4825",
    *,
    stock: int = 1,
    commerce: bool = True,
    **extra: Any,
) -> dict[str, Any]:
    """A content-store product record as the query layer returns it."""
    record = {
        "_id": record_id,
        "title": f"Record {record_id}",
        "slug": {"current": f"record-{record_id}"},
        "artist": ["Artist"],
        "label": [{"main": "Label"}],
        "week": week if isinstance(week, list) else [week],
        "stock": stock,
        "inStock": stock > 0,
        "sku": f"SKU-{record_id}",
    }
    if commerce:
        record["swellProductId"] = f"sw-{record_id}"
    record.update(extra)
    return record


def commerce_for(record: dict[str, Any], *, stock: int | None = None, price: float = 25.0) -> CommerceProduct:
    return CommerceProduct(
        id=record["swellProductId"],
        slug=f"swell-{record['_id']}",
        sku=record.get("sku"),
        name=record["title"],
        price=price,
        stock_level=record.get("stock", 0) if stock is None else stock,
        stock_purchasable=True,
    )


class FakeSanity:
    """In-memory content store answering the catalog's GROQ queries.

    Dispatches on query parameters first (week, weeks, handle, slug) and on
    the query shape otherwise (count, week projection, featured).
    """

    def __init__(
        self,
        weeks: dict[str, list[dict[str, Any]]] | None = None,
        *,
        featured: list[dict[str, Any]] | None = None,
        total: int = 0,
        page: list[dict[str, Any]] | None = None,
        products: dict[str, dict[str, Any]] | None = None,
        submenu: dict[str, Any] | None = None,
    ) -> None:
        self.weeks = weeks or {}
        self.featured = featured or []
        self.total = total
        self.page = page or []
        self.products = products or {}
        self.submenu = submenu
        self.fail: Exception | None = None
        self.delay = 0.0
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def queries(self, needle: str) -> list[str]:
        return [q for q, _ in self.calls if needle in q]

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        params = params or {}
        self.calls.append((query, params))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail

        if "week" in params:
            records = self.weeks.get(params["week"], [])
            if "stock > 0" in query:
                records = [r for r in records if (r.get("stock") or 0) > 0]
            return records
        if "weeks" in params:
            return [r for w in params["weeks"] for r in self.weeks.get(w, []) if (r.get("stock") or 0) > 0]
        if "handle" in params:
            return self.products.get(params["handle"])
        if "slug" in params:
            return self.submenu
        if query.startswith("count("):
            return self.total
        if query.rstrip().endswith("{ week }"):
            return [{"week": [w]} for w in self.weeks]
        if "featured == true" in query:
            return self.featured
        return self.page


class FakeSwell:
    """In-memory commerce store; tracks peak concurrency of lookups."""

    def __init__(self, products: dict[str, CommerceProduct] | None = None, *, delay: float = 0.0) -> None:
        self.products = products or {}
        self.failing: set[str] = set()
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.peak = 0

    @classmethod
    def for_records(cls, *record_lists: list[dict[str, Any]], **kwargs: Any) -> "FakeSwell":
        products = {
            r["swellProductId"]: commerce_for(r)
            for records in record_lists
            for r in records
            if r.get("swellProductId")
        }
        return cls(products, **kwargs)

    async def get_product(self, id_or_slug: str) -> CommerceProduct | None:
        self.calls.append(id_or_slug)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if id_or_slug in self.failing:
                raise CommerceStoreError(f"lookup failed for {id_or_slug}")
            return self.products.get(id_or_slug)
        finally:
            self.in_flight -= 1


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    cfg = Config()
    set_core_config(cfg)
    yield cfg
    set_core_config(None)


@pytest.fixture
def make_catalog(config, clock):
    """Build a ProductCatalog over the fakes with a fixed wall clock."""

    def _make(sanity: FakeSanity, swell: FakeSwell | None = None, **overrides: Any):
        cfg = config.model_copy(deep=True)
        for key, value in overrides.items():
            setattr(cfg.catalog, key, value)
        return build_catalog(
            cfg,
            content=sanity,
            commerce=swell,
            clock=lambda: FIXED_NOW,
            cache=TTLCache(default_ttl=cfg.content_ttl, clock=clock),
        )

    return _make
