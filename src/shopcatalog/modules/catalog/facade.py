"""Cache facade: the public product-catalog API.

``ProductCatalog`` wraps every aggregation operation behind the TTL cache.
Keys combine the operation name with the arguments that change its output.
Excluded ids only contribute their count to the key, so two calls excluding
different ids of the same count share an entry.

Degraded results (an upstream failed) are returned but not cached, so the
next request retries the upstream instead of serving an empty shelf for a
whole TTL.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from shopcatalog.core.cache import TTLCache
from shopcatalog.core.config import Config, get_core_config
from shopcatalog.core.exceptions import ConfigurationError
from shopcatalog.core.limiter import ConcurrencyLimiter
from shopcatalog.core.result import Result
from shopcatalog.modules.connectors.sanity import SanityConnector
from shopcatalog.modules.connectors.swell import SwellConnector

from .enrichment import CommerceEnricher, CommerceLookup
from .models import BatchProducts, MergedProduct, ProductSearchResult, ProductsWithBreakdown
from .queries import ContentFetcher, ContentQueries
from .service import AggregationService

T = TypeVar("T")

logger = logging.getLogger(__name__)

BATCH_KEY = "batch-products"
BATCH_FEATURED_LIMIT = 10
BATCH_NEW_LIMIT = 24
BATCH_NEW_CAP = 18
# Key families dropped on any single-product invalidation.
BROAD_KEY_PREFIXES = ("batch-", "new-")


class ProductCatalog:
    """Cached product listings for page rendering and REST handlers.

    Args:
        service: Aggregation service answering cache misses.
        cache: TTL cache owned by this catalog.
        content_ttl: TTL (seconds) for per-query results.
        static_ttl: TTL (seconds) for batch results.
        batch_timeout: Per-call timeout (seconds) inside ``get_batch_products``.
    """

    def __init__(
        self,
        service: AggregationService,
        cache: TTLCache | None = None,
        *,
        content_ttl: float = 300.0,
        static_ttl: float = 900.0,
        batch_timeout: float = 8.0,
    ) -> None:
        self.service = service
        self.cache = cache if cache is not None else TTLCache(default_ttl=content_ttl)
        self.content_ttl = content_ttl
        self.static_ttl = static_ttl
        self.batch_timeout = batch_timeout
        self._inflight: set[asyncio.Future[Any]] = set()

    async def _cached(self, key: str, ttl: float, compute: Callable[[], Awaitable[Result[T]]]) -> T:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = await compute()
        if result.ok:
            if result.value is not None:
                self.cache.set(key, result.value, ttl)
        else:
            degraded = result.degraded
            logger.warning(
                "Not caching degraded result: key=%s source=%s count=%d reason=%s",
                key,
                degraded.source if degraded else "",
                degraded.count if degraded else 0,
                degraded.reason if degraded else "",
            )
        return result.value

    # ---- Listings ----

    async def get_featured_products(self, limit: int = 10) -> list[MergedProduct]:
        return await self._cached(
            f"featured-{limit}", self.content_ttl, lambda: self.service.featured(limit)
        )

    async def get_new_products(
        self, limit: int = 12, excluded_ids: Iterable[str] = ()
    ) -> list[MergedProduct]:
        excluded = list(excluded_ids)
        return await self._cached(
            f"new-{limit}-{len(excluded)}",
            self.content_ttl,
            lambda: self.service.new_products(limit, excluded),
        )

    async def get_new_products_with_breakdown(
        self,
        limit: int = 12,
        excluded_ids: Iterable[str] = (),
        max_weeks: int = 8,
    ) -> ProductsWithBreakdown:
        excluded = list(excluded_ids)
        return await self._cached(
            f"breakdown-{limit}-{len(excluded)}-{max_weeks}",
            self.content_ttl,
            lambda: self.service.new_with_breakdown(limit, excluded, max_weeks),
        )

    async def get_new_products_optimized(self, limit: int = 144) -> list[MergedProduct]:
        return await self._cached(
            f"optimized-new-{limit}",
            self.content_ttl,
            lambda: self.service.new_products_optimized(limit),
        )

    async def get_products_by_archive(
        self,
        archive_type: str,
        slug: str,
        page: int = 1,
        limit: int = 20,
        include_out_of_stock: bool = False,
    ) -> ProductSearchResult:
        key = f"archive-{archive_type}-{slug}-{page}-{limit}-{str(include_out_of_stock).lower()}"
        return await self._cached(
            key,
            self.content_ttl,
            lambda: self.service.archive(archive_type, slug, page, limit, include_out_of_stock),
        )

    # Artist and label pages list sold-out records too; the others do not.

    async def get_products_by_artist(self, slug: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self.get_products_by_archive("artist", slug, page, limit, True)

    async def get_products_by_label(self, slug: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self.get_products_by_archive("label", slug, page, limit, True)

    async def get_products_by_genre(self, slug: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self.get_products_by_archive("genre", slug, page, limit, False)

    async def get_products_by_format(self, slug: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self.get_products_by_archive("format", slug, page, limit, False)

    async def get_products_by_week(self, week: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self.get_products_by_archive("week", week, page, limit, False)

    async def get_products_by_tag(self, slug: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self.get_products_by_archive("tag", slug, page, limit, False)

    async def search_products(self, term: str, page: int = 1, limit: int = 20) -> ProductSearchResult:
        return await self._cached(
            f"search-{term}-{page}-{limit}",
            self.content_ttl,
            lambda: self.service.search(term, page, limit),
        )

    async def get_product(self, handle: str) -> MergedProduct | None:
        return await self._cached(
            f"product-{handle}", self.content_ttl, lambda: self.service.product(handle)
        )

    # ---- Batch ----

    async def _race(self, coro: Awaitable[list[MergedProduct]], label: str) -> tuple[list[MergedProduct], bool]:
        """Await ``coro`` for at most ``batch_timeout`` seconds.

        On timeout the empty fallback is returned; the underlying work keeps
        running (shielded) and still fills the cache when it finishes.
        """
        task = asyncio.ensure_future(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        try:
            return await asyncio.wait_for(asyncio.shield(task), self.batch_timeout), True
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs, using empty fallback", label, self.batch_timeout)
            return [], False

    async def get_batch_products(self) -> BatchProducts:
        """Homepage batch: featured plus new arrivals not already featured."""
        cached = self.cache.get(BATCH_KEY)
        if cached is not None:
            return cached

        (featured, featured_ok), (new, new_ok) = await asyncio.gather(
            self._race(self.get_featured_products(BATCH_FEATURED_LIMIT), "Featured products"),
            self._race(self.get_new_products(BATCH_NEW_LIMIT, []), "New products"),
        )
        featured_keys = set().union(*(p.identity_keys for p in featured))
        batch = BatchProducts(
            featured=featured,
            new=[p for p in new if not p.identity_keys & featured_keys][:BATCH_NEW_CAP],
        )
        if featured_ok and new_ok:
            self.cache.set(BATCH_KEY, batch, self.static_ttl)
        return batch

    # ---- Invalidation ----

    def invalidate_product_cache(self, product_id: str | None = None) -> list[str]:
        """Drop entries for one product (plus batch/new lists), or everything.

        Returns the deleted keys.
        """
        if not product_id:
            keys = list(self.cache.keys())
            self.cache.clear()
            logger.info("Product cache cleared (%d entries)", len(keys))
            return keys

        deleted = self.cache.invalidate(
            lambda key: product_id in key or key.startswith(BROAD_KEY_PREFIXES)
        )
        logger.info("Invalidated %d cache entries for product %s", len(deleted), product_id)
        return deleted

    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()


def build_catalog(
    config: Config | None = None,
    *,
    content: ContentFetcher | None = None,
    commerce: CommerceLookup | None = None,
    clock: Callable[[], datetime] = datetime.now,
    cache: TTLCache | None = None,
) -> ProductCatalog:
    """Wire a ProductCatalog from config (the dependency-injection root).

    ``content`` and ``commerce`` override the HTTP connectors. Without
    commerce credentials the catalog runs content-only.
    """
    config = config or get_core_config()

    if content is None:
        content = SanityConnector(config=config)
    if commerce is None:
        try:
            commerce = SwellConnector(config=config)
        except ConfigurationError as e:
            logger.warning("Commerce store disabled, products will be content-only: %s", e)

    limiter = ConcurrencyLimiter(config.catalog.commerce_concurrency)
    service = AggregationService(
        ContentQueries(content),
        CommerceEnricher(commerce, limiter),
        clock=clock,
        limits=config.catalog.limits,
    )
    return ProductCatalog(
        service,
        cache if cache is not None else TTLCache(default_ttl=config.content_ttl),
        content_ttl=config.content_ttl,
        static_ttl=config.static_ttl,
        batch_timeout=config.batch_timeout,
    )


__all__ = ["ProductCatalog", "build_catalog"]
