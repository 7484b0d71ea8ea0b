"""Aggregation service: product listings built from both upstream stores.

Each operation returns a ``Result``. Upstream failures are caught here, at
the query boundary, and become an empty value with a ``Degraded`` marker;
nothing raises to the caller.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Callable, Iterable

from shopcatalog.core.config import CatalogLimits
from shopcatalog.core.result import Degraded, Result, merge_degraded

from .enrichment import CONVERSION_ERRORS, CommerceEnricher
from .fields import slug_to_label_name
from .filters import archive_condition
from .models import (
    MergedProduct,
    ProductSearchResult,
    ProductsWithBreakdown,
)
from .queries import (
    PRODUCT_QUERY_FIELDS,
    SEARCH_ORDER,
    ContentQueries,
    archive_filter,
    archive_order,
    search_filter,
)
from .transformers import convert_content_only, is_product_in_stock
from .weeks import target_weeks

logger = logging.getLogger(__name__)

# limit at or above this means "return everything collected".
UNLIMITED_THRESHOLD = 100
MAX_PAGE_SIZE = 100
OPTIMIZED_MAX_WEEKS = 4


def _safe_page(page: int) -> int:
    try:
        return max(1, int(page) or 1)
    except (TypeError, ValueError):
        return 1


def _safe_limit(limit: int, default: int) -> int:
    try:
        value = int(limit) or default
    except (TypeError, ValueError):
        value = default
    return max(1, min(MAX_PAGE_SIZE, value))


def convert_records(records: Iterable[dict[str, Any]], featured: bool = False) -> list[MergedProduct]:
    """Content-only conversion of a page; malformed records are logged and dropped."""
    products: list[MergedProduct] = []
    for record in records:
        try:
            products.append(convert_content_only(record, featured=featured))
        except CONVERSION_ERRORS as e:
            logger.warning("Dropping malformed content record %r: %s", record.get("_id"), e)
    return products


def week_breakdown(products: Iterable[MergedProduct]) -> dict[str, int]:
    """Count of products per listing week, in first-seen order."""
    breakdown: dict[str, int] = {}
    for product in products:
        key = product.display_week or product.week or "unknown"
        breakdown[key] = breakdown.get(key, 0) + 1
    return breakdown


class AggregationService:
    """Orchestrates content queries, enrichment and transformation.

    Args:
        queries: Content query layer.
        enricher: Commerce enrichment layer (shares the limiter).
        clock: Wall clock used for week tokens; injectable for tests.
        limits: Default page sizes.
    """

    def __init__(
        self,
        queries: ContentQueries,
        enricher: CommerceEnricher,
        *,
        clock: Callable[[], datetime] = datetime.now,
        limits: CatalogLimits | None = None,
    ) -> None:
        self.queries = queries
        self.enricher = enricher
        self.clock = clock
        self.limits = limits or CatalogLimits()

    # ---- Featured ----

    async def featured(self, limit: int | None = None) -> Result[list[MergedProduct]]:
        """Featured, in-stock products; content-only for latency."""
        limit = limit or self.limits.featured
        try:
            records = await self.queries.featured(limit)
        except Exception as e:
            logger.warning("Featured products query failed: %s", e)
            return Result.fallback([], source="content", reason=e)
        return Result.success(convert_records(records, featured=True))

    # ---- New arrivals ----

    async def new_with_breakdown(
        self,
        limit: int | None = None,
        excluded_ids: Iterable[str] = (),
        max_weeks: int | None = None,
    ) -> Result[ProductsWithBreakdown]:
        """New arrivals grouped by drop week, most recent week first.

        The most recent week lists every product (pre-orders included);
        older weeks only list products in stock. A product tagged with
        several weeks appears once, under the most recent one.
        ``excluded_ids`` may hold content ids or commerce ids.
        """
        limit = limit or self.limits.new_products
        max_weeks = max_weeks or self.limits.max_weeks
        unlimited = limit >= UNLIMITED_THRESHOLD

        try:
            tokens = await self.queries.all_week_tokens()
            weeks = target_weeks(max_weeks, tokens, now=self.clock())
            if not weeks:
                return Result.success(ProductsWithBreakdown())

            most_recent = weeks[0]
            used_ids: set[str] = set(excluded_ids)
            collected: list[MergedProduct] = []
            markers: list[Degraded | None] = []

            for week in weeks:
                is_first = week == most_recent
                records = await self.queries.products_for_week(week, stock_required=not is_first)
                enriched = await self.enricher.enrich_many(records)

                for result in enriched:
                    markers.append(result.degraded)
                    product = result.value
                    if product is None or product.identity_keys & used_ids:
                        continue
                    if not is_first and not is_product_in_stock(product):
                        continue
                    used_ids.update(product.identity_keys)
                    product.display_week = week
                    collected.append(product)

                logger.debug("New arrivals: week=%s records=%d collected=%d", week, len(records), len(collected))
                if not unlimited and len(collected) >= limit:
                    break

        except Exception as e:
            logger.warning("New arrivals query failed: %s", e, exc_info=True)
            return Result.fallback(ProductsWithBreakdown(), source="content", reason=e)

        products = collected if unlimited else collected[:limit]
        value = ProductsWithBreakdown(
            products=products,
            weeks_used=weeks,
            week_breakdown=week_breakdown(products),
        )
        return Result(value=value, degraded=merge_degraded(*markers))

    async def new_products(
        self,
        limit: int | None = None,
        excluded_ids: Iterable[str] = (),
    ) -> Result[list[MergedProduct]]:
        result = await self.new_with_breakdown(limit, excluded_ids)
        return Result(value=result.value.products, degraded=result.degraded)

    async def new_products_optimized(self, limit: int = 144) -> Result[list[MergedProduct]]:
        """Single-query new arrivals across the last few drop weeks.

        In-stock only and content-only. Falls back to the per-week path when
        the combined query fails.
        """
        try:
            tokens = await self.queries.all_week_tokens()
            weeks = target_weeks(OPTIMIZED_MAX_WEEKS, tokens, now=self.clock())
            if not weeks:
                return Result.success([])
            records = await self.queries.multi_week(weeks, limit)
        except Exception as e:
            logger.warning("Optimized new arrivals failed, using per-week path: %s", e)
            fallback = await self.new_with_breakdown(limit, (), OPTIMIZED_MAX_WEEKS)
            return Result(value=fallback.value.products, degraded=fallback.degraded)
        return Result.success(convert_records(records))

    # ---- Archive ----

    async def _archive_condition(self, archive_type: str, slug: str) -> tuple[str, str]:
        """Filter condition and display name for an archive facet."""
        actual_name = slug_to_label_name(slug)
        if archive_type != "genre":
            return archive_condition(archive_type, slug), actual_name

        try:
            submenu_item = await self.queries.submenu_item(slug)
        except Exception as e:
            logger.info("Genre taxonomy lookup failed for %s, using slug heuristics: %s", slug, e)
            submenu_item = None

        if submenu_item and submenu_item.get("label"):
            actual_name = submenu_item["label"]
        return archive_condition("genre", slug, submenu_item), actual_name

    async def archive(
        self,
        archive_type: str,
        slug: str,
        page: int = 1,
        limit: int = 20,
        include_out_of_stock: bool = False,
    ) -> Result[ProductSearchResult]:
        """One page of products for an artist/label/genre/format/week/tag."""
        safe_page = _safe_page(page)
        safe_limit = _safe_limit(limit, 20)
        offset = (safe_page - 1) * safe_limit

        try:
            condition, actual_name = await self._archive_condition(archive_type, slug)
            filter_expr = archive_filter(condition, include_out_of_stock=include_out_of_stock)
            total = await self.queries.count(filter_expr)
            records = await self.queries.page(
                filter_expr,
                archive_order(include_out_of_stock=include_out_of_stock),
                offset,
                safe_limit,
            )
        except Exception as e:
            logger.warning("Archive query failed: type=%s slug=%s: %s", archive_type, slug, e)
            return Result.fallback(
                ProductSearchResult(current_page=1, actual_name=slug),
                source="content",
                reason=e,
            )

        return Result.success(
            ProductSearchResult(
                products=convert_records(records),
                total=total,
                pages=math.ceil(total / safe_limit),
                current_page=safe_page,
                actual_name=actual_name,
            )
        )

    # ---- Search ----

    async def search(
        self,
        term: str,
        page: int = 1,
        limit: int | None = None,
    ) -> Result[ProductSearchResult]:
        """Free-text search, enriched and filtered to in-stock products.

        ``total`` and ``pages`` count content matches before the stock
        filter, so a page can hold fewer products than ``limit``.
        """
        safe_page = _safe_page(page)
        safe_limit = _safe_limit(limit or self.limits.search, self.limits.search)
        offset = (safe_page - 1) * safe_limit

        term = (term or "").strip()
        if not term:
            return Result.success(ProductSearchResult(current_page=safe_page))

        try:
            filter_expr = search_filter(term)
            total = await self.queries.count(filter_expr)
            records = await self.queries.page(
                filter_expr, SEARCH_ORDER, offset, safe_limit, fields=PRODUCT_QUERY_FIELDS
            )
        except Exception as e:
            logger.warning("Search failed for %r: %s", term, e)
            return Result.fallback(ProductSearchResult(current_page=1), source="content", reason=e)

        enriched = await self.enricher.enrich_many(records)
        products = [r.value for r in enriched if r.value is not None and is_product_in_stock(r.value)]
        return Result(
            value=ProductSearchResult(
                products=products,
                total=total,
                pages=math.ceil(total / safe_limit),
                current_page=safe_page,
            ),
            degraded=merge_degraded(*(r.degraded for r in enriched)),
        )

    # ---- Single product ----

    async def product(self, handle: str) -> Result[MergedProduct | None]:
        """Product by content slug, commerce slug or SKU; ``None`` if absent."""
        try:
            record = await self.queries.product_by_handle(handle)
        except Exception as e:
            logger.warning("Product lookup failed for %s: %s", handle, e)
            return Result.fallback(None, source="content", reason=e)

        if record is None:
            return Result.success(None)
        enriched = await self.enricher.enrich(record)
        return Result(value=enriched.value, degraded=enriched.degraded)


__all__ = ["AggregationService", "UNLIMITED_THRESHOLD", "convert_records", "week_breakdown"]
