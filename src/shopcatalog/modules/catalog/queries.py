"""Content query layer: GROQ builders and a thin executor.

Builders are pure functions returning ``(query, params)``; ``ContentQueries``
runs them through the Sanity connector and hands back raw records. Nothing
here merges, enriches or transforms.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from shopcatalog.core.config import PLACEHOLDER_WEEK

from .filters import groq_str, search_condition

logger = logging.getLogger(__name__)

BASE_PRODUCT_FILTER = '_type == "product" && !(_id in path("drafts.**"))'
BASE_PRODUCT_FILTER_WITH_IMAGE = f"{BASE_PRODUCT_FILTER} && defined(mainImage.asset)"

STOCK_CONDITION = "stock > 0 && (inStock == true || inStock == null)"
ORDER_RANK = 'coalesce(orderRank, "zzz") asc'

# week[0] as YYWW so string ordering is chronological.
WEEK_RECENCY = 'select(length(week[0]) == 4 => week[0][2] + week[0][3] + week[0][0] + week[0][1], "0000") desc'

# Upper bound on records fetched for a single new-arrivals week.
WEEK_PAGE_SIZE = 200

_IMAGE_ASSET = """asset->{
      _id,
      url,
      metadata{
        lqip,
        dimensions{
          width,
          height
        }
      }
    },
    alt,
    caption"""

_TRACKLIST = """tracklist[]{
    _key,
    _type,
    title,
    duration,
    artist,
    trackNumber,
    audioUrl,
    audioFilename,
    audioFileSize,
    audioMimeType,
    storageProvider
  }"""

FAST_QUERY_FIELDS = f"""
  _id,
  title,
  price,
  stock,
  inStock,
  swellProductId,
  swellSlug,
  slug,
  sku,
  description,
  shortDescription,
  swellCurrency,
  swellPrice,
  artist,
  label,
  format,
  genre,
  week,
  category,
  country,
  released,
  catalog,
  tags,
  {_TRACKLIST},
  mainImage{{
    {_IMAGE_ASSET}
  }},
  "imageUrl": coalesce(mainImage.asset->url, "/placeholder.jpg"),
  menuOrder,
  orderRank,
  featured,
  discogsReleaseId
"""

PRODUCT_QUERY_FIELDS = f"""{FAST_QUERY_FIELDS},
  media,
  sleeve,
  notes,
  _createdAt,
  additionalImages[]{{
    _key,
    _type,
    {_IMAGE_ASSET}
  }},
  gallery[]{{
    {_IMAGE_ASSET}
  }},
  inMixtapes[]{{
    _key,
    mixtape->{{
      _id,
      title,
      slug,
      mixcloudUrl,
      publishedAt,
      contributors[]->{{
        _id,
        name,
        slug
      }},
      artist
    }},
    trackTitle,
    trackArtist,
    artist,
    publishedAt
  }}
"""

Query = tuple[str, dict[str, Any]]


class ContentFetcher(Protocol):
    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any: ...


# ---- Builders ----------------------------------------------------------------


def all_weeks_query() -> Query:
    return f"*[{BASE_PRODUCT_FILTER} && defined(week) && count(week) > 0] {{ week }}", {}


def week_products_query(week: str, *, stock_required: bool, limit: int = WEEK_PAGE_SIZE) -> Query:
    """Products tagged with ``week``; special drops (RSD, LPH) are excluded."""
    stock = f" && {STOCK_CONDITION}" if stock_required else ""
    query = f"""*[{BASE_PRODUCT_FILTER_WITH_IMAGE}
        && defined(week)
        && count(week) > 0
        && length(week[0]) == 4
        && !(week[0] match "*RSD*")
        && !(week[0] match "*LPH*")
        && $week in week[]{stock}] | order({ORDER_RANK}) [0...{limit}] {{
        {PRODUCT_QUERY_FIELDS}
      }}"""
    return query, {"week": week}


def featured_query(limit: int) -> Query:
    query = f"""*[{BASE_PRODUCT_FILTER_WITH_IMAGE}
      && featured == true
      && {STOCK_CONDITION}] | order({ORDER_RANK}) [0...{limit}] {{
      {FAST_QUERY_FIELDS}
    }}"""
    return query, {}


def multi_week_query(weeks: list[str], limit: int) -> Query:
    """In-stock products from any of ``weeks`` in one round trip."""
    query = f"""*[{BASE_PRODUCT_FILTER_WITH_IMAGE}
      && count((week[])[@ in $weeks]) > 0
      && {STOCK_CONDITION}] | order({ORDER_RANK}) [0...{limit}] {{
      {FAST_QUERY_FIELDS}
    }}"""
    return query, {"weeks": list(weeks)}


def archive_filter(condition: str, *, include_out_of_stock: bool) -> str:
    stock = "" if include_out_of_stock else f" && {STOCK_CONDITION}"
    return (
        f"{BASE_PRODUCT_FILTER_WITH_IMAGE} && ({condition})"
        f" && week[0] != {groq_str(PLACEHOLDER_WEEK)}{stock}"
    )


def archive_order(*, include_out_of_stock: bool) -> str:
    """In-stock first (only when out-of-stock items are listed), then week
    recency, then the manual ``orderRank``."""
    clauses = ["defined(week[0]) desc", WEEK_RECENCY, ORDER_RANK]
    if include_out_of_stock:
        clauses.insert(0, "select(stock > 0 && inStock == true => 0, 1) asc")
    return ", ".join(clauses)


def count_query(filter_expr: str) -> Query:
    return f"count(*[{filter_expr}])", {}


def page_query(filter_expr: str, order: str, offset: int, limit: int, *, fields: str = FAST_QUERY_FIELDS) -> Query:
    query = f"""*[{filter_expr}] | order({order}) [{offset}...{offset + limit}] {{
      {fields}
    }}"""
    return query, {}


def search_filter(term: str) -> str:
    """Free-text filter; content-only drafts (no commerce id) never match."""
    return f"{BASE_PRODUCT_FILTER_WITH_IMAGE} && ({search_condition(term)}) && defined(swellProductId)"


SEARCH_ORDER = f"_score desc, week[0] asc, {ORDER_RANK}"


def submenu_item_query(slug: str) -> Query:
    query = """*[_type == "submenuItem" && slug.current == $slug][0]{
      slug,
      label,
      relatedGenres,
      relatedRegions
    }"""
    return query, {"slug": slug}


def product_by_handle_query(handle: str) -> Query:
    query = f"""*[{BASE_PRODUCT_FILTER} && (slug.current == $handle || swellSlug == $handle || sku == $handle)][0] {{
      {PRODUCT_QUERY_FIELDS}
    }}"""
    return query, {"handle": handle}


# ---- Executor ----------------------------------------------------------------


def _records(result: Any) -> list[dict[str, Any]]:
    if not isinstance(result, list):
        return []
    return [r for r in result if isinstance(r, dict)]


def _record(result: Any) -> dict[str, Any] | None:
    return result if isinstance(result, dict) else None


class ContentQueries:
    """Runs content queries; upstream errors propagate to the caller."""

    def __init__(self, connector: ContentFetcher) -> None:
        self._connector = connector

    async def _fetch(self, query: Query) -> Any:
        text, params = query
        return await self._connector.fetch(text, params or None)

    async def all_week_tokens(self) -> list[str]:
        """Every week tag present on any product (may contain duplicates)."""
        rows = _records(await self._fetch(all_weeks_query()))
        tokens: list[str] = []
        for row in rows:
            weeks = row.get("week") or []
            if isinstance(weeks, list):
                tokens.extend(w for w in weeks if isinstance(w, str))
        return tokens

    async def products_for_week(self, week: str, *, stock_required: bool) -> list[dict[str, Any]]:
        return _records(await self._fetch(week_products_query(week, stock_required=stock_required)))

    async def featured(self, limit: int) -> list[dict[str, Any]]:
        return _records(await self._fetch(featured_query(limit)))

    async def multi_week(self, weeks: list[str], limit: int) -> list[dict[str, Any]]:
        return _records(await self._fetch(multi_week_query(weeks, limit)))

    async def count(self, filter_expr: str) -> int:
        result = await self._fetch(count_query(filter_expr))
        return result if isinstance(result, int) else 0

    async def page(
        self,
        filter_expr: str,
        order: str,
        offset: int,
        limit: int,
        *,
        fields: str = FAST_QUERY_FIELDS,
    ) -> list[dict[str, Any]]:
        return _records(await self._fetch(page_query(filter_expr, order, offset, limit, fields=fields)))

    async def submenu_item(self, slug: str) -> dict[str, Any] | None:
        return _record(await self._fetch(submenu_item_query(slug)))

    async def product_by_handle(self, handle: str) -> dict[str, Any] | None:
        return _record(await self._fetch(product_by_handle_query(handle)))


__all__ = [
    "BASE_PRODUCT_FILTER",
    "BASE_PRODUCT_FILTER_WITH_IMAGE",
    "ContentFetcher",
    "ContentQueries",
    "FAST_QUERY_FIELDS",
    "PRODUCT_QUERY_FIELDS",
    "SEARCH_ORDER",
    "STOCK_CONDITION",
    "WEEK_PAGE_SIZE",
    "all_weeks_query",
    "archive_filter",
    "archive_order",
    "count_query",
    "featured_query",
    "multi_week_query",
    "page_query",
    "product_by_handle_query",
    "search_filter",
    "submenu_item_query",
    "week_products_query",
]
