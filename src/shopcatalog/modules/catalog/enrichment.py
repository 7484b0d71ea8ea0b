"""Commerce enrichment: attach price and stock to content records.

Every commerce lookup runs inside the shared ``ConcurrencyLimiter`` so the
fan-out of a listing page never exceeds the commerce API's rate budget.
Failures never drop a product: the record degrades to a content-only
MergedProduct that reports no stock. Only a record that cannot be converted
at all is dropped (``value`` is ``None``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from pydantic import ValidationError

from shopcatalog.core.limiter import ConcurrencyLimiter
from shopcatalog.core.result import Result
from shopcatalog.modules.connectors.swell import CommerceProduct

from .fields import extract_string
from .models import MergedProduct
from .transformers import convert_content_only, merge_commerce

logger = logging.getLogger(__name__)

# Errors a malformed content record can raise while being converted.
CONVERSION_ERRORS = (ValidationError, TypeError, ValueError)


class CommerceLookup(Protocol):
    async def get_product(self, id_or_slug: str) -> CommerceProduct | None: ...


def _content_only(record: dict[str, Any]) -> MergedProduct | None:
    try:
        return convert_content_only(record, with_content_stock=False)
    except CONVERSION_ERRORS as e:
        logger.warning("Dropping malformed content record %r: %s", record.get("_id"), e)
        return None


class CommerceEnricher:
    """Merges content records with their commerce records.

    Args:
        commerce: Commerce store client; ``None`` disables enrichment and
            every product is content-only.
        limiter: Shared limiter bounding in-flight commerce calls.
    """

    def __init__(self, commerce: CommerceLookup | None, limiter: ConcurrencyLimiter) -> None:
        self._commerce = commerce
        self._limiter = limiter

    @property
    def limiter(self) -> ConcurrencyLimiter:
        return self._limiter

    @staticmethod
    async def _lookup(
        commerce: CommerceLookup,
        commerce_id: str | None,
        sku: str | None,
    ) -> CommerceProduct | None:
        if commerce_id:
            product = await commerce.get_product(commerce_id)
            if product is not None:
                return product
        if sku and sku != commerce_id:
            return await commerce.get_product(sku)
        return None

    async def enrich(self, record: dict[str, Any]) -> Result[MergedProduct | None]:
        """Commerce id first, SKU second; content-only when neither resolves.

        A missing commerce record is a plain content-only product. A failed
        lookup (transport or payload error) is reported as degraded.
        """
        commerce_id = extract_string(record.get("swellProductId")) or None
        sku = extract_string(record.get("sku")) or None

        if self._commerce is None or not (commerce_id or sku):
            return Result.success(_content_only(record))

        try:
            commerce = await self._limiter.run(self._lookup, self._commerce, commerce_id, sku)
        except Exception as e:
            logger.warning(
                "Commerce lookup failed for %s (id=%s sku=%s), using content only",
                record.get("_id"),
                commerce_id,
                sku,
                exc_info=True,
            )
            return Result.fallback(_content_only(record), source="commerce", reason=e)

        if commerce is None:
            logger.debug("No commerce product for %s, using content only", record.get("_id"))
            return Result.success(_content_only(record))

        try:
            return Result.success(merge_commerce(record, commerce))
        except CONVERSION_ERRORS as e:
            logger.warning("Dropping malformed content record %r: %s", record.get("_id"), e)
            return Result.success(None)

    async def enrich_many(self, records: list[dict[str, Any]]) -> list[Result[MergedProduct | None]]:
        """Enrich a page concurrently; the limiter bounds the actual fan-out."""
        return list(await asyncio.gather(*(self.enrich(r) for r in records)))


__all__ = ["CONVERSION_ERRORS", "CommerceEnricher", "CommerceLookup"]
