"""Product catalog: week clock, content queries, enrichment and the cached facade."""

from .facade import ProductCatalog, build_catalog
from .models import (
    ARCHIVE_TYPES,
    ArchiveType,
    BatchProducts,
    MergedProduct,
    ProductSearchResult,
    ProductsWithBreakdown,
)
from .service import AggregationService
from .webhook import WebhookHandler

__all__ = [
    "ARCHIVE_TYPES",
    "AggregationService",
    "ArchiveType",
    "BatchProducts",
    "MergedProduct",
    "ProductCatalog",
    "ProductSearchResult",
    "ProductsWithBreakdown",
    "WebhookHandler",
    "build_catalog",
]
