"""Pure conversions from content (and commerce) records to MergedProduct.

Content records are editor-authored and loosely shaped, so every value is
coerced before it reaches the model: strings through ``extract_string``,
lists and objects only when they have the expected type.
"""

from __future__ import annotations

from typing import Any

from shopcatalog.modules.connectors.swell import CommerceProduct

from .fields import extract_string, extract_week
from .models import MergedProduct

UNTITLED = "Untitled"
DEFAULT_CURRENCY = "USD"


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_optional_list(value: Any) -> list[Any] | None:
    return value if isinstance(value, list) else None


def _as_dict(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def content_slug(record: dict[str, Any]) -> str:
    slug = record.get("slug")
    if isinstance(slug, dict):
        return extract_string(slug.get("current"))
    return slug if isinstance(slug, str) else ""


def content_title(record: dict[str, Any]) -> str:
    return extract_string(record.get("title"))


def resolve_slug(record: dict[str, Any], commerce: CommerceProduct | None = None) -> str:
    """commerce slug -> swellSlug -> slug.current -> sku -> _id."""
    candidates = [
        commerce.slug if commerce else "",
        extract_string(record.get("swellSlug")),
        content_slug(record),
        extract_string(record.get("sku")),
        extract_string(record.get("_id")),
    ]
    for candidate in candidates:
        if candidate:
            return candidate
    return "untitled"


def _image_url(record: dict[str, Any]) -> str | None:
    url = extract_string(record.get("imageUrl"))
    if url:
        return url
    main_image = _as_dict(record.get("mainImage")) or {}
    asset = _as_dict(main_image.get("asset")) or {}
    return extract_string(asset.get("url")) or None


def _editorial_fields(record: dict[str, Any]) -> dict[str, Any]:
    order_rank = extract_string(record.get("orderRank"))
    return {
        "content_id": extract_string(record.get("_id")),
        "title": content_title(record) or UNTITLED,
        "artist": extract_string(record.get("artist")),
        "label": extract_string(record.get("label")),
        "format": extract_string(record.get("format")),
        "genre": extract_string(record.get("genre")),
        "category": extract_string(record.get("category")),
        "country": extract_string(record.get("country")),
        "released": extract_string(record.get("released")),
        "catalog": extract_string(record.get("catalog")),
        "week": extract_week(record.get("week")),
        "order_rank": order_rank or None,
        "menu_order": _as_int(record["menuOrder"]) if record.get("menuOrder") is not None else None,
        "main_image": _as_dict(record.get("mainImage")),
        "additional_images": _as_optional_list(record.get("additionalImages")),
        "gallery": _as_optional_list(record.get("gallery")),
        "tracklist": _as_list(record.get("tracklist")),
        "in_mixtapes": _as_list(record.get("inMixtapes")),
        "tags": _as_list(record.get("tags")),
        "image_url": _image_url(record),
        "short_description": extract_string(record.get("shortDescription")),
        "sanity_content": record,
    }


def convert_content_only(
    record: dict[str, Any],
    featured: bool = False,
    *,
    with_content_stock: bool = True,
) -> MergedProduct:
    """Build a MergedProduct from the content record alone.

    With ``with_content_stock`` the editorial stock mirror (``stock``,
    ``inStock``) is trusted, which is what the fast listing paths do. The
    enrichment fallback passes ``False``: without the commerce store the
    product is reported as not purchasable.
    """
    record_id = extract_string(record.get("_id"))
    slug = resolve_slug(record)
    stock = _as_int(record.get("stock")) if with_content_stock else 0

    return MergedProduct(
        id=record_id,
        slug=slug,
        product_slug=slug,
        sku=extract_string(record.get("sku")) or record_id,
        name=content_title(record) or UNTITLED,
        price=_as_float(record.get("price") or record.get("swellPrice")),
        currency=extract_string(record.get("swellCurrency")) or DEFAULT_CURRENCY,
        description=extract_string(record.get("description")),
        stock_level=stock,
        stock_purchasable=bool(record.get("inStock") and stock > 0),
        stock_tracking=False,
        featured=bool(record.get("featured")) or featured,
        commerce_id=extract_string(record.get("swellProductId")) or None,
        media=extract_string(record.get("media")) or None,
        sleeve=extract_string(record.get("sleeve")) or None,
        notes=extract_string(record.get("notes")) or None,
        **_editorial_fields(record),
    )


def merge_commerce(record: dict[str, Any], commerce: CommerceProduct) -> MergedProduct:
    """Merge a content record with its commerce record.

    Commerce wins for identity, price, currency and stock; content wins for
    editorial metadata. Condition fields prefer commerce when set.
    """
    slug = resolve_slug(record, commerce)
    editorial = _editorial_fields(record)
    editorial["title"] = content_title(record) or commerce.name or UNTITLED

    return MergedProduct(
        id=commerce.id,
        slug=slug,
        product_slug=slug,
        sku=commerce.sku or extract_string(record.get("sku")) or editorial["content_id"] or commerce.id,
        name=commerce.name or content_title(record) or UNTITLED,
        price=commerce.price or 0,
        currency=commerce.currency or DEFAULT_CURRENCY,
        description=commerce.description or extract_string(record.get("description")),
        stock_level=commerce.stock_level or 0,
        stock_purchasable=commerce.stock_purchasable,
        stock_tracking=commerce.stock_tracking,
        stock_status=commerce.stock_status,
        variants=commerce.variants,
        featured=bool(record.get("featured")),
        commerce_id=commerce.id,
        media=commerce.media or extract_string(record.get("media")) or None,
        sleeve=commerce.sleeve or extract_string(record.get("sleeve")) or None,
        notes=commerce.notes or extract_string(record.get("notes")) or None,
        **editorial,
    )


def is_product_in_stock(product: MergedProduct) -> bool:
    return product.stock_level > 0


__all__ = [
    "content_slug",
    "content_title",
    "convert_content_only",
    "is_product_in_stock",
    "merge_commerce",
    "resolve_slug",
]
