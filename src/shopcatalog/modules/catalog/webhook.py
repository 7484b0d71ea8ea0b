"""Cache invalidation webhook.

The CMS and the commerce store post events when products change. This module
authenticates the request and maps each event type onto the catalog's
invalidation calls. It is transport-agnostic: an HTTP route only needs to
pass the ``Authorization`` header and the decoded JSON body.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shopcatalog.core.exceptions import InvalidWebhookEvent, WebhookUnauthorized

from .facade import ProductCatalog

logger = logging.getLogger(__name__)

PRODUCT_EVENTS = frozenset({"product_stock_change", "product_update"})
GLOBAL_EVENTS = frozenset({"archive_update", "global_invalidate"})
EVENT_TYPES = PRODUCT_EVENTS | GLOBAL_EVENTS


class WebhookEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    product_id: str | None = Field(default=None, alias="productId")
    slug: str | None = None
    archive_type: str | None = Field(default=None, alias="archiveType")


def check_authorization(header: str | None, secret: str | None) -> None:
    """Require ``Authorization: Bearer <secret>``; no secret means deny all."""
    if not secret:
        raise WebhookUnauthorized("Webhook secret is not configured")
    expected = f"Bearer {secret}"
    if not header or not hmac.compare_digest(header.encode(), expected.encode()):
        raise WebhookUnauthorized("Unauthorized")


def parse_event(body: Any) -> WebhookEvent:
    if not isinstance(body, dict):
        raise InvalidWebhookEvent("Event body must be an object")
    try:
        event = WebhookEvent.model_validate(body)
    except ValidationError as e:
        raise InvalidWebhookEvent(f"Malformed event: {e.error_count()} error(s)") from e
    if event.type not in EVENT_TYPES:
        raise InvalidWebhookEvent(f"Invalid type: {event.type}")
    return event


class WebhookHandler:
    """Authenticates invalidation events and applies them to a catalog."""

    def __init__(self, catalog: ProductCatalog, secret: str | None) -> None:
        self.catalog = catalog
        self.secret = secret

    def handle(self, body: Any, authorization: str | None) -> dict[str, Any]:
        check_authorization(authorization, self.secret)
        event = parse_event(body)

        if event.type in PRODUCT_EVENTS:
            # A product event without an id is accepted but changes nothing.
            deleted = self.catalog.invalidate_product_cache(event.product_id) if event.product_id else []
        else:
            deleted = self.catalog.invalidate_product_cache()

        logger.info(
            "Webhook %s: product=%s slug=%s deleted=%d",
            event.type,
            event.product_id,
            event.slug,
            len(deleted),
        )
        return {
            "success": True,
            "invalidated": event.type,
            "deleted": len(deleted),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


__all__ = [
    "EVENT_TYPES",
    "WebhookEvent",
    "WebhookHandler",
    "check_authorization",
    "parse_event",
]
