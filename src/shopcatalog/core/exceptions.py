"""Exception hierarchy for shopcatalog.

Connectors raise these; the aggregation service catches them at the query
boundary and turns them into degraded results, so none of them reach the
public catalog functions.

Usage:
    from shopcatalog.core.exceptions import ContentStoreError
"""

from __future__ import annotations


class ShopCatalogError(Exception):
    """Base exception for shopcatalog.

    Every subclass carries a stable ``code`` for logs and webhook responses.
    """

    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}" if self.message else self.code


class ConfigurationError(ShopCatalogError):
    code = "CONFIGURATION_ERROR"


class UpstreamError(ShopCatalogError):
    """An upstream store could not be reached or answered with an error."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code


class ContentStoreError(UpstreamError):
    code = "CONTENT_STORE_ERROR"


class CommerceStoreError(UpstreamError):
    code = "COMMERCE_STORE_ERROR"


class InvalidWebhookEvent(ShopCatalogError):
    code = "INVALID_WEBHOOK_EVENT"


class WebhookUnauthorized(ShopCatalogError):
    code = "WEBHOOK_UNAUTHORIZED"


__all__ = [
    "ShopCatalogError",
    "ConfigurationError",
    "UpstreamError",
    "ContentStoreError",
    "CommerceStoreError",
    "InvalidWebhookEvent",
    "WebhookUnauthorized",
]
