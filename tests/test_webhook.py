"""Tests for the cache invalidation webhook."""

import pytest

from conftest import FakeSanity
from shopcatalog.core.exceptions import InvalidWebhookEvent, WebhookUnauthorized
from shopcatalog.modules.catalog.webhook import WebhookHandler, check_authorization, parse_event

SECRET = "hook-secret"
AUTH = f"Bearer {SECRET}"


@pytest.fixture
def catalog(make_catalog):
    catalog = make_catalog(FakeSanity())
    for key in ("product-p1", "product-p2", "featured-10", "new-12-0", "batch-products"):
        catalog.cache.set(key, [])
    return catalog


class TestAuthorization:
    def test_accepts_bearer_secret(self):
        check_authorization(AUTH, SECRET)

    @pytest.mark.parametrize("header", [None, "", SECRET, "Bearer wrong", f"bearer {SECRET}"])
    def test_rejects(self, header):
        with pytest.raises(WebhookUnauthorized):
            check_authorization(header, SECRET)

    def test_no_secret_configured_denies(self):
        with pytest.raises(WebhookUnauthorized):
            check_authorization("Bearer ", "")


class TestParseEvent:
    def test_aliases(self):
        event = parse_event({"type": "product_update", "productId": "p1", "archiveType": "genre"})
        assert event.product_id == "p1"
        assert event.archive_type == "genre"

    @pytest.mark.parametrize("body", [{"type": "reindex"}, {}, ["product_update"], None])
    def test_invalid(self, body):
        with pytest.raises(InvalidWebhookEvent):
            parse_event(body)


class TestWebhookHandler:
    @pytest.mark.parametrize("event_type", ["product_stock_change", "product_update"])
    def test_product_events_invalidate_by_id(self, catalog, event_type):
        response = WebhookHandler(catalog, SECRET).handle({"type": event_type, "productId": "p1"}, AUTH)

        assert response["success"] is True
        assert response["invalidated"] == event_type
        assert response["deleted"] == 3
        assert sorted(catalog.cache.keys()) == ["featured-10", "product-p2"]

    def test_product_event_without_id_is_noop(self, catalog):
        response = WebhookHandler(catalog, SECRET).handle({"type": "product_update", "slug": "x"}, AUTH)
        assert response["deleted"] == 0
        assert len(catalog.cache) == 5

    @pytest.mark.parametrize("event_type", ["archive_update", "global_invalidate"])
    def test_global_events_clear_everything(self, catalog, event_type):
        body = {"type": event_type, "archiveType": "genre", "slug": "jazz"}
        response = WebhookHandler(catalog, SECRET).handle(body, AUTH)
        assert response["deleted"] == 5
        assert len(catalog.cache) == 0

    def test_unauthorized_leaves_cache_alone(self, catalog):
        with pytest.raises(WebhookUnauthorized):
            WebhookHandler(catalog, SECRET).handle({"type": "global_invalidate"}, "Bearer nope")
        assert len(catalog.cache) == 5

    def test_unknown_type(self, catalog):
        with pytest.raises(InvalidWebhookEvent):
            WebhookHandler(catalog, SECRET).handle({"type": "reindex"}, AUTH)
