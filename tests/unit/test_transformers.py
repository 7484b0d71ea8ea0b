"""Tests for content/commerce record conversion."""

from shopcatalog.modules.catalog.transformers import (
    convert_content_only,
    is_product_in_stock,
    merge_commerce,
    resolve_slug,
)
from shopcatalog.modules.connectors.swell import CommerceProduct


def _record(**overrides):
    record = {
        "_id": "content-1",
        "title": "Kind of Blue",
        "slug": {"current": "kind-of-blue"},
        "artist": ["Miles Davis"],
        "label": [{"main": "Columbia"}],
        "genre": [{"main": "Jazz"}, {"main": "Modal"}],
        "format": [{"main": "LP"}],
        "week": ["RSD24", "4825"],
        "stock": 3,
        "inStock": True,
        "orderRank": "0|a",
        "mainImage": {"asset": {"url": "https://cdn/img.jpg"}},
    }
    record.update(overrides)
    return record


class TestConvertContentOnly:
    def test_editorial_fields(self):
        product = convert_content_only(_record())
        assert product.id == "content-1"
        assert product.slug == "kind-of-blue"
        assert product.artist == "Miles Davis"
        assert product.label == "Columbia"
        assert product.genre == "Jazz, Modal"
        assert product.week == "4825"
        assert product.image_url == "https://cdn/img.jpg"
        assert product.sanity_content["_id"] == "content-1"

    def test_trusts_content_stock_mirror(self):
        product = convert_content_only(_record())
        assert product.stock_level == 3
        assert product.stock_purchasable is True

    def test_without_content_stock(self):
        product = convert_content_only(_record(), with_content_stock=False)
        assert product.stock_level == 0
        assert product.stock_purchasable is False
        assert product.artist == "Miles Davis"

    def test_featured_flag(self):
        assert convert_content_only(_record(), featured=True).featured is True
        assert convert_content_only(_record()).featured is False

    def test_bare_record(self):
        product = convert_content_only({"_id": "x"})
        assert product.title == "Untitled"
        assert product.slug == "x"
        assert product.sku == "x"
        assert product.stock_level == 0

    def test_malformed_fields_do_not_raise(self):
        product = convert_content_only(_record(artist={"foo": 1}, stock="n/a", menuOrder="7"))
        assert product.artist == ""
        assert product.stock_level == 0
        assert product.menu_order == 7


class TestMergeCommerce:
    def test_commerce_wins_for_price_and_stock(self):
        commerce = CommerceProduct(
            id="sw-1",
            slug="kind-of-blue-lp",
            sku="COL-1",
            name="Kind of Blue (LP)",
            price=32.5,
            currency="EUR",
            stock_level=0,
            stock_purchasable=False,
            media="VG+",
        )
        product = merge_commerce(_record(media="NM"), commerce)
        assert product.id == "sw-1"
        assert product.commerce_id == "sw-1"
        assert product.slug == "kind-of-blue-lp"
        assert product.price == 32.5
        assert product.currency == "EUR"
        assert product.stock_level == 0
        assert product.media == "VG+"
        # Editorial fields still come from content.
        assert product.title == "Kind of Blue"
        assert product.artist == "Miles Davis"


class TestResolveSlug:
    def test_order(self):
        record = {"_id": "id", "sku": "sku", "slug": {"current": "content"}, "swellSlug": "swell"}
        assert resolve_slug(record) == "swell"
        del record["swellSlug"]
        assert resolve_slug(record) == "content"
        del record["slug"]
        assert resolve_slug(record) == "sku"
        del record["sku"]
        assert resolve_slug(record) == "id"
        assert resolve_slug({}) == "untitled"


def test_is_product_in_stock():
    assert is_product_in_stock(convert_content_only(_record(stock=1)))
    assert not is_product_in_stock(convert_content_only(_record(stock=0)))


class TestMalformedRecords:
    def test_shapes_are_coerced(self):
        product = convert_content_only(
            _record(
                title=["Kind of Blue", "Remaster"],
                tags="jazz",
                swellProductId=12345,
                mainImage="img.jpg",
                tracklist={"side": "A"},
                inMixtapes=None,
                gallery="nope",
                swellCurrency=["EUR"],
                imageUrl=["https://cdn/a.jpg"],
                orderRank=3,
            )
        )
        assert product.title == "Kind of Blue, Remaster"
        assert product.name == "Kind of Blue, Remaster"
        assert product.tags == []
        assert product.commerce_id == "12345"
        assert product.main_image is None
        assert product.tracklist == []
        assert product.in_mixtapes == []
        assert product.gallery is None
        assert product.currency == "EUR"
        assert product.image_url == "https://cdn/a.jpg"
        assert product.order_rank == "3"

    def test_merge_with_malformed_content(self):
        commerce = CommerceProduct(id="sw-1", name="Kind of Blue", price=20, stock_level=1)
        product = merge_commerce(_record(title={"foo": 1}, tags="jazz", _id=99, mainImage=[1]), commerce)
        assert product.title == "Kind of Blue"
        assert product.content_id == "99"
        assert product.tags == []
        assert product.main_image is None

    def test_identity_keys(self):
        content_only = convert_content_only(_record(swellProductId="sw-1"))
        merged = merge_commerce(_record(), CommerceProduct(id="sw-1"))
        assert content_only.identity_keys == {"content-1", "sw-1"}
        assert merged.identity_keys == {"content-1", "sw-1"}
