"""Tests for content field normalization."""

import pytest

from shopcatalog.modules.catalog.fields import (
    ArrayField,
    EmptyField,
    ObjectField,
    ReferenceField,
    StringField,
    extract_string,
    extract_week,
    normalize,
    parse_field,
    slug_to_label_name,
)


class TestParseField:
    def test_variants(self):
        assert parse_field(None) == EmptyField()
        assert parse_field("") == EmptyField()
        assert parse_field("Blue Note") == StringField("Blue Note")
        assert parse_field({"main": "Jazz", "sub": "Bop"}) == ObjectField("Jazz")
        assert parse_field({"_type": "reference", "_ref": "label-1"}) == ReferenceField("label-1")
        assert parse_field(["a", {"name": "b"}]) == ArrayField((StringField("a"), ObjectField("b")))

    def test_label_key_priority(self):
        assert parse_field({"title": "T", "name": "N", "main": "M"}) == ObjectField("M")
        assert parse_field({"title": "T", "name": "N"}) == ObjectField("N")

    def test_unknown_object_is_empty(self):
        assert parse_field({"foo": "bar"}) == EmptyField()


class TestNormalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Blue Note", "Blue Note"),
            (["Blue Note", "Verve"], "Blue Note, Verve"),
            ({"main": "Jazz"}, "Jazz"),
            ([{"main": "Jazz"}, {"main": "Soul"}], "Jazz, Soul"),
            ([{"main": "Jazz"}, None, "", {"foo": 1}], "Jazz"),
            ({"_type": "reference", "_ref": "x"}, ""),
            (None, ""),
            (1972, "1972"),
        ],
    )
    def test_extract_string(self, raw, expected):
        assert extract_string(raw) == expected

    def test_unknown_variant_raises(self):
        with pytest.raises(TypeError):
            normalize(object())  # type: ignore[arg-type]


class TestExtractWeek:
    def test_prefers_week_token(self):
        assert extract_week(["RSD24", "4725", "4825"]) == "4725"

    def test_falls_back_to_first_string(self):
        assert extract_week(["RSD24", "LPH1"]) == "RSD24"

    def test_plain_string_and_empty(self):
        assert extract_week("4825") == "4825"
        assert extract_week([]) == ""
        assert extract_week(None) == ""


class TestSlugToLabelName:
    def test_double_dash_is_ampersand(self):
        assert slug_to_label_name("blue-note--verve") == "blue note & verve"

    def test_and_is_ampersand(self):
        assert slug_to_label_name("rock-and-roll") == "rock & roll"
