"""Normalization of content-store field shapes.

Editorial fields arrive in several shapes for the same logical value:

    "Blue Note"                                   plain string
    ["Blue Note", "Verve"]                        array of strings
    {"main": "Jazz", "sub": "Hard Bop"}           object with a display key
    [{"main": "Jazz"}, {"main": "Soul"}]          array of objects
    {"_type": "reference", "_ref": "label-123"}   unresolved reference

``parse_field`` classifies the raw value once into a tagged union and
``normalize`` folds any variant into a flat string. Nothing here raises on
bad input: unknown shapes become an empty field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

from .weeks import is_week_token

# Object keys that carry a display label, in priority order.
LABEL_KEYS = ("main", "name", "title")


@dataclass(frozen=True)
class EmptyField:
    pass


@dataclass(frozen=True)
class StringField:
    value: str


@dataclass(frozen=True)
class ObjectField:
    """Object with a display label (``main``, ``name`` or ``title``)."""

    label: str


@dataclass(frozen=True)
class ReferenceField:
    """Unresolved reference; carries no displayable text."""

    ref: str


@dataclass(frozen=True)
class ArrayField:
    items: tuple["Field", ...]


Field = Union[EmptyField, StringField, ObjectField, ReferenceField, ArrayField]

EMPTY = EmptyField()


def _parse_object(raw: dict[str, Any]) -> Field:
    for key in LABEL_KEYS:
        value = raw.get(key)
        if value:
            return ObjectField(label=str(value))
    if raw.get("_type") == "reference" and raw.get("_ref"):
        return ReferenceField(ref=str(raw["_ref"]))
    return EMPTY


def parse_field(raw: Any) -> Field:
    """Classify a raw content value into one of the field variants."""
    if raw is None or raw == "" or raw is False:
        return EMPTY
    if isinstance(raw, str):
        return StringField(raw)
    if isinstance(raw, (list, tuple)):
        return ArrayField(tuple(parse_field(item) for item in raw))
    if isinstance(raw, dict):
        return _parse_object(raw)
    if isinstance(raw, (int, float)):
        return StringField(str(raw)) if raw else EMPTY
    return StringField(str(raw))


def normalize(field: Field) -> str:
    """Flatten a parsed field to a display string (arrays joined by ", ")."""
    if isinstance(field, EmptyField):
        return ""
    if isinstance(field, StringField):
        return field.value
    if isinstance(field, ObjectField):
        return field.label
    if isinstance(field, ReferenceField):
        return ""
    if isinstance(field, ArrayField):
        return ", ".join(text for text in (normalize(item) for item in field.items) if text)
    raise TypeError(f"Unknown field variant: {type(field).__name__}")


def extract_string(raw: Any) -> str:
    return normalize(parse_field(raw))


def extract_week(raw: Any) -> str:
    """Primary week token of a record.

    Arrays prefer the first ``WWYY`` token, then the first string of any
    form (editors also tag special drops such as "RSD24").
    """
    if not raw:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (list, tuple)):
        for item in raw:
            if is_week_token(item):
                return item
        for item in raw:
            if isinstance(item, str):
                return item
        return str(raw[0]) if raw[0] else ""
    return str(raw)


def slug_to_label_name(slug: str) -> str:
    """``"blue-note--verve"`` -> ``"blue note & verve"``."""
    name = re.sub(r"--+", " & ", slug)
    name = name.replace("-", " ")
    return re.sub(r"\s+and\s+", " & ", name, flags=re.IGNORECASE)


__all__ = [
    "ArrayField",
    "EmptyField",
    "Field",
    "ObjectField",
    "ReferenceField",
    "StringField",
    "extract_string",
    "extract_week",
    "normalize",
    "parse_field",
    "slug_to_label_name",
]
