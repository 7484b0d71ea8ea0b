"""GROQ filter conditions for archive facets.

Editorial naming is inconsistent (case, "&" vs "and", hyphenated slugs,
compound genres), so each facet expands a URL slug into a list of
variations and ORs the resulting conditions together.

String literals are emitted through ``groq_str`` (JSON encoding), which is
also a valid GROQ string literal.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable

from .fields import slug_to_label_name


def groq_str(value: str) -> str:
    return json.dumps(value)


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def _join(conditions: Iterable[str]) -> str:
    return " || ".join(_unique(conditions))


def _cases(value: str) -> list[str]:
    return _unique([value, value.lower(), value.upper()])


def _slug_variations(slug: str) -> list[str]:
    return _unique(
        [
            slug,
            slug_to_label_name(slug),
            slug.replace("-", " "),
            re.sub(r"--+", " & ", slug),
        ]
    )


def artist_condition(slug: str) -> str:
    conditions: list[str] = []
    for variation in _slug_variations(slug):
        conditions += [f"{groq_str(v)} in artist[]" for v in _cases(variation)]
        conditions += [f"artist[] match {groq_str(f'*{v}*')}" for v in _cases(variation)]
        conditions.append(f"lower(artist[]) match {groq_str(f'*{variation.lower()}*')}")
    return _join(conditions)


def label_condition(slug: str) -> str:
    conditions: list[str] = []
    for variation in _slug_variations(slug):
        conditions += [f"{groq_str(v)} in label[]" for v in _cases(variation)]
        conditions += [f"label[] match {groq_str(f'*{v}*')}" for v in _cases(variation)]
        conditions += [f"{groq_str(v)} in label[].main" for v in _cases(variation)]
        conditions.append(f"lower(label[]) match {groq_str(f'*{variation.lower()}*')}")
        conditions.append(f"lower(label[].main) match {groq_str(f'*{variation.lower()}*')}")
    return _join(conditions)


def _genre_conditions(name: str) -> list[str]:
    conditions = [f"{groq_str(v)} in genre[].main" for v in _cases(name)]
    conditions += [f"genre[].main == {groq_str(v)}" for v in _cases(name)]
    return conditions


def genre_condition(slug: str, submenu_item: dict[str, Any] | None = None) -> str:
    """Genre filter, curated aliases first.

    When the navigation taxonomy has a submenu entry for ``slug`` with
    ``relatedGenres``, the slug, the entry's label and every related alias
    are matched. Otherwise fall back to heuristics on the slug alone.
    """
    related = (submenu_item or {}).get("relatedGenres") or []
    if related:
        main_name = (submenu_item or {}).get("label") or slug_to_label_name(slug)
        conditions = [f"{groq_str(v)} in genre[].main" for v in _cases(slug)]
        conditions += _genre_conditions(main_name)
        for alias in related:
            if isinstance(alias, str) and alias:
                conditions += _genre_conditions(alias)
        return _join(conditions)

    genre_name = slug_to_label_name(slug)
    conditions = [
        f"{groq_str(slug.lower())} in genre[].main",
        f"{groq_str(slug.upper())} in genre[].main",
        f"{groq_str(genre_name)} in genre[].main",
    ]
    conditions += [f"genre[].main == {groq_str(v)}" for v in _cases(genre_name)]
    return _join(conditions)


def format_condition(slug: str) -> str:
    format_name = slug_to_label_name(slug)
    variants = _unique(
        [
            slug.upper(),
            format_name.upper(),
            slug,
            format_name,
            slug.lower(),
            format_name.lower(),
            slug.capitalize(),
            format_name.capitalize(),
        ]
    )
    conditions = [f"{groq_str(v)} in format[].main" for v in variants]
    conditions += [f"format[].main == {groq_str(v)}" for v in variants]

    # Vinyl sizes are stored with an inch mark: 7" and 12".
    for size in ("7", "12"):
        if slug in (size, f"{size}-inch") or size in format_name:
            inch = groq_str(f'{size}"')
            conditions += [f"format[].main == {inch}", f"{inch} in format[].main"]
    return _join(conditions)


def week_condition(slug: str) -> str:
    return f"{groq_str(slug)} in week[]"


def tag_condition(slug: str) -> str:
    return _join(f"{groq_str(v)} in tags[]" for v in [slug, slug_to_label_name(slug)])


def archive_condition(archive_type: str, slug: str, submenu_item: dict[str, Any] | None = None) -> str:
    """Filter condition for one archive facet; unknown facets match tags."""
    if archive_type == "artist":
        return artist_condition(slug)
    if archive_type == "label":
        return label_condition(slug)
    if archive_type == "genre":
        return genre_condition(slug, submenu_item)
    if archive_type == "format":
        return format_condition(slug)
    if archive_type == "week":
        return week_condition(slug)
    return tag_condition(slug)


def search_condition(term: str) -> str:
    """OR of title substring and membership in artist/label/genre/tags."""
    literal = groq_str(term)
    return " || ".join(
        [
            f"title match {groq_str(f'*{term}*')}",
            f"{literal} in artist[]",
            f"{literal} in label[]",
            f"{literal} in genre[].main",
            f"{literal} in tags[]",
        ]
    )


__all__ = [
    "archive_condition",
    "artist_condition",
    "format_condition",
    "genre_condition",
    "groq_str",
    "label_condition",
    "search_condition",
    "tag_condition",
    "week_condition",
]
