"""Environment readers for shopcatalog settings.

This is the one module allowed to touch ``os.environ``
(``tests/unit/test_no_direct_env.py`` enforces it). ``Config.load`` calls
these helpers; everything else reads ``get_core_config()``.

Blank values count as unset, so ``SANITY_DATASET=`` in a ``.env`` file keeps
the default instead of overriding it with an empty string.
"""

from __future__ import annotations

import os

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})


def get_env(name: str, default: str | None = None) -> str | None:
    """Stripped value of ``name``, or ``default`` when unset or blank."""
    raw = os.environ.get(name, "").strip()
    return raw or default


def get_bool_env(name: str, default: bool | None = None) -> bool | None:
    """Parse a boolean flag; unrecognised spellings fall back to ``default``."""
    raw = get_env(name)
    if raw is None:
        return default
    flag = raw.lower()
    if flag in _TRUE_VALUES:
        return True
    if flag in _FALSE_VALUES:
        return False
    return default


def get_int_env(name: str, default: int | None = None) -> int | None:
    raw = get_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Week token reserved by editors for "undated" catalogue entries.
PLACEHOLDER_WEEK = "0001"
