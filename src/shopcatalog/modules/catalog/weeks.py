"""Week clock: calendar time to ``WWYY`` drop-week tokens.

Products carry an array of week tokens (a reissue can belong to several drop
weeks), so "is this product new this week" is a membership test on the
token, never a date range.

The year is treated as exactly 52 weeks when walking backwards. Late-December
dates can still produce a current token of week 53; it walks back to 52.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Iterable

WEEK_TOKEN_RE = re.compile(r"^\d{4}$")

WEEKS_PER_YEAR = 52
# Hard bound on the backwards walk in target_weeks().
MAX_WEEKS_TO_CHECK = 52


def is_week_token(value: object) -> bool:
    return isinstance(value, str) and bool(WEEK_TOKEN_RE.match(value))


def format_token(week: int, year: int) -> str:
    return f"{week:02d}{year % 100:02d}"


def parse_token(token: str) -> tuple[int, int]:
    """Split ``WWYY`` into ``(week, two_digit_year)``."""
    if not is_week_token(token):
        raise ValueError(f"Not a WWYY week token: {token!r}")
    return int(token[:2]), int(token[2:])


def current_week_token(now: datetime | None = None) -> str:
    """Week token for ``now`` (defaults to the local wall clock).

    Week number is ``ceil((days_since_jan1 + weekday_of_jan1 + 1) / 7)``
    with Sunday as weekday 0, so week 1 is the (possibly partial) week
    containing January 1st.
    """
    now = now or datetime.now()
    start = datetime(now.year, 1, 1, tzinfo=now.tzinfo)
    days = (now - start).days
    jan1_weekday = (start.weekday() + 1) % 7
    week = math.ceil((days + jan1_weekday + 1) / 7)
    return format_token(week, now.year)


def previous_token(token: str) -> str:
    """The token one week earlier; week 1 wraps to week 52 of the previous year."""
    week, year = parse_token(token)
    if week > 1:
        return format_token(week - 1, year)
    return format_token(WEEKS_PER_YEAR, (year - 1) % 100)


def token_sort_key(token: str) -> str:
    """``YYWW`` so that plain string ordering is chronological."""
    return token[2:] + token[:2]


def sort_tokens_by_recency(tokens: Iterable[object]) -> list[str]:
    """Valid tokens only, most recent first."""
    valid = {t for t in tokens if is_week_token(t)}
    return sorted(valid, key=token_sort_key, reverse=True)  # type: ignore[arg-type]


def target_weeks(
    max_count: int,
    available: Iterable[object],
    now: datetime | None = None,
) -> list[str]:
    """Walk back from the current week collecting tokens that have products.

    Returns at most ``max_count`` tokens, most recent first. The walk stops
    after ``MAX_WEEKS_TO_CHECK`` steps, so fewer tokens come back when the
    catalogue has no older drops.
    """
    available_tokens = set(sort_tokens_by_recency(available))
    needed = min(max_count, len(available_tokens))

    result: list[str] = []
    token = current_week_token(now)
    checked = 0
    while len(result) < needed and checked < MAX_WEEKS_TO_CHECK:
        if token in available_tokens:
            result.append(token)
        token = previous_token(token)
        checked += 1
    return result


__all__ = [
    "MAX_WEEKS_TO_CHECK",
    "WEEKS_PER_YEAR",
    "current_week_token",
    "format_token",
    "is_week_token",
    "parse_token",
    "previous_token",
    "sort_tokens_by_recency",
    "target_weeks",
    "token_sort_key",
]
