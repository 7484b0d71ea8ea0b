"""Result type for catch-and-degrade operations.

Listing operations never raise to their callers. Instead of silently
returning an empty value they return a ``Result`` whose ``degraded`` marker
says which upstream failed, so the facade can log it and skip caching.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Degraded:
    """Why a value is a fallback rather than the real answer.

    Attributes:
        source: Upstream that failed ("content", "commerce", "timeout").
        reason: Short human-readable description (usually the exception).
        count: How many items were affected (partial enrichment failures).
    """

    source: str
    reason: str = ""
    count: int = 1


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T
    degraded: Degraded | None = None

    @property
    def ok(self) -> bool:
        return self.degraded is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, source: str, reason: object = "", count: int = 1) -> "Result[T]":
        return cls(value=value, degraded=Degraded(source=source, reason=str(reason), count=count))


def merge_degraded(*markers: Degraded | None) -> Degraded | None:
    """Combine several markers into one (first source wins, counts add up)."""
    present = [m for m in markers if m is not None]
    if not present:
        return None
    first = present[0]
    return Degraded(
        source=first.source,
        reason=first.reason,
        count=sum(m.count for m in present),
    )


__all__ = ["Degraded", "Result", "merge_degraded"]
