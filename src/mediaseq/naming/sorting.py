"""Natural-order comparison and batch sort strategies."""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Iterable, Sequence

from .models import MediaItem, SortStrategy

_RUNS = re.compile(r"\d+|\D+")


def split_runs(value: str) -> list[str]:
    """Split ``value`` into alternating runs of digits and non-digits.

    Args:
        value: Text to split.

    Returns:
        list[str]: Maximal runs in their original order, e.g. ``"file10b2"`` becomes
        ``["file", "10", "b", "2"]``. An empty string yields an empty list.
    """

    return _RUNS.findall(value)


def compare_natural(left: str, right: str) -> int:
    """Compare two names so that embedded numbers order numerically.

    Numeric runs compare as integers, a numeric run sorts before a text run, and
    text runs compare case-insensitively. When every compared run is equal the
    name with fewer runs sorts first.

    Args:
        left: First name.
        right: Second name.

    Returns:
        int: Negative, zero, or positive like a classic ``cmp`` function.
    """

    left_runs = split_runs(left)
    right_runs = split_runs(right)

    for left_run, right_run in zip(left_runs, right_runs):
        left_numeric = left_run.isdecimal()
        right_numeric = right_run.isdecimal()
        if left_numeric and right_numeric:
            result = _sign(int(left_run) - int(right_run))
        elif left_numeric:
            result = -1
        elif right_numeric:
            result = 1
        else:
            a, b = left_run.lower(), right_run.lower()
            result = (a > b) - (a < b)
        if result:
            return result

    return _sign(len(left_runs) - len(right_runs))


natural_key = cmp_to_key(compare_natural)


def sort_items(items: Iterable[MediaItem], strategy: SortStrategy) -> list[MediaItem]:
    """Return ``items`` ordered according to ``strategy``.

    Args:
        items: Items in selection order.
        strategy: Sort strategy to apply.

    Returns:
        list[MediaItem]: New list in the requested order. Ties keep selection order.
    """

    ordered: Sequence[MediaItem] = list(items)
    if strategy is SortStrategy.NATURAL:
        return sorted(ordered, key=lambda item: natural_key(item.name))
    if strategy is SortStrategy.DATE_MODIFIED:
        return sorted(ordered, key=lambda item: item.modified_at, reverse=True)
    if strategy is SortStrategy.SIZE:
        return sorted(ordered, key=lambda item: item.size_bytes, reverse=True)
    return list(ordered)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


__all__ = ["compare_natural", "natural_key", "sort_items", "split_runs"]
