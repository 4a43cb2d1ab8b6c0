"""Size ranking and big-option classification."""

from __future__ import annotations

from collections.abc import Iterable

from .interfaces import OptionRowStore
from .schemas import OptionRow


def rank_by_size(store: OptionRowStore, *, preload_only: bool, limit: int) -> list[OptionRow]:
    """Return up to ``limit`` rows, largest first.

    Rows of equal size come back in whatever order the store yields them.
    """
    if limit <= 0:
        return []
    rows = store.query_top_by_size(preload_only=preload_only, limit=limit)
    ordered = sorted(rows, key=lambda row: row.size_bytes, reverse=True)
    return ordered[:limit]


def preload_totals(store: OptionRowStore) -> tuple[int, int]:
    """Exact (count, total bytes) of autoloaded rows, independent of any sample."""
    count = store.scalar_count(preload_only=True)
    total_bytes = store.scalar_sum_bytes(preload_only=True)
    return count, total_bytes


def filter_big(rows: Iterable[OptionRow], threshold: int) -> list[OptionRow]:
    return [row for row in rows if row.size_bytes >= threshold]
