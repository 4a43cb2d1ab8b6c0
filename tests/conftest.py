"""Shared fixtures: SQLite options tables and an in-memory row store."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from auditor_core.interfaces import ExpiredPairRow, TransientFamily
from auditor_core.schemas import OptionRow
from auditor_core.transients import parse_epoch, value_key_for
from store.database import options_table_name, schema_sql

OptionSpec = tuple[str, str, str]


def create_options_db(
    db_path: Path, options: Sequence[OptionSpec], table_prefix: str = "wp_"
) -> Path:
    """Create an options table and fill it with (name, value, autoload) rows."""
    table = options_table_name(table_prefix)
    connection = sqlite3.connect(str(db_path))
    try:
        connection.executescript(schema_sql(table_prefix))
        connection.executemany(
            f"INSERT INTO {table} (option_name, option_value, autoload) VALUES (?, ?, ?)",
            list(options),
        )
        connection.commit()
    finally:
        connection.close()
    return db_path


@pytest.fixture
def options_db(tmp_path: Path) -> Callable[..., Path]:
    def _make(
        options: Sequence[OptionSpec] = (), table_prefix: str = "wp_", name: str = "options.db"
    ) -> Path:
        return create_options_db(tmp_path / name, options, table_prefix)

    return _make


class InMemoryOptionStore:
    """Dict-backed implementation of the row store protocol, recording every call."""

    def __init__(self, options: Sequence[OptionSpec] = ()) -> None:
        self.options: dict[str, tuple[str, str]] = {
            name: (value, autoload) for name, value, autoload in options
        }
        self.calls: list[str] = []

    def _rows(self) -> list[OptionRow]:
        return [
            OptionRow(key=name, size_bytes=len(value.encode("utf-8")), preload_flag=autoload)
            for name, (value, autoload) in self.options.items()
        ]

    def query_top_by_size(self, *, preload_only: bool, limit: int) -> list[OptionRow]:
        self.calls.append("query_top_by_size")
        rows = [r for r in self._rows() if r.preload_flag == "yes" or not preload_only]
        return sorted(rows, key=lambda r: r.size_bytes, reverse=True)[:limit]

    def scalar_sum_bytes(self, *, preload_only: bool = True) -> int:
        self.calls.append("scalar_sum_bytes")
        return sum(r.size_bytes for r in self._rows() if r.preload_flag == "yes" or not preload_only)

    def scalar_count(self, *, preload_only: bool = False) -> int:
        self.calls.append("scalar_count")
        return sum(1 for r in self._rows() if r.preload_flag == "yes" or not preload_only)

    def query_candidate_rows(
        self,
        exclude_prefixes: Sequence[str],
        limit: int,
        *,
        exclude_keys: Sequence[str] = (),
    ) -> list[OptionRow]:
        self.calls.append("query_candidate_rows")
        rows = [
            r
            for r in self._rows()
            if not any(r.key.startswith(p) for p in exclude_prefixes) and r.key not in exclude_keys
        ]
        return sorted(rows, key=lambda r: r.size_bytes, reverse=True)[:limit]

    def _expired(self, family: TransientFamily, now: int) -> list[tuple[str, int]]:
        found = []
        for name, (value, _) in self.options.items():
            if name.startswith(family.timeout_prefix):
                epoch = parse_epoch(value)
                if 0 < epoch < now:
                    found.append((name, epoch))
        return sorted(found, key=lambda item: item[1])

    def query_expired_pairs(
        self, family: TransientFamily, now: int, limit: int
    ) -> list[ExpiredPairRow]:
        self.calls.append("query_expired_pairs")
        pairs = []
        for name, _ in self._expired(family, now)[:limit]:
            value_key = value_key_for(name, family)
            value = self.options.get(value_key)
            pairs.append(
                ExpiredPairRow(
                    timeout_key=name,
                    timeout_value=self.options[name][0],
                    value_key=value_key if value is not None else None,
                    size_bytes=len(value[0].encode("utf-8")) if value is not None else None,
                )
            )
        return pairs

    def scalar_count_expired(self, family: TransientFamily, now: int) -> int:
        self.calls.append("scalar_count_expired")
        return len(self._expired(family, now))


@pytest.fixture
def memory_store() -> Callable[..., InMemoryOptionStore]:
    def _make(options: Sequence[OptionSpec] = ()) -> InMemoryOptionStore:
        return InMemoryOptionStore(options)

    return _make
