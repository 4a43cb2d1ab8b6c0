"""
SQLite-backed, read-only options row store.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from contextlib import closing
from pathlib import Path
from typing import cast

from auditor_core.interfaces import ExpiredPairRow, TransientFamily
from auditor_core.schemas import OptionRow

from .database import DEFAULT_TABLE_PREFIX, connect, options_table_name, table_exists


# Byte length of the raw stored value; LENGTH() on TEXT would count characters.
_BYTES_EXPR = "COALESCE(LENGTH(CAST({col} AS BLOB)), 0)"


def _require_str(value: object, field: str) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        raise ValueError(f"{field} is required")
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _int_or_zero(value: object) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return 0


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return _int_or_zero(value)


def _row_to_option(row: sqlite3.Row) -> OptionRow:
    return OptionRow(
        key=_require_str(cast(object, row["option_name"]), "option_name"),
        size_bytes=_int_or_zero(cast(object, row["bytes"])),
        preload_flag=_optional_str(cast(object, row["autoload"])) or "",
    )


class OptionStore:
    """Query interface over an options table. Never writes."""

    def __init__(self, db_path: str | Path, table_prefix: str = DEFAULT_TABLE_PREFIX) -> None:
        self.db_path: str = str(db_path)
        self.table: str = options_table_name(table_prefix)
        with closing(connect(self.db_path)) as connection:
            try:
                found = table_exists(connection, self.table)
            except sqlite3.DatabaseError as e:
                raise ValueError(f"Not a SQLite database: {self.db_path}") from e
        if not found:
            raise ValueError(f"Options table {self.table!r} not found in {self.db_path}")

    def _fetch_all(self, sql: str, params: Sequence[object] = ()) -> list[sqlite3.Row]:
        with closing(connect(self.db_path)) as connection:
            return cast(list[sqlite3.Row], connection.execute(sql, tuple(params)).fetchall())

    def _fetch_scalar(self, sql: str, params: Sequence[object] = ()) -> int:
        with closing(connect(self.db_path)) as connection:
            row = cast(sqlite3.Row | None, connection.execute(sql, tuple(params)).fetchone())
        if row is None:
            return 0
        return _int_or_zero(cast(object, row[0]))

    def query_top_by_size(self, *, preload_only: bool, limit: int) -> list[OptionRow]:
        where = "WHERE autoload = 'yes'" if preload_only else ""
        rows = self._fetch_all(
            f"""
            SELECT option_name, autoload, {_BYTES_EXPR.format(col="option_value")} AS bytes
            FROM {self.table}
            {where}
            ORDER BY bytes DESC
            LIMIT ?
            """,
            (limit,),
        )
        return [_row_to_option(row) for row in rows]

    def scalar_sum_bytes(self, *, preload_only: bool = True) -> int:
        where = "WHERE autoload = 'yes'" if preload_only else ""
        return self._fetch_scalar(
            f"SELECT SUM({_BYTES_EXPR.format(col='option_value')}) FROM {self.table} {where}"
        )

    def scalar_count(self, *, preload_only: bool = False) -> int:
        where = "WHERE autoload = 'yes'" if preload_only else ""
        return self._fetch_scalar(f"SELECT COUNT(*) FROM {self.table} {where}")

    def query_candidate_rows(
        self,
        exclude_prefixes: Sequence[str],
        limit: int,
        *,
        exclude_keys: Sequence[str] = (),
    ) -> list[OptionRow]:
        clauses: list[str] = []
        params: list[object] = []
        for prefix in exclude_prefixes:
            clauses.append("substr(option_name, 1, ?) <> ?")
            params.extend((len(prefix), prefix))
        if exclude_keys:
            placeholders = ", ".join("?" for _ in exclude_keys)
            clauses.append(f"option_name NOT IN ({placeholders})")
            params.extend(exclude_keys)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)
        rows = self._fetch_all(
            f"""
            SELECT option_name, autoload, {_BYTES_EXPR.format(col="option_value")} AS bytes
            FROM {self.table}
            {where}
            ORDER BY bytes DESC
            LIMIT ?
            """,
            params,
        )
        return [_row_to_option(row) for row in rows]

    def query_expired_pairs(
        self, family: TransientFamily, now: int, limit: int
    ) -> list[ExpiredPairRow]:
        timeout_prefix = family.timeout_prefix
        rows = self._fetch_all(
            f"""
            SELECT o.option_name AS timeout_name,
                   o.option_value AS timeout_value,
                   v.option_name AS value_name,
                   LENGTH(CAST(v.option_value AS BLOB)) AS bytes
            FROM {self.table} o
            LEFT JOIN {self.table} v
              ON v.option_name = ? || substr(o.option_name, ?)
            WHERE substr(o.option_name, 1, ?) = ?
              AND CAST(o.option_value AS INTEGER) > 0
              AND CAST(o.option_value AS INTEGER) < ?
            ORDER BY CAST(o.option_value AS INTEGER) ASC
            LIMIT ?
            """,
            (
                family.value_prefix,
                len(timeout_prefix) + 1,
                len(timeout_prefix),
                timeout_prefix,
                now,
                limit,
            ),
        )
        return [
            ExpiredPairRow(
                timeout_key=_require_str(cast(object, row["timeout_name"]), "timeout_name"),
                timeout_value=_optional_str(cast(object, row["timeout_value"])),
                value_key=_optional_str(cast(object, row["value_name"])),
                size_bytes=_optional_int(cast(object, row["bytes"])),
            )
            for row in rows
        ]

    def scalar_count_expired(self, family: TransientFamily, now: int) -> int:
        timeout_prefix = family.timeout_prefix
        return self._fetch_scalar(
            f"""
            SELECT COUNT(*) FROM {self.table}
            WHERE substr(option_name, 1, ?) = ?
              AND CAST(option_value AS INTEGER) > 0
              AND CAST(option_value AS INTEGER) < ?
            """,
            (len(timeout_prefix), timeout_prefix, now),
        )
