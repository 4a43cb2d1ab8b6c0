"""
SQLite database utilities for the store module.
"""

from __future__ import annotations

import re
import sqlite3
from pathlib import Path


OPTIONS_TABLE_SUFFIX = "options"
DEFAULT_TABLE_PREFIX = "wp_"

# Mirrors the host's options table; only the columns the auditor reads matter.
SCHEMA_SQL = """
CREATE TABLE {table} (
  option_id INTEGER PRIMARY KEY AUTOINCREMENT,
  option_name TEXT NOT NULL UNIQUE,
  option_value TEXT NOT NULL DEFAULT '',
  autoload TEXT NOT NULL DEFAULT 'yes'
);

CREATE INDEX idx_{table}_autoload ON {table}(autoload);
"""

_TABLE_PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9_]*$")


def options_table_name(table_prefix: str = DEFAULT_TABLE_PREFIX) -> str:
    """Return the options table name for a prefix, rejecting anything unsafe to inline."""
    if not _TABLE_PREFIX_PATTERN.match(table_prefix):
        raise ValueError(f"Invalid table prefix: {table_prefix!r}")
    return f"{table_prefix}{OPTIONS_TABLE_SUFFIX}"


def schema_sql(table_prefix: str = DEFAULT_TABLE_PREFIX) -> str:
    return SCHEMA_SQL.format(table=options_table_name(table_prefix))


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a read-only SQLite connection.

    The file must already exist; a missing path is never created.
    """
    path = Path(db_path)
    if not path.exists():
        raise FileNotFoundError(f"Database not found: {path}")
    connection = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
    connection.row_factory = sqlite3.Row
    return connection


def table_exists(connection: sqlite3.Connection, table: str) -> bool:
    row = connection.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    ).fetchone()
    return row is not None
