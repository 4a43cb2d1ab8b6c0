"""
Store Module

Read-only access to the options table.

This module provides:
- SQLite connections opened in read-only mode
- Size-ranked and aggregate queries over option rows
- Candidate sampling for orphan detection
- Expired transient timeout/value pair lookups
"""

__version__ = "0.1.0"

from .repository import OptionStore

__all__ = ["OptionStore"]
