"""Heuristic detection of options left behind by uninstalled plugins.

WordPress does not record which plugin owns an option, so ownership is
guessed from the option name: the chunk before the first delimiter is treated
as the owner's prefix and compared against markers of installed plugins.
The comparison is loose. It misses options whose prefix has no
lexical relation to the plugin name, and it accuses generic-looking names
that nothing installed claims. Results are therefore labelled "likely".
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from .interfaces import OptionRowStore
from .schemas import OptionRow, OrphanCandidate

logger = logging.getLogger(__name__)

PREFIX_DELIMITERS = ("_", "-", ".", ":")
MIN_PREFIX_LENGTH = 3
CANDIDATE_HEADROOM = 6

EXCLUDED_KEY_PREFIXES = ("_transient_", "_site_transient_")
EXCLUDED_KEYS = ("cron",)

PLATFORM_PREFIXES = frozenset(
    {
        "wp",
        "wpdb",
        "site",
        "blog",
        "rewrite",
        "widget",
        "theme",
        "users",
        "user",
        "admin",
        "dashboard",
        "mailserver",
        "uploads",
        "permalink",
        "gmt",
    }
)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9_\-]")


def sanitize_key(value: str) -> str:
    """Lower-case and drop everything outside ``[a-z0-9_-]``."""
    return _UNSAFE_KEY_CHARS.sub("", value.lower())


def guess_prefix(key: str) -> str:
    """Guess the owning plugin's prefix from an option name.

    Takes the text before the earliest ``_``, ``-``, ``.`` or ``:``. Returns
    ``""`` when the name has no delimiter or the sanitized prefix is shorter
    than three characters.
    """
    positions = [pos for pos in (key.find(d) for d in PREFIX_DELIMITERS) if pos != -1]
    if not positions:
        return ""
    prefix = sanitize_key(key[: min(positions)])
    if len(prefix) < MIN_PREFIX_LENGTH:
        return ""
    return prefix


def is_platform_prefix(prefix: str) -> bool:
    return prefix in PLATFORM_PREFIXES


def looks_installed(prefix: str, markers: Iterable[str]) -> bool:
    """True if ``prefix`` equals, contains, or is contained in any marker."""
    for marker in markers:
        if marker == prefix:
            return True
        if prefix in marker or marker in prefix:
            return True
    return False


def classify_row(row: OptionRow, markers: frozenset[str]) -> OrphanCandidate | None:
    """Return an orphan candidate for ``row`` or ``None`` when it is not flagged."""
    if not row.key:
        return None
    prefix = guess_prefix(row.key)
    if not prefix:
        return None
    if is_platform_prefix(prefix):
        return None
    if prefix in markers:
        return None
    if looks_installed(prefix, markers):
        return None
    return OrphanCandidate(
        key=row.key,
        prefix_guess=prefix,
        size_bytes=row.size_bytes,
        preload_flag=row.preload_flag,
    )


class OrphanScanner:
    """Samples the largest options and flags the ones nothing installed claims."""

    def __init__(self, store: OptionRowStore) -> None:
        self.store = store

    def scan(self, markers: Iterable[str], limit: int) -> list[OrphanCandidate]:
        if limit <= 0:
            return []
        marker_set = frozenset(m for m in markers if m)
        if not marker_set:
            logger.warning(
                "No installed component markers; every prefixed option will look orphaned"
            )

        candidates = self.store.query_candidate_rows(
            EXCLUDED_KEY_PREFIXES,
            limit * CANDIDATE_HEADROOM,
            exclude_keys=EXCLUDED_KEYS,
        )

        orphans: list[OrphanCandidate] = []
        for row in candidates:
            if len(orphans) >= limit:
                break
            candidate = classify_row(row, marker_set)
            if candidate is not None:
                orphans.append(candidate)

        logger.debug(f"Examined {len(candidates)} candidate options, flagged {len(orphans)}")
        return orphans
