"""Expired transient detection.

A transient is stored as two rows: ``_transient_{name}`` holds the value and
``_transient_timeout_{name}`` holds the expiry epoch. Network-wide transients
use the ``_site_transient_`` prefix. Expired rows are supposed to be purged,
but cleanup depends on traffic and cron, so they often linger.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo

from .interfaces import ExpiredPairRow, OptionRowStore, TransientFamily
from .schemas import TransientPair, TransientScan

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEADING_INTEGER = re.compile(r"[+-]?\d+")


def value_key_for(timeout_key: str, family: TransientFamily) -> str:
    return timeout_key.replace(family.timeout_prefix, family.value_prefix, 1)


def parse_epoch(value: object) -> int:
    """Interpret a stored timeout value as an integer epoch; unparseable is 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INTEGER.match(str(value).strip())
    return int(match.group(0)) if match else 0


def is_expired(timeout_epoch: int, now: int) -> bool:
    """Zero means "never expires"; anything else expires strictly before ``now``."""
    return 0 < timeout_epoch < now


def format_epoch(epoch: int, tz: tzinfo = timezone.utc) -> str:
    if not epoch:
        return ""
    return datetime.fromtimestamp(epoch, tz=tz).strftime(TIMESTAMP_FORMAT)


def to_pair(row: ExpiredPairRow, tz: tzinfo = timezone.utc) -> TransientPair:
    epoch = parse_epoch(row.timeout_value)
    return TransientPair(
        timeout_key=row.timeout_key,
        value_key=row.value_key or "",
        timeout_epoch=epoch,
        timeout_human=format_epoch(epoch, tz),
        size_bytes=row.size_bytes or 0,
    )


class TransientScanner:
    def __init__(self, store: OptionRowStore, tz: tzinfo = timezone.utc) -> None:
        self.store = store
        self.tz = tz

    def sample(self, family: TransientFamily, now: int, limit: int) -> list[TransientPair]:
        """Expired pairs of one family, soonest-expired first."""
        if limit <= 0:
            return []
        rows = self.store.query_expired_pairs(family, now, limit)
        pairs = [to_pair(row, self.tz) for row in rows]
        pairs = [pair for pair in pairs if is_expired(pair.timeout_epoch, now)]
        pairs.sort(key=lambda pair: pair.timeout_epoch)
        return pairs[:limit]

    def scan(self, now: int, limit: int) -> TransientScan:
        return TransientScan(
            expired_transients_sample=self.sample(TransientFamily.PLAIN, now, limit),
            expired_site_transients_sample=self.sample(TransientFamily.NETWORK, now, limit),
            expired_transients_count_estimate=self.store.scalar_count_expired(
                TransientFamily.PLAIN, now
            ),
            expired_site_transients_count_estimate=self.store.scalar_count_expired(
                TransientFamily.NETWORK, now
            ),
        )
