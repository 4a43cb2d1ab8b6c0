"""Capabilities the audit engine consumes from its collaborators."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .schemas import OptionRow


class TransientFamily(str, Enum):
    """Naming family of a transient timeout row."""

    PLAIN = "plain"
    NETWORK = "network"

    @property
    def timeout_prefix(self) -> str:
        if self is TransientFamily.NETWORK:
            return "_site_transient_timeout_"
        return "_transient_timeout_"

    @property
    def value_prefix(self) -> str:
        if self is TransientFamily.NETWORK:
            return "_site_transient_"
        return "_transient_"


@dataclass(frozen=True)
class ExpiredPairRow:
    """Raw timeout row joined with its value row, as the store returns it.

    ``value_key`` and ``size_bytes`` are ``None`` when the value row is gone.
    """

    timeout_key: str
    timeout_value: str | int | None
    value_key: str | None = None
    size_bytes: int | None = None


class OptionRowStore(Protocol):
    def query_top_by_size(self, *, preload_only: bool, limit: int) -> list[OptionRow]:
        ...

    def scalar_sum_bytes(self, *, preload_only: bool = True) -> int:
        ...

    def scalar_count(self, *, preload_only: bool = False) -> int:
        ...

    def query_candidate_rows(
        self,
        exclude_prefixes: Sequence[str],
        limit: int,
        *,
        exclude_keys: Sequence[str] = (),
    ) -> list[OptionRow]:
        ...

    def query_expired_pairs(
        self, family: TransientFamily, now: int, limit: int
    ) -> list[ExpiredPairRow]:
        ...

    def scalar_count_expired(self, family: TransientFamily, now: int) -> int:
        ...


class ComponentRegistry(Protocol):
    def list_installed_markers(self) -> frozenset[str]:
        ...
