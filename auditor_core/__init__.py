"""
Auditor Core Module

Read-only audit and classification engine for a WordPress-style options table.

This module provides:
- Size ranking of autoloaded and all options
- Threshold classification of big autoload offenders
- Heuristic detection of options orphaned by removed plugins
- Detection of expired transients that were never purged
- Aggregation of all of the above into a single audit report
"""

__version__ = "0.1.0"

from .aggregator import OptionsAuditor
from .interfaces import ComponentRegistry, ExpiredPairRow, OptionRowStore, TransientFamily
from .orphans import guess_prefix, looks_installed, sanitize_key
from .schemas import (
    AuditConfig,
    AuditCounts,
    AuditReport,
    AuditThresholds,
    OptionRow,
    OrphanCandidate,
    TransientPair,
    TransientScan,
)

__all__ = [
    "AuditConfig",
    "AuditCounts",
    "AuditReport",
    "AuditThresholds",
    "ComponentRegistry",
    "ExpiredPairRow",
    "OptionRow",
    "OptionRowStore",
    "OptionsAuditor",
    "OrphanCandidate",
    "TransientFamily",
    "TransientPair",
    "TransientScan",
    "guess_prefix",
    "looks_installed",
    "sanitize_key",
]
