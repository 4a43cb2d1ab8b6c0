"""Audit orchestration: one read-only pass over the options table."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import timezone, tzinfo

from .interfaces import ComponentRegistry, OptionRowStore
from .orphans import OrphanScanner
from .ranking import filter_big, preload_totals, rank_by_size
from .schemas import AuditConfig, AuditCounts, AuditReport, AuditThresholds
from .transients import TransientScanner

logger = logging.getLogger(__name__)


class OptionsAuditor:
    """Runs every analysis against the current store and registry state.

    Nothing is cached between calls to :meth:`run`; each call re-queries the
    store and re-reads the installed component markers.
    """

    def __init__(
        self,
        store: OptionRowStore,
        registry: ComponentRegistry,
        config: AuditConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.store = store
        self.registry = registry
        self.config = config or AuditConfig()
        self.clock = clock
        self.orphan_scanner = OrphanScanner(store)
        self.transient_scanner = TransientScanner(store, tz=tz)

    def run(self) -> AuditReport:
        config = self.config
        logger.debug(
            f"Audit limits: autoload_top={config.autoload_top_limit} "
            f"largest={config.largest_limit} orphans={config.orphan_limit} "
            f"transients={config.transient_limit} "
            f"threshold={config.big_option_threshold_bytes}B"
        )
        now = int(self.clock())

        autoload_top = rank_by_size(
            self.store, preload_only=True, limit=config.autoload_top_limit
        )
        largest_overall = rank_by_size(
            self.store, preload_only=False, limit=config.largest_limit
        )
        autoload_count, autoload_bytes = preload_totals(self.store)
        total_count = self.store.scalar_count(preload_only=False)

        transients = self.transient_scanner.scan(now, config.transient_limit)

        markers = self.registry.list_installed_markers()
        orphans = self.orphan_scanner.scan(markers, config.orphan_limit)

        big_autoload = filter_big(autoload_top, config.big_option_threshold_bytes)

        report = AuditReport(
            thresholds=AuditThresholds(big_option_bytes=config.big_option_threshold_bytes),
            counts=AuditCounts(
                total_options=total_count,
                autoload_options=autoload_count,
                autoload_total_bytes=autoload_bytes,
            ),
            autoload_top=autoload_top,
            largest_overall=largest_overall,
            big_autoload=big_autoload,
            orphans=orphans,
            transients=transients,
        )
        logger.info(
            f"Audited {total_count} options: {len(big_autoload)} big autoload, "
            f"{len(orphans)} likely orphans, "
            f"{transients.expired_transients_count_estimate} expired transients, "
            f"{transients.expired_site_transients_count_estimate} expired site transients"
        )
        return report
