"""Charts for options audit reports."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from auditor_core.schemas import AuditReport, OptionRow  # noqa: E402

MAX_BARS = 20


def _short_label(key: str, width: int = 40) -> str:
    return key if len(key) <= width else key[: width - 1] + "…"


def _bar_labels(keys: list[str]) -> list[str]:
    """Shortened labels, numbered where truncation makes two of them equal."""
    labels: list[str] = []
    seen: set[str] = set()
    for key in keys:
        label = _short_label(key)
        n = 2
        while label in seen:
            label = f"{_short_label(key)} #{n}"
            n += 1
        seen.add(label)
        labels.append(label)
    return labels


class PlotGenerator:
    def _set_style(self) -> None:
        style = 'seaborn-v0_8-whitegrid' if 'seaborn-v0_8-whitegrid' in plt.style.available else 'ggplot'
        plt.style.use(style)

    def _reset_style(self) -> None:
        plt.style.use('default')

    def _plot_sizes(
        self,
        rows: list[OptionRow],
        threshold: int | None,
        title: str,
        save_path: Path,
    ) -> bool:
        rows = rows[:MAX_BARS]
        if not rows:
            return False

        save_path.parent.mkdir(parents=True, exist_ok=True)
        self._set_style()
        labels = _bar_labels([row.key for row in reversed(rows)])
        sizes_kb = [row.size_bytes / 1024 for row in reversed(rows)]
        colors = [
            '#e74c3c' if threshold is not None and row.size_bytes >= threshold else '#3498db'
            for row in reversed(rows)
        ]

        plt.figure(figsize=(10, max(4, 0.4 * len(rows) + 1)))
        plt.barh(labels, sizes_kb, color=colors)
        if threshold is not None:
            plt.axvline(threshold / 1024, color='#c0392b', linestyle='--', linewidth=1,
                        label=f'Threshold ({threshold / 1024:.0f} KB)')
            plt.legend(loc='lower right')
        plt.xlabel('Size (KB)', fontsize=12)
        plt.title(title, fontsize=14, fontweight='bold')
        plt.grid(True, axis='x', alpha=0.3)
        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close()
        self._reset_style()
        return True

    def plot_autoload_top(self, report: AuditReport, save_path: str | Path) -> bool:
        """Horizontal bar chart of the largest autoloaded options.

        Returns False and writes nothing when there are no autoloaded options.
        """
        return self._plot_sizes(
            report.autoload_top,
            report.thresholds.big_option_bytes,
            'Largest Autoloaded Options',
            Path(save_path),
        )

    def plot_largest_overall(self, report: AuditReport, save_path: str | Path) -> bool:
        return self._plot_sizes(
            report.largest_overall, None, 'Largest Options Overall', Path(save_path)
        )

    def plot_orphan_prefixes(self, report: AuditReport, save_path: str | Path) -> bool:
        """Bytes held by likely orphans, grouped by guessed prefix."""
        save_path = Path(save_path)
        totals: Counter[str] = Counter()
        for orphan in report.orphans:
            totals[orphan.prefix_guess] += orphan.size_bytes
        if not totals:
            return False

        save_path.parent.mkdir(parents=True, exist_ok=True)
        self._set_style()
        top = totals.most_common(MAX_BARS)
        labels = [prefix for prefix, _ in reversed(top)]
        sizes_kb = [size / 1024 for _, size in reversed(top)]

        plt.figure(figsize=(10, max(4, 0.4 * len(top) + 1)))
        plt.barh(labels, sizes_kb, color='#e67e22')
        plt.xlabel('Size (KB)', fontsize=12)
        plt.title('Likely Orphaned Options by Prefix', fontsize=14, fontweight='bold')
        plt.grid(True, axis='x', alpha=0.3)
        plt.tight_layout()
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close()
        self._reset_style()
        return True

    def plot_all(self, report: AuditReport, plots_dir: str | Path) -> list[Path]:
        plots_dir = Path(plots_dir)
        written: list[Path] = []
        for name, plot in (
            ("autoload_top", self.plot_autoload_top),
            ("largest_overall", self.plot_largest_overall),
            ("orphan_prefixes", self.plot_orphan_prefixes),
        ):
            path = plots_dir / f"{name}.png"
            if plot(report, path):
                written.append(path)
            else:
                # Stale chart from an earlier run.
                path.unlink(missing_ok=True)
        return written
