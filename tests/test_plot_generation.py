from pathlib import Path

import pytest

from auditor_core.schemas import AuditCounts, AuditReport, AuditThresholds, OptionRow, OrphanCandidate
from reporting.plotting import PlotGenerator, _bar_labels


@pytest.fixture
def sample_report() -> AuditReport:
    rows = [
        OptionRow(key=f"plugin{i}_blob_with_a_rather_long_option_name", size_bytes=i * 40000, preload_flag="yes")
        for i in range(1, 25)
    ]
    rows.sort(key=lambda r: r.size_bytes, reverse=True)
    return AuditReport(
        thresholds=AuditThresholds(big_option_bytes=262144),
        counts=AuditCounts(total_options=24, autoload_options=24),
        autoload_top=rows,
        largest_overall=rows[:5],
        big_autoload=[r for r in rows if r.size_bytes >= 262144],
        orphans=[
            OrphanCandidate(key="ghost_a", prefix_guess="ghost", size_bytes=5000, preload_flag="yes"),
            OrphanCandidate(key="ghost_b", prefix_guess="ghost", size_bytes=3000, preload_flag="no"),
            OrphanCandidate(key="relic_x", prefix_guess="relic", size_bytes=1000, preload_flag="no"),
        ],
    )


def test_plot_autoload_top(sample_report, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "autoload.png"
    assert pg.plot_autoload_top(sample_report, save_path) is True
    assert save_path.exists()


def test_plot_largest_overall(sample_report, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "largest.png"
    assert pg.plot_largest_overall(sample_report, save_path) is True
    assert save_path.exists()


def test_plot_orphan_prefixes(sample_report, tmp_path):
    pg = PlotGenerator()
    save_path = tmp_path / "orphans.png"
    assert pg.plot_orphan_prefixes(sample_report, save_path) is True
    assert save_path.exists()


def test_plot_all(sample_report, tmp_path):
    written = PlotGenerator().plot_all(sample_report, tmp_path / "plots")

    assert [p.name for p in written] == ["autoload_top.png", "largest_overall.png", "orphan_prefixes.png"]
    assert all(p.exists() for p in written)


def test_empty_report_writes_nothing(tmp_path):
    report = AuditReport(thresholds=AuditThresholds(big_option_bytes=1024), counts=AuditCounts())

    written = PlotGenerator().plot_all(report, tmp_path / "plots")

    assert written == []
    assert not (tmp_path / "plots").exists()


def test_truncated_labels_stay_distinct():
    shared = "woocommerce_analytics_report_cache_segment_"
    keys = [shared + "one", shared + "two", "short_key"]

    labels = _bar_labels(keys)

    assert len(set(labels)) == 3
    assert labels[2] == "short_key"
    assert all(len(label) <= 43 for label in labels)


def test_plot_all_removes_chart_with_no_data(sample_report, tmp_path):
    plots_dir = tmp_path / "plots"
    PlotGenerator().plot_all(sample_report, plots_dir)
    tidy = sample_report.model_copy(update={"orphans": []})

    written = PlotGenerator().plot_all(tidy, plots_dir)

    assert [p.name for p in written] == ["autoload_top.png", "largest_overall.png"]
    assert not (plots_dir / "orphan_prefixes.png").exists()
