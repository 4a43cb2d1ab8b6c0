"""CLI interface for auditing an options table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import typer

from auditor_core.aggregator import OptionsAuditor
from auditor_core.interfaces import ComponentRegistry
from auditor_core.schemas import AuditReport
from registry.plugins import KNOWN_MARKERS, ManifestRegistry, PluginDirectoryRegistry, StaticRegistry
from store.repository import OptionStore

from reporting.config import AuditRunConfig, load_config
from reporting.export import EXPORT_FILENAME, build_export_payload, write_export
from reporting.formatting import human_bytes
from reporting.plotting import PlotGenerator
from reporting.report import ReportGenerator

app = typer.Typer(help="Read-only options table auditor")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to audit YAML config")
DatabaseOption = typer.Option(None, "--database", "-d", help="SQLite database containing the options table")
PrefixOption = typer.Option(None, "--table-prefix", help="Table prefix (default wp_)")
PluginsDirOption = typer.Option(None, "--plugins-dir", help="Plugins directory to read installed plugins from")
ManifestOption = typer.Option(None, "--plugins-manifest", help="YAML manifest of installed plugins")
ThresholdOption = typer.Option(None, "--threshold", help="Big option threshold in bytes (min 1024)")
SiteUrlOption = typer.Option(None, "--site-url", help="Site URL recorded in exports and reports")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> typer.Exit:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _resolve_config(config_path: Optional[str], **overrides: Any) -> AuditRunConfig:
    try:
        config = load_config(config_path) if config_path else AuditRunConfig()
        updates = {key: value for key, value in overrides.items() if value is not None}
        if updates:
            config = AuditRunConfig.from_dict({**config.to_dict(), **updates})
    except FileNotFoundError as e:
        raise _fail(str(e))
    except ValueError as e:
        raise _fail(f"Invalid config: {e}")
    if not config.database:
        raise _fail("No database given. Use --database or set 'database' in the config file.")
    return config


def _build_registry(config: AuditRunConfig) -> ComponentRegistry:
    if config.plugins_dir:
        return PluginDirectoryRegistry(config.plugins_dir)
    if config.plugins_manifest:
        return ManifestRegistry(config.plugins_manifest)
    typer.secho(
        "⚠️  No plugins directory or manifest given; orphan detection only knows "
        f"{', '.join(KNOWN_MARKERS)}",
        fg=typer.colors.YELLOW,
        err=True,
    )
    return StaticRegistry(KNOWN_MARKERS)


def _run_audit(config: AuditRunConfig) -> AuditReport:
    try:
        store = OptionStore(config.database or "", table_prefix=config.table_prefix)
        auditor = OptionsAuditor(
            store,
            _build_registry(config),
            config.audit_config(),
            tz=config.display_tz,
        )
        return auditor.run()
    except FileNotFoundError as e:
        raise _fail(str(e))
    except ValueError as e:
        raise _fail(str(e))


def _print_summary(report: AuditReport) -> None:
    counts = report.counts
    trans = report.transients
    typer.secho("\n📋 Options table summary:\n", fg=typer.colors.BLUE)
    typer.echo(f"   Total options:          {counts.total_options}")
    typer.echo(
        f"   Autoload options:       {counts.autoload_options} "
        f"({human_bytes(counts.autoload_total_bytes)})"
    )
    typer.echo(
        f"   Big autoload offenders: {len(report.big_autoload)} "
        f"(threshold {human_bytes(report.thresholds.big_option_bytes)})"
    )
    typer.echo(f"   Likely orphans:         {len(report.orphans)}")
    typer.echo(
        f"   Expired transients:     {trans.expired_transients_count_estimate} "
        f"(site: {trans.expired_site_transients_count_estimate})"
    )

    if report.big_autoload:
        typer.secho("\n⚠️  Big autoloaded options:", fg=typer.colors.YELLOW)
        for row in report.big_autoload:
            typer.echo(f"   {row.key}: {human_bytes(row.size_bytes)}")


@app.command()
def run(
    config_path: Optional[str] = ConfigOption,
    database: Optional[str] = DatabaseOption,
    table_prefix: Optional[str] = PrefixOption,
    plugins_dir: Optional[str] = PluginsDirOption,
    plugins_manifest: Optional[str] = ManifestOption,
    threshold: Optional[int] = ThresholdOption,
) -> None:
    """Audit the options table and print a summary."""
    config = _resolve_config(
        config_path,
        database=database,
        table_prefix=table_prefix,
        plugins_dir=plugins_dir,
        plugins_manifest=plugins_manifest,
        big_option_threshold_bytes=threshold,
    )
    report = _run_audit(config)
    _print_summary(report)


@app.command()
def export(
    config_path: Optional[str] = ConfigOption,
    database: Optional[str] = DatabaseOption,
    table_prefix: Optional[str] = PrefixOption,
    plugins_dir: Optional[str] = PluginsDirOption,
    plugins_manifest: Optional[str] = ManifestOption,
    threshold: Optional[int] = ThresholdOption,
    site_url: Optional[str] = SiteUrlOption,
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output JSON path"),
) -> None:
    """Export the audit as JSON."""
    config = _resolve_config(
        config_path,
        database=database,
        table_prefix=table_prefix,
        plugins_dir=plugins_dir,
        plugins_manifest=plugins_manifest,
        big_option_threshold_bytes=threshold,
        site_url=site_url,
    )
    report = _run_audit(config)
    payload = build_export_payload(report, site_url=config.site_url)
    output_path = Path(output) if output else Path(config.output_dir) / EXPORT_FILENAME
    write_export(payload, output_path)

    typer.secho("✅ Audit exported!", fg=typer.colors.GREEN)
    typer.echo(f"   JSON: {output_path}")


@app.command()
def report(
    config_path: Optional[str] = ConfigOption,
    database: Optional[str] = DatabaseOption,
    table_prefix: Optional[str] = PrefixOption,
    plugins_dir: Optional[str] = PluginsDirOption,
    plugins_manifest: Optional[str] = ManifestOption,
    threshold: Optional[int] = ThresholdOption,
    site_url: Optional[str] = SiteUrlOption,
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Directory for report files"),
    plots: bool = typer.Option(True, "--plots/--no-plots", help="Render charts into the HTML report"),
) -> None:
    """Generate Markdown and HTML reports."""
    config = _resolve_config(
        config_path,
        database=database,
        table_prefix=table_prefix,
        plugins_dir=plugins_dir,
        plugins_manifest=plugins_manifest,
        big_option_threshold_bytes=threshold,
        site_url=site_url,
        output_dir=output_dir,
    )
    audit = _run_audit(config)

    out_dir = Path(config.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    plots_dir = out_dir / "plots"
    if plots:
        PlotGenerator().plot_all(audit, plots_dir)

    generator = ReportGenerator(audit, site_url=config.site_url, plots_dir=plots_dir if plots else None)
    md_path = out_dir / "report.md"
    html_path = out_dir / "report.html"
    generator.generate_markdown(md_path)
    generator.generate_html(html_path)

    typer.secho("✅ Reports generated successfully!", fg=typer.colors.GREEN)
    typer.echo(f"   Markdown: {md_path}")
    typer.echo(f"   HTML:     {html_path}")


@app.command()
def markers(
    plugins_dir: Optional[str] = PluginsDirOption,
    plugins_manifest: Optional[str] = ManifestOption,
) -> None:
    """List the normalized markers of installed plugins."""
    registry: ComponentRegistry
    try:
        if plugins_dir:
            registry = PluginDirectoryRegistry(plugins_dir)
        elif plugins_manifest:
            registry = ManifestRegistry(plugins_manifest)
        else:
            raise _fail("Give --plugins-dir or --plugins-manifest")
        found = registry.list_installed_markers()
    except FileNotFoundError as e:
        raise _fail(str(e))
    except ValueError as e:
        raise _fail(str(e))

    typer.secho(f"\n🔌 {len(found)} marker(s):\n", fg=typer.colors.BLUE)
    for marker in sorted(found):
        typer.echo(f"  {marker}")


if __name__ == "__main__":
    app()
