import base64
import html
from datetime import datetime
from pathlib import Path

from auditor_core.schemas import AuditReport, OptionRow, TransientPair

from reporting.formatting import human_bytes

EMPTY_AUTOLOAD = "No autoloaded options found. Unusual, unless the site has a very custom setup."
EMPTY_LARGEST = "No options found. The options table is empty."
EMPTY_ORPHANS = (
    "No likely orphans detected in this sample. Either the table is tidy, "
    "or the option names are too generic to guess ownership."
)
EMPTY_TRANSIENTS = "No expired transients found in the sample."
ORPHAN_NOTE = "Heuristic. Expect false positives. Only delete options you can attribute with confidence."
READ_ONLY_NOTE = "Read only audit. If you delete anything, do it on staging, with backups, in small batches."


class ReportGenerator:
    def __init__(self, report: AuditReport, site_url: str = "", plots_dir: Path | None = None):
        self.report = report
        self.site_url = site_url
        self.plots_dir = Path(plots_dir) if plots_dir is not None else None
        self.summary = self._calculate_summary()

    def _calculate_summary(self) -> list[tuple[str, str]]:
        report = self.report
        counts = report.counts
        trans = report.transients
        return [
            ("Total options", str(counts.total_options)),
            (
                "Autoload options",
                f"{counts.autoload_options} (total size {human_bytes(counts.autoload_total_bytes)})",
            ),
            (
                "Big autoload offenders (sample)",
                f"{len(report.big_autoload)} (threshold {human_bytes(report.thresholds.big_option_bytes)})",
            ),
            ("Likely orphan options (sample)", str(len(report.orphans))),
            (
                "Expired transients (estimate)",
                f"{trans.expired_transients_count_estimate} "
                f"(expired site transients: {trans.expired_site_transients_count_estimate})",
            ),
        ]

    # Markdown

    @staticmethod
    def _md_code(value: str) -> str:
        if not value:
            return ""
        cell = value.replace("`", "").replace("|", r"\|")
        return f"`{cell}`"

    def _md_option_table(self, rows: list[OptionRow], empty: str) -> str:
        if not rows:
            return empty
        lines = ["| Option | Size | Bytes | Autoload |", "|--------|------|-------|----------|"]
        for row in rows:
            lines.append(
                f"| {self._md_code(row.key)} | {human_bytes(row.size_bytes)} | "
                f"{row.size_bytes} | {self._md_code(row.preload_flag)} |"
            )
        return "\n".join(lines)

    def _md_transient_table(self, title: str, pairs: list[TransientPair]) -> str:
        if not pairs:
            return ""
        lines = [
            f"### {title}",
            "",
            "| Timeout option | Value option | Expired at | Size |",
            "|----------------|--------------|------------|------|",
        ]
        for pair in pairs:
            lines.append(
                f"| {self._md_code(pair.timeout_key)} | {self._md_code(pair.value_key)} | "
                f"{pair.timeout_human} | {human_bytes(pair.size_bytes)} |"
            )
        return "\n".join(lines) + "\n"

    def generate_markdown(self, output_path: Path) -> None:
        output_path = Path(output_path)
        report = self.report
        date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        summary_rows = "\n".join(f"| {label} | {value} |" for label, value in self.summary)

        if report.orphans:
            orphan_lines = [
                "| Option | Prefix guess | Size | Autoload |",
                "|--------|--------------|------|----------|",
            ]
            for orphan in report.orphans:
                orphan_lines.append(
                    f"| {self._md_code(orphan.key)} | {self._md_code(orphan.prefix_guess)} | "
                    f"{human_bytes(orphan.size_bytes)} | {self._md_code(orphan.preload_flag)} |"
                )
            orphan_table = "\n".join(orphan_lines) + f"\n\n_{ORPHAN_NOTE}_"
        else:
            orphan_table = EMPTY_ORPHANS

        trans = report.transients
        transient_tables = (
            self._md_transient_table("Expired transients (sample)", trans.expired_transients_sample)
            + self._md_transient_table(
                "Expired site transients (sample)", trans.expired_site_transients_sample
            )
        ) or EMPTY_TRANSIENTS

        md_content = f"""# Options Table Audit

- **Site:** {self.site_url or "N/A"}
- **Generated:** {date}

## Summary
| Metric | Value |
|--------|-------|
{summary_rows}

## Top autoloaded options by size
Autoloaded options are loaded on every request, front end included.

{self._md_option_table(report.autoload_top, EMPTY_AUTOLOAD)}

## Largest options overall
Big regardless of autoload. Often cached blobs or page builder data.

{self._md_option_table(report.largest_overall, EMPTY_LARGEST)}

## Likely orphaned plugin options
Options whose prefix matches no installed plugin.

{orphan_table}

## Transient debris
- **Expired transients estimate:** {trans.expired_transients_count_estimate}
- **Expired site transients estimate:** {trans.expired_site_transients_count_estimate}

{transient_tables}

---
_{READ_ONLY_NOTE}_
"""
        output_path.write_text(md_content, encoding="utf-8")

    # HTML

    def _html_option_table(self, rows: list[OptionRow], empty: str) -> str:
        if not rows:
            return f"<p>{html.escape(empty)}</p>"
        body = "".join(
            f"<tr><td><code>{html.escape(row.key)}</code></td>"
            f"<td><strong>{human_bytes(row.size_bytes)}</strong> "
            f"<span class=\"muted\">({row.size_bytes} bytes)</span></td>"
            f"<td><code>{html.escape(row.preload_flag)}</code></td></tr>"
            for row in rows
        )
        return (
            "<table><thead><tr><th>Option</th><th>Size</th><th>Autoload</th></tr></thead>"
            f"<tbody>{body}</tbody></table>"
        )

    def _html_transient_table(self, title: str, pairs: list[TransientPair]) -> str:
        if not pairs:
            return ""
        body = "".join(
            f"<tr><td><code>{html.escape(pair.timeout_key)}</code></td>"
            f"<td><code>{html.escape(pair.value_key)}</code></td>"
            f"<td>{html.escape(pair.timeout_human)}</td>"
            f"<td>{human_bytes(pair.size_bytes)}</td></tr>"
            for pair in pairs
        )
        return (
            f"<h3>{html.escape(title)}</h3>"
            "<table><thead><tr><th>Timeout option</th><th>Value option</th>"
            "<th>Expired at</th><th>Size</th></tr></thead>"
            f"<tbody>{body}</tbody></table>"
        )

    def _embedded_plots(self) -> list[str]:
        embedded_images = []
        if self.plots_dir is not None and self.plots_dir.exists():
            for plot_file in sorted(self.plots_dir.glob("*.png")):
                with open(plot_file, "rb") as f:
                    encoded = base64.b64encode(f.read()).decode("utf-8")
                title = plot_file.stem.replace("_", " ").title()
                embedded_images.append(
                    f'<div class="plot-card"><h3>{title}</h3>'
                    f'<img src="data:image/png;base64,{encoded}" alt="{plot_file.name}"></div>'
                )
        return embedded_images

    def generate_html(self, output_path: Path) -> None:
        output_path = Path(output_path)
        report = self.report
        date = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        site = html.escape(self.site_url or "N/A")

        summary_rows = "".join(
            f"<tr><th>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>"
            for label, value in self.summary
        )

        if report.orphans:
            orphan_body = "".join(
                f"<tr><td><code>{html.escape(o.key)}</code></td>"
                f"<td><code>{html.escape(o.prefix_guess)}</code></td>"
                f"<td><strong>{human_bytes(o.size_bytes)}</strong></td>"
                f"<td><code>{html.escape(o.preload_flag)}</code></td></tr>"
                for o in report.orphans
            )
            orphan_html = (
                "<table><thead><tr><th>Option</th><th>Prefix guess</th><th>Size</th>"
                f"<th>Autoload</th></tr></thead><tbody>{orphan_body}</tbody></table>"
                f'<p class="muted">{html.escape(ORPHAN_NOTE)}</p>'
            )
        else:
            orphan_html = f"<p>{html.escape(EMPTY_ORPHANS)}</p>"

        trans = report.transients
        transient_html = (
            self._html_transient_table("Expired transients (sample)", trans.expired_transients_sample)
            + self._html_transient_table(
                "Expired site transients (sample)", trans.expired_site_transients_sample
            )
        ) or f"<p>{html.escape(EMPTY_TRANSIENTS)}</p>"

        embedded_images = self._embedded_plots()

        html_content = f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Options Table Audit - {site}</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 1100px; margin: 0 auto; padding: 20px; background-color: #f4f7f6; }}
        h1, h2, h3 {{ color: #2c3e50; }}
        section {{ background: white; padding: 25px; margin-bottom: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.05); }}
        table {{ border-collapse: collapse; width: 100%; margin-bottom: 20px; }}
        th, td {{ border: 1px solid #eee; padding: 10px; text-align: left; }}
        th {{ background-color: #f8f9fa; color: #2c3e50; font-weight: 600; }}
        tr:nth-child(even) {{ background-color: #fafafa; }}
        code {{ word-break: break-all; }}
        .muted {{ opacity: 0.75; font-size: 12px; }}
        .plot-card {{ margin-bottom: 30px; text-align: center; }}
        img {{ max-width: 100%; height: auto; border: 1px solid #ddd; border-radius: 5px; }}
    </style>
</head>
<body>
    <header style="margin-bottom: 40px; text-align: center;">
        <h1>Options Table Audit</h1>
        <p style="color: #7f8c8d;">{site} &middot; Generated on {date}</p>
    </header>

    <section>
        <h2>Summary</h2>
        <table><tbody>{summary_rows}</tbody></table>
    </section>

    <section>
        <h2>Top autoloaded options by size</h2>
        <p>Autoloaded options are loaded on every request, front end included.</p>
        {self._html_option_table(report.autoload_top, EMPTY_AUTOLOAD)}
    </section>

    <section>
        <h2>Largest options overall</h2>
        <p>Big regardless of autoload. Often cached blobs or page builder data.</p>
        {self._html_option_table(report.largest_overall, EMPTY_LARGEST)}
    </section>

    <section>
        <h2>Likely orphaned plugin options</h2>
        <p>Options whose prefix matches no installed plugin.</p>
        {orphan_html}
    </section>

    <section>
        <h2>Transient debris</h2>
        <p><strong>Expired transients estimate:</strong> {trans.expired_transients_count_estimate}</p>
        <p><strong>Expired site transients estimate:</strong> {trans.expired_site_transients_count_estimate}</p>
        {transient_html}
    </section>

    <section>
        <h2>Visualizations</h2>
        {"".join(embedded_images) if embedded_images else "<p>No plots available.</p>"}
    </section>

    <p class="muted">{html.escape(READ_ONLY_NOTE)}</p>
</body>
</html>
"""
        output_path.write_text(html_content, encoding="utf-8")
