"""JSON export of an audit report."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from auditor_core.schemas import AuditReport

EXPORT_FILENAME = "wp-options-audit.json"


def build_export_payload(
    report: AuditReport, site_url: str = "", now: datetime | None = None
) -> dict[str, Any]:
    """Wrap a report with generation time and site identity."""
    generated_at = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return {
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "site_url": site_url,
        "audit": report.to_dict(),
    }


def write_export(payload: dict[str, Any], output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return output_path
