"""Audit run configuration with YAML support."""

from __future__ import annotations

from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import ValidationError, field_validator

from auditor_core.schemas import AuditConfig


class AuditRunConfig(AuditConfig):
    """Audit tunables plus where to find the data and where to write output."""

    # Store
    database: str | None = None
    table_prefix: str = "wp_"

    # Installed plugins (directory wins over manifest when both are set)
    plugins_dir: str | None = None
    plugins_manifest: str | None = None

    # Output
    site_url: str = ""
    display_timezone: str = "UTC"
    output_dir: str = "audit-output"

    @field_validator("display_timezone")
    @classmethod
    def known_timezone(cls, value: str) -> str:
        if value.upper() == "UTC":
            return "UTC"
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def display_tz(self) -> tzinfo:
        if self.display_timezone == "UTC":
            return timezone.utc
        return ZoneInfo(self.display_timezone)

    def audit_config(self) -> AuditConfig:
        """The subset of settings the audit engine itself consumes."""
        return AuditConfig(
            autoload_top_limit=self.autoload_top_limit,
            largest_limit=self.largest_limit,
            orphan_limit=self.orphan_limit,
            transient_limit=self.transient_limit,
            big_option_threshold_bytes=self.big_option_threshold_bytes,
        )


def load_config(yaml_path: str | Path) -> AuditRunConfig:
    """Load audit configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        AuditRunConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or has bad field values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not data or not isinstance(data, dict):
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

    try:
        return AuditRunConfig.from_dict(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: AuditRunConfig, yaml_path: str | Path) -> None:
    """Save audit configuration to a YAML file.

    Args:
        config: AuditRunConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
