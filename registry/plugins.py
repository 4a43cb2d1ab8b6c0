"""Installed plugin discovery and component marker building."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from auditor_core.orphans import sanitize_key

logger = logging.getLogger(__name__)

# Big plugins whose option prefixes are obvious even when their folder is renamed.
KNOWN_MARKERS = ("woocommerce", "elementor", "yoast")

HEADER_READ_BYTES = 8192

_HEADER_FIELDS = {
    "name": "Plugin Name",
    "text_domain": "Text Domain",
}


@dataclass(frozen=True)
class PluginInfo:
    path: str
    name: str = ""
    text_domain: str = ""


def plugin_markers(plugin: PluginInfo) -> set[str]:
    """Markers for one plugin: folder, main file base name, text domain, display name."""
    path = PurePosixPath(plugin.path.replace("\\", "/"))
    raw = [str(path.parent), path.name[:-4] if path.name.endswith(".php") else path.name]
    raw.append(plugin.text_domain)
    raw.append(plugin.name)

    markers: set[str] = set()
    for value in raw:
        if not value or value == ".":
            continue
        marker = sanitize_key(value)
        if marker:
            markers.add(marker)
    return markers


def build_markers(
    plugins: Iterable[PluginInfo], extra: Iterable[str] = KNOWN_MARKERS
) -> frozenset[str]:
    markers: set[str] = set()
    for plugin in plugins:
        markers |= plugin_markers(plugin)
    for marker in extra:
        cleaned = sanitize_key(marker)
        if cleaned:
            markers.add(cleaned)
    return frozenset(markers)


def read_plugin_headers(path: str | Path) -> dict[str, str]:
    """Parse the header comment fields the registry cares about."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        head = f.read(HEADER_READ_BYTES)

    headers: dict[str, str] = {}
    for field, label in _HEADER_FIELDS.items():
        match = re.search(
            rf"^[ \t/*#@]*{re.escape(label)}:(.*)$", head, re.MULTILINE | re.IGNORECASE
        )
        if match:
            value = re.sub(r"\s*(?:\*/|\?>).*$", "", match.group(1)).strip()
            if value:
                headers[field] = value
    return headers


class StaticRegistry:
    """Fixed marker set, normalized on the way in."""

    def __init__(self, markers: Iterable[str]) -> None:
        self._markers = frozenset(m for m in (sanitize_key(x) for x in markers) if m)

    def list_installed_markers(self) -> frozenset[str]:
        return self._markers


class PluginDirectoryRegistry:
    """Reads installed plugins from a plugins directory.

    A plugin is a ``*.php`` file directly in the directory or one level down
    whose header declares a ``Plugin Name``.
    """

    def __init__(self, plugins_dir: str | Path, extra: Iterable[str] = KNOWN_MARKERS) -> None:
        self.plugins_dir = Path(plugins_dir)
        self.extra = tuple(extra)

    def discover(self) -> list[PluginInfo]:
        if not self.plugins_dir.is_dir():
            raise FileNotFoundError(f"Plugins directory not found: {self.plugins_dir}")

        files = sorted(self.plugins_dir.glob("*.php")) + sorted(self.plugins_dir.glob("*/*.php"))
        plugins: list[PluginInfo] = []
        for php_file in files:
            try:
                headers = read_plugin_headers(php_file)
            except OSError as e:
                logger.warning(f"Skipping unreadable plugin file {php_file}: {e}")
                continue
            if "name" not in headers:
                continue
            plugins.append(
                PluginInfo(
                    path=php_file.relative_to(self.plugins_dir).as_posix(),
                    name=headers["name"],
                    text_domain=headers.get("text_domain", ""),
                )
            )
        return plugins

    def list_installed_markers(self) -> frozenset[str]:
        return build_markers(self.discover(), extra=self.extra)


class ManifestRegistry:
    """Reads installed plugins from a YAML list of ``{path, name, text_domain}``."""

    def __init__(self, manifest_path: str | Path, extra: Iterable[str] = KNOWN_MARKERS) -> None:
        self.manifest_path = Path(manifest_path)
        self.extra = tuple(extra)

    def load(self) -> list[PluginInfo]:
        if not self.manifest_path.exists():
            raise FileNotFoundError(f"Plugin manifest not found: {self.manifest_path}")

        with open(self.manifest_path, "r", encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)

        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get("plugins", [])
        if not isinstance(data, list):
            raise ValueError(f"Plugin manifest must be a list: {self.manifest_path}")

        plugins: list[PluginInfo] = []
        for entry in data:
            if isinstance(entry, str):
                plugins.append(PluginInfo(path=entry))
                continue
            if not isinstance(entry, dict) or not entry.get("path"):
                raise ValueError(f"Invalid plugin entry in {self.manifest_path}: {entry!r}")
            plugins.append(
                PluginInfo(
                    path=str(entry["path"]),
                    name=str(entry.get("name") or ""),
                    text_domain=str(entry.get("text_domain") or ""),
                )
            )
        return plugins

    def list_installed_markers(self) -> frozenset[str]:
        return build_markers(self.load(), extra=self.extra)
