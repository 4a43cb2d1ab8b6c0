"""
Registry Module

Installed component discovery for orphan detection.

This module provides:
- Plugin discovery from a plugins directory or a YAML manifest
- Normalized component markers built from folder, file, text domain and name
- A static registry for scripted audits
"""

__version__ = "0.1.0"

from .plugins import (
    KNOWN_MARKERS,
    ManifestRegistry,
    PluginDirectoryRegistry,
    PluginInfo,
    StaticRegistry,
    build_markers,
)

__all__ = [
    "KNOWN_MARKERS",
    "ManifestRegistry",
    "PluginDirectoryRegistry",
    "PluginInfo",
    "StaticRegistry",
    "build_markers",
]
