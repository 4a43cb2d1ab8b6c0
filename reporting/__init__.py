"""
Reporting Module

Configuration, CLI and output for options table audits.

This module provides:
- YAML-based audit configuration
- CLI for running audits, exports and reports
- JSON export payloads
- Markdown and HTML reports with embedded charts
"""

__version__ = "0.1.0"
