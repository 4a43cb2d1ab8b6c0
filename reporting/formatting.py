from __future__ import annotations


def human_bytes(num_bytes: int | float) -> str:
    """Format a byte count as B, KB, MB or GB (1024-based)."""
    value = float(num_bytes)
    if value < 1024:
        return f"{int(value)} B"
    kb = value / 1024
    if kb < 1024:
        return f"{kb:,.1f} KB"
    mb = kb / 1024
    if mb < 1024:
        return f"{mb:,.2f} MB"
    gb = mb / 1024
    return f"{gb:,.2f} GB"
