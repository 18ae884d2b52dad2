from __future__ import annotations

from datetime import datetime

UNITS = ["B", "KB", "MB", "GB", "TB", "PB"]


def format_bytes(size: int | None) -> str:
    if size is None:
        return ""
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(UNITS) - 1:
        value /= 1024.0
        unit += 1
    if unit == 0:
        return f"{int(value)} {UNITS[unit]}"
    return f"{value:.1f} {UNITS[unit]}"


def format_timestamp(ts: float) -> str:
    if ts <= 0:
        return ""
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")
