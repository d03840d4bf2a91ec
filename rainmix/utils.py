"""
rainmix Utilities - Shared formatting helpers.

Invariants:
- Sizes use binary units like `ls -lh` (K = 1024 bytes), rounded up
- Unknown durations render as a fixed placeholder
"""

import math


SIZE_UNITS = ("K", "M", "G", "T")
UNKNOWN_DURATION = "--:--:--"


def format_size(num_bytes: int) -> str:
    """
    Format a byte count the way `ls -lh` does.

    Values below 10 keep one decimal; every value is rounded up, and a
    value that rounds up to 1024 moves to the next unit.

    Examples:
        512 -> "512", 1025 -> "1.1K", 1536 -> "1.5K", 31_457_280 -> "30M"
    """
    if num_bytes < 1024:
        return str(num_bytes)
    size = float(num_bytes)
    for unit in SIZE_UNITS:
        size /= 1024
        if size < 10:
            tenths = math.ceil(size * 10)
            return f"{tenths / 10:.1f}{unit}" if tenths < 100 else f"10{unit}"
        if math.ceil(size) < 1024 or unit == SIZE_UNITS[-1]:
            break
    return f"{math.ceil(size)}{unit}"


def format_duration(seconds: float | None) -> str:
    """Format seconds as H:MM:SS (truncated)."""
    if seconds is None or seconds < 0:
        return UNKNOWN_DURATION
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
