import re
from typing import Optional

from dvdoll.utils.constants import END_KEYWORDS, START_KEYWORDS, ZERO_TIME

_LEADING_INT_REGEX = re.compile(r"^\s*([+-]?\d+)")


def normalize_start_time(value: str) -> str:
    """Map empty, ``0``, ``first`` and ``start`` to the beginning of the title."""
    if value.strip().lower() in START_KEYWORDS:
        return ZERO_TIME
    return value


def normalize_end_time(value: str) -> str:
    """Map empty, ``last`` and ``end`` to no end time."""
    if value.strip().lower() in END_KEYWORDS:
        return ""
    return value


def is_time_selection(chapter_start: str) -> bool:
    """A first chapter of ``0`` or anything containing ``:`` selects a time range."""
    return chapter_start == "0" or ":" in chapter_start


def parse_leading_int(value: str) -> int:
    """Parse the integer at the start of ``value``; 0 if there is none."""
    m = _LEADING_INT_REGEX.match(value)
    if not m:
        return 0
    return int(m.group(1))


def parse_timestamp(value: str) -> Optional[float]:
    """
    Convert ``[[HH:]MM:]SS[.fff]`` to seconds.

    Returns None for ``N/A``, empty strings and anything else ffmpeg would
    have to interpret itself (e.g. ``90s`` or ``1500ms``).
    """
    value = value.strip()
    if not value or value.upper() == "N/A":
        return None
    negative = value.startswith("-")
    if negative:
        value = value[1:]
    seconds = 0.0
    try:
        for part in value.split(":"):
            seconds = seconds * 60 + float(part)
    except ValueError:
        return None
    return -seconds if negative else seconds


def format_seconds(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    total = int(seconds)
    return f"{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"
