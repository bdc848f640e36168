"""
Provides structured logging and colour-aware console output.

Log lines carry a UTC timestamp, a level and key-value pairs so a session can
be reconstructed from a log file. They go to stderr through ``tqdm.write`` so
an active remux progress bar is not torn apart, and are optionally appended
to a log file. User-facing text (prompts, title lists, errors) goes through
``safe_print`` and ``colorize`` instead.
"""
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from tqdm import tqdm

from dvdoll.errors import InputError
from dvdoll.utils.constants import COLOR_RESET, NO_COLOR

_separator = " | "
_log_file: Optional[TextIO] = None
_use_color = not NO_COLOR


class LogLevel(Enum):
    """Log level enumeration."""
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


_current_level = LogLevel.WARN


def set_log_level(level: LogLevel) -> None:
    """Set the current log level."""
    global _current_level
    _current_level = level


def get_log_level() -> LogLevel:
    """Get the current log level."""
    return _current_level


def set_log_file(path: Optional[Path]) -> None:
    """Append log lines to ``path`` in addition to stderr. ``None`` closes the sink."""
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None
    if path is not None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _log_file = open(path, "a", encoding="utf-8", buffering=1)
        except OSError as e:
            raise InputError(f"Cannot open log file {path}: {e}") from e


def set_color(enabled: bool) -> None:
    global _use_color
    _use_color = enabled


def colorize(text: str, color: str) -> str:
    """Wrap text in an ANSI colour unless colours are disabled."""
    if not _use_color:
        return text
    return f"{color}{text}{COLOR_RESET}"


def _format_kv(data: Dict[str, Any]) -> str:
    """Format key-value pairs for logging."""
    parts = []
    for key, value in data.items():
        if isinstance(value, str):
            # Escape quotes and newlines to keep log entries single-line.
            escaped = value.replace("\r", "\\r").replace("\n", "\\n")
            escaped = escaped.replace('"', '\\"')
            parts.append(f'{key}="{escaped}"')
        elif value is None:
            parts.append(f'{key}=null')
        elif isinstance(value, bool):
            parts.append(f'{key}={str(value).lower()}')
        elif isinstance(value, (list, tuple)):
            parts.append(f'{key}="{" ".join(str(v) for v in value)}"')
        else:
            parts.append(f'{key}={value}')
    return _separator.join(parts)


def _should_log(level: LogLevel) -> bool:
    """Check if a message at the given level should be logged."""
    return level.value >= _current_level.value


def log(event: str, level: LogLevel = LogLevel.INFO, *, console: bool = True, **kwargs) -> None:
    """
    Structured logging function.

    Args:
        event: Event name (e.g., 'probe.title', 'remux.complete')
        level: Log level (TRACE, DEBUG, INFO, WARN, ERROR)
        console: False writes the line to the log file only
        **kwargs: Key-value pairs to log
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    header = f"{timestamp}{_separator}[{level.name}]{_separator}{event}"
    line = f"{header}{_separator}{_format_kv(kwargs)}" if kwargs else header

    # The file sink records everything; the console respects the level.
    if _log_file is not None:
        _log_file.write(line + "\n")

    if console and _should_log(level):
        tqdm.write(line, file=sys.stderr)


def safe_print(*args, **kwargs) -> None:
    """Print user-facing text without breaking an active progress bar."""
    file = kwargs.pop("file", sys.stdout)
    end = kwargs.pop("end", "\n")
    sep = kwargs.pop("sep", " ")
    text = sep.join(str(a) for a in args)
    if end == "\n":
        tqdm.write(text, file=file)
    else:
        file.write(text + end)
        file.flush()
