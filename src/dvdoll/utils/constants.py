"""
Constants and configuration settings for DVD remuxing.

This module contains the console colours, prompt defaults, the fixed ffprobe
and ffmpeg arguments used to open a DVD title, and the environment based
configuration. A ``.env`` file in the working directory is loaded first so
the executables and logging can be configured without flags.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


APP_NAME = "DVDoll"
HEADER = f"{APP_NAME} - FFmpeg DVD remuxer"

# External tools
FFMPEG_BIN = os.getenv("DVDOLL_FFMPEG", "ffmpeg")
FFPROBE_BIN = os.getenv("DVDOLL_FFPROBE", "ffprobe")

# Run settings
DEBUG = _env_flag("DVDOLL_DEBUG")
LOG_FILE = os.getenv("DVDOLL_LOG_FILE")
NO_COLOR = "NO_COLOR" in os.environ

# ANSI colours
COLOR_RED = "\x1b[91m"
COLOR_YELLOW = "\x1b[93m"
COLOR_CYAN = "\x1b[96m"
COLOR_GRAY = "\x1b[90m"
COLOR_RESET = "\x1b[0m"
CLEAR_SCREEN = "\x1b[2J\x1b[H"

# DVD layout
MAX_TITLES = 99  # DVD title numbers range from 1-99

# Output settings
DEFAULT_OUTPUT_NAME = "output"
OUTPUT_EXTENSION = ".mkv"
FLAC_COMPRESSION_LEVEL = "8"

# Arguments that open a single title through ffmpeg's dvdvideo demuxer
DVDVIDEO_INPUT_ARGS = ["-f", "dvdvideo", "-preindex", "True"]
PROBE_BASE_ARGS = ["-v", "error", "-hide_banner"]
PLAIN_VALUE_FORMAT = "default=noprint_wrappers=1:nokey=1"

# Start/end keywords accepted at the time prompts
START_KEYWORDS = {"", "0", "first", "start"}
END_KEYWORDS = {"", "last", "end"}
ZERO_TIME = "00:00:00"

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

# Key codes read by the continue prompt
KEY_ESC = "\x1b"
