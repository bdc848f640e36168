"""Remuxing a DVD title to Matroska with ffmpeg.

- core: audio handling, ffmpeg command building and execution with progress
"""

from .core import (
    RemuxJob,
    audio_args,
    build_ffmpeg_cmd,
    expected_duration,
    remux_title,
)

__all__ = [
    "RemuxJob",
    "audio_args",
    "build_ffmpeg_cmd",
    "expected_duration",
    "remux_title",
]
