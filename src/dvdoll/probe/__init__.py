"""ffprobe queries for DVD titles: durations, chapter counts and audio codecs."""

from .core import (
    TitleInfo,
    detect_audio_codec,
    get_chapter_count,
    get_title_duration,
    list_titles,
    print_title_list,
)

__all__ = [
    "TitleInfo",
    "detect_audio_codec",
    "get_chapter_count",
    "get_title_duration",
    "list_titles",
    "print_title_list",
]
