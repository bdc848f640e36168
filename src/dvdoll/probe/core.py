"""
Functions to query DVD titles with ffprobe.

Every query opens a single title through ffmpeg's dvdvideo demuxer and asks
for one plain value (duration, chapter indexes or the first audio codec), so
the output can be read without a JSON parser.
"""
from dataclasses import dataclass
from typing import List, Optional

from dvdoll.errors import ProbeError
from dvdoll.utils import constants, logger, system_util, time_util
from dvdoll.utils.constants import COLOR_YELLOW, ZERO_TIME
from dvdoll.utils.logger import LogLevel, colorize, safe_print


@dataclass
class TitleInfo:
    number: int
    duration: str
    chapters: int

    @property
    def seconds(self) -> Optional[float]:
        return time_util.parse_timestamp(self.duration)


def _probe_cmd(input_path: str, title: int, *query: str) -> List[str]:
    return [
        constants.FFPROBE_BIN,
        *constants.PROBE_BASE_ARGS,
        *constants.DVDVIDEO_INPUT_ARGS,
        "-title", str(title),
        *query,
        input_path,
    ]


def _run_probe(cmd: List[str], title: int) -> str:
    logger.log("probe.command", LogLevel.DEBUG, title=title, cmd=cmd)
    code, out, err = system_util.run_cmd(cmd)
    if code != 0:
        logger.log("probe.failed", LogLevel.DEBUG, title=title, exit_code=code, error=err.strip()[:200])
        raise ProbeError(f"ffprobe exited with code {code} for title {title}")
    return out


def get_title_duration(input_path: str, title: int) -> str:
    """Return the sexagesimal duration of a title as printed by ffprobe."""
    cmd = _probe_cmd(input_path, title,
                     "-show_entries", "format=duration",
                     "-sexagesimal",
                     "-of", constants.PLAIN_VALUE_FORMAT)
    return _run_probe(cmd, title).strip()


def get_chapter_count(input_path: str, title: int) -> int:
    """Return the number of chapters in a title."""
    cmd = _probe_cmd(input_path, title,
                     "-show_chapters",
                     "-show_entries", "chapter=index",
                     "-of", "csv=p=0")
    out = _run_probe(cmd, title)
    return sum(1 for line in out.strip().splitlines() if line.strip())


def list_titles(input_path: str, max_titles: int = constants.MAX_TITLES) -> List[TitleInfo]:
    """
    Probe titles 1..max_titles in order.

    The disc's title count is not queried up front: probing stops at the first
    title that fails or reports no duration.
    """
    titles = []
    for number in range(1, max_titles + 1):
        try:
            duration = get_title_duration(input_path, number)
        except ProbeError:
            break
        if not duration:
            break
        if duration.upper() == "N/A":
            duration = ZERO_TIME

        try:
            chapters = get_chapter_count(input_path, number)
        except ProbeError:
            chapters = 0

        logger.log("probe.title", LogLevel.DEBUG, title=number, duration=duration, chapters=chapters)
        titles.append(TitleInfo(number, duration, chapters))
    return titles


def print_title_list(titles: List[TitleInfo]) -> None:
    safe_print()
    safe_print(colorize("Title list:", COLOR_YELLOW))
    for t in titles:
        safe_print(f"  Title {t.number} - Chapters: {t.chapters:02d} ({t.duration})")
    if not titles:
        safe_print("  No titles found.")
    safe_print()


def detect_audio_codec(input_path: str, title: int) -> str:
    """Return the codec name of the title's first audio stream."""
    safe_print()
    safe_print("Analyzing audio codec...")
    cmd = _probe_cmd(input_path, title,
                     "-select_streams", "a:0",
                     "-show_entries", "stream=codec_name",
                     "-of", constants.PLAIN_VALUE_FORMAT)
    codec = _run_probe(cmd, title).strip()
    if not codec:
        raise ProbeError("No audio codec detected. Check if ffprobe is in your PATH and the input is valid")
    logger.log("probe.audio_codec", LogLevel.INFO, title=title, codec=codec)
    safe_print(f"Detected audio codec: {codec}")
    return codec
