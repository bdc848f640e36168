"""Shared fixtures: a fake ffprobe and a quiet, colourless logger."""

from typing import Dict, List, Tuple

import pytest

from dvdoll.utils import logger
from dvdoll.utils.logger import LogLevel


@pytest.fixture(autouse=True)
def plain_console():
    logger.set_color(False)
    logger.set_log_level(LogLevel.WARN)
    yield
    logger.set_log_file(None)
    logger.set_log_level(LogLevel.WARN)


class FakeFFprobe:
    """
    Answers ffprobe command lines from a table of titles.

    ``titles`` maps a title number to (duration, chapter count, audio codec).
    Unknown titles fail the way ffprobe does when the title does not exist.
    """

    def __init__(self, titles: Dict[int, Tuple[str, int, str]]):
        self.titles = titles
        self.calls: List[List[str]] = []
        self.fail_chapters = False

    def __call__(self, cmd: List[str]) -> Tuple[int, str, str]:
        self.calls.append(cmd)
        number = int(cmd[cmd.index("-title") + 1])
        if number not in self.titles:
            return 1, "", f"Title {number} not found"
        duration, chapters, codec = self.titles[number]
        if "format=duration" in cmd:
            return 0, f"{duration}\n", ""
        if "-show_chapters" in cmd:
            if self.fail_chapters:
                return 1, "", "chapter error"
            return 0, "".join(f"{i}\n" for i in range(chapters)), ""
        if "stream=codec_name" in cmd:
            return 0, f"{codec}\n" if codec else "", ""
        raise AssertionError(f"unexpected ffprobe call: {cmd}")


@pytest.fixture
def fake_ffprobe(monkeypatch):
    fake = FakeFFprobe({
        1: ("1:52:03.120000", 24, "ac3"),
        2: ("0:00:42.000000", 1, "pcm_dvd"),
        3: ("N/A", 0, ""),
    })
    monkeypatch.setattr("dvdoll.utils.system_util.run_cmd", fake)
    return fake
