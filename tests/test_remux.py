import warnings
from unittest.mock import patch

import pytest
from tqdm import TqdmWarning

from dvdoll import remux
from dvdoll.errors import RemuxError
from dvdoll.probe import TitleInfo
from dvdoll.remux import RemuxJob
from dvdoll.utils import constants


class FakeProcess:
    def __init__(self, stderr_lines, returncode=0):
        self.stderr = iter(stderr_lines)
        self.returncode = returncode
        self.terminated = False

    def wait(self):
        return self.returncode

    def terminate(self):
        self.terminated = True


@pytest.mark.parametrize("codec,expected", [
    ("ac3", ["-c:a", "copy"]),
    ("dts", ["-c:a", "copy"]),
    ("pcm_dvd", ["-c:a", "flac", "-compression_level:a", "8"]),
    ("PCM_S16BE", ["-c:a", "flac", "-compression_level:a", "8"]),
])
def test_audio_args(codec, expected):
    assert remux.audio_args(codec) == expected


def test_chapter_command():
    job = RemuxJob(input_path="/media/dvd", title=2, output_file="movie.mkv",
                   audio_codec="ac3", chapter_start=3, chapter_end=5)
    assert remux.build_ffmpeg_cmd(job) == [
        constants.FFMPEG_BIN, "-hide_banner",
        "-f", "dvdvideo", "-preindex", "True",
        "-title", "2",
        "-chapter_start", "3", "-chapter_end", "5",
        "-i", "/media/dvd",
        "-map", "0", "-c", "copy",
        "-c:a", "copy",
        "movie.mkv",
    ]


def test_time_command_with_end():
    job = RemuxJob(input_path="movie.iso", title=1, output_file="clip.mkv", audio_codec="pcm_dvd",
                   use_time=True, start_time="00:01:00", end_time="00:02:00")
    cmd = remux.build_ffmpeg_cmd(job)
    assert cmd[cmd.index("-ss") + 1] == "00:01:00"
    assert cmd[cmd.index("-to") + 1] == "00:02:00"
    assert "-chapter_start" not in cmd
    assert cmd[-5:] == ["-c:a", "flac", "-compression_level:a", "8", "clip.mkv"]
    # Seeking happens on the input side.
    assert cmd.index("-ss") < cmd.index("-i")


def test_time_command_without_end():
    job = RemuxJob(input_path="movie.iso", title=1, output_file="clip.mkv",
                   use_time=True, start_time="00:00:00")
    cmd = remux.build_ffmpeg_cmd(job)
    assert "-ss" in cmd
    assert "-to" not in cmd


def test_overwrite_flag():
    job = RemuxJob(input_path="movie.iso", title=1, output_file="clip.mkv",
                   chapter_start=1, chapter_end=1, overwrite=True)
    assert remux.build_ffmpeg_cmd(job)[-2:] == ["-y", "clip.mkv"]


def test_expected_duration_time_range():
    title = TitleInfo(1, "1:00:00.000000", 10)
    job = RemuxJob("dvd", 1, "o.mkv", use_time=True, start_time="00:10:00", end_time="00:25:00")
    assert remux.expected_duration(job, title) == pytest.approx(900)

    job.end_time = ""
    assert remux.expected_duration(job, title) == pytest.approx(3000)

    job.end_time = "00:05:00"
    assert remux.expected_duration(job, title) is None


def test_expected_duration_chapters():
    title = TitleInfo(1, "0:45:00.000000", 6)
    full = RemuxJob("dvd", 1, "o.mkv", chapter_start=1, chapter_end=6)
    partial = RemuxJob("dvd", 1, "o.mkv", chapter_start=2, chapter_end=4)
    assert remux.expected_duration(full, title) == pytest.approx(2700)
    assert remux.expected_duration(partial, title) is None
    assert remux.expected_duration(full, None) is None


def test_dry_run_does_not_start_ffmpeg(capsys):
    job = RemuxJob("/media/dvd", 1, "movie.mkv", chapter_start=1, chapter_end=2)
    with patch("dvdoll.remux.core.subprocess.Popen") as popen:
        assert remux.remux_title(job, dry_run=True) == 0
    popen.assert_not_called()
    out = capsys.readouterr().out
    assert "-chapter_start 1 -chapter_end 2" in out


def test_remux_success(capsys):
    job = RemuxJob("/media/dvd", 1, "movie.mkv", audio_codec="ac3", chapter_start=1, chapter_end=2)
    lines = [
        "Input #0, dvdvideo, from '/media/dvd':\n",
        "frame=  250 fps=0.0 q=-1.0 size=    2048KiB time=00:00:10.00 bitrate=1677.7kbits/s speed=20x\n",
        "frame=  500 fps=0.0 q=-1.0 Lsize=    4096KiB time=00:00:20.00 bitrate=1677.7kbits/s speed=20x\n",
    ]
    with patch("dvdoll.remux.core.subprocess.Popen", return_value=FakeProcess(lines)) as popen:
        assert remux.remux_title(job, duration=20.0) == 0

    cmd = popen.call_args[0][0]
    assert cmd[-1] == "movie.mkv"
    out = capsys.readouterr().out
    assert "Remuxing file..." in out
    assert "Process finished." in out


def test_remux_failure_raises():
    job = RemuxJob("/media/dvd", 4, "movie.mkv", chapter_start=1, chapter_end=2)
    lines = ["[dvdvideo @ 0x1] Title 4 not found\n", "Error opening input files: Invalid argument\n"]
    with patch("dvdoll.remux.core.subprocess.Popen", return_value=FakeProcess(lines, returncode=234)):
        with pytest.raises(RemuxError) as exc_info:
            remux.remux_title(job)

    assert exc_info.value.exit_code == 234
    assert "Invalid argument" in exc_info.value.message
    assert "Title 4 not found" in exc_info.value.stderr


def test_interrupt_terminates_ffmpeg():
    def interrupted():
        yield "frame=  250 fps=0.0 q=-1.0 size=    2048KiB time=00:00:10.00 bitrate=1677.7kbits/s speed=20x\n"
        raise KeyboardInterrupt

    job = RemuxJob("/media/dvd", 1, "movie.mkv", chapter_start=1, chapter_end=2)
    process = FakeProcess([])
    process.stderr = interrupted()
    with patch("dvdoll.remux.core.subprocess.Popen", return_value=process):
        with pytest.raises(KeyboardInterrupt):
            remux.remux_title(job, duration=60.0)

    assert process.terminated is True


def test_negative_status_time_does_not_warn():
    job = RemuxJob("/media/dvd", 1, "movie.mkv", chapter_start=1, chapter_end=2)
    lines = [
        "frame=    0 fps=0.0 q=-1.0 size=       0KiB time=-00:00:00.03 bitrate=N/A speed=N/A\n",
        "frame=  500 fps=0.0 q=-1.0 Lsize=    4096KiB time=00:00:20.00 bitrate=1677.7kbits/s speed=20x\n",
    ]
    with warnings.catch_warnings():
        warnings.simplefilter("error", TqdmWarning)
        with patch("dvdoll.remux.core.subprocess.Popen", return_value=FakeProcess(lines)):
            assert remux.remux_title(job, duration=20.0) == 0
