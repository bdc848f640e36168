"""
Functions to build and run the ffmpeg command that remuxes a DVD title.

Video, subtitles and every other stream are copied as-is into Matroska. The
first audio stream's codec decides the audio handling: PCM is compressed
losslessly to FLAC, anything else is copied.
"""
import re
import subprocess
from collections import deque
from dataclasses import dataclass
from typing import List, Optional

from tqdm import tqdm

from dvdoll.errors import RemuxError
from dvdoll.probe import TitleInfo
from dvdoll.utils import constants, logger, time_util
from dvdoll.utils.logger import LogLevel, safe_print

_TIME_REGEX = re.compile(r"time=\s*(\S+)")
_STDERR_TAIL_LINES = 20


@dataclass
class RemuxJob:
    input_path: str
    title: int
    output_file: str
    audio_codec: str = ""
    use_time: bool = False
    chapter_start: int = 0
    chapter_end: int = 0
    start_time: str = constants.ZERO_TIME
    end_time: str = ""
    overwrite: bool = False


def audio_args(codec: str) -> List[str]:
    """Copy the audio unless it is PCM, which is compressed to FLAC."""
    if "pcm" in codec.lower():
        return ["-c:a", "flac", "-compression_level:a", constants.FLAC_COMPRESSION_LEVEL]
    return ["-c:a", "copy"]


def build_ffmpeg_cmd(job: RemuxJob) -> List[str]:
    """Build the ffmpeg command line for a remux job."""
    cmd = [
        constants.FFMPEG_BIN,
        "-hide_banner",
        *constants.DVDVIDEO_INPUT_ARGS,
        "-title", str(job.title),
    ]
    if job.use_time:
        cmd += ["-ss", job.start_time]
        if job.end_time:
            cmd += ["-to", job.end_time]
    else:
        cmd += ["-chapter_start", str(job.chapter_start), "-chapter_end", str(job.chapter_end)]

    cmd += ["-i", job.input_path, "-map", "0", "-c", "copy"]
    cmd += audio_args(job.audio_codec)
    if job.overwrite:
        cmd.append("-y")
    cmd.append(job.output_file)
    return cmd


def expected_duration(job: RemuxJob, title: Optional[TitleInfo]) -> Optional[float]:
    """
    Estimate the length of the output in seconds, for the progress bar.

    Returns None when it cannot be known without probing chapter times.
    """
    title_seconds = title.seconds if title else None
    if job.use_time:
        start = time_util.parse_timestamp(job.start_time)
        end = time_util.parse_timestamp(job.end_time) if job.end_time else title_seconds
        if start is None or end is None or end <= start:
            return None
        return end - start

    if title and title.chapters and job.chapter_start == 1 and job.chapter_end >= title.chapters:
        return title_seconds or None
    return None


def _progress_seconds(line: str) -> Optional[float]:
    """Extract the ``time=`` position from an ffmpeg status line."""
    m = _TIME_REGEX.search(line)
    if not m:
        return None
    return time_util.parse_timestamp(m.group(1))


def remux_title(job: RemuxJob, duration: Optional[float] = None, dry_run: bool = False) -> int:
    """
    Run ffmpeg for a remux job and report progress.

    Args:
        job: The remux parameters
        duration: Expected output length in seconds; enables a percentage bar
        dry_run: Print the command instead of running it

    Returns:
        ffmpeg's exit code (always 0, failures raise RemuxError)
    """
    cmd = build_ffmpeg_cmd(job)
    logger.log("remux.command", LogLevel.INFO, title=job.title, output=job.output_file,
               expected=time_util.format_seconds(duration) if duration else None, cmd=cmd)

    safe_print()
    if dry_run:
        safe_print("Dry run, not remuxing:")
        safe_print("  " + subprocess.list2cmdline(cmd))
        return 0

    safe_print("Remuxing file...")
    echo_stderr = logger.get_log_level().value <= LogLevel.DEBUG.value
    tail = deque(maxlen=_STDERR_TAIL_LINES)

    # Universal newlines split ffmpeg's carriage-return status updates into lines.
    process = subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
    )
    total = round(duration, 1) if duration else None
    bar = tqdm(total=total, unit="s", desc=f"Title {job.title}", leave=True,
               bar_format="{l_bar}{bar}| {n:.0f}/{total:.0f}s [{elapsed}<{remaining}]" if total else None)
    try:
        for line in process.stderr:
            line = line.rstrip()
            if not line:
                continue
            seconds = _progress_seconds(line) if "time=" in line else None
            if seconds is not None:
                seconds = max(0.0, seconds)
                bar.n = min(seconds, total) if total else seconds
                bar.refresh()
                continue
            tail.append(line)
            if echo_stderr:
                tqdm.write(line)
        code = process.wait()
    except KeyboardInterrupt:
        process.terminate()
        process.wait()
        raise
    finally:
        bar.close()

    if code != 0:
        stderr_text = "\n".join(tail)
        logger.log("remux.failed", LogLevel.ERROR, title=job.title, exit_code=code, error=stderr_text[-200:])
        raise RemuxError(f"ffmpeg exited with code {code}" + (f": {tail[-1]}" if tail else ""),
                         exit_code=code, stderr=stderr_text)

    logger.log("remux.complete", LogLevel.INFO, title=job.title, output=job.output_file)
    safe_print("Process finished.")
    return code
