"""
The interactive session loop.

A session fills a SessionParams from command-line flags, asks for whatever is
still missing, remuxes one title and then offers to start over with a clean
set of parameters. In non-interactive mode every prompt answers with an empty
string, so a missing required value ends the program instead of waiting for
input.
"""
import os
import sys
from dataclasses import dataclass, fields
from typing import List, Optional, TextIO

from dvdoll import probe, remux
from dvdoll.errors import InputError
from dvdoll.probe import TitleInfo
from dvdoll.utils import constants, logger, time_util
from dvdoll.utils.constants import COLOR_CYAN, COLOR_GRAY, COLOR_RED, KEY_ESC
from dvdoll.utils.logger import LogLevel, colorize, safe_print


@dataclass
class SessionParams:
    input_path: str = ""
    title: int = 0
    chapter_start: str = ""
    chapter_end: int = 0
    start_time: str = ""
    end_time: str = ""
    output_file: str = ""
    list_only: bool = False
    non_interactive: bool = False

    def reset(self) -> None:
        """Forget everything chosen for the previous file."""
        for f in fields(self):
            if f.name != "non_interactive":
                setattr(self, f.name, f.default)


class Prompter:
    """Line-based prompts on a pair of text streams."""

    def __init__(self, non_interactive: bool = False, stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None):
        self.non_interactive = non_interactive
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def ask(self, label: str) -> str:
        """Show ``label`` and return the trimmed answer. End of input answers empty."""
        if self.non_interactive:
            return ""
        self.stdout.write(colorize(f"{label}: ", COLOR_CYAN))
        self.stdout.flush()
        line = self.stdin.readline()
        return line.strip()

    def read_key(self) -> Optional[str]:
        """
        Read a single key press without waiting for Enter.

        Returns None when the terminal cannot be switched to raw mode (e.g.
        stdin is a pipe), and an empty string at end of input.
        """
        if os.name == "nt":
            import msvcrt
            return msvcrt.getwch()

        import termios
        import tty

        try:
            fd = self.stdin.fileno()
            old_state = termios.tcgetattr(fd)
        except (OSError, ValueError, termios.error):
            return None
        try:
            tty.setraw(fd)
            data = os.read(fd, 1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_state)
        return data.decode("latin-1")

    def ask_continue(self) -> bool:
        """Enter processes another file, ESC closes the program."""
        if self.non_interactive:
            return False
        self.stdout.write(
            f"{colorize('Press ', COLOR_GRAY)}{colorize('Enter', COLOR_CYAN)}"
            f"{colorize(' to process another file', COLOR_GRAY)}\n"
            f"{colorize('Press ', COLOR_GRAY)}{colorize('ESC', COLOR_RED)}"
            f"{colorize(' to close', COLOR_GRAY)}\n"
        )
        self.stdout.flush()

        key = self.read_key()
        if key is None:
            answer = self.ask("(press Enter to continue, type 'esc' to exit)")
            return answer.lower() != "esc"
        # Ctrl-C and Ctrl-D arrive as plain bytes in raw mode.
        return key not in ("", KEY_ESC, "\x03", "\x04")

    def confirm(self, question: str) -> bool:
        return self.ask(f"{question} [y/N]").lower() in ("y", "yes")


def print_header(stream: Optional[TextIO] = None) -> None:
    safe_print(colorize(constants.HEADER, COLOR_RED), file=stream or sys.stdout)
    safe_print(file=stream or sys.stdout)


def clear_screen(stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    stream.write(constants.CLEAR_SCREEN)
    stream.flush()


class Session:
    """Walks the user through one remux at a time until they close it."""

    def __init__(self, params: SessionParams, prompter: Optional[Prompter] = None,
                 overwrite: bool = False, dry_run: bool = False):
        self.params = params
        self.prompter = prompter or Prompter(non_interactive=params.non_interactive)
        self.overwrite = overwrite
        self.dry_run = dry_run
        self.titles: List[TitleInfo] = []

    def _ask(self, label: str) -> str:
        return self.prompter.ask(label)

    def run(self) -> None:
        """Process files until the user closes the session."""
        while True:
            if not self.run_once():
                return
            if self.params.non_interactive or not self.prompter.ask_continue():
                return

            clear_screen(self.prompter.stdout)
            print_header(self.prompter.stdout)
            self.params.reset()
            logger.log("session.reset", LogLevel.DEBUG)

    def run_once(self) -> bool:
        """
        Collect the parameters for one file and remux it.

        Returns False when the session only listed titles.
        """
        p = self.params
        self._resolve_input()

        self.titles = probe.list_titles(p.input_path)
        probe.print_title_list(self.titles)
        if p.list_only:
            return False

        self._resolve_title()
        job = self._resolve_range()
        job.output_file = self._resolve_output()
        job.overwrite = self._confirm_overwrite(job.output_file)
        job.audio_codec = probe.detect_audio_codec(p.input_path, p.title)

        duration = remux.expected_duration(job, self._title_info(p.title))
        remux.remux_title(job, duration=duration, dry_run=self.dry_run)
        return True

    def _title_info(self, number: int) -> Optional[TitleInfo]:
        for t in self.titles:
            if t.number == number:
                return t
        return None

    def _resolve_input(self) -> None:
        p = self.params
        if not p.input_path:
            p.input_path = self._ask("Input")
        if not p.input_path:
            raise InputError("Input path is required.")
        p.input_path = os.path.normpath(p.input_path.strip('"'))

    def _resolve_title(self) -> None:
        p = self.params
        if p.title == 0:
            answer = self._ask("Title number")
            if not answer:
                raise InputError("Title number is required.")
            p.title = time_util.parse_leading_int(answer)
        if p.title <= 0:
            raise InputError("Title number must be greater than zero.")

    def _resolve_range(self) -> remux.RemuxJob:
        p = self.params
        if not p.chapter_start and (p.start_time or p.end_time):
            p.chapter_start = "0"
        if not p.chapter_start:
            p.chapter_start = self._ask("First chapter")
            if not p.chapter_start:
                raise InputError("First chapter is required.")

        job = remux.RemuxJob(input_path=p.input_path, title=p.title, output_file="")
        if time_util.is_time_selection(p.chapter_start):
            if not p.start_time:
                if p.chapter_start == "0":
                    p.start_time = self._ask("Start time (-ss)")
                else:
                    p.start_time = p.chapter_start
            p.start_time = time_util.normalize_start_time(p.start_time)
            if not p.end_time:
                p.end_time = self._ask("End time (-to)")
            p.end_time = time_util.normalize_end_time(p.end_time)

            job.use_time = True
            job.start_time = p.start_time
            job.end_time = p.end_time
            return job

        first = time_util.parse_leading_int(p.chapter_start)
        if first <= 0:
            raise InputError("First chapter must be greater than zero.")
        if p.chapter_end == 0:
            answer = self._ask("Last chapter")
            if not answer:
                raise InputError("Last chapter is required.")
            p.chapter_end = time_util.parse_leading_int(answer)
        if p.chapter_end <= 0:
            raise InputError("Last chapter must be greater than zero.")

        self._check_chapters(first, p.chapter_end)
        job.chapter_start = first
        job.chapter_end = p.chapter_end
        return job

    def _check_chapters(self, first: int, last: int) -> None:
        if last < first:
            logger.log("session.warning", LogLevel.WARN,
                       msg="Last chapter is before first chapter", first=first, last=last)
        info = self._title_info(self.params.title)
        if info and info.chapters and last > info.chapters:
            logger.log("session.warning", LogLevel.WARN,
                       msg="Last chapter is beyond the title's chapter count",
                       title=info.number, last=last, chapters=info.chapters)

    def _resolve_output(self) -> str:
        p = self.params
        if not p.output_file:
            p.output_file = self._ask("Output filename")
        if not p.output_file:
            p.output_file = constants.DEFAULT_OUTPUT_NAME
        if not p.output_file.lower().endswith(constants.OUTPUT_EXTENSION):
            p.output_file += constants.OUTPUT_EXTENSION
        return p.output_file

    def _confirm_overwrite(self, output_file: str) -> bool:
        """ffmpeg is told to overwrite only after the user agreed to it."""
        if not os.path.exists(output_file):
            return False
        if self.overwrite:
            return True
        if self.params.non_interactive:
            raise InputError(f"Output file exists: {output_file} (use --overwrite to replace it)")
        if not self.prompter.confirm(f"{output_file} already exists. Overwrite?"):
            raise InputError(f"Output file exists: {output_file}")
        return True
