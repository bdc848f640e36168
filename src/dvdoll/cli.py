#!/usr/bin/env python3
"""
DVDoll command-line entry point.

Parses the flags, checks that ffprobe and ffmpeg are available and hands over
to the interactive session. Any DvdollError ends the program with a red
``ERROR:`` line and exit status 1.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import dvdoll as dvdoll_module
from dvdoll.errors import DvdollError
from dvdoll.session import Prompter, Session, SessionParams, print_header
from dvdoll.utils import constants, logger, system_util
from dvdoll.utils.constants import COLOR_RED, EXIT_ERROR, EXIT_INTERRUPTED, EXIT_OK
from dvdoll.utils.logger import LogLevel, colorize, safe_print


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dvdoll",
        description="Remux a DVD title (folder or ISO) into an MKV file with ffmpeg. "
                    "Missing values are asked for interactively.",
        epilog="Example: dvdoll --title 1 --chapter-start 1 --chapter-end 12 --output Movie /media/DVD",
    )
    parser.add_argument("input_arg", nargs="?", metavar="input", help="Input DVD path or ISO file")
    parser.add_argument("-i", "--input", help="Input DVD path or ISO file (takes precedence over the positional)")
    parser.add_argument("-t", "--title", type=int, default=0, help="Title number")
    parser.add_argument("--chapter-start", default="", help="First chapter or time (0 or HH:MM:SS)")
    parser.add_argument("--chapter-end", type=int, default=0, help="Last chapter")
    parser.add_argument("--start-time", default="", help="Start time (-ss) in HH:MM:SS")
    parser.add_argument("--end-time", default="", help="End time (-to) in HH:MM:SS")
    parser.add_argument("-o", "--output", default="", help="Output filename (mkv)")
    parser.add_argument("--list", action="store_true", help="Only list titles and exit")
    parser.add_argument("--non-interactive", action="store_true",
                        help="Disable prompts and fail on missing values")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite an existing output file without asking")
    parser.add_argument("--dry-run", action="store_true", help="Print the ffmpeg command instead of running it")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also append log lines to this file (default: $DVDOLL_LOG_FILE)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {dvdoll_module.__version__}")
    return parser


def params_from_args(args: argparse.Namespace) -> SessionParams:
    return SessionParams(
        input_path=args.input or args.input_arg or "",
        title=args.title,
        chapter_start=args.chapter_start,
        chapter_end=args.chapter_end,
        start_time=args.start_time,
        end_time=args.end_time,
        output_file=args.output,
        list_only=args.list,
        non_interactive=args.non_interactive,
    )


def fatal(message: str) -> int:
    # The console already gets the plain ERROR line below.
    logger.log("session.error", LogLevel.ERROR, console=dvdoll_module.DEBUG, msg=message)
    safe_print(f"{colorize('ERROR:', COLOR_RED)} {message}")
    return EXIT_ERROR


def run(argv: Optional[List[str]] = None) -> int:
    """Run the program and return its exit status."""
    args = build_parser().parse_args(argv)

    dvdoll_module.DEBUG = args.debug or constants.DEBUG
    logger.set_log_level(LogLevel.DEBUG if dvdoll_module.DEBUG else LogLevel.WARN)
    if not sys.stdout.isatty():
        logger.set_color(False)

    print_header()
    try:
        log_file = args.log_file or constants.LOG_FILE
        if log_file:
            logger.set_log_file(Path(log_file).expanduser().resolve())
        system_util.which_or_die(constants.FFPROBE_BIN)
        system_util.which_or_die(constants.FFMPEG_BIN)

        params = params_from_args(args)
        session = Session(
            params,
            Prompter(non_interactive=params.non_interactive),
            overwrite=args.overwrite,
            dry_run=args.dry_run,
        )
        session.run()
    except DvdollError as e:
        return fatal(e.message)
    except KeyboardInterrupt:
        safe_print()
        logger.log("session.interrupted", LogLevel.INFO)
        return EXIT_INTERRUPTED
    finally:
        logger.set_log_file(None)
    return EXIT_OK


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
