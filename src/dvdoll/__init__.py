"""
DVDoll: remux a DVD title into a Matroska file with ffmpeg.

The package is organised into:
- probe: ffprobe queries for titles, chapters and the audio codec.
- remux: ffmpeg command building and execution with progress reporting.
- session: the interactive prompt loop that collects the remux parameters.
- cli: flag parsing and the program entry point.
- utils: constants, logging and subprocess helpers.
"""

__version__ = "1.0.0"

# Debug flag for controlling verbose output
DEBUG: bool = False

__all__ = ["__version__", "DEBUG"]
