"""Exceptions raised by DVDoll. Every one of them ends the session."""


class DvdollError(Exception):
    """Base class for fatal errors reported to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ToolNotFoundError(DvdollError):
    """ffmpeg or ffprobe is missing from PATH."""


class InputError(DvdollError):
    """A required value is missing or invalid."""


class ProbeError(DvdollError):
    """ffprobe failed or returned nothing usable."""


class RemuxError(DvdollError):
    """ffmpeg exited with a non-zero status."""

    def __init__(self, message: str, exit_code: int = 1, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
