"""
Utility functions for running system commands and verifying binary availability.

Functions:
    - run_cmd: Executes a system command and returns its exit code along with its
      standard output and error streams.
    - which_or_die: Checks for the presence of a specific binary on the system's
      PATH and raises ToolNotFoundError if it is unavailable.
"""
import shutil
import subprocess
from typing import List, Tuple

from dvdoll.errors import ToolNotFoundError
from dvdoll.utils import logger
from dvdoll.utils.logger import LogLevel


def run_cmd(cmd: List[str]) -> Tuple[int, str, str]:
    """Run a command and return (code, stdout, stderr)."""
    logger.log("cmd.run", LogLevel.TRACE, cmd=cmd)
    try:
        p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                           stdin=subprocess.DEVNULL, text=True, errors="replace")
    except OSError as e:
        return 127, "", str(e)
    return p.returncode, p.stdout, p.stderr


def which_or_die(binary: str) -> str:
    """Return the full path of a binary on PATH, raise if it is not found."""
    path = shutil.which(binary)
    if path is None:
        raise ToolNotFoundError(f"{binary} not found in PATH")
    logger.log("startup.tool", LogLevel.DEBUG, name=binary, path=path)
    return path
