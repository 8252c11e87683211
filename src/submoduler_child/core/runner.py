"""External command runner

Every subprocess the tool starts goes through a CommandRunner so that
git, the test suite and the build tool can be replaced by a fake in
tests.
"""
import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from submoduler_child.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of an external command

    Attributes:
        output: Captured stdout (empty when output was streamed)
        success: True if the command exited with status 0
        returncode: Raw exit status, 127 if the program was not found
        error: Captured stderr or a launch failure message
    """

    output: str
    success: bool
    returncode: int = 0
    error: str = ""


class CommandRunner:
    """Runs external commands in a fixed working directory"""

    def __init__(self, cwd: Union[str, Path] = "."):
        self.cwd = Path(cwd)

    def run(
        self,
        args: Sequence[str],
        capture: bool = True,
        cwd: Optional[Path] = None,
    ) -> RunResult:
        """Run a command and report its output and exit status

        Args:
            args: Program and arguments
            capture: Capture stdout/stderr; when False output goes to
                the terminal
            cwd: Working directory (defaults to the runner's)

        Returns:
            RunResult, never raises for a non-zero exit
        """
        cmd: List[str] = list(args)
        work_dir = cwd or self.cwd
        logger.debug("Running %s in %s", " ".join(cmd), work_dir)

        try:
            result = subprocess.run(
                cmd,
                cwd=work_dir,
                capture_output=capture,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError:
            logger.debug("Command not found: %s", cmd[0])
            return RunResult(
                output="",
                success=False,
                returncode=127,
                error=f"{cmd[0]}: command not found",
            )

        return RunResult(
            output=result.stdout or "",
            success=result.returncode == 0,
            returncode=result.returncode,
            error=result.stderr or "",
        )


def split_command(command: str) -> List[str]:
    """Split a configured command line into arguments

    Raises:
        ConfigError: If the command line has unbalanced quotes
    """
    try:
        return shlex.split(command)
    except ValueError as e:
        raise ConfigError(f"Cannot parse command '{command}': {e}") from e
