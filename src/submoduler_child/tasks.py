"""Configured test and build tasks

Both tasks run a command line taken from .submoduler.yml in the child
root, streaming its output to the terminal.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional

from submoduler_child.core.config import Config
from submoduler_child.core.runner import CommandRunner, RunResult, split_command
from submoduler_child.errors import ConfigError

logger = logging.getLogger(__name__)

GEMSPEC_NAME_PATTERN = re.compile(r"""\.name\s*=\s*["']([^"']+)["']""")


def find_gemspec(project_path: Path) -> Optional[Path]:
    """First *.gemspec in the project root, by name"""
    gemspecs = sorted(project_path.glob("*.gemspec"))
    return gemspecs[0] if gemspecs else None


def gemspec_name(gemspec: Path) -> Optional[str]:
    """Read the gem name from a ``spec.name = "..."`` line"""
    match = GEMSPEC_NAME_PATTERN.search(gemspec.read_text())
    return match.group(1) if match else None


def _run_configured(runner: CommandRunner, args: List[str], config: Config) -> RunResult:
    if not args:
        raise ConfigError("Configured command is empty")
    logger.info("Running %s", " ".join(args))
    return runner.run(args, capture=False, cwd=config.project_path)


def run_tests(config: Config, runner: CommandRunner) -> RunResult:
    """Run the child's test suite

    Returns:
        RunResult; success is False if any test failed
    """
    return _run_configured(runner, split_command(config.test_command), config)


def run_build(config: Config, runner: CommandRunner) -> RunResult:
    """Build the child's package

    A ``{gemspec}`` placeholder in the build command is replaced by the
    first gemspec in the project root.

    Raises:
        ConfigError: If the command needs a gemspec and there is none
    """
    args = split_command(config.build_command)
    if any("{gemspec}" in arg for arg in args):
        gemspec = find_gemspec(config.project_path)
        if gemspec is None:
            raise ConfigError(
                f"No .gemspec found in {config.project_path}; set 'build.command' in .submoduler.yml"
            )
        args = [arg.replace("{gemspec}", gemspec.name) for arg in args]

    return _run_configured(runner, args, config)
