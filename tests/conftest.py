"""Shared fixtures for submoduler-child tests"""
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest

from submoduler_child.core.runner import CommandRunner, RunResult


def git(repo: Path, *args: str) -> str:
    """Run a git command in a test repository and return its stdout"""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def init_repo(path: Path) -> Path:
    """Create a Git repository on branch main with a test identity"""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "user.name", "Test User")
    git(path, "config", "commit.gpgsign", "false")
    return path


CHILD_CONFIG = """\
submoduler:
  childname: demo_gem
  type: child

paths:
  lib: lib
  spec: spec

test:
  command: "true"
"""


@pytest.fixture
def git_repo(tmp_path):
    """Create a temporary Git repository"""
    return init_repo(tmp_path / "test_repo")


@pytest.fixture
def child_repo(tmp_path):
    """A committed child submodule with a config, version file and origin

    The origin is a bare repository so pushes succeed.
    """
    origin = tmp_path / "origin.git"
    origin.mkdir()
    git(origin, "init", "--bare")

    repo = init_repo(tmp_path / "demo_gem")
    (repo / ".submoduler.yml").write_text(CHILD_CONFIG)
    version_dir = repo / "lib" / "demo_gem"
    version_dir.mkdir(parents=True)
    (version_dir / "version.rb").write_text(
        'module DemoGem\n  VERSION = "1.2.3"\nend\n'
    )
    git(repo, "add", "-A")
    git(repo, "commit", "-m", "Initial commit")
    git(repo, "remote", "add", "origin", str(origin))
    git(repo, "push", "-u", "origin", "main")
    return repo


Response = Union[RunResult, Callable[[List[str]], RunResult]]


class FakeRunner(CommandRunner):
    """Runner that records commands and replays canned results

    Responses are keyed by the joined command line; the longest
    matching prefix wins. Unknown commands succeed with no output.
    """

    def __init__(self, responses: Optional[Dict[str, Response]] = None):
        super().__init__(".")
        self.responses: Dict[str, Response] = dict(responses or {})
        self.calls: List[str] = []

    def on(self, command: str, output: str = "", success: bool = True) -> "FakeRunner":
        self.responses[command] = RunResult(
            output=output, success=success, returncode=0 if success else 1
        )
        return self

    def run(
        self,
        args: Sequence[str],
        capture: bool = True,
        cwd: Optional[Path] = None,
    ) -> RunResult:
        line = " ".join(args)
        self.calls.append(line)

        matches = [key for key in self.responses if line == key or line.startswith(key + " ")]
        if not matches:
            return RunResult(output="", success=True)

        response = self.responses[max(matches, key=len)]
        if callable(response):
            return response(list(args))
        return response

    def called(self, prefix: str) -> List[str]:
        return [call for call in self.calls if call.startswith(prefix)]


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def run_git():
    """The git() helper, for tests that need to set up history"""
    return git
