"""Git operations wrapper for submoduler-child

Provides the narrow set of git queries and mutations the commands
need. All calls go through a CommandRunner.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from submoduler_child.core.runner import CommandRunner, RunResult
from submoduler_child.errors import GitError

logger = logging.getLogger(__name__)


@dataclass
class Commit:
    """Represents a Git commit"""

    hash: str
    message: str

    @property
    def short_hash(self) -> str:
        """Get short commit hash"""
        return self.hash[:7]


@dataclass
class StatusEntry:
    """One record of ``git status --porcelain -z``

    Attributes:
        index: Index (staged) status letter, ' ' if unchanged
        worktree: Working tree status letter, ' ' if unchanged
        path: File path; for renames, the new path
    """

    index: str
    worktree: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.index == "?" and self.worktree == "?"

    @property
    def is_staged(self) -> bool:
        return self.index not in (" ", "?", "!")

    @property
    def is_modified(self) -> bool:
        return self.worktree not in (" ", "?", "!")

    @classmethod
    def parse(cls, record: str) -> Optional["StatusEntry"]:
        """Parse one ``--porcelain -z`` record, None for malformed ones"""
        if len(record) < 4:
            return None
        return cls(index=record[0], worktree=record[1], path=record[3:])

    @classmethod
    def parse_all(cls, output: str) -> List["StatusEntry"]:
        """Parse NUL-separated ``git status --porcelain -z`` output

        Paths are verbatim in this format. A rename or copy record is
        followed by a record holding the original path, which is dropped.
        """
        records = output.split("\0")
        entries = []
        i = 0
        while i < len(records):
            entry = cls.parse(records[i])
            i += 1
            if entry is None:
                continue
            if entry.index in ("R", "C") or entry.worktree in ("R", "C"):
                i += 1
            entries.append(entry)
        return entries


class GitManager:
    """Git operations manager

    Provides a high-level interface to the git operations used by the
    status, update and release code paths.
    """

    def __init__(self, repo_path: str = ".", runner: Optional[CommandRunner] = None):
        """Initialize Git manager for a repository

        Args:
            repo_path: Path to the Git repository
            runner: Command runner, a subprocess runner by default
        """
        self.repo_path = Path(repo_path).resolve()
        self.runner = runner or CommandRunner(self.repo_path)

    def _run_git(self, args: List[str], check: bool = True) -> RunResult:
        """Run a Git command

        Args:
            args: Git command arguments
            check: Whether to raise on non-zero exit

        Returns:
            RunResult of the command

        Raises:
            GitError: If check is set and the command failed
        """
        cmd = ["git"] + args
        result = self.runner.run(cmd)
        if check and not result.success:
            detail = result.error.strip() or result.output.strip()
            message = f"Git command failed: {' '.join(cmd)}"
            if detail:
                message = f"{message}: {detail}"
            raise GitError(message)
        return result

    def is_repository(self) -> bool:
        """Check if repo_path is inside a Git work tree"""
        result = self._run_git(["rev-parse", "--is-inside-work-tree"], check=False)
        return result.success and result.output.strip() == "true"

    def get_status_entries(self) -> List[StatusEntry]:
        """Get working tree changes

        Returns:
            Parsed porcelain status entries, empty if the tree is clean
        """
        result = self._run_git(["status", "--porcelain", "-z"])
        return StatusEntry.parse_all(result.output)

    def is_dirty(self) -> bool:
        """Check if working directory has uncommitted changes

        Returns:
            True if there are uncommitted or untracked changes
        """
        result = self._run_git(["status", "--porcelain"])
        return len(result.output.strip()) > 0

    def get_current_branch(self) -> Optional[str]:
        """Get current branch name

        Returns:
            Branch name, or None on a detached HEAD
        """
        result = self._run_git(["branch", "--show-current"])
        branch = result.output.strip()
        return branch or None

    def get_ahead_behind(self, branch: str) -> Optional[Tuple[int, int]]:
        """Count commits ahead of and behind the branch's upstream

        Args:
            branch: Local branch name

        Returns:
            (ahead, behind), or None if the branch has no upstream
        """
        result = self._run_git(
            ["rev-list", "--left-right", "--count", f"{branch}...{branch}@{{u}}"],
            check=False,
        )
        if not result.success:
            return None

        parts = result.output.split()
        if len(parts) != 2:
            return None
        try:
            return int(parts[0]), int(parts[1])
        except ValueError:
            return None

    def stage_all(self) -> None:
        """Stage every change, including untracked and deleted files"""
        self._run_git(["add", "-A"])

    def commit(self, message: str) -> Optional[Commit]:
        """Create a commit from the index

        Args:
            message: Commit message

        Returns:
            The new HEAD commit
        """
        self._run_git(["commit", "-m", message])
        return self.get_head_commit()

    def push(self, remote: str = "origin") -> RunResult:
        """Push the current branch, without raising on failure"""
        return self._run_git(["push", remote, "HEAD"], check=False)

    def push_tags(self, remote: str = "origin") -> RunResult:
        """Push all tags, without raising on failure"""
        return self._run_git(["push", remote, "--tags"], check=False)

    def get_remote_url(self, remote: str = "origin") -> Optional[str]:
        """Get remote repository URL

        Args:
            remote: Remote name

        Returns:
            Remote URL or None
        """
        result = self._run_git(["remote", "get-url", remote], check=False)
        if result.success and result.output.strip():
            return result.output.strip()
        return None

    def get_latest_tag(self) -> Optional[str]:
        """Most recent tag reachable from HEAD, None if there is none"""
        result = self._run_git(["describe", "--tags", "--abbrev=0"], check=False)
        if result.success and result.output.strip():
            return result.output.strip()
        return None

    def get_head_commit(self) -> Optional[Commit]:
        """Get the HEAD commit

        Returns:
            HEAD commit or None if the repository has no commits
        """
        result = self._run_git(["log", "-1", "--pretty=format:%H|%s"], check=False)
        if not result.success or not result.output.strip():
            return None

        commit_hash, _, message = result.output.strip().partition("|")
        return Commit(hash=commit_hash, message=message)
