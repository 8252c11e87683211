"""Repository status reporting

Collects a read-only summary of the child's working tree and branch
tracking state.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from submoduler_child.core.config import Config
from submoduler_child.core.git import GitManager
from submoduler_child.errors import GitError

logger = logging.getLogger(__name__)


@dataclass
class WorkingTreeStatus:
    """Working tree changes grouped by kind

    A file that is staged and modified again afterwards appears in
    both lists.
    """

    staged: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_clean(self) -> bool:
        return self.error is None and not (self.staged or self.modified or self.untracked)


@dataclass
class BranchStatus:
    """Current branch and its position relative to the upstream

    Attributes:
        name: Branch name, None on a detached HEAD
        ahead: Commits not on the upstream, None without upstream
        behind: Upstream commits not on the branch, None without upstream
    """

    name: Optional[str] = None
    ahead: Optional[int] = None
    behind: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_detached(self) -> bool:
        return self.error is None and self.name is None

    @property
    def has_upstream(self) -> bool:
        return self.ahead is not None and self.behind is not None


@dataclass
class RepositoryStatus:
    """Combined status of a child submodule"""

    child_name: str
    working_tree: WorkingTreeStatus
    branch: BranchStatus

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output"""
        return {
            "child_name": self.child_name,
            "clean": self.working_tree.is_clean,
            "staged": self.working_tree.staged,
            "modified": self.working_tree.modified,
            "untracked": self.working_tree.untracked,
            "branch": self.branch.name,
            "detached": self.branch.is_detached,
            "ahead": self.branch.ahead,
            "behind": self.branch.behind,
        }


class StatusReporter:
    """Builds a RepositoryStatus from config and git queries"""

    def __init__(self, config: Config, git: GitManager):
        self.config = config
        self.git = git

    def collect(self) -> RepositoryStatus:
        """Query git and assemble the status summary"""
        return RepositoryStatus(
            child_name=self.config.child_name,
            working_tree=self.working_tree(),
            branch=self.branch(),
        )

    def working_tree(self) -> WorkingTreeStatus:
        status = WorkingTreeStatus()
        try:
            entries = self.git.get_status_entries()
        except GitError as e:
            logger.debug("git status failed: %s", e)
            status.error = str(e)
            return status

        for entry in entries:
            if entry.is_untracked:
                status.untracked.append(entry.path)
                continue
            if entry.is_staged:
                status.staged.append(entry.path)
            if entry.is_modified:
                status.modified.append(entry.path)

        return status

    def branch(self) -> BranchStatus:
        try:
            name = self.git.get_current_branch()
        except GitError as e:
            logger.debug("git branch failed: %s", e)
            return BranchStatus(error=str(e))

        if name is None:
            return BranchStatus()

        counts = self.git.get_ahead_behind(name)
        if counts is None:
            return BranchStatus(name=name)
        return BranchStatus(name=name, ahead=counts[0], behind=counts[1])
