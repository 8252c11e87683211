"""Core modules for submoduler-child"""

from .config import Config
from .git import GitManager
from .runner import CommandRunner, RunResult
from .version import SemanticVersion, VersionManager, bump_version

__all__ = [
    "Config",
    "CommandRunner",
    "GitManager",
    "RunResult",
    "SemanticVersion",
    "VersionManager",
    "bump_version",
]
