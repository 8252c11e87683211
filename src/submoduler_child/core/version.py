"""Semantic version handling for submoduler-child

Parses, bumps and persists the child's version. The version lives
either in a dedicated file holding only the version string, or as a
``VERSION = "x.y.z"`` / ``__version__ = "x.y.z"`` assignment inside a
source file such as a gem's ``lib/<name>/version.rb``.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from submoduler_child.core.config import Config
from submoduler_child.errors import VersionError

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(
    r"^(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)"
    r"(?:-(?P<prerelease>[0-9A-Za-z][0-9A-Za-z.-]*))?$"
)

ASSIGNMENT_PATTERN = re.compile(
    r"""(?P<prefix>\b(?:VERSION|__version__)\s*=\s*)(?P<quote>["'])(?P<version>[^"']+)(?P=quote)"""
)


class BumpKind(str, Enum):
    """Version component to increment"""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclass(frozen=True)
class SemanticVersion:
    """A major.minor.patch version with an optional prerelease suffix"""

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        """Parse a version string

        Args:
            text: Version such as "1.2.3" or "2.0.0-beta.1"

        Returns:
            Parsed version

        Raises:
            VersionError: If the text is not a semantic version
        """
        match = VERSION_PATTERN.match(text.strip())
        if not match:
            raise VersionError(f"Invalid semantic version: '{text.strip()}'")

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease"),
        )

    def bump(self, kind: str) -> "SemanticVersion":
        """Return the next version

        Exactly one component is incremented, every lower component is
        reset to zero and the prerelease suffix is dropped.

        Args:
            kind: "major", "minor" or "patch"

        Raises:
            VersionError: For an unknown bump kind
        """
        try:
            bump_kind = BumpKind(kind)
        except ValueError:
            raise VersionError(
                f"Unknown bump kind '{kind}', expected one of: major, minor, patch"
            ) from None

        if bump_kind is BumpKind.MAJOR:
            return SemanticVersion(self.major + 1, 0, 0)
        if bump_kind is BumpKind.MINOR:
            return SemanticVersion(self.major, self.minor + 1, 0)
        return SemanticVersion(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{self.prerelease}"
        return base


def bump_version(version: str, kind: str) -> str:
    """Bump a version string

    >>> bump_version("1.2.3", "minor")
    '1.3.0'
    """
    return str(SemanticVersion.parse(version).bump(kind))


class VersionFile:
    """A file that stores the version string

    Args:
        path: Path to a plain version file or a source file with a
            version assignment
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_text(self) -> str:
        try:
            return self.path.read_text()
        except OSError as e:
            raise VersionError(f"Cannot read version file {self.path}: {e}") from e

    def read(self) -> SemanticVersion:
        """Read and parse the stored version"""
        text = self._read_text()
        match = ASSIGNMENT_PATTERN.search(text)
        if match:
            return SemanticVersion.parse(match.group("version"))
        return SemanticVersion.parse(text)

    def write(self, version: SemanticVersion) -> None:
        """Replace the stored version, keeping the rest of the file"""
        text = self._read_text()
        match = ASSIGNMENT_PATTERN.search(text)
        if match:
            new_text = (
                text[: match.start("version")] + str(version) + text[match.end("version"):]
            )
        else:
            new_text = f"{version}\n"

        self.path.write_text(new_text)
        logger.info("Wrote version %s to %s", version, self.path)

    def bump(self, kind: str) -> SemanticVersion:
        """Bump the stored version and write it back

        Returns:
            The new version
        """
        current = self.read()
        new = current.bump(kind)
        self.write(new)
        return new


class VersionManager:
    """Locates and manages the child's version file"""

    PLAIN_FILES = ["VERSION", "version.txt"]

    def __init__(self, config: Config):
        self.config = config

    def candidates(self) -> List[Path]:
        """Version file candidates, most specific first"""
        root = self.config.project_path
        configured = self.config.version_file
        if configured:
            return [root / configured]

        lib = self.config.lib_dir
        paths = [lib / self.config.child_name / "version.rb"]
        paths.extend(sorted(lib.glob("*/version.rb")))
        paths.extend(sorted(lib.glob("*/version.py")))
        paths.extend(root / name for name in self.PLAIN_FILES)
        return paths

    def locate(self) -> VersionFile:
        """Find the version file

        Raises:
            VersionError: If no candidate exists
        """
        for path in self.candidates():
            if path.is_file():
                logger.debug("Using version file %s", path)
                return VersionFile(path)

        if self.config.version_file:
            raise VersionError(f"Version file not found: {self.config.version_file}")
        raise VersionError(
            "No version file found. Set 'version.file' in .submoduler.yml"
        )

    def current(self) -> SemanticVersion:
        return self.locate().read()

    def bump(self, kind: str) -> SemanticVersion:
        return self.locate().bump(kind)
