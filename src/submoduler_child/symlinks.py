"""Steering directory symlink reconciliation

Mirrors the markdown files of several source directories (the vendored
parent and child gems and the parent's own steering directory) into the
child's steering directory as relative symlinks. Regular files already
in the steering directory belong to the user and are never replaced.
"""
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Set

from submoduler_child.core.config import Config
from submoduler_child.errors import SymlinkError

logger = logging.getLogger(__name__)

MARKDOWN_GLOB = "*.md"


class LinkStatus(str, Enum):
    """Outcome of reconciling one steering file"""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    BROKEN = "broken"


@dataclass
class SymlinkEntry:
    """A steering file handled during one reconciliation run

    Attributes:
        filename: Name of the entry in the steering directory
        source: Link value, relative to the steering directory
        status: Classification of the entry
    """

    filename: str
    source: str
    status: LinkStatus

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary"""
        return {
            "filename": self.filename,
            "source": self.source,
            "status": self.status.value,
        }


@dataclass
class ReconcileReport:
    """Result of a reconciliation run"""

    target_dir: Path
    entries: List[SymlinkEntry] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_links: int = 0

    def names(self, status: LinkStatus) -> List[str]:
        """Filenames with the given classification, in processing order"""
        return [e.filename for e in self.entries if e.status is status]

    @property
    def created(self) -> List[str]:
        return self.names(LinkStatus.CREATED)

    @property
    def updated(self) -> List[str]:
        return self.names(LinkStatus.UPDATED)

    @property
    def skipped(self) -> List[str]:
        return self.names(LinkStatus.SKIPPED)

    @property
    def broken(self) -> List[str]:
        return self.names(LinkStatus.BROKEN)

    def counts(self) -> Dict[str, int]:
        """Number of entries per classification"""
        return {status.value: len(self.names(status)) for status in LinkStatus}


class SymlinkReconciler:
    """Builds the steering directory from an ordered list of sources

    Args:
        target_dir: Steering directory to populate
        sources: Candidate source directories, in priority order
        dry_run: Classify entries without touching the filesystem
    """

    def __init__(self, target_dir: Path, sources: List[Path], dry_run: bool = False):
        self.target_dir = Path(target_dir)
        self.sources = [Path(s) for s in sources]
        self.dry_run = dry_run

    @classmethod
    def from_config(cls, config: Config, dry_run: bool = False) -> "SymlinkReconciler":
        """Create a reconciler for the configured steering layout

        Source directories are resolved relative to the parent
        repository location, the target relative to the child root.
        """
        root = config.project_path
        parent = root / config.parent_path
        return cls(
            target_dir=root / config.steering_dir,
            sources=[parent / source for source in config.steering_sources],
            dry_run=dry_run,
        )

    def reconcile(self) -> ReconcileReport:
        """Link every source markdown file into the target directory

        Returns:
            ReconcileReport with one entry per attempted link plus one per
            broken link found afterwards

        Raises:
            SymlinkError: If the target directory cannot be created
        """
        report = ReconcileReport(target_dir=self.target_dir)
        self._ensure_target()

        planned: Set[str] = set()
        for source_dir in self.sources:
            self._link_files_from(source_dir, report, planned)

        self._find_broken(report)
        report.total_links = self._count_links()
        return report

    def _ensure_target(self) -> None:
        if self.target_dir.is_dir():
            return
        if self.dry_run:
            logger.info("[DRY RUN] Would create %s", self.target_dir)
            return

        try:
            self.target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SymlinkError(f"Cannot create {self.target_dir}: {e}") from e
        logger.info("Created %s", self.target_dir)

    def _link_files_from(
        self, source_dir: Path, report: ReconcileReport, planned: Set[str]
    ) -> None:
        """Link the markdown files found directly inside one source"""
        if not source_dir.is_dir():
            message = f"Source directory not found: {source_dir}"
            logger.warning(message)
            report.warnings.append(message)
            return

        if self._same_directory(source_dir, self.target_dir):
            message = f"Source directory is the steering directory itself: {source_dir}"
            logger.warning(message)
            report.warnings.append(message)
            return

        for source_file in sorted(source_dir.glob(MARKDOWN_GLOB)):
            filename = source_file.name
            target = self.target_dir / filename
            link_value = self._link_value(source_file)

            if target.is_symlink() or filename in planned:
                status = LinkStatus.UPDATED
            elif target.exists():
                logger.debug("Skipping %s, a regular file is in the way", target)
                report.entries.append(SymlinkEntry(filename, link_value, LinkStatus.SKIPPED))
                continue
            else:
                status = LinkStatus.CREATED

            if self.dry_run:
                logger.info("[DRY RUN] Would link %s -> %s", target, link_value)
            else:
                try:
                    if target.is_symlink():
                        target.unlink()
                    os.symlink(link_value, target)
                except OSError as e:
                    message = f"Cannot link {target}: {e}"
                    logger.warning(message)
                    report.warnings.append(message)
                    continue

            planned.add(filename)
            report.entries.append(SymlinkEntry(filename, link_value, status))

    def _link_value(self, source_file: Path) -> str:
        """Path of the link target, relative to the steering directory

        A source that is itself a symlink is followed one level so the
        new link does not chain through it.
        """
        real_source = source_file
        if source_file.is_symlink():
            pointed = Path(os.readlink(source_file))
            real_source = pointed if pointed.is_absolute() else source_file.parent / pointed

        return os.path.relpath(
            os.path.abspath(real_source), os.path.abspath(self.target_dir)
        )

    def _find_broken(self, report: ReconcileReport) -> None:
        if not self.target_dir.is_dir():
            return

        for entry in sorted(self.target_dir.iterdir()):
            if entry.is_symlink() and not entry.exists():
                link_value = os.readlink(entry)
                logger.warning("Broken symlink %s -> %s", entry, link_value)
                report.entries.append(SymlinkEntry(entry.name, link_value, LinkStatus.BROKEN))

    def _count_links(self) -> int:
        if not self.target_dir.is_dir():
            return 0
        return sum(1 for entry in self.target_dir.iterdir() if entry.is_symlink())

    @staticmethod
    def _same_directory(first: Path, second: Path) -> bool:
        try:
            return first.resolve() == second.resolve()
        except OSError:
            return False

