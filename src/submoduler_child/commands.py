"""Command handlers for submoduler-child

Each CommandKind maps to one Command subclass. Handlers receive the
project configuration in their constructor and return an exit code
from execute(). Errors are raised as SubmodulerError and reported by
the CLI.
"""
import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Type

import click

from submoduler_child.core.config import CONFIG_FILENAME, Config
from submoduler_child.core.git import GitManager
from submoduler_child.core.runner import CommandRunner
from submoduler_child.core.version import VersionManager
from submoduler_child.errors import ConfigError
from submoduler_child.status import RepositoryStatus, StatusReporter
from submoduler_child.symlinks import ReconcileReport, SymlinkReconciler
from submoduler_child.tasks import find_gemspec, gemspec_name, run_build, run_tests
from submoduler_child.templates import render_config
from submoduler_child.workflow import Step, StepResult, UpdateWorkflow


class CommandKind(str, Enum):
    """Commands understood by the CLI"""

    INIT = "init"
    STATUS = "status"
    TEST = "test"
    VERSION = "version"
    BUILD = "build"
    SYMLINK_BUILD = "symlink_build"
    UPDATE = "update"

    @property
    def description(self) -> str:
        return DESCRIPTIONS[self]

    @property
    def requires_child(self) -> bool:
        """Whether .submoduler.yml must exist and describe a child"""
        return self is not CommandKind.INIT


DESCRIPTIONS: Dict[CommandKind, str] = {
    CommandKind.INIT: "Initialize a new Submoduler child submodule",
    CommandKind.STATUS: "Display status of the child submodule",
    CommandKind.TEST: "Run tests in the child submodule",
    CommandKind.VERSION: "Display and manage version information",
    CommandKind.BUILD: "Build the child submodule gem package",
    CommandKind.SYMLINK_BUILD: "Build symlinks from vendor gems to child .kiro/steering",
    CommandKind.UPDATE: "Run full update workflow (tests, commit, bump, push)",
}


def success(message: str) -> None:
    click.secho(message, fg="green")


def warning(message: str) -> None:
    click.secho(message, fg="yellow")


def failure(message: str) -> None:
    click.secho(message, fg="red", err=True)


class Command(ABC):
    """Base class for command handlers"""

    kind: CommandKind

    def __init__(self, config: Config, runner: Optional[CommandRunner] = None):
        self.config = config
        self.runner = runner or CommandRunner(config.project_path)

    @property
    def git(self) -> GitManager:
        return GitManager(str(self.config.project_path), runner=self.runner)

    @abstractmethod
    def execute(self, **options: Any) -> int:
        """Run the command and return its exit code"""


class InitCommand(Command):
    kind = CommandKind.INIT

    CHILD_DIRS = ("lib", "spec", "bin")

    def execute(self, name: Optional[str] = None, **options: Any) -> int:
        click.echo("Initializing Submoduler Child...")

        if self.config.exists():
            raise ConfigError(f"{CONFIG_FILENAME} already exists")

        child_name = name or self.detect_name()
        self.config.config_file.write_text(render_config(child_name))
        success(f"✓ Created {CONFIG_FILENAME}")

        for dirname in self.CHILD_DIRS:
            path = self.config.project_path / dirname
            if not path.is_dir():
                path.mkdir()
                success(f"✓ Created {dirname}/")

        success(f"✓ Initialized Submoduler Child: {child_name}")
        click.echo("")
        click.echo("Next steps:")
        click.echo(f"  1. Review {CONFIG_FILENAME} configuration")
        click.echo("  2. Run 'submoduler-child status' to verify setup")
        return 0

    def detect_name(self) -> str:
        """Gem name from the gemspec, else the directory name"""
        gemspec = find_gemspec(self.config.project_path)
        if gemspec is not None:
            name = gemspec_name(gemspec)
            if name:
                return name
        return self.config.project_path.name


class StatusCommand(Command):
    kind = CommandKind.STATUS

    def execute(self, output_json: bool = False, **options: Any) -> int:
        status = StatusReporter(self.config, self.git).collect()

        if output_json:
            click.echo(json.dumps(status.to_dict(), indent=2))
        else:
            self.render(status)

        return 1 if status.working_tree.error else 0

    def render(self, status: RepositoryStatus) -> None:
        click.echo(f"=== Child Submodule: {status.child_name} ===")
        click.echo("")
        click.echo("Repository Status:")

        tree = status.working_tree
        if tree.error:
            failure(f"  ✗ Error checking git status: {tree.error}")
        elif tree.is_clean:
            success("  ✓ Working tree is clean")
        else:
            warning("  ✗ Working tree has changes:")
            for label, files in (
                ("Staged", tree.staged),
                ("Modified", tree.modified),
                ("Untracked", tree.untracked),
            ):
                if files:
                    click.echo(f"    {label}:")
                    for filename in files:
                        click.echo(f"      {filename}")
        click.echo("")

        click.echo("Branch Information:")
        branch = status.branch
        if branch.error:
            failure(f"  ✗ Error reading branch: {branch.error}")
        elif branch.is_detached:
            click.echo("  ℹ Not on any branch (detached HEAD)")
        else:
            click.echo(f"  Current branch: {branch.name}")
            if not branch.has_upstream:
                click.echo("  ℹ No remote tracking branch")
            elif branch.ahead and branch.behind:
                warning(
                    f"  ⚠ Branch is {branch.ahead} commit(s) ahead and "
                    f"{branch.behind} commit(s) behind remote"
                )
            elif branch.ahead:
                warning(f"  ↑ Branch is {branch.ahead} commit(s) ahead of remote")
            elif branch.behind:
                warning(f"  ↓ Branch is {branch.behind} commit(s) behind remote")
            else:
                success("  ✓ Branch is up to date with remote")


class TestCommand(Command):
    kind = CommandKind.TEST
    __test__ = False

    def execute(self, **options: Any) -> int:
        click.echo(f"Running tests: {self.config.test_command}")
        result = run_tests(self.config, self.runner)
        if result.success:
            success("✓ Tests passed")
            return 0

        failure(f"✗ Tests failed (exit status {result.returncode})")
        if result.error:
            failure(result.error.strip())
        return 1


class VersionCommand(Command):
    kind = CommandKind.VERSION

    def execute(self, bump: Optional[str] = None, **options: Any) -> int:
        version_file = VersionManager(self.config).locate()
        current = version_file.read()

        if bump is None:
            click.echo(f"{self.config.child_name} {current}")
            click.echo(f"Version file: {version_file.path}")
            return 0

        new = version_file.bump(bump)
        success(f"✓ Version bumped: {current} → {new}")
        return 0


class BuildCommand(Command):
    kind = CommandKind.BUILD

    def execute(self, **options: Any) -> int:
        click.echo(f"Building {self.config.child_name}...")
        result = run_build(self.config, self.runner)
        if result.success:
            success("✓ Build complete")
            return 0

        failure(f"✗ Build failed (exit status {result.returncode})")
        if result.error:
            failure(result.error.strip())
        return 1


class SymlinkBuildCommand(Command):
    kind = CommandKind.SYMLINK_BUILD

    def execute(self, dry_run: bool = False, **options: Any) -> int:
        click.echo("")
        click.echo("=== Building Symlinks (Child) ===")
        if dry_run:
            warning("Dry run: no files will be changed")

        reconciler = SymlinkReconciler.from_config(self.config, dry_run=dry_run)
        click.echo(f"✓ Steering directory: {self.config.steering_dir}")
        click.echo(f"✓ Parent path: {self.config.parent_path}")

        report = reconciler.reconcile()
        self.render(report)
        return 0

    def render(self, report: ReconcileReport) -> None:
        for message in report.warnings:
            warning(f"⚠ {message}")

        click.echo("")
        click.echo("=== Symlink Build Results ===")
        if report.created:
            success(f"✓ Created: {len(report.created)} files")
            for name in report.created:
                click.echo(f"  + {name}")
        if report.updated:
            click.echo(f"↻ Updated: {len(report.updated)} files")
            for name in report.updated:
                click.echo(f"  ↻ {name}")
        if report.skipped:
            warning(f"⊘ Skipped: {len(report.skipped)} files (already exist)")
            for name in report.skipped:
                click.echo(f"  ⊘ {name}")
        if report.broken:
            failure(f"✗ Broken: {len(report.broken)} symlinks")
            for name in report.broken:
                failure(f"  ✗ {name}")

        click.echo("")
        click.echo(f"Total symlinks in {self.config.steering_dir}: {report.total_links}")


STEP_LABELS: Dict[Step, str] = {
    Step.RUN_TESTS: "Running tests...",
    Step.COMMIT_CHANGES: "Committing changes...",
    Step.BUMP_VERSION: "Bumping version...",
    Step.COMMIT_VERSION: "Committing version bump...",
    Step.PUSH: "Pushing changes to remote...",
    Step.CREATE_RELEASE: "Creating GitHub release...",
}


class UpdateCommand(Command):
    kind = CommandKind.UPDATE

    def execute(self, message: Optional[str] = None, release: bool = False, **options: Any) -> int:
        workflow = UpdateWorkflow(
            self.config,
            self.git,
            self.runner,
            message=message,
            release=release,
            on_step_start=lambda step: click.echo(STEP_LABELS[step]),
            on_step_result=self.report_step,
        )

        click.secho("Starting update workflow...", fg="cyan")
        outcome = workflow.run()

        if outcome.aborted:
            failed = outcome.failed_step
            step_name = failed.step.value if failed else "unknown"
            failure(f"✗ Update aborted at {step_name}")
            return outcome.exit_code

        success("Update completed successfully!")
        return outcome.exit_code

    @staticmethod
    def report_step(result: StepResult) -> None:
        if not result.message:
            return
        if not result.success:
            failure(f"  ✗ {result.message}")
        elif result.skipped:
            warning(f"  ⊘ {result.message}")
        else:
            success(f"  ✓ {result.message}")


HANDLERS: Dict[CommandKind, Type[Command]] = {
    CommandKind.INIT: InitCommand,
    CommandKind.STATUS: StatusCommand,
    CommandKind.TEST: TestCommand,
    CommandKind.VERSION: VersionCommand,
    CommandKind.BUILD: BuildCommand,
    CommandKind.SYMLINK_BUILD: SymlinkBuildCommand,
    CommandKind.UPDATE: UpdateCommand,
}


def dispatch(
    kind: CommandKind,
    project: str = ".",
    runner: Optional[CommandRunner] = None,
    **options: Any,
) -> int:
    """Build the handler for a command and execute it

    Every command except init first verifies that the project is a
    configured child submodule.

    Raises:
        ConfigError: If the child configuration is missing or invalid
    """
    config = Config(project)
    if kind.requires_child:
        config.validate_child()

    handler = HANDLERS[kind](config, runner=runner)
    return handler.execute(**options)
