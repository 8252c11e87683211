"""Update workflow for a child submodule

Runs test → commit → version bump → commit → push → optional release,
stopping at the first required step that fails. Completed steps are
never rolled back.
"""
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple

from submoduler_child.core.config import Config
from submoduler_child.core.git import GitManager
from submoduler_child.core.runner import CommandRunner
from submoduler_child.core.version import BumpKind, VersionManager
from submoduler_child.errors import ConfigError, ReleaseError, SubmodulerError
from submoduler_child.release import GitHubReleaseClient, parse_github_repository
from submoduler_child.tasks import run_tests
from submoduler_child.templates import render_release_body

logger = logging.getLogger(__name__)


class Step(str, Enum):
    """Workflow steps, in execution order"""

    RUN_TESTS = "run_tests"
    COMMIT_CHANGES = "commit_changes"
    BUMP_VERSION = "bump_version"
    COMMIT_VERSION = "commit_version"
    PUSH = "push"
    CREATE_RELEASE = "create_release"


# A failed release is reported but does not abort or fail the workflow
OPTIONAL_STEPS = {Step.CREATE_RELEASE}


@dataclass
class StepResult:
    """Outcome of a single workflow step"""

    step: Step
    success: bool
    message: str = ""
    skipped: bool = False


@dataclass
class WorkflowOutcome:
    """Ordered record of the steps that ran"""

    steps: List[StepResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def exit_code(self) -> int:
        return 1 if self.aborted else 0

    @property
    def failed_step(self) -> Optional[StepResult]:
        """The step that aborted the workflow, if any"""
        if not self.aborted:
            return None
        return self.steps[-1]

    def result_for(self, step: Step) -> Optional[StepResult]:
        for result in self.steps:
            if result.step is step:
                return result
        return None


ReleaseClientFactory = Callable[[str, str], GitHubReleaseClient]


class UpdateWorkflow:
    """Sequences the update steps for a child submodule

    Args:
        config: Child configuration
        git: Git manager for the child repository
        runner: Runner used for the test suite
        message: Commit message for pending changes (required)
        release: Create a hosted release after pushing
        environ: Environment used to look up the release token
        release_client_factory: Builds a release client from
            (token, api_url)
        on_step_start: Called before each step runs
        on_step_result: Called with each step's result
    """

    def __init__(
        self,
        config: Config,
        git: GitManager,
        runner: CommandRunner,
        message: Optional[str],
        release: bool = False,
        environ: Optional[Mapping[str, str]] = None,
        release_client_factory: Optional[ReleaseClientFactory] = None,
        on_step_start: Optional[Callable[[Step], None]] = None,
        on_step_result: Optional[Callable[[StepResult], None]] = None,
    ):
        if not message or not message.strip():
            raise ConfigError("--message (-m) is required")

        self.config = config
        self.git = git
        self.runner = runner
        self.message = message
        self.release = release
        self.environ = os.environ if environ is None else environ
        self.release_client_factory = release_client_factory or GitHubReleaseClient
        self.on_step_start = on_step_start
        self.on_step_result = on_step_result
        self.versions = VersionManager(config)
        self.new_version: Optional[str] = None

    def plan(self) -> List[Tuple[Step, Callable[[], StepResult]]]:
        """Steps to run, in order"""
        steps = [
            (Step.RUN_TESTS, self.run_tests),
            (Step.COMMIT_CHANGES, self.commit_changes),
            (Step.BUMP_VERSION, self.bump_version),
            (Step.COMMIT_VERSION, self.commit_version),
            (Step.PUSH, self.push),
        ]
        if self.release:
            steps.append((Step.CREATE_RELEASE, self.create_release))
        return steps

    def run(self) -> WorkflowOutcome:
        """Execute the workflow

        Returns:
            WorkflowOutcome; exit_code is 1 if a required step failed
        """
        outcome = WorkflowOutcome()

        for step, action in self.plan():
            if self.on_step_start:
                self.on_step_start(step)

            try:
                result = action()
            except (SubmodulerError, OSError) as e:
                logger.debug("Step %s raised %r", step.value, e)
                result = StepResult(step, success=False, message=str(e))

            outcome.steps.append(result)
            if self.on_step_result:
                self.on_step_result(result)

            if not result.success and step not in OPTIONAL_STEPS:
                logger.info("Aborting update workflow at %s", step.value)
                outcome.aborted = True
                break

        return outcome

    def run_tests(self) -> StepResult:
        result = run_tests(self.config, self.runner)
        if not result.success:
            return StepResult(Step.RUN_TESTS, success=False, message="Tests failed! Aborting update.")
        return StepResult(Step.RUN_TESTS, success=True, message="Tests passed")

    def _commit_pending(self, step: Step, message: str) -> StepResult:
        if not self.git.is_dirty():
            return StepResult(step, success=True, message="Working tree clean, nothing to commit", skipped=True)

        self.git.stage_all()
        commit = self.git.commit(message)
        short_hash = commit.short_hash if commit else "?"
        return StepResult(step, success=True, message=f"Committed {short_hash}: {message}")

    def commit_changes(self) -> StepResult:
        return self._commit_pending(Step.COMMIT_CHANGES, self.message)

    def bump_version(self) -> StepResult:
        version_file = self.versions.locate()
        old = version_file.read()
        new = version_file.bump(BumpKind.PATCH.value)
        self.new_version = str(new)
        return StepResult(Step.BUMP_VERSION, success=True, message=f"Version bumped: {old} → {new}")

    def commit_version(self) -> StepResult:
        return self._commit_pending(Step.COMMIT_VERSION, f"Bump version to {self.new_version}")

    def push(self) -> StepResult:
        """Push the branch and tags

        The push results are not checked; a rejected push still lets
        the workflow continue.
        """
        remote = self.config.release_remote
        pushed = self.git.push(remote)
        tags = self.git.push_tags(remote)
        if not (pushed.success and tags.success):
            logger.warning("git push to %s reported a failure", remote)
        return StepResult(Step.PUSH, success=True, message=f"Pushed to {remote}")

    def create_release(self) -> StepResult:
        token_env = self.config.release_token_env
        token = self.environ.get(token_env)
        if not token:
            return StepResult(
                Step.CREATE_RELEASE,
                success=True,
                skipped=True,
                message=f"{token_env} not set. Skipping release creation.",
            )

        remote_url = self.git.get_remote_url(self.config.release_remote)
        if not remote_url:
            raise ReleaseError(f"Remote '{self.config.release_remote}' has no URL")
        repository = parse_github_repository(remote_url)

        tag = self.git.get_latest_tag()
        if not tag:
            return StepResult(
                Step.CREATE_RELEASE, success=True, skipped=True, message="No tag found to release."
            )

        client = self.release_client_factory(token, self.config.release_api_url)
        body = render_release_body(self.config.child_name, tag, self.new_version or "")
        release = client.create_release(repository, tag, name=f"Release {tag}", body=body)
        message = f"GitHub release created: {tag}"
        if release.url:
            message = f"{message} ({release.url})"
        return StepResult(Step.CREATE_RELEASE, success=True, message=message)
