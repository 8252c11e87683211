"""Tests for the status reporter"""
import pytest

from submoduler_child.core.config import Config
from submoduler_child.core.git import GitManager
from submoduler_child.status import StatusReporter


@pytest.fixture
def reporter(child_repo):
    config = Config(str(child_repo))
    return StatusReporter(config, GitManager(str(child_repo)))


def test_clean_child(reporter):
    """Test a freshly pushed child"""
    status = reporter.collect()

    assert status.child_name == "demo_gem"
    assert status.working_tree.is_clean
    assert status.branch.name == "main"
    assert (status.branch.ahead, status.branch.behind) == (0, 0)


def test_two_untracked_files(child_repo, reporter):
    """Test untracked files are listed and the tree is not clean"""
    (child_repo / "one.md").write_text("1")
    (child_repo / "two.md").write_text("2")

    tree = reporter.collect().working_tree

    assert sorted(tree.untracked) == ["one.md", "two.md"]
    assert tree.modified == []
    assert tree.staged == []
    assert not tree.is_clean


def test_untracked_names_are_not_escaped(child_repo, reporter):
    """Test non-ASCII and control characters appear as the real filename"""
    (child_repo / "café.md").write_text("1")
    (child_repo / "tab\there.md").write_text("2")

    tree = reporter.collect().working_tree

    assert sorted(tree.untracked) == ["café.md", "tab\there.md"]


def test_staged_and_modified(child_repo, reporter, run_git):
    """Test staged and modified files are told apart"""
    version_rb = child_repo / "lib" / "demo_gem" / "version.rb"
    version_rb.write_text('VERSION = "1.2.4"\n')
    run_git(child_repo, "add", "lib/demo_gem/version.rb")
    (child_repo / ".submoduler.yml").write_text("submoduler:\n  type: child\n")

    tree = reporter.collect().working_tree

    assert tree.staged == ["lib/demo_gem/version.rb"]
    assert tree.modified == [".submoduler.yml"]


def test_no_upstream(tmp_path, run_git):
    """Test a branch without a tracking branch"""
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init")
    run_git(repo, "symbolic-ref", "HEAD", "refs/heads/main")

    reporter = StatusReporter(Config(str(repo)), GitManager(str(repo)))
    branch = reporter.collect().branch

    assert branch.name == "main"
    assert not branch.has_upstream
    assert not branch.is_detached


def test_detached_head(fake_runner):
    """Test detached HEAD reporting"""
    fake_runner.on("git branch --show-current", output="\n")
    reporter = StatusReporter(Config("."), GitManager(".", runner=fake_runner))

    branch = reporter.collect().branch

    assert branch.is_detached
    assert not fake_runner.called("git rev-list")


def test_ahead_and_behind(fake_runner):
    """Test ahead/behind counts from rev-list"""
    fake_runner.on("git branch --show-current", output="feature\n")
    fake_runner.on("git rev-list", output="2\t5\n")
    reporter = StatusReporter(Config("."), GitManager(".", runner=fake_runner))

    branch = reporter.collect().branch

    assert (branch.ahead, branch.behind) == (2, 5)
    assert fake_runner.called("git rev-list") == [
        "git rev-list --left-right --count feature...feature@{u}"
    ]


def test_git_failure_is_reported(fake_runner):
    """Test a failing git status becomes an error, not an exception"""
    fake_runner.on("git status", output="", success=False)
    reporter = StatusReporter(Config("."), GitManager(".", runner=fake_runner))

    tree = reporter.collect().working_tree

    assert tree.error is not None
    assert not tree.is_clean
