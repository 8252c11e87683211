"""Tests for semantic version handling"""
import pytest

from submoduler_child.core.config import CONFIG_FILENAME, Config
from submoduler_child.core.version import (
    SemanticVersion,
    VersionFile,
    VersionManager,
    bump_version,
)
from submoduler_child.errors import VersionError


@pytest.mark.parametrize(
    "kind, expected",
    [
        ("patch", "1.2.4"),
        ("minor", "1.3.0"),
        ("major", "2.0.0"),
    ],
)
def test_bump_version(kind, expected):
    """Test each bump kind on 1.2.3"""
    assert bump_version("1.2.3", kind) == expected


def test_parse_prerelease():
    """Test parsing a prerelease suffix"""
    version = SemanticVersion.parse("2.0.0-beta.1")

    assert (version.major, version.minor, version.patch) == (2, 0, 0)
    assert version.prerelease == "beta.1"
    assert str(version) == "2.0.0-beta.1"


def test_bump_drops_prerelease():
    """Test that a bump produces a plain release version"""
    assert bump_version("1.4.0-rc.2", "patch") == "1.4.1"


def test_parse_strips_whitespace():
    """Test version files with trailing newlines"""
    assert str(SemanticVersion.parse("0.9.12\n")) == "0.9.12"


@pytest.mark.parametrize("text", ["1.2", "1.2.x", "v1.2.3", "", "1.2.3.4", "-1.2.3"])
def test_parse_invalid(text):
    """Test that malformed versions are rejected"""
    with pytest.raises(VersionError):
        SemanticVersion.parse(text)


def test_unknown_bump_kind():
    """Test an unsupported bump kind"""
    with pytest.raises(VersionError, match="Unknown bump kind"):
        bump_version("1.2.3", "build")


def test_version_file_plain(tmp_path):
    """Test a file that holds only the version"""
    path = tmp_path / "VERSION"
    path.write_text("0.1.0\n")
    version_file = VersionFile(path)

    new = version_file.bump("minor")

    assert str(new) == "0.2.0"
    assert path.read_text() == "0.2.0\n"


def test_version_file_ruby_assignment(tmp_path):
    """Test a gem version.rb keeps its surrounding code"""
    path = tmp_path / "version.rb"
    path.write_text("module Demo\n  VERSION = '1.9.9'.freeze\nend\n")

    VersionFile(path).bump("patch")

    assert path.read_text() == "module Demo\n  VERSION = '1.9.10'.freeze\nend\n"


def test_version_file_python_assignment(tmp_path):
    """Test a __version__ assignment"""
    path = tmp_path / "version.py"
    path.write_text('"""Version."""\n__version__ = "3.0.1"\n')

    assert str(VersionFile(path).read()) == "3.0.1"


def test_version_file_invalid_content(tmp_path):
    """Test a version file without a parsable version"""
    path = tmp_path / "VERSION"
    path.write_text("not a version\n")

    with pytest.raises(VersionError):
        VersionFile(path).bump("patch")
    assert path.read_text() == "not a version\n"


@pytest.fixture
def child(tmp_path):
    project = tmp_path / "demo_gem"
    project.mkdir()
    (project / CONFIG_FILENAME).write_text("submoduler:\n  childname: demo_gem\n  type: child\n")
    return project


def test_manager_finds_gem_version(child):
    """Test lib/<childname>/version.rb discovery"""
    version_dir = child / "lib" / "demo_gem"
    version_dir.mkdir(parents=True)
    (version_dir / "version.rb").write_text('VERSION = "0.4.2"\n')
    (child / "VERSION").write_text("9.9.9\n")

    manager = VersionManager(Config(str(child)))

    assert str(manager.current()) == "0.4.2"


def test_manager_falls_back_to_version_file(child):
    """Test the plain VERSION file"""
    (child / "VERSION").write_text("1.0.0\n")

    manager = VersionManager(Config(str(child)))

    assert str(manager.bump("major")) == "2.0.0"
    assert (child / "VERSION").read_text() == "2.0.0\n"


def test_manager_configured_file(child):
    """Test an explicit version.file setting"""
    (child / CONFIG_FILENAME).write_text(
        "submoduler:\n  type: child\nversion:\n  file: meta/RELEASE\n"
    )
    (child / "meta").mkdir()
    (child / "meta" / "RELEASE").write_text("5.6.7")

    assert str(VersionManager(Config(str(child))).current()) == "5.6.7"


def test_manager_no_version_file(child):
    """Test a child without any version file"""
    with pytest.raises(VersionError, match="No version file found"):
        VersionManager(Config(str(child))).locate()
