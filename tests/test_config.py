"""Tests for configuration management"""
import pytest

from submoduler_child.core.config import CONFIG_FILENAME, Config
from submoduler_child.errors import ConfigError


@pytest.fixture
def temp_project(tmp_path):
    """Create a temporary project directory"""
    project = tmp_path / "child_project"
    project.mkdir()
    return project


@pytest.fixture
def sample_config(temp_project):
    """Create a sample configuration file"""
    config_file = temp_project / CONFIG_FILENAME
    config_content = """
submoduler:
  childname: my_gem
  type: child
  path: ../..

paths:
  lib: lib
  spec: spec

steering:
  sources:
    - docs/steering

test:
  command: "bundle exec rake spec"
"""
    config_file.write_text(config_content)
    return temp_project


def test_config_load_default(temp_project):
    """Test loading defaults when no file exists"""
    config = Config(str(temp_project))
    loaded = config.load()

    assert "submoduler" in loaded
    assert "paths" in loaded
    assert loaded["steering"]["dir"] == ".kiro/steering"
    assert not config.exists()


def test_config_merge_user_config(sample_config):
    """Test merging user config with defaults"""
    config = Config(str(sample_config))

    # User overrides
    assert config.child_name == "my_gem"
    assert config.test_command == "bundle exec rake spec"
    assert config.steering_sources == ["docs/steering"]

    # Default values preserved
    assert config.steering_dir == ".kiro/steering"
    assert config.release_token_env == "GITHUB_TOKEN"


def test_get_dot_notation(sample_config):
    """Test dot-notation lookups"""
    config = Config(str(sample_config))

    assert config.get("submoduler.type") == "child"
    assert config.get("paths.lib") == "lib"
    assert config.get("missing.key", "fallback") == "fallback"


def test_validate_child_passes(sample_config):
    """Test validation of a child record"""
    Config(str(sample_config)).validate_child()


def test_validate_child_missing_file(temp_project):
    """Test validation without a config file"""
    with pytest.raises(ConfigError, match="Missing .submoduler.yml"):
        Config(str(temp_project)).validate_child()


def test_validate_child_wrong_type(temp_project):
    """Test validation rejects a parent record"""
    (temp_project / CONFIG_FILENAME).write_text("submoduler:\n  childname: x\n  type: parent\n")

    with pytest.raises(ConfigError, match="expected 'child'"):
        Config(str(temp_project)).validate_child()


def test_validate_child_missing_type(temp_project):
    """Test validation rejects a record without a type"""
    (temp_project / CONFIG_FILENAME).write_text("submoduler:\n  childname: x\n")

    with pytest.raises(ConfigError, match="missing 'submoduler.type'"):
        Config(str(temp_project)).validate_child()


def test_invalid_yaml(temp_project):
    """Test that unparsable YAML is a configuration error"""
    (temp_project / CONFIG_FILENAME).write_text("submoduler: [unclosed\n")

    with pytest.raises(ConfigError):
        Config(str(temp_project)).load()


def test_non_mapping_section(temp_project):
    """Test that a scalar in place of a section is rejected"""
    (temp_project / CONFIG_FILENAME).write_text("paths: lib\n")

    with pytest.raises(ConfigError, match="must be a mapping"):
        Config(str(temp_project)).load()


def test_parent_path_precedence(temp_project):
    """Test submoduler.path wins over parent.path"""
    config_file = temp_project / CONFIG_FILENAME

    config_file.write_text("submoduler:\n  type: child\n")
    assert Config(str(temp_project)).parent_path == "../../"

    config_file.write_text("submoduler:\n  type: child\nparent:\n  path: ../parent\n")
    assert Config(str(temp_project)).parent_path == "../parent"

    config_file.write_text(
        "submoduler:\n  type: child\n  path: /srv/parent\nparent:\n  path: ../parent\n"
    )
    assert Config(str(temp_project)).parent_path == "/srv/parent"


def test_empty_section_keeps_defaults(temp_project):
    """Test a section header with only comments below it"""
    (temp_project / CONFIG_FILENAME).write_text(
        "submoduler:\n  type: child\nparent:\n  # path: ../parent\n"
    )
    config = Config(str(temp_project))

    assert config.parent_path == "../../"


def test_child_name_falls_back_to_directory(temp_project):
    """Test child name without childname key"""
    (temp_project / CONFIG_FILENAME).write_text("submoduler:\n  type: child\n")

    assert Config(str(temp_project)).child_name == "child_project"


def test_config_save_and_reload(temp_project):
    """Test saving configuration"""
    config = Config(str(temp_project))
    loaded = config.load()
    loaded["submoduler"]["type"] = "child"
    loaded["submoduler"]["childname"] = "saved"
    config.save(loaded)

    reloaded = Config(str(temp_project))
    assert reloaded.exists()
    assert reloaded.child_name == "saved"
    reloaded.validate_child()
