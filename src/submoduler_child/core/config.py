"""Configuration parser for submoduler-child

Handles loading, validation, and default values for .submoduler.yml
"""
from pathlib import Path
from typing import Any, Dict, List, Optional
import copy

import yaml

from submoduler_child.errors import ConfigError


CONFIG_FILENAME = ".submoduler.yml"
CHILD_TYPE = "child"
DEFAULT_PARENT_PATH = "../../"


class Config:
    """Configuration for a child submodule

    Loads .submoduler.yml from the project root and merges it over
    DEFAULT_CONFIG. One instance is created per command invocation and
    handed to every component that needs it.
    """

    DEFAULT_CONFIG: Dict[str, Any] = {
        "submoduler": {
            "childname": None,
            "type": None,
            "path": None,
        },
        "paths": {
            "lib": "lib",
            "spec": "spec",
        },
        "parent": {
            "path": None,
        },
        "steering": {
            "dir": ".kiro/steering",
            "sources": [
                "vendor/submoduler_parent/.kiro/steering",
                "vendor/submoduler_child/.kiro/steering",
                ".kiro/steering",
            ],
        },
        "test": {
            "command": "bundle exec rspec",
        },
        "build": {
            "command": "gem build {gemspec}",
        },
        "version": {
            "file": None,
        },
        "release": {
            "remote": "origin",
            "token_env": "GITHUB_TOKEN",
            "api_url": "https://api.github.com",
        },
    }

    def __init__(self, project_path: str = "."):
        """Initialize configuration for a project

        Args:
            project_path: Path to the child submodule root
        """
        self.project_path = Path(project_path).resolve()
        self.config_file = self.project_path / CONFIG_FILENAME
        self._config: Optional[Dict[str, Any]] = None

    def exists(self) -> bool:
        """Check whether the configuration file is present"""
        return self.config_file.exists()

    def load(self) -> Dict[str, Any]:
        """Load and merge configuration

        Returns:
            Merged configuration dict with defaults applied

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping
        """
        if self._config is None:
            config = copy.deepcopy(self.DEFAULT_CONFIG)

            if self.config_file.exists():
                try:
                    user_config = yaml.safe_load(self.config_file.read_text())
                except yaml.YAMLError as e:
                    raise ConfigError(f"Cannot parse {CONFIG_FILENAME}: {e}") from e

                if user_config is not None and not isinstance(user_config, dict):
                    raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping of sections")
                if user_config:
                    config = self._merge_config(config, user_config)

            self._config = config

        return self._config

    def _merge_config(
        self, default: Dict[str, Any], user: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep merge user config with defaults

        Empty sections in the file (e.g. a ``parent:`` header with only
        comments below it) keep their defaults.

        Args:
            default: Default configuration
            user: User-provided configuration

        Returns:
            Merged configuration
        """
        result = copy.deepcopy(default)

        for key, value in user.items():
            if key in result and isinstance(result[key], dict):
                if isinstance(value, dict):
                    result[key] = self._merge_config(result[key], value)
                elif value is not None:
                    raise ConfigError(f"Section '{key}' must be a mapping")
            else:
                result[key] = value

        return result

    def save(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Save configuration to file

        Args:
            config: Configuration to save, or current config if None
        """
        to_save = config or self._config or self.load()
        self.config_file.write_text(yaml.dump(to_save, default_flow_style=False, sort_keys=False))
        self._config = None

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key

        Args:
            key: Dot-notation key (e.g., "submoduler.childname")
            default: Default value if not found or empty

        Returns:
            Configuration value or default
        """
        value: Any = self.load()
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return default if value is None else value

    def validate_child(self) -> None:
        """Verify this project is a configured child submodule

        Raises:
            ConfigError: If the file is missing or not a child record
        """
        if not self.exists():
            raise ConfigError(
                f"Not in a Submoduler directory. Missing {CONFIG_FILENAME}"
            )

        record_type = self.get("submoduler.type")
        if record_type is None:
            raise ConfigError("Invalid configuration: missing 'submoduler.type'")
        if str(record_type) != CHILD_TYPE:
            raise ConfigError(
                f"Invalid configuration: type is '{record_type}', expected '{CHILD_TYPE}'"
            )

    @property
    def child_name(self) -> str:
        """Child submodule name, falling back to the directory name"""
        return str(self.get("submoduler.childname", self.project_path.name))

    @property
    def parent_path(self) -> str:
        """Path to the parent repository root, relative to the child"""
        return str(
            self.get("submoduler.path")
            or self.get("parent.path")
            or DEFAULT_PARENT_PATH
        )

    @property
    def lib_dir(self) -> Path:
        return self.project_path / self.get("paths.lib", "lib")

    @property
    def steering_dir(self) -> str:
        """Steering directory, relative to the project root"""
        return str(self.get("steering.dir", ".kiro/steering"))

    @property
    def steering_sources(self) -> List[str]:
        """Ordered steering source directories, relative to the parent"""
        sources = self.get("steering.sources", [])
        if not isinstance(sources, list):
            raise ConfigError("'steering.sources' must be a list")
        return [str(s) for s in sources]

    @property
    def test_command(self) -> str:
        return str(self.get("test.command", "bundle exec rspec"))

    @property
    def build_command(self) -> str:
        return str(self.get("build.command", "gem build {gemspec}"))

    @property
    def version_file(self) -> Optional[str]:
        return self.get("version.file")

    @property
    def release_remote(self) -> str:
        return str(self.get("release.remote", "origin"))

    @property
    def release_token_env(self) -> str:
        return str(self.get("release.token_env", "GITHUB_TOKEN"))

    @property
    def release_api_url(self) -> str:
        return str(self.get("release.api_url", "https://api.github.com")).rstrip("/")
