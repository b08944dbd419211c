"""
Configuration file support for multicall binaries.

Provides hierarchical configuration loading from:
1. Project config: .multicall.toml or multicall.toml in project root
2. User config: ~/.config/multicall/config.toml

Command-line arguments override config file values, and project config
overrides user config.
"""

import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from multicall.exceptions import ConfigurationError

# Config file names to search for in project directories
CONFIG_FILENAMES = [".multicall.toml", "multicall.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "multicall" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"verbose", "log_level"},
    "install": {"prefix", "resolve_symlink"},
    "rpc": {"socket_path"},
}


@dataclass
class DefaultsConfig:
    """Default options for every command."""

    verbose: bool = False
    log_level: str = "WARNING"


@dataclass
class InstallConfig:
    """Symlink installer configuration."""

    prefix: str | None = None
    resolve_symlink: bool = True


@dataclass
class RpcConfig:
    """Unix socket request/response configuration."""

    socket_path: str | None = None


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    install: InstallConfig = field(default_factory=InstallConfig)
    rpc: RpcConfig = field(default_factory=RpcConfig)

    # Track which file each setting came from
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object

        Raises:
            ConfigurationError: If a config file is unreadable or not valid TOML
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """
    Load a TOML file.

    Raises:
        ConfigurationError: If TOML is invalid or the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}", context={"file": str(path)}) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read config file {path}: {e}", context={"file": str(path)}
        ) from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    if "defaults" in data:
        defaults_data = data["defaults"]
        _warn_unknown_keys(defaults_data, KNOWN_KEYS["defaults"], "defaults", source)

        if "verbose" in defaults_data:
            config.defaults.verbose = defaults_data["verbose"]
            sources["defaults.verbose"] = source
        if "log_level" in defaults_data:
            config.defaults.log_level = str(defaults_data["log_level"]).upper()
            sources["defaults.log_level"] = source

    if "install" in data:
        install_data = data["install"]
        _warn_unknown_keys(install_data, KNOWN_KEYS["install"], "install", source)

        if "prefix" in install_data:
            config.install.prefix = install_data["prefix"]
            sources["install.prefix"] = source
        if "resolve_symlink" in install_data:
            config.install.resolve_symlink = install_data["resolve_symlink"]
            sources["install.resolve_symlink"] = source

    if "rpc" in data:
        rpc_data = data["rpc"]
        _warn_unknown_keys(rpc_data, KNOWN_KEYS["rpc"], "rpc", source)

        if "socket_path" in rpc_data:
            config.rpc.socket_path = rpc_data["socket_path"]
            sources["rpc.socket_path"] = source


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# multicall configuration file
# Place as .multicall.toml in project root or ~/.config/multicall/config.toml for user defaults

[defaults]
# Log every dispatch and symlink operation
# verbose = false

# Logging level when not verbose: DEBUG, INFO, WARNING, ERROR
# log_level = "WARNING"

[install]
# Default symlink prefix for the symlinkops command
# prefix = "tool"

# Follow symlinks to the real binary before installing
# resolve_symlink = true

[rpc]
# Unix socket path for request/response calls into a running instance
# socket_path = "/tmp/multicall.sock"
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
