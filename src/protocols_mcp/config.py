"""AI Protocols Server Configuration

Configuration loading with environment variable support and sensible defaults.

Environment Variables:
    PROTOCOLS_CONFIG_PATH: Path to config file (default: protocols-config.yaml in package dir)
    PROTOCOLS_PATH: Override protocols root (directory containing BRAIN/)
    PROTOCOLS_PROJECT_ROOT: Override project directory used for context detection
    PROTOCOLS_LOG_LEVEL: Override logging level

Configuration Schema:
    protocols:
        root: str - Protocols root directory (contains BRAIN/)
        directory: str - Protocol directory name (default: "BRAIN")
        extension: str - Protocol file extension (default: ".md")
    search:
        min_score: int - Minimum score a search result must exceed (default: 0)
        fuzzy_limit: int - Fuzzy matches shown (default: 5)
        match_lines: int - Matching lines shown per search result (default: 2)
        use_context: bool - Re-rank search results by project context (default: True)
    context:
        project_root: str - Project directory inspected for tech stack
    server:
        name: str - MCP server name (default: "ai-protocols")
        log_level: str - Logging level (default: "INFO")
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "protocols-config.yaml"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "protocols": {
        "root": None,  # Use PROTOCOLS_PATH or auto-detected root
        "directory": "BRAIN",
        "extension": ".md",
    },
    "search": {
        "min_score": 0,
        "fuzzy_limit": 5,
        "match_lines": 2,
        "use_context": True,
    },
    "context": {
        "project_root": None,  # Use current working directory
    },
    "server": {
        "name": "ai-protocols",
        "log_level": "INFO",
    },
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge override dict into base dict.

    Args:
        base: Base dictionary (defaults)
        override: Override dictionary (user config)

    Returns:
        Merged dictionary with override values taking precedence
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _resolve_path(path: str | None, base_dir: Path) -> Path | None:
    """
    Resolve a path, making relative paths absolute from base_dir.

    Args:
        path: Path string (absolute or relative) or None
        base_dir: Base directory for relative path resolution

    Returns:
        Resolved absolute Path or None if path was None
    """
    if path is None:
        return None

    path_obj = Path(path)
    if path_obj.is_absolute():
        return path_obj
    return (base_dir / path_obj).resolve()


def _read_config_file(path: Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"top-level value must be a mapping, got {type(data).__name__}")
    return data


def load_config(
    config_path: str | None = None, base_dir: Path | None = None
) -> dict[str, Any]:
    """
    Load configuration from YAML file with environment variable overrides.

    Configuration Loading Order (later overrides earlier):
    1. Default values (DEFAULT_CONFIG)
    2. Config file (from PROTOCOLS_CONFIG_PATH or config_path parameter)
    3. Environment variable overrides (PROTOCOLS_PATH, PROTOCOLS_PROJECT_ROOT,
       PROTOCOLS_LOG_LEVEL)

    Args:
        config_path: Explicit config file path (overrides PROTOCOLS_CONFIG_PATH)
        base_dir: Directory for relative path resolution and default config lookup

    Returns:
        Merged configuration dictionary

    Raises:
        ConfigurationError: If an explicit config file is invalid YAML or unreadable
    """
    if base_dir is None:
        base_dir = Path(__file__).parent

    config = copy.deepcopy(DEFAULT_CONFIG)

    file_path = config_path or os.environ.get("PROTOCOLS_CONFIG_PATH")

    if file_path:
        # Explicit config path - must be valid if it exists
        resolved_path = _resolve_path(file_path, base_dir)
        if resolved_path and resolved_path.exists():
            try:
                config = _deep_merge(config, _read_config_file(resolved_path))
                logger.info(f"Loaded configuration from: {resolved_path}")
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
            except OSError as e:
                raise ConfigurationError(f"Cannot read config file: {e}") from e
        else:
            logger.warning(f"Config file not found (using defaults): {file_path}")
    else:
        default_config_path = base_dir / CONFIG_FILE_NAME
        if default_config_path.exists():
            try:
                config = _deep_merge(config, _read_config_file(default_config_path))
                logger.info(f"Loaded configuration from: {default_config_path}")
            except yaml.YAMLError as e:
                logger.warning(f"Invalid YAML in default config (ignoring): {e}")
            except OSError as e:
                logger.warning(f"Cannot read default config (ignoring): {e}")
        else:
            logger.debug("No config file found, using defaults")

    env_overrides = {
        "PROTOCOLS_PATH": ("protocols", "root"),
        "PROTOCOLS_PROJECT_ROOT": ("context", "project_root"),
        "PROTOCOLS_LOG_LEVEL": ("server", "log_level"),
    }
    for env_var, (section, key) in env_overrides.items():
        value = os.environ.get(env_var)
        if value:
            config.setdefault(section, {})[key] = value
            logger.info(f"{section}.{key} override from env: {value}")

    for section, key in (("protocols", "root"), ("context", "project_root")):
        value = config.get(section, {}).get(key)
        if value:
            config[section][key] = str(_resolve_path(value, base_dir))

    return config


def resolve_protocols_root(
    config: dict[str, Any], package_dir: Path | None = None
) -> Path:
    """
    Resolve the protocols root directory portably.

    Resolution order:
    1. protocols.root from config (already includes PROTOCOLS_PATH)
    2. First parent of the package directory that contains the protocol directory

    Args:
        config: Configuration dictionary from load_config()
        package_dir: Directory to search upwards from (default: this package)

    Returns:
        Protocols root path

    Raises:
        ConfigurationError: If no root can be located
    """
    protocols = config.get("protocols", {})
    configured = protocols.get("root")
    if configured:
        return Path(configured)

    if package_dir is None:
        package_dir = Path(__file__).parent

    directory = protocols.get("directory", "BRAIN")
    for candidate in (package_dir, *package_dir.parents):
        if (candidate / directory).is_dir():
            logger.info(f"Auto-detected protocols root: {candidate}")
            return candidate

    raise ConfigurationError(
        "Could not locate protocols directory. Set PROTOCOLS_PATH environment variable."
    )


def get_project_root(config: dict[str, Any]) -> Path:
    """Project directory used for context detection (default: cwd)."""
    path_str = config.get("context", {}).get("project_root")
    return Path(path_str) if path_str else Path.cwd()


def get_search_config(config: dict[str, Any]) -> dict[str, Any]:
    """Search section merged over defaults."""
    return _deep_merge(DEFAULT_CONFIG["search"], config.get("search", {}))


def configure_logging(config: dict[str, Any]) -> None:
    """Configure root logging from server.log_level (logs go to stderr)."""
    level_name = str(config.get("server", {}).get("log_level", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        logger.warning(f"Unknown log level '{level_name}', using INFO")
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
