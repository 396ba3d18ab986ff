"""
Configuration management for Aura Pulse.

Settings are read from (highest priority first):
1. Values set explicitly via the setters below (e.g. from CLI flags)
2. AURA_PULSE_* environment variables
3. .aura-pulse.toml (local config)
4. pyproject.toml (project-level config)
"""

import os
import tomllib
from pathlib import Path
from typing import Any

# project_root is the parent directory of aura_pulse/
PROJECT_ROOT = Path(__file__).resolve().parent.parent

LOCAL_CONFIG_NAME = ".aura-pulse.toml"
TOOL_SECTION = "aura-pulse"

# Global configuration for SSL verification
# Can be set to False by CLI --insecure flag
VERIFY_SSL = True

# Default cache directory: ~/.cache/aura-pulse
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "aura-pulse"
# Default TTL: 24 hours (in seconds)
DEFAULT_CACHE_TTL = 24 * 60 * 60
# Trailing commit window for velocity and refactor analysis
DEFAULT_WINDOW_DAYS = 30

_CACHE_DIR: Path | None = None
_CACHE_TTL: int | None = None
_WINDOW_DAYS: int | None = None


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def get_tool_config() -> dict[str, Any]:
    """
    Return the [tool.aura-pulse] table.

    The local config file wins; pyproject.toml is only consulted when the
    local file has no such table.
    """
    for config_path in (
        PROJECT_ROOT / LOCAL_CONFIG_NAME,
        PROJECT_ROOT / "pyproject.toml",
    ):
        config = load_config_file(config_path)
        section = config.get("tool", {}).get(TOOL_SECTION)
        if section:
            return section
    return {}


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def set_verify_ssl(verify: bool) -> None:
    """
    Set the SSL verification setting globally.

    Args:
        verify: Whether to verify SSL certificates.
    """
    global VERIFY_SSL
    VERIFY_SSL = verify


def get_verify_ssl() -> bool:
    return VERIFY_SSL


def get_cache_dir() -> Path:
    """
    Get the cache directory path.

    Priority:
    1. Explicitly set value via set_cache_dir()
    2. AURA_PULSE_CACHE_DIR environment variable
    3. [tool.aura-pulse.cache] directory
    4. Default: ~/.cache/aura-pulse
    """
    if _CACHE_DIR is not None:
        return _CACHE_DIR

    env_cache_dir = os.getenv("AURA_PULSE_CACHE_DIR")
    if env_cache_dir:
        return Path(env_cache_dir).expanduser()

    cache_config = get_tool_config().get("cache", {})
    if "directory" in cache_config:
        return Path(cache_config["directory"]).expanduser()

    return DEFAULT_CACHE_DIR


def set_cache_dir(path: Path | str) -> None:
    global _CACHE_DIR
    _CACHE_DIR = Path(path).expanduser()


def get_cache_ttl() -> int:
    """
    Get the cache TTL (Time To Live) in seconds.

    Priority:
    1. Explicitly set value via set_cache_ttl()
    2. AURA_PULSE_CACHE_TTL environment variable (ignored if not an integer)
    3. [tool.aura-pulse.cache] ttl_seconds
    4. Default: 86400 (24 hours)
    """
    if _CACHE_TTL is not None:
        return _CACHE_TTL

    env_cache_ttl = _env_int("AURA_PULSE_CACHE_TTL")
    if env_cache_ttl is not None:
        return env_cache_ttl

    cache_config = get_tool_config().get("cache", {})
    if "ttl_seconds" in cache_config:
        return int(cache_config["ttl_seconds"])

    return DEFAULT_CACHE_TTL


def set_cache_ttl(seconds: int) -> None:
    global _CACHE_TTL
    _CACHE_TTL = seconds


def is_cache_enabled() -> bool:
    """Check if cache is enabled (default: True)."""
    cache_config = get_tool_config().get("cache", {})
    if "enabled" in cache_config:
        return bool(cache_config["enabled"])
    return True


def get_window_days() -> int:
    """
    Get the trailing commit window in days.

    Priority:
    1. Explicitly set value via set_window_days()
    2. AURA_PULSE_WINDOW_DAYS environment variable
    3. [tool.aura-pulse] window_days
    4. Default: 30
    """
    if _WINDOW_DAYS is not None:
        return _WINDOW_DAYS

    env_window = _env_int("AURA_PULSE_WINDOW_DAYS")
    if env_window is not None:
        return env_window

    tool_config = get_tool_config()
    if "window_days" in tool_config:
        return int(tool_config["window_days"])

    return DEFAULT_WINDOW_DAYS


def set_window_days(days: int) -> None:
    global _WINDOW_DAYS
    _WINDOW_DAYS = days


def reset_overrides() -> None:
    """Forget values set through the setters."""
    global _CACHE_DIR, _CACHE_TTL, _WINDOW_DAYS, VERIFY_SSL
    _CACHE_DIR = None
    _CACHE_TTL = None
    _WINDOW_DAYS = None
    VERIFY_SSL = True
