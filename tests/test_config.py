"""
Tests for the configuration module.
"""

import tempfile
from pathlib import Path

import pytest

import aura_pulse.config
from aura_pulse.config import (
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_TTL,
    DEFAULT_WINDOW_DAYS,
    get_cache_dir,
    get_cache_ttl,
    get_verify_ssl,
    get_window_days,
    is_cache_enabled,
    load_config_file,
    reset_overrides,
    set_cache_dir,
    set_cache_ttl,
    set_verify_ssl,
    set_window_days,
)


@pytest.fixture
def temp_project_root(monkeypatch):
    """Create a temporary project root with a clean environment."""
    for name in (
        "AURA_PULSE_CACHE_DIR",
        "AURA_PULSE_CACHE_TTL",
        "AURA_PULSE_WINDOW_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)

    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)

        original_root = aura_pulse.config.PROJECT_ROOT
        aura_pulse.config.PROJECT_ROOT = tmpdir_path
        reset_overrides()

        yield tmpdir_path

        # Restore
        reset_overrides()
        aura_pulse.config.PROJECT_ROOT = original_root


def test_defaults_without_config(temp_project_root):
    """Test that missing files fall back to the defaults."""
    assert get_cache_dir() == DEFAULT_CACHE_DIR
    assert get_cache_ttl() == DEFAULT_CACHE_TTL
    assert get_window_days() == DEFAULT_WINDOW_DAYS
    assert is_cache_enabled() is True


def test_settings_from_local_config(temp_project_root):
    """Test loading settings from .aura-pulse.toml."""
    (temp_project_root / ".aura-pulse.toml").write_text(
        """
[tool.aura-pulse]
window_days = 14

[tool.aura-pulse.cache]
directory = "/tmp/aura-cache"
ttl_seconds = 3600
enabled = false
"""
    )

    assert get_window_days() == 14
    assert get_cache_dir() == Path("/tmp/aura-cache")
    assert get_cache_ttl() == 3600
    assert is_cache_enabled() is False


def test_settings_from_pyproject(temp_project_root):
    """Test loading settings from pyproject.toml."""
    (temp_project_root / "pyproject.toml").write_text(
        """
[tool.aura-pulse]
window_days = 60
"""
    )

    assert get_window_days() == 60


def test_local_config_takes_priority(temp_project_root):
    """Test that .aura-pulse.toml takes priority over pyproject.toml."""
    (temp_project_root / "pyproject.toml").write_text(
        """
[tool.aura-pulse]
window_days = 60
"""
    )
    (temp_project_root / ".aura-pulse.toml").write_text(
        """
[tool.aura-pulse]
window_days = 7
"""
    )

    assert get_window_days() == 7


def test_environment_overrides_config_file(temp_project_root, monkeypatch):
    """Test that AURA_PULSE_* variables beat the config files."""
    (temp_project_root / ".aura-pulse.toml").write_text(
        """
[tool.aura-pulse]
window_days = 7

[tool.aura-pulse.cache]
ttl_seconds = 3600
"""
    )
    monkeypatch.setenv("AURA_PULSE_WINDOW_DAYS", "45")
    monkeypatch.setenv("AURA_PULSE_CACHE_TTL", "120")
    monkeypatch.setenv("AURA_PULSE_CACHE_DIR", str(temp_project_root / "env-cache"))

    assert get_window_days() == 45
    assert get_cache_ttl() == 120
    assert get_cache_dir() == temp_project_root / "env-cache"


def test_invalid_environment_values_are_ignored(temp_project_root, monkeypatch):
    monkeypatch.setenv("AURA_PULSE_CACHE_TTL", "soon")
    assert get_cache_ttl() == DEFAULT_CACHE_TTL


def test_setters_take_priority(temp_project_root, monkeypatch):
    """Test that explicitly set values beat environment variables."""
    monkeypatch.setenv("AURA_PULSE_WINDOW_DAYS", "45")
    set_window_days(10)
    set_cache_ttl(60)
    set_cache_dir(temp_project_root / "cli-cache")

    assert get_window_days() == 10
    assert get_cache_ttl() == 60
    assert get_cache_dir() == temp_project_root / "cli-cache"


def test_verify_ssl_toggle(temp_project_root):
    assert get_verify_ssl() is True
    set_verify_ssl(False)
    assert get_verify_ssl() is False
    reset_overrides()
    assert get_verify_ssl() is True


def test_invalid_toml_raises(temp_project_root):
    """Test that a malformed config file is reported."""
    config_file = temp_project_root / ".aura-pulse.toml"
    config_file.write_text("[tool.aura-pulse\nwindow_days = ")

    with pytest.raises(ValueError, match="Failed to load config"):
        load_config_file(config_file)
