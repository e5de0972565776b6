"""Tests for config module."""

from pathlib import Path
from unittest.mock import patch

import tomllib

from core.config import CONFIG_FILENAME, DEFAULT_CONFIG, Config, get_config, save_config


def test_default_config(tmp_path):
    """Test loading default config when no file exists."""
    with patch("core.config.Path.home", return_value=tmp_path):
        config = get_config()

    assert config == DEFAULT_CONFIG
    assert config.files_to_scan == ["**/*.ts", "**/*.tsx"]
    assert "**/node_modules/**" in config.files_to_exclude
    assert config.double_quotes is False
    assert config.emit_semicolon is True
    assert config.show_notifications is False


def test_config_from_file(tmp_path):
    """Test loading config from TOML file."""
    config_path = tmp_path / "custom.toml"
    config_path.write_text("""
show_notifications = true

[scan]
files_to_scan = ["src/**/*.ts"]
workers = 0

[style]
double_quotes = true
emit_semicolon = false

[watch]
debounce_ms = 250
""")

    config = get_config(config_path)
    assert config.show_notifications is True
    assert config.files_to_scan == ["src/**/*.ts"]
    assert config.scan_workers == 1
    assert config.double_quotes is True
    assert config.emit_semicolon is False
    assert config.watch_debounce_ms == 250
    # Untouched keys keep defaults
    assert config.space_between_braces is True
    assert config.files_to_exclude == DEFAULT_CONFIG.files_to_exclude


def test_project_config_preferred_over_home(tmp_path):
    """Test the workspace file wins over the home file."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    (home / CONFIG_FILENAME).write_text("disabled = true\n")
    (project / CONFIG_FILENAME).write_text("max_completion_items = 7\n")

    with patch("core.config.Path.home", return_value=home):
        assert get_config(project_root=project).max_completion_items == 7
        assert get_config(project_root=tmp_path).disabled is True


def test_invalid_toml_falls_back(tmp_path):
    """Test unreadable config yields defaults."""
    config_path = tmp_path / "bad.toml"
    config_path.write_text("this is = = not toml")
    assert get_config(config_path) == DEFAULT_CONFIG


def test_save_config_round_trip(tmp_path):
    """Test saving and reloading config."""
    config = Config(double_quotes=True, scan_workers=2, files_to_exclude=["**/vendor/**"])
    path = save_config(config, tmp_path / "nested" / CONFIG_FILENAME)

    assert path.exists()
    data = tomllib.loads(path.read_text())
    assert data["style"]["double_quotes"] is True
    assert data["scan"]["workers"] == 2
    assert get_config(path) == config
