"""Configuration loading."""

from dataclasses import asdict, dataclass, field
import logging
from pathlib import Path
from typing import List, Optional

import tomllib

import tomli_w

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".tsimporter.toml"


@dataclass(frozen=True)
class Config:
    """Importer configuration."""
    disabled: bool = False
    # Scan settings
    files_to_scan: List[str] = field(default_factory=lambda: ["**/*.ts", "**/*.tsx"])
    files_to_exclude: List[str] = field(default_factory=lambda: [
        "**/node_modules/**", "**/.git/**", "**/dist/**", "**/out/**", "**/build/**"
    ])
    scan_workers: int = 4
    # Statement style
    double_quotes: bool = False
    emit_semicolon: bool = True
    space_between_braces: bool = True
    collapse_index: bool = True
    # Host settings
    show_notifications: bool = False
    no_status_bar: bool = False
    max_completion_items: int = 100
    # Watch settings
    watch_enabled: bool = True
    watch_debounce_ms: int = 100
    watch_polling_fallback: bool = True
    watch_polling_interval_ms: int = 1500


DEFAULT_CONFIG = Config()


def default_config_path() -> Path:
    return Path.home() / CONFIG_FILENAME


def get_config(path: Optional[Path] = None, project_root: Optional[Path] = None) -> Config:
    """
    Load configuration from TOML.

    Lookup order: an explicit ``path``, then ``<project_root>/.tsimporter.toml``,
    then ``~/.tsimporter.toml``. Defaults are used when nothing is found or the
    file cannot be read.

    Returns:
        The loaded configuration.
    """
    candidates = []
    if path is not None:
        candidates.append(Path(path))
    if project_root is not None:
        candidates.append(Path(project_root) / CONFIG_FILENAME)
    candidates.append(default_config_path())

    config_path = next((p for p in candidates if p.exists()), None)
    if config_path is None:
        return DEFAULT_CONFIG

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return DEFAULT_CONFIG

    return config_from_dict(data)


def config_from_dict(data: dict) -> Config:
    """Build a Config from parsed TOML, falling back to defaults per key."""
    scan = data.get("scan", {})
    style = data.get("style", {})
    watch = data.get("watch", {})

    return Config(
        disabled=data.get("disabled", DEFAULT_CONFIG.disabled),
        files_to_scan=scan.get("files_to_scan", DEFAULT_CONFIG.files_to_scan),
        files_to_exclude=scan.get("files_to_exclude", DEFAULT_CONFIG.files_to_exclude),
        scan_workers=max(1, int(scan.get("workers", DEFAULT_CONFIG.scan_workers))),
        double_quotes=style.get("double_quotes", DEFAULT_CONFIG.double_quotes),
        emit_semicolon=style.get("emit_semicolon", DEFAULT_CONFIG.emit_semicolon),
        space_between_braces=style.get("space_between_braces", DEFAULT_CONFIG.space_between_braces),
        collapse_index=style.get("collapse_index", DEFAULT_CONFIG.collapse_index),
        show_notifications=data.get("show_notifications", DEFAULT_CONFIG.show_notifications),
        no_status_bar=data.get("no_status_bar", DEFAULT_CONFIG.no_status_bar),
        max_completion_items=data.get("max_completion_items", DEFAULT_CONFIG.max_completion_items),
        watch_enabled=watch.get("enabled", DEFAULT_CONFIG.watch_enabled),
        watch_debounce_ms=watch.get("debounce_ms", DEFAULT_CONFIG.watch_debounce_ms),
        watch_polling_fallback=watch.get("polling_fallback", DEFAULT_CONFIG.watch_polling_fallback),
        watch_polling_interval_ms=watch.get("polling_interval_ms", DEFAULT_CONFIG.watch_polling_interval_ms),
    )


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    """
    Save configuration as TOML.

    Args:
        config: The configuration to save.
        path: Target file, defaults to ``~/.tsimporter.toml``.

    Returns:
        The path written.
    """
    config_path = Path(path) if path is not None else default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    values = asdict(config)
    config_dict = {
        "disabled": values["disabled"],
        "show_notifications": values["show_notifications"],
        "no_status_bar": values["no_status_bar"],
        "max_completion_items": values["max_completion_items"],
        "scan": {
            "files_to_scan": values["files_to_scan"],
            "files_to_exclude": values["files_to_exclude"],
            "workers": values["scan_workers"],
        },
        "style": {
            "double_quotes": values["double_quotes"],
            "emit_semicolon": values["emit_semicolon"],
            "space_between_braces": values["space_between_braces"],
            "collapse_index": values["collapse_index"],
        },
        "watch": {
            "enabled": values["watch_enabled"],
            "debounce_ms": values["watch_debounce_ms"],
            "polling_fallback": values["watch_polling_fallback"],
            "polling_interval_ms": values["watch_polling_interval_ms"],
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(config_dict, f)
    return config_path
