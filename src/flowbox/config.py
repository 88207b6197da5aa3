"""Settings for flowbox.

Settings are read from ``~/.flowbox/config.json`` when it exists and then
overridden by environment variables. flowbox never writes this file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

from rich.console import Console

from .constants import DEFAULT_BASE_IMAGE, DEFAULT_IMAGE_NAME

console = Console(stderr=True)

ENV_BASE_IMAGE = "FLOWBOX_BASE_IMAGE"
ENV_SQL_CLI_VERSION = "FLOWBOX_SQL_CLI_VERSION"


@dataclass(frozen=True)
class Settings:
    """flowbox settings model."""

    # Image the tool is installed on
    base_image: str = DEFAULT_BASE_IMAGE

    # Pinned astro-sql-cli version; empty means latest from PyPI
    sql_cli_version: str = ""

    # Repository name of the built tool image
    image_name: str = DEFAULT_IMAGE_NAME


def get_config_dir() -> Path:
    """Get the flowbox configuration directory."""
    return Path.home() / ".flowbox"


def get_config_path() -> Path:
    """Get the path to the settings file."""
    return get_config_dir() / "config.json"


def _read_settings_file(config_path: Path) -> Settings:
    if not config_path.exists():
        return Settings()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top level must be an object")
        known = {f.name for f in fields(Settings)}
        return Settings(**{k: str(v) for k, v in data.items() if k in known})
    except (json.JSONDecodeError, ValueError) as e:
        console.print(f"[yellow]Warning: Failed to load {config_path} ({e}), using defaults[/yellow]")
        return Settings()


def load_settings() -> Settings:
    """Load settings from file and environment, or return defaults."""
    settings = _read_settings_file(get_config_path())

    overrides: dict[str, str] = {}
    if os.environ.get(ENV_BASE_IMAGE):
        overrides["base_image"] = os.environ[ENV_BASE_IMAGE]
    if os.environ.get(ENV_SQL_CLI_VERSION):
        overrides["sql_cli_version"] = os.environ[ENV_SQL_CLI_VERSION]

    return replace(settings, **overrides) if overrides else settings
