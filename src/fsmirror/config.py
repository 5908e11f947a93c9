"""Configuration management for fsmirror."""

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from . import CONFIG_FILE, ENV_PREFIX

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


class FSMirrorConfig(BaseModel):
    """Configuration for fsmirror."""

    version: int = 1
    sort_entries: bool = True
    output_format: Literal["json", "yaml"] = "json"
    json_indent: int = Field(default=4, ge=0)
    recursive: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


def get_config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return project_root / CONFIG_FILE


def load_config(project_root: Path) -> FSMirrorConfig:
    """Load configuration from the project's config file.

    Falls back to defaults if file doesn't exist.
    Environment variables can override config values.
    """
    config_path = get_config_path(project_root)

    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)
        config = FSMirrorConfig.model_validate(data)
    else:
        config = FSMirrorConfig()

    # Apply environment variable overrides
    config = _apply_env_overrides(config)

    return config


def save_config(config: FSMirrorConfig, project_root: Path) -> None:
    """Save configuration to the project's config file."""
    config_path = get_config_path(project_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(config.model_dump(), f, indent=2)


def _apply_env_overrides(config: FSMirrorConfig) -> FSMirrorConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    # FSMIRROR_OUTPUT_FORMAT
    if output_format := os.environ.get(f"{ENV_PREFIX}OUTPUT_FORMAT"):
        if output_format.lower() in ("json", "yaml"):
            data["output_format"] = output_format.lower()

    # FSMIRROR_LOG_LEVEL
    if level := os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
        if level.upper() in ("DEBUG", "INFO", "WARNING", "ERROR"):
            data["log_level"] = level.upper()

    # FSMIRROR_SORT_ENTRIES, FSMIRROR_RECURSIVE
    for key in ("sort_entries", "recursive"):
        flag = _parse_flag(os.environ.get(f"{ENV_PREFIX}{key.upper()}"))
        if flag is not None:
            data[key] = flag

    return FSMirrorConfig.model_validate(data)


def _parse_flag(value: str | None) -> bool | None:
    if value is None:
        return None
    if value.lower() in TRUE_VALUES:
        return True
    if value.lower() in FALSE_VALUES:
        return False
    return None
