"""Settings schema and frontpost.yaml loader"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_FILE = "frontpost.yaml"
ENV_PREFIX = "FRONTPOST_"


class Settings(BaseModel):
    content_dir:          str = Field(default="content",  description="Directory holding post files")
    format:               str = Field(default="toml",     pattern="^(toml|markdown)$", description="Front matter flavour")
    filename_date_format: str = Field(default="%y-%m-%d", description="strftime pattern for file name prefixes")
    log_level:            str = Field(default="WARNING",  description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{value}'")
        return value


def load_config(overrides: dict[str, Any] | None = None) -> Settings:
    """Load Settings from frontpost.yaml, then FRONTPOST_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid settings: {e}") from e
