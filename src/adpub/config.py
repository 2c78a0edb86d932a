"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from adpub.core.models import PreamblePolicy


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "ADPUB_"


class Settings(BaseModel):
    author_key:  str = Field(default="",        description="Author public key stamped on every record")
    parse_level: int = Field(default=2, ge=2, le=5, description="Deepest heading level that becomes its own record")
    preamble:    PreamblePolicy = Field(default=PreamblePolicy.discard, description="discard, index or first-child")
    output_dir:  str = Field(default="dist",    description="Directory for compiled record JSON")
    log_level:   str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then ADPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
