"""Settings schema and wikidown.yaml loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from wikidown.inline import DEFAULT_MAX_DEPTH

CONFIG_FILE = "wikidown.yaml"
ENV_PREFIX = "WIKIDOWN_"


class Settings(BaseModel):
    vault_path: Optional[str] = Field(default=None, description="Obsidian vault to publish from")
    publish_tag: str = Field(default="wiki", description="Notes carrying #<tag> are published")
    db_path: str = Field(default="wikidown.db", description="SQLite page store")
    wiki_base_path: str = Field(default="/pages", description="URL prefix for wikilinks")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, description="Max nesting before flattening")
    log_level: str = Field(default="WARNING", description="Level for the wikidown logger")


def load_config(overrides: Optional[dict[str, Any]] = None) -> Settings:
    """Load Settings from wikidown.yaml, then WIKIDOWN_<FIELD> env vars, then non-None overrides."""
    data: dict[str, Any] = {}
    config_path = Path(CONFIG_FILE)
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        val = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if val:
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
