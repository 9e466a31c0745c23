"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "NOTIONPUB_"

# Unprefixed fallbacks accepted for the credentials most deployments already export.
ENV_ALIASES = {
    "notion_token":       "NOTION_TOKEN",
    "notion_database_id": "NOTION_DATABASE_ID",
}


class Settings(BaseModel):
    notion_token:       str = Field(default="", description="Notion integration token")
    notion_database_id: str = Field(default="", description="Database holding the blog entries")
    notion_api_url:     str = Field(default="https://api.notion.com/v1", description="Notion REST API base URL")
    notion_version:     str = Field(default="2022-06-28", description="Notion-Version request header")
    page_size:          int = Field(default=100, ge=1, le=100, description="Page size for paginated listings")
    request_timeout:    float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    route_base_path:    str = Field(default="/blog", description="Route prefix posts are served under")
    theme:              str = Field(default="modern", pattern="^(modern|minimal|dev)$", description="modern, minimal or dev")
    plugins:            list[str] = Field(default_factory=list, description="Built-in plugins to enable; empty = all")
    words_per_minute:   int = Field(default=200, ge=1, description="ReadingTime divisor")
    output_dir:         str = Field(default="dist", description="Directory for exported posts + JSON files")
    output_format:      str = Field(default="mdx", pattern="^(md|mdx|html)$", description="md, mdx or html")
    parser_config:      str = Field(default="gfm-like", description="MarkdownIt preset used for html output")
    log_level:          str = Field(default="WARNING", description="Root logging level for the CLI")


def _env_value(name: str) -> str | None:
    """Return NOTIONPUB_<NAME>, falling back to an unprefixed alias where one exists."""
    val = os.getenv(f"{ENV_PREFIX}{name.upper()}")
    if not val and name in ENV_ALIASES:
        val = os.getenv(ENV_ALIASES[name])
    return val or None


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then NOTIONPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := _env_value(name):
            # list fields arrive as comma-separated env values
            data[name] = [v.strip() for v in val.split(",") if v.strip()] if name == "plugins" else val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
