"""Application configuration: settings schema, config.yaml and environment loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from cmsfix.core.boilerplate import DEFAULT_PATTERNS, FOOTER_ANCHORS, HEADER_LABELS, BoilerplatePattern
from cmsfix.core.html.lift import ALLOWED_ANCESTORS


CONFIG_FILE = "config.yaml"
ENV_FILE = ".env.local"

# Environment names shared with the website build; CMSFIX_<FIELD> still wins.
SANITY_ENV = {
    "project_id": ("NEXT_PUBLIC_SANITY_PROJECT_ID", "SANITY_PROJECT_ID"),
    "dataset":    ("NEXT_PUBLIC_SANITY_DATASET", "SANITY_DATASET"),
    "token":      ("SANITY_WRITE_TOKEN",),
}


class Settings(BaseModel):
    app_name:     str = "cmsfix"
    project_id:   Optional[str] = Field(default=None, description="Sanity project id")
    dataset:      Optional[str] = Field(default=None, description="Sanity dataset name")
    api_version:  str = Field(default="2024-01-01", pattern=r"^\d{4}-\d{2}-\d{2}$")
    token:        Optional[str] = Field(default=None, description="Write token; required with --apply")
    timeout:      float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    log_level:    str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    document_type: str = Field(default="collection.article", description="Document type the fixers operate on")
    id_pattern:    str = Field(default="*migrated-*", description="Glob on _id selecting migrated documents")
    person_type:   str = Field(default="person", description="Document type holding author candidates")
    author_name:   str = Field(default="Michael", description="Substring picking the default author")

    content_selector:  str = Field(default=".post-content", description="CSS selector of the article container")
    allowed_ancestors: list[str] = Field(default_factory=lambda: sorted(ALLOWED_ANCESTORS))
    max_depth:         int = Field(default=5, ge=1, description="Ancestor levels examined per image")

    disallowed_styles: list[str] = Field(default_factory=lambda: ["h5", "h6"])
    replacement_style: str = Field(default="h4")
    footer_window:     int = Field(default=20, ge=1, description="Trailing blocks searched for a footer")
    footer_lookback:   int = Field(default=3, ge=0, description="Blocks before the footer line checked for footer-like text")
    footer_anchors:    list[BoilerplatePattern] = Field(default_factory=lambda: list(FOOTER_ANCHORS))
    header_labels:     list[str] = Field(default_factory=lambda: list(HEADER_LABELS))
    header_window:     int = Field(default=6, ge=1, description="Leading blocks searched for site-title lines")
    boilerplate_patterns: list[BoilerplatePattern] = Field(default_factory=lambda: list(DEFAULT_PATTERNS))

    @field_validator("allowed_ancestors", "disallowed_styles", "header_labels", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


def _read_yaml() -> dict[str, Any]:
    """Return config.yaml contents as a mapping, or {} when the file is absent."""
    if not Path(CONFIG_FILE).exists():
        return {}
    try:
        data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")
    return data


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, Sanity env names, CMSFIX_<FIELD> env vars, then non-None CLI overrides.

    .env.local is read first but never replaces variables already set in the process.
    """
    load_dotenv(ENV_FILE, override=False)
    data = _read_yaml()

    for name, env_names in SANITY_ENV.items():
        for env_name in env_names:
            if val := os.getenv(env_name):
                data[name] = val
                break

    for name in Settings.model_fields:
        if val := os.getenv(f"CMSFIX_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def require_store(settings: Settings, write: bool = False) -> Settings:
    """Raise ValueError unless the store identity (and, for writes, the token) is configured."""
    missing = [name for name in ("project_id", "dataset") if not getattr(settings, name)]
    if write and not settings.token:
        missing.append("token")
    if missing:
        env = ", ".join(SANITY_ENV[name][-1] for name in missing)
        raise ValueError(f"Missing Sanity configuration: {', '.join(missing)} (set {env})")
    return settings
