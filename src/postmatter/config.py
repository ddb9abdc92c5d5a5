"""Configuration loaded from .postmatter.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".postmatter.toml"

STANDARD_KEYS = ["layout", "title", "keywords", "category", "comments"]


class PostsConfig(BaseModel):
    """[posts] section."""

    directory: str = "_posts"
    extensions: list[str] = Field(default_factory=lambda: [".md", ".markdown"])


class FrontMatterConfig(BaseModel):
    """[front_matter] section."""

    required: list[str] = Field(default_factory=lambda: ["title"])
    expected: list[str] = Field(default_factory=lambda: list(STANDARD_KEYS))
    default_layout: str = "post"
    default_comments: bool = True


class ChecksConfig(BaseModel):
    """[checks] section."""

    require_language: bool = True
    languages: list[str] = Field(default_factory=list)  # empty allows any


class OutputConfig(BaseModel):
    """[output] section."""

    directory: str = "./_export"
    format: str = "markdown"


class PostmatterConfig(BaseModel):
    """Top-level configuration model."""

    posts: PostsConfig = Field(default_factory=PostsConfig)
    front_matter: FrontMatterConfig = Field(default_factory=FrontMatterConfig)
    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def posts_dir(self) -> Path:
        return Path(self.posts.directory)

    @property
    def output_dir(self) -> Path:
        return Path(self.output.directory)


def load_config(path: str | Path | None = None) -> PostmatterConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .postmatter.toml in CWD
    3. ~/.config/postmatter/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged PostmatterConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        candidate = Path(CONFIG_FILENAME)
        if candidate.exists():
            data = _load_toml(candidate)
            logger.info("Loaded config from %s", candidate)
        global_config = Path.home() / ".config" / "postmatter" / "config.toml"
        if not data and global_config.exists():
            data = _load_toml(global_config)
            logger.info("Loaded config from %s", global_config)

    config = PostmatterConfig.model_validate(data) if data else PostmatterConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: PostmatterConfig, **cli_kwargs: object) -> PostmatterConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``posts_directory``,
            ``output_format``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "posts_directory": ("posts", "directory"),
        "output_directory": ("output", "directory"),
        "output_format": ("output", "format"),
        "default_layout": ("front_matter", "default_layout"),
        "require_language": ("checks", "require_language"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return PostmatterConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: PostmatterConfig) -> PostmatterConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "POSTMATTER_POSTS_DIR": ("posts", "directory"),
        "POSTMATTER_OUTPUT_DIR": ("output", "directory"),
        "POSTMATTER_FORMAT": ("output", "format"),
        "POSTMATTER_DEFAULT_LAYOUT": ("front_matter", "default_layout"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    languages_raw = os.environ.get("POSTMATTER_LANGUAGES")
    if languages_raw is not None:
        data["checks"]["languages"] = [
            lang.strip() for lang in languages_raw.split(",") if lang.strip()
        ]

    return PostmatterConfig.model_validate(data)
