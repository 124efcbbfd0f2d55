"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDFOLIO_"


class Settings(BaseModel):
    app_name:         str  = "mdfolio"
    language:         str  = Field(default="es", min_length=2, description="Default book language code")
    extract_metadata: bool = Field(default=True, description="Pull title/author out of DOCX input")
    adjust_headings:  bool = Field(default=True, description="Promote headings after metadata extraction")
    scene_separators: bool = Field(default=True, description="Turn runs of empty paragraphs into ***")
    clean_whitespace: bool = Field(default=True, description="Trim trailing spaces, cap blank lines")
    scene_break_threshold: int = Field(default=2, ge=1, description="Empty paragraphs needed for a scene break")
    toc_title:  str = Field(default="Índice", description="Title of the visible index page")
    toc_depth:  int = Field(default=1, ge=1, le=3, description="Heading depth listed in the table of contents")
    output_dir: str = Field(default="dist", description="Directory for generated Markdown/HTML/EPUB files")


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of settings")
    return data


def load_config(overrides: dict[str, Any] = None, path: str | Path = CONFIG_FILE) -> Settings:
    """Layered settings: config file, then MDFOLIO_<FIELD> env vars, then non-None overrides.

    A missing config file is not an error; a malformed one raises ValueError.
    """
    config_path = Path(path)
    data = _read_config_file(config_path) if config_path.is_file() else {}

    env = {name: os.environ[ENV_PREFIX + name.upper()] for name in Settings.model_fields
           if os.environ.get(ENV_PREFIX + name.upper())}
    data.update(env)

    data.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return Settings(**data)
