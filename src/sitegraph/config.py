"""Project-level settings from ``sitegraph.yaml``.

The nearest ``sitegraph.yaml`` walking up from the working directory is
used; CLI options override individual values.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import GraphLoadError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "sitegraph.yaml"


class ExportSettings(BaseModel):
    title: Optional[str] = None
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    frame_loop: bool = True
    tailwind_cdn: str = "https://cdn.tailwindcss.com"


class Settings(BaseModel):
    graphs_dir: Path = Path("graphs")
    export_dir: Path = Path("dist")
    seed: Optional[int] = None
    export: ExportSettings = Field(default_factory=ExportSettings)


def find_config(start: Optional[Path] = None) -> Optional[Path]:
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_settings(start: Optional[Path] = None) -> Settings:
    """Settings from the nearest config file, or defaults when there is none."""
    path = find_config(start)
    if path is None:
        return Settings()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        settings = Settings.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise GraphLoadError(path, str(e)) from e
    logger.debug("Loaded settings from %s", path)
    return settings


def write_default_settings(directory: Path) -> Path:
    path = Path(directory) / CONFIG_FILENAME
    data = Settings().model_dump(mode="json")
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path
