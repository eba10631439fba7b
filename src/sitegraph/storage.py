from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Type, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .exceptions import GraphLoadError
from .ir import GraphDefinition, Project

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def serialize(model: BaseModel) -> Dict[str, Any]:
    """Plain camelCase record; nodes and connections reference each other by id only."""
    return model.model_dump(mode="json", by_alias=True)


def deserialize(data: Dict[str, Any]) -> GraphDefinition:
    return GraphDefinition.model_validate(data)


def _load(path: Path, model: Type[M]) -> M:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise GraphLoadError(path, str(e)) from e
    if not isinstance(data, dict):
        raise GraphLoadError(path, "top-level value must be a mapping")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise GraphLoadError(path, str(e)) from e


def _save(model: BaseModel, path: Path) -> None:
    path = Path(path)
    data = serialize(model)
    if path.suffix == ".json":
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    logger.debug("Saved %s to %s", type(model).__name__, path)


def load_graph(path: Path) -> GraphDefinition:
    return _load(path, GraphDefinition)


def save_graph(graph: GraphDefinition, path: Path) -> None:
    _save(graph, path)


def load_project(path: Path) -> Project:
    return _load(path, Project)


def save_project(project: Project, path: Path) -> None:
    _save(project, path)
