from importlib.resources import files
from pathlib import Path
from typing import List, Optional

import yaml

from .exceptions import UnknownTemplateError
from .ir import GraphDefinition, generate_id
from .storage import save_graph


def available_templates() -> List[str]:
    pkg = files("sitegraph.templates")
    return sorted(p.name[: -len(".yaml")] for p in pkg.iterdir() if p.name.endswith(".yaml"))


def _load_template_yaml(name: str) -> str:
    pkg = files("sitegraph.templates")
    return (pkg / f"{name}.yaml").read_text(encoding="utf-8")


def generate_graph_from_template(template: str, name: Optional[str] = None) -> GraphDefinition:
    """Starter graph with a fresh graph id; node ids are graph-local and kept."""
    key = template.lower().replace("-", "_")
    known = available_templates()
    if key not in known:
        raise UnknownTemplateError(template, known)
    data = yaml.safe_load(_load_template_yaml(key))
    graph = GraphDefinition.model_validate(data)
    graph.id = generate_id("graph")
    if name:
        graph.name = name
    return graph


def save_graph_yaml(graph: GraphDefinition, path: Path) -> None:
    save_graph(graph, path)
