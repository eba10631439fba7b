"""Node-graph scripting for site elements: evaluate, override, export."""

from .catalogue import CATALOGUE, EXPOSABLE_KINDS, NodeKind
from .context import Effect, RuntimeContext, TriggerTable
from .exceptions import (
    GraphLoadError,
    MissingDefinitionError,
    NotExposableError,
    SitegraphError,
    UnknownTemplateError,
)
from .ir import Connection, Element, GraphDefinition, Node, NodeData, Page, Project
from .runner import Evaluation, Interpreter, evaluate, evaluate_element

__version__ = "0.1.0"

__all__ = [
    "CATALOGUE",
    "EXPOSABLE_KINDS",
    "NodeKind",
    "Effect",
    "RuntimeContext",
    "TriggerTable",
    "GraphLoadError",
    "MissingDefinitionError",
    "NotExposableError",
    "SitegraphError",
    "UnknownTemplateError",
    "Connection",
    "Element",
    "GraphDefinition",
    "Node",
    "NodeData",
    "Page",
    "Project",
    "Evaluation",
    "Interpreter",
    "evaluate",
    "evaluate_element",
]
