"""Per-instance overrides and the linked/detached lifecycle.

A *linked* element evaluates its component's master graph with
``prop_overrides`` layered on top. A *detached* element owns a private deep
copy and edits its node literals directly. Reconciliation between the two
matches nodes by id only: nodes whose ids no longer correspond are reported
in a :class:`ReconcileReport` and logged, never silently dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .catalogue import EXPOSABLE_KINDS
from .coerce import is_number
from .exceptions import MissingDefinitionError, NotExposableError
from .ir import Element, GraphDefinition, NodeData

logger = logging.getLogger(__name__)


class ReconcileReport(BaseModel):
    applied: Dict[str, Any] = Field(default_factory=dict)
    unmatched: List[str] = Field(default_factory=list)

    @property
    def diverged(self) -> bool:
        return bool(self.unmatched)


class ExposedProperty(BaseModel):
    node_id: str
    kind: str
    label: str
    default_value: Any = None
    current_value: Any = None


def _find(library: Iterable[GraphDefinition], graph_id: Optional[str]) -> Optional[GraphDefinition]:
    return next((g for g in library if g.id == graph_id), None)


def _has_value(data: NodeData) -> bool:
    # an explicit null counts; a value that was never set does not
    return data.value is not None or "value" in data.model_fields_set


def _differs(a: Any, b: Any) -> bool:
    """Strict inequality: ``True`` and ``1`` differ, ``1`` and ``1.0`` do not."""
    if is_number(a) and is_number(b):
        return a != b
    return type(a) is not type(b) or a != b


def effective_graph(element: Element, library: Iterable[GraphDefinition]) -> Optional[GraphDefinition]:
    if element.is_detached and element.custom_node_group is not None:
        return element.custom_node_group
    return _find(library, element.custom_component_id)


def apply_override(element: Element, node_id: str, value: Any) -> None:
    """Set an instance value for ``node_id``; the shared master is never touched."""
    if element.is_detached and element.custom_node_group is not None:
        node = element.custom_node_group.get_node(node_id)
        if node is None:
            logger.warning("Element '%s' has no local node '%s'; value ignored", element.id, node_id)
            return
        node.data.value = value
        element.prop_overrides.pop(node_id, None)
        return
    element.prop_overrides[node_id] = value


def clear_override(element: Element, node_id: str) -> None:
    element.prop_overrides.pop(node_id, None)


def detach(element: Element, master: Optional[GraphDefinition]) -> ReconcileReport:
    """Give the element a private copy of ``master`` with its overrides baked in."""
    if master is None:
        raise MissingDefinitionError(element.id, element.custom_component_id)
    if element.is_detached:
        return ReconcileReport()

    local = master.model_copy(deep=True)
    local.id = f"{element.id}_local"
    local.name = f"Local Copy of {master.name}"

    report = ReconcileReport()
    for node_id, value in element.prop_overrides.items():
        node = local.get_node(node_id)
        if node is None:
            report.unmatched.append(node_id)
            continue
        node.data.value = value
        report.applied[node_id] = value

    if report.unmatched:
        logger.warning(
            "Detaching '%s': overrides for %s match no node in '%s' and were not carried over",
            element.id, ", ".join(report.unmatched), master.id,
        )
    element.custom_node_group = local
    element.prop_overrides = {}
    element.is_detached = True
    return report


def relink(element: Element, master: Optional[GraphDefinition]) -> ReconcileReport:
    """Drop the private copy and rebuild overrides from literals that differ from ``master``."""
    if master is None:
        raise MissingDefinitionError(element.id, element.custom_component_id)
    local = element.custom_node_group
    report = ReconcileReport()

    if element.is_detached and local is not None:
        local_nodes = local.node_map()
        master_ids = set()
        for master_node in master.nodes:
            master_ids.add(master_node.id)
            local_node = local_nodes.get(master_node.id)
            if local_node is None or not _has_value(local_node.data):
                continue
            local_value = local_node.data.value
            if _differs(local_value, master_node.data.value):
                report.applied[master_node.id] = local_value
        report.unmatched = [n.id for n in local.nodes if n.id not in master_ids and n.data.value is not None]
        if report.unmatched:
            logger.warning(
                "Relinking '%s': local nodes %s have no counterpart in '%s'; their values are lost",
                element.id, ", ".join(report.unmatched), master.id,
            )

    element.is_detached = False
    element.custom_node_group = None
    element.prop_overrides = dict(report.applied)
    return report


def set_detached(element: Element, detached: bool, library: Iterable[GraphDefinition]) -> ReconcileReport:
    """The auto-update toggle: ``True`` detaches, ``False`` re-links."""
    master = _find(library, element.custom_component_id)
    if detached:
        return detach(element, master)
    return relink(element, master)


def expose(graph: GraphDefinition, node_id: str, label: Optional[str] = None, exposed: bool = True) -> None:
    node = graph.get_node(node_id)
    if node is None:
        raise KeyError(node_id)
    if exposed and node.type not in EXPOSABLE_KINDS:
        raise NotExposableError(node_id, node.type)
    node.data.exposed = exposed
    if label is not None:
        node.data.exposed_label = label


def exposed_properties(element: Element, library: Iterable[GraphDefinition]) -> List[ExposedProperty]:
    graph = effective_graph(element, library)
    if graph is None:
        return []
    props = []
    for node in graph.nodes:
        if not node.data.exposed:
            continue
        if element.is_detached:
            current = node.data.value
        else:
            current = element.prop_overrides.get(node.id, node.data.value)
        props.append(ExposedProperty(
            node_id=node.id,
            kind=node.type,
            label=node.data.exposed_label or node.data.label,
            default_value=node.data.value,
            current_value=current,
        ))
    return props
