from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ElementType(str, Enum):
    BUTTON = "BUTTON"
    HEADING = "HEADING"
    PARAGRAPH = "PARAGRAPH"
    CARD = "CARD"
    INPUT = "INPUT"
    IMAGE_PLACEHOLDER = "IMAGE_PLACEHOLDER"
    VIDEO_PLACEHOLDER = "VIDEO_PLACEHOLDER"
    AVATAR = "AVATAR"
    BADGE = "BADGE"
    DIVIDER = "DIVIDER"
    CONTAINER = "CONTAINER"
    CUSTOM = "CUSTOM"


class NodeData(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    label: str = ""
    value: Any = None
    exposed: bool = False
    exposed_label: Optional[str] = None
    input_count: Optional[int] = None


class Node(WireModel):
    id: str = Field(default_factory=lambda: generate_id("node"))
    type: str
    x: float = 0.0
    y: float = 0.0
    data: NodeData = Field(default_factory=NodeData)


class Connection(WireModel):
    id: str = Field(default_factory=lambda: generate_id("conn"))
    source_node_id: str
    source_socket_id: str
    target_node_id: str
    target_socket_id: str


class GraphDefinition(WireModel):
    id: str = Field(default_factory=lambda: generate_id("graph"))
    name: str = ""
    nodes: List[Node] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)

    def node_map(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def output_node(self) -> Optional[Node]:
        for n in self.nodes:
            if n.type == "OUTPUT":
                return n
        return None

    def incoming(self) -> Dict[Tuple[str, str], Connection]:
        """(target node, target socket) -> connection; the last matching connection wins."""
        index: Dict[Tuple[str, str], Connection] = {}
        for c in self.connections:
            index[(c.target_node_id, c.target_socket_id)] = c
        return index


class Page(WireModel):
    id: str = Field(default_factory=lambda: generate_id("page"))
    name: str = ""


class Element(WireModel):
    """An on-canvas element; graph-bearing elements are the instances overrides apply to."""
    id: str = Field(default_factory=lambda: generate_id("el"))
    type: str = ElementType.CONTAINER.value
    page_id: str = ""
    parent_id: Optional[str] = None
    name: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 40.0
    content: Optional[str] = None
    style: Dict[str, Any] = Field(default_factory=dict)
    custom_component_id: Optional[str] = None
    is_detached: bool = False
    custom_node_group: Optional[GraphDefinition] = None
    scripts: List[str] = Field(default_factory=list)
    prop_overrides: Dict[str, Any] = Field(default_factory=dict)


class Project(WireModel):
    name: str = "Exported Project"
    width: float = Field(default=1200.0, gt=0)
    height: float = 800.0
    pages: List[Page] = Field(default_factory=list)
    elements: List[Element] = Field(default_factory=list)
    components: List[GraphDefinition] = Field(default_factory=list)
    scripts: List[GraphDefinition] = Field(default_factory=list)

    def component(self, component_id: Optional[str]) -> Optional[GraphDefinition]:
        return next((c for c in self.components if c.id == component_id), None)

    def script(self, script_id: str) -> Optional[GraphDefinition]:
        return next((s for s in self.scripts if s.id == script_id), None)

    def roots_on(self, page_id: str) -> List[Element]:
        return [e for e in self.elements if e.page_id == page_id and not e.parent_id]

    def children_of(self, element_id: str) -> List[Element]:
        return [e for e in self.elements if e.parent_id == element_id]
