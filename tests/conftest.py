from typing import Any, Dict, List, Optional, Tuple

import pytest

from sitegraph.ir import Connection, GraphDefinition, Node, NodeData

NodeSpecTuple = Tuple[str, str, Optional[Dict[str, Any]]]
Wire = Tuple[str, str, str, str]


def build_graph(nodes: List[NodeSpecTuple], wires: List[Wire], graph_id: str = "g") -> GraphDefinition:
    """Nodes as (id, kind, data) and wires as (source, source socket, target, target socket)."""
    return GraphDefinition(
        id=graph_id,
        name=graph_id,
        nodes=[Node(id=nid, type=kind, data=NodeData(**(data or {}))) for nid, kind, data in nodes],
        connections=[
            Connection(
                id=f"c{i}",
                source_node_id=src,
                source_socket_id=src_socket,
                target_node_id=dst,
                target_socket_id=dst_socket,
            )
            for i, (src, src_socket, dst, dst_socket) in enumerate(wires)
        ],
    )


@pytest.fixture
def graph():
    return build_graph
