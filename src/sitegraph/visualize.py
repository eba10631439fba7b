from pathlib import Path

import networkx as nx

from .catalogue import CATALOGUE
from .storage import load_graph
from .validator import dependency_graph


def ascii_plan(path: Path) -> str:
    g = load_graph(path)
    nxg = dependency_graph(g)
    nodes = g.node_map()

    try:
        order = list(nx.topological_sort(nxg))
        lines = [f"# ASCII Plan for '{g.name or g.id}' (topological order)"]
    except nx.NetworkXUnfeasible:
        order = [n.id for n in g.nodes]
        lines = [f"# ASCII Plan for '{g.name or g.id}' (graph has cycles; file order)"]

    for i, nid in enumerate(order, 1):
        node = nodes[nid]
        spec = CATALOGUE.get(node.type)
        label = node.data.label or (spec.label if spec else "?")
        literal = f" = {node.data.value!r}" if node.data.value is not None else ""
        exposed = " *exposed*" if node.data.exposed else ""
        lines.append(f"{i:02d}. {node.id} [{node.type}] {label}{literal}{exposed}")
        for c in g.connections:
            if c.source_node_id == nid and c.target_node_id in nodes:
                lines.append(f"    └─▶ {c.target_node_id}  ({c.source_socket_id}->{c.target_socket_id})")
    return "\n".join(lines)
