from pathlib import Path
from collections import Counter
from typing import List, Tuple

import networkx as nx

from .catalogue import CATALOGUE, EXPOSABLE_KINDS, NodeKind
from .ir import Connection, GraphDefinition
from .storage import load_graph


def dependency_graph(g: GraphDefinition) -> nx.DiGraph:
    """Directed graph of node ids, one edge per connection between known nodes."""
    nxg = nx.DiGraph()
    nxg.add_nodes_from(n.id for n in g.nodes)
    for c in g.connections:
        if c.source_node_id in nxg and c.target_node_id in nxg:
            nxg.add_edge(c.source_node_id, c.target_node_id, socket=c.target_socket_id)
    return nxg


def find_cycles(g: GraphDefinition) -> List[List[str]]:
    cycles = [_canonical_cycle(c) for c in nx.simple_cycles(dependency_graph(g))]
    return sorted(cycles)


def _canonical_cycle(cycle: List[str]) -> List[str]:
    # rotate so the smallest id leads; keeps reports stable across runs
    start = cycle.index(min(cycle))
    return cycle[start:] + cycle[:start]


def dangling_references(g: GraphDefinition) -> List[Connection]:
    node_ids = {n.id for n in g.nodes}
    return [c for c in g.connections if c.source_node_id not in node_ids or c.target_node_id not in node_ids]


def validate_graph(g: GraphDefinition) -> Tuple[bool, List[str]]:
    """Editor-side checks; evaluation never depends on these passing."""
    messages: List[str] = []
    ok = True

    # 1) Unique node ids
    counts = Counter(n.id for n in g.nodes)
    dupes = sorted(i for i, k in counts.items() if k > 1)
    if dupes:
        ok = False
        messages.append(f"ERR: Duplicate node IDs detected: {', '.join(dupes)}.")
    else:
        messages.append("OK: Node IDs are unique.")

    # 2) Exactly one Output
    outputs = [n.id for n in g.nodes if n.type == NodeKind.OUTPUT.value]
    if len(outputs) > 1:
        ok = False
        messages.append(f"ERR: {len(outputs)} Output nodes found ({', '.join(outputs)}); at most one is allowed.")
    elif not outputs:
        messages.append("WARN: No Output node; the graph evaluates to an empty style and content.")
    else:
        messages.append("OK: Graph has one Output node.")

    # 3) Node kinds are known
    unknown = sorted({n.type for n in g.nodes if n.type not in CATALOGUE})
    for kind in unknown:
        messages.append(f"WARN: Unknown node kind '{kind}' evaluates to its literal value.")

    # 4) Connections refer to existing nodes
    dangling = dangling_references(g)
    for c in dangling:
        ok = False
        messages.append(f"ERR: Connection {c.id} ({c.source_node_id}->{c.target_node_id}) references missing node(s).")
    if not dangling:
        messages.append("OK: All connections reference existing nodes.")

    # 5) Sockets exist on the catalogue entry
    node_map = g.node_map()
    bad_sockets = 0
    for c in g.connections:
        source, target = node_map.get(c.source_node_id), node_map.get(c.target_node_id)
        if source is not None and source.type in CATALOGUE:
            if c.source_socket_id not in CATALOGUE[source.type].output_ids():
                bad_sockets += 1
                messages.append(f"WARN: Connection {c.id} leaves {source.id}.{c.source_socket_id}, not an output of {source.type}.")
        if target is not None and target.type in CATALOGUE:
            if c.target_socket_id not in CATALOGUE[target.type].input_ids(target.data.input_count):
                bad_sockets += 1
                messages.append(f"WARN: Connection {c.id} enters {target.id}.{c.target_socket_id}, not an input of {target.type}.")
    if not bad_sockets:
        messages.append("OK: All connection endpoints correspond to declared sockets.")

    # 6) Fan-in: only the last connection into a socket is used
    fan_in = Counter((c.target_node_id, c.target_socket_id) for c in g.connections)
    for (node_id, socket), k in sorted(fan_in.items()):
        if k > 1:
            messages.append(f"WARN: {k} connections enter {node_id}.{socket}; only the last one is used.")

    # 7) Cycles
    cycles = find_cycles(g)
    for cycle in cycles:
        ok = False
        messages.append(f"ERR: Cycle detected: {' -> '.join(cycle + cycle[:1])}.")
    if not cycles:
        messages.append("OK: Graph is acyclic.")

    # 8) Exposed flags only on exposable kinds
    for n in g.nodes:
        if n.data.exposed and n.type not in EXPOSABLE_KINDS:
            messages.append(f"WARN: Node {n.id} ({n.type}) is marked exposed but its kind cannot be exposed.")

    return ok, messages


def validate_graph_from_file(path: Path) -> Tuple[bool, List[str]]:
    return validate_graph(load_graph(path))
