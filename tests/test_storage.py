import json
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from sitegraph.catalogue import CATALOGUE
from sitegraph.exceptions import GraphLoadError
from sitegraph.ir import Connection, Element, GraphDefinition, Node, NodeData, Page, Project
from sitegraph.storage import deserialize, load_graph, load_project, save_graph, save_project, serialize

literals = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(-10_000, 10_000),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=12),
)


@st.composite
def graphs(draw):
    kinds = sorted(CATALOGUE)
    nodes = [
        Node(
            id=f"n{i}",
            type=kind,
            x=draw(st.floats(-2000, 2000)),
            y=draw(st.floats(-2000, 2000)),
            data=NodeData(
                label=draw(st.text(max_size=8)),
                value=draw(literals),
                exposed=draw(st.booleans()),
                input_count=draw(st.one_of(st.none(), st.integers(0, 6))),
            ),
        )
        for i, kind in enumerate(kinds)
    ]
    ids = [n.id for n in nodes]
    pairs = draw(st.lists(st.tuples(st.sampled_from(ids), st.sampled_from(ids)), max_size=20))
    connections = [
        Connection(id=f"c{i}", source_node_id=a, source_socket_id="out", target_node_id=b, target_socket_id="in-a")
        for i, (a, b) in enumerate(pairs)
    ]
    return GraphDefinition(id="g", name=draw(st.text(max_size=10)), nodes=nodes, connections=connections)


@settings(max_examples=30, deadline=None)
@given(graphs())
def test_json_round_trip_covers_every_node_kind(g):
    record = json.loads(json.dumps(serialize(g)))
    assert {n["type"] for n in record["nodes"]} == set(CATALOGUE)
    assert deserialize(record) == g


def test_wire_format_is_camel_case():
    g = GraphDefinition(
        id="g",
        nodes=[Node(id="n", type="TEXT", data=NodeData(value="hi", exposed_label="Title", input_count=2))],
        connections=[Connection(id="c", source_node_id="n", source_socket_id="out-text",
                                target_node_id="n", target_socket_id="in-x")],
    )
    record = serialize(g)
    assert record["connections"][0]["sourceNodeId"] == "n"
    assert record["nodes"][0]["data"]["exposedLabel"] == "Title"
    assert record["nodes"][0]["data"]["inputCount"] == 2


def test_unknown_data_keys_survive(tmp_path: Path):
    g = GraphDefinition(id="g", nodes=[Node(id="l", type="LINK", data=NodeData(value="https://a.b", newTab=True))])
    path = tmp_path / "g.json"
    save_graph(g, path)
    assert load_graph(path).get_node("l").data.model_dump(by_alias=True)["newTab"] is True


@pytest.mark.parametrize("suffix", [".yaml", ".json"])
def test_project_file_round_trip(tmp_path: Path, suffix):
    component = GraphDefinition(id="cmp", name="Card", nodes=[Node(id="root", type="OUTPUT")])
    project = Project(
        name="Site",
        pages=[Page(id="home", name="Home")],
        elements=[Element(id="el", type="CUSTOM", page_id="home", custom_component_id="cmp",
                          prop_overrides={"caption": "Hi"})],
        components=[component],
    )
    path = tmp_path / f"site{suffix}"
    save_project(project, path)
    assert load_project(path) == project


def test_bad_files_raise_graph_load_error(tmp_path: Path):
    missing = tmp_path / "missing.yaml"
    with pytest.raises(GraphLoadError):
        load_graph(missing)

    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just text\n")
    with pytest.raises(GraphLoadError, match="mapping"):
        load_graph(scalar)

    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps({"nodes": [{"id": "x"}]}))
    with pytest.raises(GraphLoadError):
        load_graph(invalid)


@pytest.mark.parametrize("width", [0, -320])
def test_project_width_must_be_positive(tmp_path: Path, width):
    path = tmp_path / "site.json"
    path.write_text(json.dumps({"name": "Flat", "width": width}), encoding="utf-8")
    with pytest.raises(GraphLoadError):
        load_project(path)
