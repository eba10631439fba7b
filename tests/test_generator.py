from pathlib import Path

import pytest

from sitegraph.exceptions import UnknownTemplateError
from sitegraph.generator import available_templates, generate_graph_from_template, save_graph_yaml
from sitegraph.validator import validate_graph_from_file
from sitegraph.visualize import ascii_plan


@pytest.mark.parametrize("template", available_templates())
def test_generate_and_validate(tmp_path: Path, template):
    g = generate_graph_from_template(template)
    path = tmp_path / f"{template}.yaml"
    save_graph_yaml(g, path)
    ok, messages = validate_graph_from_file(path)
    assert ok, messages
    assert not [m for m in messages if m.startswith("WARN")], messages


def test_templates_are_shipped():
    assert {"blank", "hover_highlight", "click_navigate", "timer_wobble"} <= set(available_templates())


def test_generated_graph_gets_fresh_id_and_name():
    a = generate_graph_from_template("hover-highlight", name="cta")
    b = generate_graph_from_template("hover_highlight")
    assert a.id != b.id
    assert a.name == "cta"
    assert a.get_node("root").type == "OUTPUT"


def test_unknown_template():
    with pytest.raises(UnknownTemplateError) as excinfo:
        generate_graph_from_template("ner")
    assert "blank" in str(excinfo.value)


def test_ascii_plan_lists_nodes_in_dependency_order(tmp_path: Path):
    path = tmp_path / "wobble.yaml"
    save_graph_yaml(generate_graph_from_template("timer_wobble"), path)
    plan = ascii_plan(path)
    lines = plan.splitlines()
    assert "topological order" in lines[0]
    order = [line.split()[1] for line in lines[1:] if not line.startswith("    ")]
    assert order.index("timer") < order.index("wave") < order.index("angle") < order.index("root")
    assert "└─▶ wave  (out-time->in-val)" in plan
    assert "= 4" in plan
