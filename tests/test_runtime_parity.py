"""The exported runtime.js and the Python interpreter must agree on every graph."""

import json
import shutil
import subprocess

import pytest

from conftest import build_graph
from sitegraph.catalogue import semantics_table
from sitegraph.context import RuntimeContext
from sitegraph.exporter import runtime_source
from sitegraph.generator import generate_graph_from_template
from sitegraph.runner import Interpreter

NODE = shutil.which("node")

pytestmark = pytest.mark.skipif(NODE is None, reason="node is not installed")

_HARNESS = r"""
const fs = require("fs");
const vm = require("vm");
const input = JSON.parse(fs.readFileSync(0, "utf8"));
globalThis.window = {
  SITEGRAPH_PROJECT: { semantics: input.semantics, pages: [], elements: [], components: [], scripts: [] },
  SITEGRAPH_CONFIG: { frameLoop: false },
  requestAnimationFrame: function () {},
};
globalThis.document = {
  querySelectorAll: function () { return []; },
  querySelector: function () { return null; },
  getElementById: function () { return null; },
};
vm.runInThisContext(input.runtime);
const triggers = window.SITEGRAPH_RUNTIME.triggers;
const results = input.cases.map(function (c, i) {
  return c.contexts.map(function (ctx) {
    return window.SITEGRAPH_EVALUATE(c.graph, c.overrides, ctx, "case-" + i, triggers);
  });
});
process.stdout.write(JSON.stringify(results));
"""

IDLE = RuntimeContext()
HOVERED = RuntimeContext(is_hovered=True)
CLICKED = RuntimeContext(is_clicked=True)


def _single(kind, data=None, inputs=()):
    nodes = [("root", "OUTPUT", None), ("n", kind, data)]
    wires = [("n", "out", "root", "in-content")]
    for i, (socket, src_kind, value) in enumerate(inputs):
        nodes.append((f"src{i}", src_kind, {"value": value}))
        wires.append((f"src{i}", "out", "n", socket))
    return build_graph(nodes, wires)


def _template(name, **values):
    g = generate_graph_from_template(name)
    for node_id, value in values.items():
        g.get_node(node_id).data.value = value
    return g


def _cases():
    merge = build_graph(
        [("root", "OUTPUT", None), ("a", "STYLE", None), ("b", "STYLE", None), ("m", "MERGE", None)],
        [("a", "out-style", "m", "in-style-a"), ("b", "out-style", "m", "in-style-b"), ("m", "out-style", "root", "in-style")],
    )
    array = build_graph(
        [
            ("root", "OUTPUT", None),
            ("arr", "ARRAY", {"inputCount": 3}),
            ("a", "TEXT", {"value": "x"}),
            ("b", "TEXT", {"value": "y"}),
            ("join", "ARRAY_JOIN", {"value": "|"}),
            ("get", "ARRAY_GET", {"value": 5}),
        ],
        [
            ("a", "out-text", "arr", "in-0"),
            ("b", "out-text", "arr", "in-2"),
            ("arr", "out-arr", "join", "in-arr"),
            ("arr", "out-arr", "get", "in-arr"),
            ("join", "out-str", "root", "in-content"),
        ],
    )
    cycle = build_graph(
        [("root", "OUTPUT", None), ("a", "MATH", None), ("b", "MATH", None), ("one", "NUMBER", {"value": 1})],
        [
            ("a", "out-res", "b", "in-a"),
            ("b", "out-res", "a", "in-a"),
            ("one", "out-num", "a", "in-b"),
            ("a", "out-res", "root", "in-content"),
        ],
    )
    fan_in = build_graph(
        [("root", "OUTPUT", None), ("a", "TEXT", {"value": "first"}), ("b", "TEXT", {"value": "second"})],
        [("a", "out-text", "root", "in-content"), ("b", "out-text", "root", "in-content")],
    )
    gated = build_graph(
        [("root", "OUTPUT", None), ("anim", "ANIMATION", {"value": "spin"}), ("hover", "INTERACTION_HOVER", None)],
        [("anim", "out-style", "root", "in-style"), ("hover", "out-bool", "anim", "in-trigger")],
    )
    gradient = build_graph(
        [("root", "OUTPUT", None), ("gr", "GRADIENT", None)],
        [("gr", "out-style", "root", "in-style")],
    )
    link = build_graph(
        [("click", "INTERACTION_CLICK", None), ("open", "LINK", {"value": "https://example.com", "newTab": True})],
        [("click", "out-bool", "open", "in-trigger")],
    )
    alert = build_graph(
        [("click", "INTERACTION_CLICK", None), ("say", "ALERT", {"value": "hi"})],
        [("click", "out-bool", "say", "in-trigger")],
    )
    pattern = [RuntimeContext(is_clicked=c) for c in (False, True, True, False, True)]

    return [
        ("blank", _template("blank"), {}, [IDLE]),
        ("hover_highlight", _template("hover_highlight"), {}, [IDLE, HOVERED]),
        ("click_navigate", _template("click_navigate", go="page-2"), {}, pattern),
        ("click_navigate without target", _template("click_navigate"), {}, [CLICKED]),
        ("timer_wobble", _template("timer_wobble"), {}, [IDLE]),
        ("timer_wobble pinned", _template("timer_wobble"), {"angle": 45}, [RuntimeContext(time=3.0)]),
        ("divide by zero", _single("DIVIDE", inputs=[("in-a", "NUMBER", 10), ("in-b", "NUMBER", 0)]), {}, [IDLE]),
        ("divide default", _single("DIVIDE", inputs=[("in-a", "NUMBER", 10)]), {}, [IDLE]),
        ("divide thirds", _single("DIVIDE", inputs=[("in-a", "NUMBER", 1), ("in-b", "NUMBER", 3)]), {}, [IDLE]),
        ("add strings", _single("MATH", inputs=[("in-a", "TEXT", "2"), ("in-b", "NUMBER", 3)]), {}, [IDLE]),
        ("add junk", _single("MATH", inputs=[("in-a", "TEXT", "abc"), ("in-b", "NUMBER", 3)]), {}, [IDLE]),
        ("add fractions", _single("MATH", inputs=[("in-a", "NUMBER", 0.1), ("in-b", "NUMBER", 0.2)]), {}, [IDLE]),
        ("uppercase", _single("UPPERCASE", inputs=[("in-text", "TEXT", "hi")]), {}, [IDLE]),
        ("capitalize", _single("CAPITALIZE", inputs=[("in-text", "TEXT", "hello")]), {}, [IDLE]),
        ("length", _single("STRING_LENGTH", inputs=[("in-text", "TEXT", "héllo \U0001F600")]), {}, [IDLE]),
        ("replace", _single("REPLACE", inputs=[
            ("in-text", "TEXT", "a-b-c"), ("in-find", "TEXT", "-"), ("in-replace", "TEXT", "+"),
        ]), {}, [IDLE]),
        ("concat", _single("CONCAT", inputs=[("in-str1", "TEXT", "foo"), ("in-str2", "NUMBER", 1)]), {}, [IDLE]),
        ("hsl", _single("HSL"), {}, [IDLE]),
        ("unknown kind", _single("NOT_A_NODE", {"value": "kept"}), {}, [IDLE]),
        ("falsy override", _single("TEXT", {"value": "literal"}), {"n": 0}, [IDLE]),
        ("empty override", _single("TEXT", {"value": "literal"}), {"n": ""}, [IDLE]),
        ("arrays", array, {}, [IDLE]),
        ("merge", merge, {"a": {"color": "red", "padding": 4}, "b": {"color": "blue"}}, [IDLE]),
        ("cycle", cycle, {}, [IDLE]),
        ("fan-in", fan_in, {}, [IDLE]),
        ("gated animation", gated, {}, [IDLE, HOVERED]),
        ("gradient", gradient, {}, [IDLE]),
        ("link", link, {}, [IDLE, CLICKED, CLICKED]),
        ("alert", alert, {}, [CLICKED, IDLE, CLICKED]),
        ("past safe integers", _single("MATH", inputs=[("in-a", "NUMBER", 2 ** 53 - 1), ("in-b", "NUMBER", 2)]), {}, [IDLE]),
        ("huge product", _single("MULTIPLY", inputs=[("in-a", "NUMBER", 2 ** 53), ("in-b", "NUMBER", 2 ** 53)]), {}, [IDLE]),
        ("round huge", _single("ROUND", inputs=[("in-val", "NUMBER", 1e21)]), {}, [IDLE]),
        ("round half", _single("ROUND", inputs=[("in-val", "NUMBER", -2.5)]), {}, [IDLE]),
        ("beyond double range", _single("MATH", inputs=[("in-a", "NUMBER", 10 ** 400)]), {}, [IDLE]),
        ("lone surrogate", _single("STRING_LENGTH", inputs=[("in-text", "TEXT", "\ud800")]), {}, [IDLE]),
    ]


CASES = _cases()


def _python_results(graph, overrides, contexts):
    interpreter = Interpreter()
    results = []
    for res in interpreter.run(graph, contexts, overrides):
        results.append({
            "style": res.style,
            "content": res.content,
            "effects": [
                {"kind": e.kind, "nodeId": e.node_id, "payload": e.payload, "options": e.options}
                for e in res.effects
            ],
        })
    return json.loads(json.dumps(results))


def _strip_scope(results):
    for res in results:
        for effect in res["effects"]:
            effect.pop("scope", None)
    return results


@pytest.fixture(scope="module")
def js_results():
    payload = {
        "runtime": runtime_source(),
        "semantics": semantics_table(),
        "cases": [
            {
                "graph": graph.model_dump(by_alias=True),
                "overrides": overrides,
                "contexts": [ctx.model_dump(by_alias=True) for ctx in contexts],
            }
            for _, graph, overrides, contexts in CASES
        ],
    }
    proc = subprocess.run(
        [NODE, "-e", _HARNESS],
        input=json.dumps(payload),
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=60,
        check=True,
    )
    return json.loads(proc.stdout)


@pytest.mark.parametrize("index", range(len(CASES)), ids=[name for name, *_ in CASES])
def test_runtime_matches_python(js_results, index):
    _, graph, overrides, contexts = CASES[index]
    assert _strip_scope(js_results[index]) == _python_results(graph, overrides, contexts)
