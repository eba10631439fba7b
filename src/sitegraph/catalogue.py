"""The node catalogue: one declarative entry per node kind.

Every kind declares its sockets and a *reducer expression*: a JSON-ready
tree built from the primitives in :mod:`sitegraph.ops`. The design-time
evaluator interprets these trees in Python and the exported artifact
interprets the very same trees (serialized into the document) in
JavaScript, so the two evaluators share one source of node semantics.

Expression encoding: a list ``[op, *args]`` is an expression, anything else
is a literal. Literal lists must be wrapped with :func:`lit`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    OUTPUT = "OUTPUT"
    # value sources
    TEXT = "TEXT"
    COLOR = "COLOR"
    NUMBER = "NUMBER"
    TOGGLE = "TOGGLE"
    # arithmetic
    MATH = "MATH"
    SUBTRACT = "SUBTRACT"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"
    SIN = "SIN"
    COS = "COS"
    ROUND = "ROUND"
    RANDOM = "RANDOM"
    # logic
    EQUAL = "EQUAL"
    GREATER = "GREATER"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    IF_ELSE = "IF_ELSE"
    # strings
    CONCAT = "CONCAT"
    UPPERCASE = "UPPERCASE"
    LOWERCASE = "LOWERCASE"
    CAPITALIZE = "CAPITALIZE"
    REPLACE = "REPLACE"
    STRING_LENGTH = "STRING_LENGTH"
    # arrays
    ARRAY = "ARRAY"
    ARRAY_GET = "ARRAY_GET"
    ARRAY_LENGTH = "ARRAY_LENGTH"
    ARRAY_JOIN = "ARRAY_JOIN"
    # style producers
    STYLE = "STYLE"
    GRADIENT = "GRADIENT"
    TRANSFORM = "TRANSFORM"
    FONT = "FONT"
    BORDER = "BORDER"
    SHADOW = "SHADOW"
    LAYOUT = "LAYOUT"
    MERGE = "MERGE"
    HSL = "HSL"
    ANIMATION = "ANIMATION"
    TRANSITION = "TRANSITION"
    # interaction
    INTERACTION_HOVER = "INTERACTION_HOVER"
    INTERACTION_CLICK = "INTERACTION_CLICK"
    TIMER = "TIMER"
    # side effects
    NAVIGATE = "NAVIGATE"
    LINK = "LINK"
    ALERT = "ALERT"


EXPOSABLE_KINDS = frozenset({
    NodeKind.TEXT.value,
    NodeKind.COLOR.value,
    NodeKind.NUMBER.value,
    NodeKind.TOGGLE.value,
    NodeKind.LINK.value,
    NodeKind.ALERT.value,
})

SOCKET_KINDS = ("style", "string", "color", "number", "boolean", "any")

# -- expression builders ----------------------------------------------------

def inp(socket: str) -> list:
    return ["in", socket]


def connected(socket: str) -> list:
    return ["connected", socket]


def value() -> list:
    return ["value"]


def data(key: str) -> list:
    return ["data", key]


def ctx(key: str) -> list:
    return ["ctx", key]


def lit(x: Any) -> list:
    return ["lit", x]


def num(expr: Any, default: float = 0) -> list:
    return ["num", expr, default]


def text(expr: Any) -> list:
    return ["str", expr]


def truthy(expr: Any) -> list:
    return ["bool", expr]


def default(expr: Any, fallback: Any) -> list:
    """``expr ?? fallback``"""
    return ["default", expr, fallback]


def either(expr: Any, fallback: Any) -> list:
    """``expr || fallback``"""
    return ["either", expr, fallback]


def op(name: str, *args: Any) -> list:
    return [name, *args]


def fmt(*parts: Any) -> list:
    return ["fmt", list(parts)]


def obj(fields: Dict[str, Any]) -> list:
    return ["obj", dict(fields)]


# -- catalogue model --------------------------------------------------------

class Socket(BaseModel):
    id: str
    label: str
    kind: str = "any"


class Action(BaseModel):
    """Side effect fired on the rising edge of ``trigger``.

    The effect payload is the node's own resolved value; ``options`` are
    extra expressions evaluated in the node's frame (e.g. ``newTab``).
    """
    effect: str
    trigger: str = "in-trigger"
    options: Dict[str, Any] = Field(default_factory=dict)


class NodeSpec(BaseModel):
    kind: str
    label: str
    inputs: List[Socket] = Field(default_factory=list)
    outputs: List[Socket] = Field(default_factory=list)
    reduce: Any = Field(default_factory=value)
    action: Optional[Action] = None
    dynamic_inputs: bool = False

    @property
    def exposable(self) -> bool:
        return self.kind in EXPOSABLE_KINDS

    def input_ids(self, input_count: Optional[int] = None) -> List[str]:
        if self.dynamic_inputs:
            return [f"in-{i}" for i in range(input_count or 0)]
        return [s.id for s in self.inputs]

    def output_ids(self) -> List[str]:
        return [s.id for s in self.outputs]

    def semantics(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"reduce": self.reduce}
        if self.action is not None:
            entry["action"] = self.action.model_dump()
        return entry


def _s(socket_id: str, label: str, kind: str = "any") -> Socket:
    return Socket(id=socket_id, label=label, kind=kind)


def _binary_number(kind: NodeKind, label: str, op_name: str, b_default: float = 0) -> NodeSpec:
    return NodeSpec(
        kind=kind.value,
        label=label,
        inputs=[_s("in-a", "A", "number"), _s("in-b", "B", "number")],
        outputs=[_s("out-res", "Result", "number")],
        reduce=op(op_name, num(inp("in-a")), num(inp("in-b"), b_default)),
    )


def _unary_number(kind: NodeKind, label: str, op_name: str, out: str = "out-res") -> NodeSpec:
    return NodeSpec(
        kind=kind.value,
        label=label,
        inputs=[_s("in-val", "Value", "number")],
        outputs=[_s(out, "Result", "number")],
        reduce=op(op_name, num(inp("in-val"))),
    )


def _binary_bool(kind: NodeKind, label: str, op_name: str) -> NodeSpec:
    return NodeSpec(
        kind=kind.value,
        label=label,
        inputs=[_s("in-a", "A", "boolean"), _s("in-b", "B", "boolean")],
        outputs=[_s("out-bool", "Yes/No", "boolean")],
        reduce=op(op_name, inp("in-a"), inp("in-b")),
    )


def _text_transform(kind: NodeKind, label: str, op_name: str) -> NodeSpec:
    return NodeSpec(
        kind=kind.value,
        label=label,
        inputs=[_s("in-text", "Text", "string")],
        outputs=[_s("out-text", "Text", "string")],
        reduce=op(op_name, text(inp("in-text"))),
    )


def _source(kind: NodeKind, label: str, out: Socket, reduce: Any = None) -> NodeSpec:
    return NodeSpec(kind=kind.value, label=label, outputs=[out], reduce=reduce or value())


_STYLE_OUT = [_s("out-style", "Style", "style")]
_TRIGGER = _s("in-trigger", "Trigger", "boolean")
_LOOPING_ANIMATIONS = ["spin", "pulse", "shake"]


def _animation_reduce() -> list:
    name = either(value(), "fadeIn")
    running = obj({
        "animation": fmt(
            name, " ",
            num(inp("in-duration"), 1), "s ease-in-out ",
            num(inp("in-delay"), 0), "s ",
            op("if", op("oneof", name, lit(_LOOPING_ANIMATIONS)), "infinite", "1"),
            " both",
        ),
    })
    stopped = obj({"animation": "none"})
    held_off = op("and", connected("in-trigger"), op("not", inp("in-trigger")))
    return op("if", held_off, stopped, running)


def _gradient_reduce() -> list:
    colors = inp("in-colors")
    stops = op(
        "if",
        op("gt", op("alen", colors), 0),
        op("join", colors, ", "),
        fmt(either(inp("in-c1"), "#ffffff"), ", ", either(inp("in-c2"), "#000000")),
    )
    return obj({"backgroundImage": fmt("linear-gradient(", num(inp("in-deg"), 90), "deg, ", stops, ")")})


_SPECS: List[NodeSpec] = [
    NodeSpec(
        kind=NodeKind.OUTPUT.value,
        label="Output",
        inputs=[_s("in-style", "Style", "style"), _s("in-content", "Content", "string")],
        reduce=lit(None),
    ),
    # value sources
    _source(NodeKind.TEXT, "Text", _s("out-text", "String", "string")),
    _source(NodeKind.COLOR, "Color", _s("out-color", "Color", "color")),
    _source(NodeKind.NUMBER, "Number", _s("out-num", "Value", "number")),
    _source(NodeKind.TOGGLE, "Toggle", _s("out-bool", "Yes/No", "boolean")),
    # arithmetic
    _binary_number(NodeKind.MATH, "Add", "add"),
    _binary_number(NodeKind.SUBTRACT, "Subtract", "sub"),
    _binary_number(NodeKind.MULTIPLY, "Multiply", "mul"),
    _binary_number(NodeKind.DIVIDE, "Divide", "div", b_default=1),
    _unary_number(NodeKind.SIN, "Sine", "sin"),
    _unary_number(NodeKind.COS, "Cosine", "cos"),
    _unary_number(NodeKind.ROUND, "Round", "round", out="out-val"),
    NodeSpec(
        kind=NodeKind.RANDOM.value,
        label="Random",
        inputs=[_s("in-min", "Min", "number"), _s("in-max", "Max", "number")],
        outputs=[_s("out-num", "Number", "number")],
        reduce=op("random", num(inp("in-min"), 0), num(inp("in-max"), 100)),
    ),
    # logic
    NodeSpec(
        kind=NodeKind.EQUAL.value,
        label="Equal",
        inputs=[_s("in-a", "A"), _s("in-b", "B")],
        outputs=[_s("out-bool", "Yes/No", "boolean")],
        reduce=op("eq", inp("in-a"), inp("in-b")),
    ),
    NodeSpec(
        kind=NodeKind.GREATER.value,
        label="Greater",
        inputs=[_s("in-a", "A", "number"), _s("in-b", "B", "number")],
        outputs=[_s("out-bool", "Yes/No", "boolean")],
        reduce=op("gt", num(inp("in-a")), num(inp("in-b"))),
    ),
    _binary_bool(NodeKind.AND, "And", "and"),
    _binary_bool(NodeKind.OR, "Or", "or"),
    NodeSpec(
        kind=NodeKind.NOT.value,
        label="Not",
        inputs=[_s("in-a", "Input", "boolean")],
        outputs=[_s("out-bool", "Output", "boolean")],
        reduce=op("not", inp("in-a")),
    ),
    NodeSpec(
        kind=NodeKind.IF_ELSE.value,
        label="If / Else",
        inputs=[_s("in-condition", "Condition", "boolean"), _s("in-true", "If true"), _s("in-false", "If false")],
        outputs=[_s("out-result", "Result")],
        reduce=op("if", inp("in-condition"), inp("in-true"), inp("in-false")),
    ),
    # strings
    NodeSpec(
        kind=NodeKind.CONCAT.value,
        label="Concat",
        inputs=[_s("in-str1", "Text 1", "string"), _s("in-str2", "Text 2", "string")],
        outputs=[_s("out-res", "Result", "string")],
        reduce=fmt(inp("in-str1"), inp("in-str2")),
    ),
    _text_transform(NodeKind.UPPERCASE, "Uppercase", "upper"),
    _text_transform(NodeKind.LOWERCASE, "Lowercase", "lower"),
    _text_transform(NodeKind.CAPITALIZE, "Capitalize", "capitalize"),
    NodeSpec(
        kind=NodeKind.REPLACE.value,
        label="Replace",
        inputs=[_s("in-text", "Text", "string"), _s("in-find", "Find", "string"), _s("in-replace", "Replace", "string")],
        outputs=[_s("out-text", "Text", "string")],
        reduce=op("replace", text(inp("in-text")), text(inp("in-find")), text(inp("in-replace"))),
    ),
    NodeSpec(
        kind=NodeKind.STRING_LENGTH.value,
        label="String length",
        inputs=[_s("in-text", "Text", "string")],
        outputs=[_s("out-len", "Length", "number")],
        reduce=op("len", text(inp("in-text"))),
    ),
    # arrays
    NodeSpec(
        kind=NodeKind.ARRAY.value,
        label="Array",
        outputs=[_s("out-arr", "Array")],
        reduce=["collect"],
        dynamic_inputs=True,
    ),
    NodeSpec(
        kind=NodeKind.ARRAY_GET.value,
        label="Array get",
        inputs=[_s("in-arr", "Array"), _s("in-index", "Index", "number")],
        outputs=[_s("out-item", "Item")],
        reduce=op("at", inp("in-arr"), default(inp("in-index"), either(value(), 0))),
    ),
    NodeSpec(
        kind=NodeKind.ARRAY_LENGTH.value,
        label="Array length",
        inputs=[_s("in-arr", "Array")],
        outputs=[_s("out-len", "Length", "number")],
        reduce=op("alen", inp("in-arr")),
    ),
    NodeSpec(
        kind=NodeKind.ARRAY_JOIN.value,
        label="Array join",
        inputs=[_s("in-arr", "Array"), _s("in-sep", "Separator", "string")],
        outputs=[_s("out-str", "String", "string")],
        reduce=op("join", inp("in-arr"), default(inp("in-sep"), either(value(), ", "))),
    ),
    # style producers
    NodeSpec(
        kind=NodeKind.STYLE.value,
        label="Typography",
        inputs=[
            _s("in-bg", "Background", "color"),
            _s("in-text", "Text color", "color"),
            _s("in-size", "Size (px)", "number"),
            _s("in-auto-size", "Auto size", "boolean"),
        ],
        outputs=_STYLE_OUT,
        reduce=obj({
            "backgroundColor": inp("in-bg"),
            "color": inp("in-text"),
            "fontSize": inp("in-size"),
            "autoFontSize": truthy(inp("in-auto-size")),
            "display": "flex",
            "alignItems": "center",
            "justifyContent": "center",
        }),
    ),
    NodeSpec(
        kind=NodeKind.GRADIENT.value,
        label="Gradient",
        inputs=[
            _s("in-colors", "Colors array"),
            _s("in-deg", "Angle (deg)", "number"),
            _s("in-c1", "Color 1", "color"),
            _s("in-c2", "Color 2", "color"),
        ],
        outputs=_STYLE_OUT,
        reduce=_gradient_reduce(),
    ),
    NodeSpec(
        kind=NodeKind.TRANSFORM.value,
        label="Transform",
        inputs=[_s("in-rot", "Rotate (deg)", "number"), _s("in-scale", "Scale", "number")],
        outputs=_STYLE_OUT,
        reduce=obj({
            "transform": fmt("rotate(", num(inp("in-rot"), 0), "deg) scale(", num(inp("in-scale"), 1), ")"),
        }),
    ),
    NodeSpec(
        kind=NodeKind.FONT.value,
        label="Font",
        inputs=[_s("in-font", "Family", "string")],
        outputs=_STYLE_OUT,
        reduce=obj({"fontFamily": either(inp("in-font"), "sans-serif")}),
    ),
    NodeSpec(
        kind=NodeKind.BORDER.value,
        label="Border",
        inputs=[_s("in-width", "Width", "number"), _s("in-color", "Color", "color"), _s("in-radius", "Radius", "number")],
        outputs=_STYLE_OUT,
        reduce=obj({
            "borderWidth": inp("in-width"),
            "borderColor": inp("in-color"),
            "borderRadius": inp("in-radius"),
        }),
    ),
    NodeSpec(
        kind=NodeKind.SHADOW.value,
        label="Shadow",
        inputs=[
            _s("in-x", "Offset X", "number"),
            _s("in-y", "Offset Y", "number"),
            _s("in-blur", "Blur", "number"),
            _s("in-color", "Color", "color"),
        ],
        outputs=_STYLE_OUT,
        reduce=obj({
            "boxShadow": fmt(
                num(inp("in-x")), "px ", num(inp("in-y")), "px ", num(inp("in-blur")), "px ",
                either(inp("in-color"), "#000000"),
            ),
        }),
    ),
    NodeSpec(
        kind=NodeKind.LAYOUT.value,
        label="Layout",
        inputs=[_s("in-padding", "Padding (px)", "number"), _s("in-opacity", "Opacity", "number")],
        outputs=_STYLE_OUT,
        reduce=obj({"padding": inp("in-padding"), "opacity": inp("in-opacity")}),
    ),
    NodeSpec(
        kind=NodeKind.MERGE.value,
        label="Merge",
        inputs=[_s("in-style-a", "Style A", "style"), _s("in-style-b", "Style B", "style")],
        outputs=_STYLE_OUT,
        reduce=op("merge", inp("in-style-a"), inp("in-style-b")),
    ),
    NodeSpec(
        kind=NodeKind.HSL.value,
        label="HSL",
        inputs=[_s("in-h", "H (0-360)", "number"), _s("in-s", "S (0-100)", "number"), _s("in-l", "L (0-100)", "number")],
        outputs=[_s("out-color", "Color", "color")],
        reduce=fmt("hsl(", num(inp("in-h"), 0), ", ", num(inp("in-s"), 100), "%, ", num(inp("in-l"), 50), "%)"),
    ),
    NodeSpec(
        kind=NodeKind.ANIMATION.value,
        label="Animation",
        inputs=[_TRIGGER, _s("in-duration", "Duration (s)", "number"), _s("in-delay", "Delay (s)", "number")],
        outputs=_STYLE_OUT,
        reduce=_animation_reduce(),
    ),
    NodeSpec(
        kind=NodeKind.TRANSITION.value,
        label="Transition",
        inputs=[_s("in-duration", "Duration (s)", "number"), _s("in-delay", "Delay (s)", "number")],
        outputs=_STYLE_OUT,
        reduce=obj({
            "transition": fmt("all ", num(inp("in-duration"), 0.3), "s ease-in-out ", num(inp("in-delay"), 0), "s"),
        }),
    ),
    # interaction
    _source(NodeKind.INTERACTION_HOVER, "Hover", _s("out-bool", "Active", "boolean"), ctx("isHovered")),
    _source(NodeKind.INTERACTION_CLICK, "Click toggle", _s("out-bool", "On", "boolean"), ctx("isClicked")),
    NodeSpec(
        kind=NodeKind.TIMER.value,
        label="Timer",
        inputs=[_s("in-speed", "Speed", "number")],
        outputs=[_s("out-time", "Time (s)", "number")],
        reduce=op("mul", ctx("time"), num(inp("in-speed"), 1)),
    ),
    # side effects
    NodeSpec(
        kind=NodeKind.NAVIGATE.value,
        label="Navigate",
        inputs=[_TRIGGER],
        action=Action(effect="navigate"),
    ),
    NodeSpec(
        kind=NodeKind.LINK.value,
        label="Open link",
        inputs=[_TRIGGER, _s("in-url", "URL", "string"), _s("in-new-tab", "New tab", "boolean")],
        reduce=default(inp("in-url"), value()),
        action=Action(effect="open_link", options={"newTab": truthy(default(inp("in-new-tab"), data("newTab")))}),
    ),
    NodeSpec(
        kind=NodeKind.ALERT.value,
        label="Alert",
        inputs=[_TRIGGER, _s("in-message", "Message", "string")],
        reduce=default(inp("in-message"), value()),
        action=Action(effect="alert"),
    ),
]

CATALOGUE: Dict[str, NodeSpec] = {spec.kind: spec for spec in _SPECS}
ACTION_KINDS = frozenset(k for k, spec in CATALOGUE.items() if spec.action is not None)


def semantics_table(kinds: Optional[Iterable[str]] = None) -> Dict[str, Dict[str, Any]]:
    """Serializable reducer table; restricted to ``kinds`` when given.

    Kinds missing from the table evaluate to their literal ``data.value``
    in both runtimes.
    """
    wanted = CATALOGUE.keys() if kinds is None else [k for k in kinds if k in CATALOGUE]
    return {k: CATALOGUE[k].semantics() for k in sorted(set(wanted))}
