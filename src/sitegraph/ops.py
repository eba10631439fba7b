"""Python interpreter for catalogue reducer expressions.

``assets/runtime.js`` carries the JavaScript port of the same primitive set;
the two must be kept in step op-for-op.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Optional, Protocol

from .coerce import (
    capitalize,
    is_number,
    js_round,
    loose_equals,
    normalize_number,
    to_bool,
    to_number,
    to_string,
    utf16_length,
)


class Frame(Protocol):
    """What an expression can see while reducing one node."""

    def input(self, socket: str) -> Any: ...

    def connected(self, socket: str) -> bool: ...

    def node_value(self) -> Any: ...

    def node_data(self, key: str) -> Any: ...

    def input_count(self) -> int: ...

    def context(self, key: str) -> Any: ...

    def random(self) -> float: ...


def _div(a: float, b: float) -> float:
    if b == 0:
        return 0
    return a / b


def _at(arr: Any, index: Any) -> Any:
    if not isinstance(arr, list) or not is_number(index):
        return None
    if isinstance(index, float):
        if not index.is_integer():
            return None
        index = int(index)
    if 0 <= index < len(arr):
        return arr[index]
    return None


def _join(arr: Any, sep: Any) -> str:
    if not isinstance(arr, list):
        return ""
    return to_string(sep).join(to_string(v) for v in arr)


def _merge(a: Any, b: Any) -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    if isinstance(a, dict):
        merged.update(a)
    if isinstance(b, dict):
        merged.update(b)
    return merged


def _replace(text: str, find: str, replacement: str) -> str:
    if not find:
        return text
    return text.replace(find, replacement)


def _strict_equals(a: Any, b: Any) -> bool:
    if is_number(a) and is_number(b):
        return a == b
    return type(a) is type(b) and a == b


def _oneof(x: Any, options: Any) -> bool:
    return isinstance(options, list) and any(_strict_equals(x, o) for o in options)


STRICT_OPS: Dict[str, Callable[..., Any]] = {
    "num": lambda x, d=0: to_number(x, d),
    "str": to_string,
    "bool": to_bool,
    "default": lambda x, fallback: fallback if x is None else x,
    "either": lambda x, fallback: x if to_bool(x) else fallback,
    "add": lambda a, b: normalize_number(a + b),
    "sub": lambda a, b: normalize_number(a - b),
    "mul": lambda a, b: normalize_number(a * b),
    "div": _div,
    "sin": lambda v: math.sin(v) if math.isfinite(v) else math.nan,
    "cos": lambda v: math.cos(v) if math.isfinite(v) else math.nan,
    "round": js_round,
    "eq": loose_equals,
    "gt": lambda a, b: to_number(a) > to_number(b),
    "and": lambda a, b: to_bool(a) and to_bool(b),
    "or": lambda a, b: to_bool(a) or to_bool(b),
    "not": lambda a: not to_bool(a),
    "if": lambda c, a, b: a if to_bool(c) else b,
    "upper": lambda s: s.upper(),
    "lower": lambda s: s.lower(),
    "capitalize": capitalize,
    "replace": _replace,
    "len": utf16_length,
    "at": _at,
    "alen": lambda arr: len(arr) if isinstance(arr, list) else 0,
    "join": _join,
    "merge": _merge,
    "oneof": _oneof,
}

SPECIAL_OPS = frozenset({"in", "connected", "value", "data", "ctx", "lit", "fmt", "obj", "collect", "random"})


def is_expression(x: Any) -> bool:
    return isinstance(x, list) and bool(x) and isinstance(x[0], str)


def evaluate_expr(expr: Any, frame: Frame) -> Any:
    """Reduce one expression; non-list arguments are literals."""
    if not is_expression(expr):
        return expr
    name, args = expr[0], expr[1:]

    if name == "in":
        return frame.input(args[0])
    if name == "connected":
        return frame.connected(args[0])
    if name == "value":
        return frame.node_value()
    if name == "data":
        return frame.node_data(args[0])
    if name == "ctx":
        return frame.context(args[0])
    if name == "lit":
        return args[0] if args else None
    if name == "fmt":
        return "".join(to_string(evaluate_expr(part, frame)) for part in args[0])
    if name == "obj":
        fields = {key: evaluate_expr(sub, frame) for key, sub in args[0].items()}
        return {key: v for key, v in fields.items() if v is not None}
    if name == "collect":
        items: List[Any] = []
        for i in range(frame.input_count()):
            v = frame.input(f"in-{i}")
            if v is not None:
                items.append(v)
        return items
    if name == "random":
        low, high = (evaluate_expr(a, frame) for a in args)
        return frame.random() * (high - low) + low

    fn: Optional[Callable[..., Any]] = STRICT_OPS.get(name)
    if fn is None:
        # Unknown primitive: behave like a passthrough of the node literal.
        return frame.node_value()
    values = [evaluate_expr(a, frame) for a in args]
    return fn(*values)
