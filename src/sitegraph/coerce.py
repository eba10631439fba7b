"""JavaScript value semantics for the Python evaluator.

The exported artifact evaluates graphs in a browser, so the design-time
evaluator coerces values exactly the way ``Number()``, ``String()``, ``!!``
and ``==`` do there. Python values map onto JavaScript ones as
None -> null, bool, int/float -> number, str, list -> array, dict -> object.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

_NUMERIC_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")

MAX_SAFE_INTEGER = 2 ** 53


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def js_number(value: Any) -> float:
    """``Number(value)``; may return NaN."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return _to_float(value)
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0.0
        if _NUMERIC_RE.match(text):
            return float(text)
        if _HEX_RE.match(text):
            return _to_float(int(text, 16))
        if text in ("Infinity", "+Infinity"):
            return math.inf
        if text == "-Infinity":
            return -math.inf
        return math.nan
    if isinstance(value, list):
        if not value:
            return 0.0
        if len(value) == 1:
            return js_number(to_string(value[0]))
        return math.nan
    return math.nan


def to_number(value: Any, default: float = 0) -> float:
    """Missing -> ``default``; non-numeric -> 0."""
    if value is None:
        return default
    n = js_number(value)
    if math.isnan(n):
        return 0
    return normalize_number(n)


def _to_float(n: int) -> float:
    try:
        return float(n)
    except OverflowError:
        return math.copysign(math.inf, n)


def normalize_number(n: float):
    """Keep numbers in double range: exact ints only below 2**53."""
    if isinstance(n, int) and not isinstance(n, bool):
        return n if abs(n) < MAX_SAFE_INTEGER else _to_float(n)
    if isinstance(n, float) and n.is_integer() and abs(n) < MAX_SAFE_INTEGER:
        return int(n)
    return n


def format_number(n: float) -> str:
    """Number to string the way JavaScript prints it (``10`` not ``10.0``)."""
    if isinstance(n, int):
        if abs(n) < MAX_SAFE_INTEGER:
            return str(n)
        n = _to_float(n)
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    if n == 0:
        return "0"
    if n.is_integer() and abs(n) < MAX_SAFE_INTEGER:
        return str(int(n))
    text = repr(n)
    magnitude = abs(n)
    if 1e-6 <= magnitude < 1e21:
        if "e" in text:
            text = format(Decimal(text), "f")
        elif text.endswith(".0"):
            text = text[:-2]
        return text
    mantissa, _, exponent = text.partition("e")
    if not exponent:
        mantissa, _, exponent = f"{n:e}".partition("e")
        mantissa = mantissa.rstrip("0").rstrip(".")
    sign = "-" if exponent.startswith("-") else "+"
    return f"{mantissa}e{sign}{int(exponent.lstrip('+-'))}"


def to_string(value: Any) -> str:
    """``String(value)`` with null treated as the empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ",".join(to_string(v) for v in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def to_bool(value: Any) -> bool:
    """JavaScript truthiness: arrays and objects are always truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    return True


def _to_primitive(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return to_string(value)
    return value


def loose_equals(a: Any, b: Any) -> bool:
    """JavaScript ``a == b``."""
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, (list, dict)) and isinstance(b, (list, dict)):
        return a is b
    if isinstance(a, bool) and isinstance(b, bool):
        return a == b
    if isinstance(a, bool):
        return loose_equals(1 if a else 0, b)
    if isinstance(b, bool):
        return loose_equals(a, 1 if b else 0)
    a, b = _to_primitive(a), _to_primitive(b)
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return js_number(a) == js_number(b)


def js_round(value: float):
    """``Math.round``: halves round towards +Infinity."""
    if isinstance(value, float) and not math.isfinite(value):
        return value
    floor = math.floor(value)
    return normalize_number(floor + 1 if value - floor >= 0.5 else floor)


def utf16_length(text: str) -> int:
    # lone surrogates are legal in JSON strings and count as one unit
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def capitalize(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]
