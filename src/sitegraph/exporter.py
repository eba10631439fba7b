"""Standalone HTML export.

The document carries static markup for every page and element, a JSON
bundle of the project, the reduced node-semantics table (only the kinds the
project uses) and ``assets/runtime.js``, which interprets that table once
per animation frame. Both the bundle table and the design-time evaluator
come from :mod:`sitegraph.catalogue`.
"""

from __future__ import annotations

import html
import json
import logging
import re
from importlib.resources import files
from typing import Any, Dict, Iterable, List, Optional, Set

from .catalogue import semantics_table
from .coerce import format_number, js_round, to_bool, to_number, to_string
from .config import ExportSettings
from .context import RuntimeContext
from .ir import Element, ElementType, GraphDefinition, Project
from .runner import Interpreter, evaluate_element
from .storage import serialize

logger = logging.getLogger(__name__)

_SHADOW_PX = re.compile(r"(-?\d+(?:\.\d+)?)px")

_PLAIN_PROPS = [
    ("backgroundColor", "background-color"),
    ("backgroundImage", "background-image"),
    ("color", "color"),
    ("fontWeight", "font-weight"),
    ("fontFamily", "font-family"),
    ("display", "display"),
    ("alignItems", "align-items"),
    ("justifyContent", "justify-content"),
    ("transform", "transform"),
    ("textAlign", "text-align"),
    ("animation", "animation"),
    ("transition", "transition"),
    ("flexDirection", "flex-direction"),
    ("lineHeight", "line-height"),
    ("letterSpacing", "letter-spacing"),
    ("textShadow", "text-shadow"),
]
_SCALED_PROPS = [
    ("marginTop", "margin-top"),
    ("marginLeft", "margin-left"),
    ("gap", "gap"),
    ("borderRadius", "border-radius"),
    ("padding", "padding"),
]
_BORDER_PROPS = [
    ("borderWidth", "border-width"),
    ("borderBottomWidth", "border-bottom-width"),
    ("borderTopWidth", "border-top-width"),
]
_TEXT_TYPES = {"BUTTON", "BADGE", "HEADING", "PARAGRAPH", "CUSTOM", "CONTAINER", "CARD"}

_TAILWIND = {
    "HEADING": "w-full h-full overflow-hidden leading-tight flex flex-col justify-center",
    "PARAGRAPH": "w-full h-full overflow-hidden leading-relaxed",
    "CARD": "w-full h-full bg-white",
    "INPUT": "w-full h-full px-3 text-sm rounded focus:outline-none focus:ring-2 focus:ring-blue-500 bg-transparent",
    "IMAGE_PLACEHOLDER": "w-full h-full flex flex-col items-center justify-center text-gray-400 bg-gray-50",
    "VIDEO_PLACEHOLDER": "w-full h-full flex flex-col items-center justify-center text-gray-400 relative overflow-hidden",
    "AVATAR": "w-full h-full flex items-center justify-center overflow-hidden",
    "DIVIDER": "w-full h-full flex items-center",
}


def tailwind_classes(element_type: str, style: Dict[str, Any]) -> str:
    if element_type in ("BUTTON", "BADGE"):
        justify = "justify-center"
        if style.get("textAlign") == "left":
            justify = "justify-start px-4"
        elif style.get("textAlign") == "right":
            justify = "justify-end px-4"
        return f"w-full h-full flex items-center {justify} transition-opacity hover:opacity-90 overflow-hidden"
    return _TAILWIND.get(element_type, "w-full h-full")


def auto_font_size(width: float, height: float, content: str) -> int:
    height_limit = js_round(height * 0.6)
    chars = max(1, len(content or "") or 1)
    width_limit = js_round((width / chars) * 1.8)
    return max(10, min(height_limit, width_limit))


def element_css(style: Dict[str, Any], width: float, height: float, content: str, canvas_width: float) -> Dict[str, str]:
    """CSS declarations for an element, pixel geometry rescaled to ``vw``."""

    def vw(px: Any) -> str:
        return f"{format_number(to_number(px) / canvas_width * 100)}vw"

    css: Dict[str, str] = {}
    for key, prop in _PLAIN_PROPS:
        if to_bool(style.get(key)):
            css[prop] = to_string(style[key])
    if style.get("opacity") is not None:
        css["opacity"] = to_string(style["opacity"])
    for key, prop in _SCALED_PROPS:
        if to_bool(style.get(key)):
            css[prop] = vw(style[key])

    if any(to_bool(style.get(key)) for key, _ in _BORDER_PROPS):
        for key, prop in _BORDER_PROPS:
            if to_bool(style.get(key)):
                css[prop] = vw(style[key])
        css["border-style"] = "solid"
        if to_bool(style.get("borderColor")):
            css["border-color"] = to_string(style["borderColor"])

    shadow = style.get("boxShadow")
    if isinstance(shadow, str) and shadow:
        css["box-shadow"] = _SHADOW_PX.sub(lambda m: vw(float(m.group(1))), shadow)

    font_size = style.get("fontSize")
    if to_bool(style.get("autoFontSize")):
        font_size = auto_font_size(width, height, content)
        css["line-height"] = "1"
        css["white-space"] = "nowrap"
        css["text-overflow"] = "ellipsis"
    if to_bool(font_size):
        css["font-size"] = vw(font_size)
    return css


def css_text(css: Dict[str, str]) -> str:
    return " ".join(f"{prop}: {value};" for prop, value in css.items())


def _pct(value: float, whole: float) -> str:
    return f"{(value / whole) * 100:.4f}%"


class _Renderer:
    def __init__(self, project: Project, canvas_width: float, canvas_height: float) -> None:
        self.project = project
        self.width = canvas_width
        self.height = canvas_height
        # static markup is the state at time 0 with no interaction
        self.interpreter = Interpreter(seed=0)

    def element(self, el: Element, parent_width: float, parent_height: float) -> str:
        children = "".join(self.element(c, el.width, el.height) for c in self.project.children_of(el.id))
        wrapper = (
            f"position: absolute; left: {_pct(el.x, parent_width)}; top: {_pct(el.y, parent_height)}; "
            f"width: {_pct(el.width, parent_width)}; height: {_pct(el.height, parent_height)};"
        )

        computed = evaluate_element(el, self.project, self.interpreter, RuntimeContext())
        style = {**el.style, **computed.style}
        content = computed.content
        css = html.escape(css_text(element_css(style, el.width, el.height, content, self.width)))
        classes = tailwind_classes(el.type, style)
        text = html.escape(content)
        text_classes = ' class="truncate max-w-full block"' if to_bool(style.get("autoFontSize")) else ""

        if el.type == ElementType.INPUT.value:
            return (
                f'<div id="{el.id}-wrapper" style="{wrapper}">'
                f'<input data-el-id="{el.id}" type="text" value="{html.escape(content)}" class="{classes}" style="{css}" readonly />'
                f"{children}</div>"
            )

        tag = "button" if el.type == ElementType.BUTTON.value else "div"
        if el.type == ElementType.DIVIDER.value:
            line = html.escape(str(style.get("backgroundColor") or "#d1d5db"))
            inner = f'<div style="width:100%; height:1px; background-color:{line};"></div>'
        elif el.type in (ElementType.IMAGE_PLACEHOLDER.value, ElementType.VIDEO_PLACEHOLDER.value, ElementType.AVATAR.value):
            inner = f'<span class="text-xs">{html.escape(el.name or el.type.split("_")[0].title())}</span>'
        elif el.type in _TEXT_TYPES:
            inner = f"<span data-el-text{text_classes}>{text}</span>"
        else:
            inner = text
        return (
            f'<div id="{el.id}-wrapper" style="{wrapper}">'
            f'<{tag} data-el-id="{el.id}" class="{classes}" style="{css}">{inner}{children}</{tag}>'
            f"</div>"
        )

    def pages(self) -> str:
        out = []
        for index, page in enumerate(self.project.pages):
            body = "\n".join(self.element(el, self.width, self.height) for el in self.project.roots_on(page.id))
            hidden = "" if index == 0 else " hidden"
            out.append(
                f'<div id="page-{page.id}" class="page-container absolute inset-0 w-full h-full{hidden}">\n{body}\n</div>'
            )
        return "\n".join(out)


def used_kinds(graphs: Iterable[GraphDefinition]) -> Set[str]:
    return {n.type for g in graphs for n in g.nodes}


def project_graphs(project: Project) -> List[GraphDefinition]:
    graphs = list(project.components) + list(project.scripts)
    graphs.extend(e.custom_node_group for e in project.elements if e.custom_node_group is not None)
    return graphs


_BUNDLED_ELEMENT_FIELDS = (
    "id", "type", "pageId", "scripts", "propOverrides", "customComponentId",
    "customNodeGroup", "isDetached", "content", "style", "width", "height",
)


def build_bundle(project: Project) -> Dict[str, Any]:
    """Everything the embedded runtime needs, JSON-ready."""
    elements = []
    for el in project.elements:
        record = serialize(el)
        elements.append({key: record[key] for key in _BUNDLED_ELEMENT_FIELDS})
    return {
        "elements": elements,
        "components": [serialize(c) for c in project.components],
        "scripts": [serialize(s) for s in project.scripts],
        "pages": [serialize(p) for p in project.pages],
        "semantics": semantics_table(used_kinds(project_graphs(project))),
    }


def _script_json(data: Any) -> str:
    # keep "</script>" inside strings from closing the tag
    return json.dumps(data, ensure_ascii=False).replace("</", "<\\/")


def runtime_source() -> str:
    return (files("sitegraph.assets") / "runtime.js").read_text(encoding="utf-8")


_KEYFRAMES = """
        @keyframes fadeIn { from { opacity: 0; } to { opacity: 1; } }
        @keyframes fadeOut { from { opacity: 1; } to { opacity: 0; } }
        @keyframes slideInUp { from { transform: translateY(50px); opacity: 0; } to { transform: translateY(0); opacity: 1; } }
        @keyframes slideInLeft { from { transform: translateX(-50px); opacity: 0; } to { transform: translateX(0); opacity: 1; } }
        @keyframes zoomIn { from { transform: scale(0.5); opacity: 0; } to { transform: scale(1); opacity: 1; } }
        @keyframes bounce { 0%, 100% { transform: translateY(0); } 50% { transform: translateY(-20px); } }
        @keyframes spin { from { transform: rotate(0deg); } to { transform: rotate(360deg); } }
        @keyframes pulse { 0%, 100% { transform: scale(1); } 50% { transform: scale(1.05); } }
        @keyframes shake { 0%, 100% { transform: translateX(0); } 25% { transform: translateX(-5px); } 75% { transform: translateX(5px); } }"""


def generate_html(project: Project, settings: Optional[ExportSettings] = None) -> str:
    settings = settings or ExportSettings()
    width = settings.width or project.width
    height = settings.height or project.height
    title = settings.title or project.name

    pages_html = _Renderer(project, width, height).pages()
    bundle = build_bundle(project)
    config = {"canvasWidth": width, "frameLoop": settings.frame_loop}
    logger.info(
        "Exporting %d page(s), %d element(s), %d node kind(s) in the runtime table",
        len(project.pages), len(project.elements), len(bundle["semantics"]),
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <script src="{html.escape(settings.tailwind_cdn)}"></script>
    <style>
        body {{ margin: 0; padding: 0; overflow-x: hidden; background-color: #ffffff; font-family: sans-serif; }}
        #app-root {{ position: relative; width: 100vw; height: {format_number(height / width * 100)}vw; overflow: hidden; }}
        .hidden {{ display: none !important; }}{_KEYFRAMES}
    </style>
</head>
<body>
    <div id="app-root">
{pages_html}
    </div>
    <script>
        window.SITEGRAPH_PROJECT = {_script_json(bundle)};
        window.SITEGRAPH_CONFIG = {_script_json(config)};
    </script>
    <script>
{runtime_source()}
    </script>
</body>
</html>
"""
