import json
import re

from sitegraph.config import ExportSettings
from sitegraph.exporter import (
    _script_json,
    auto_font_size,
    build_bundle,
    element_css,
    generate_html,
    runtime_source,
    tailwind_classes,
)
from sitegraph.generator import generate_graph_from_template
from sitegraph.ir import Element, Page, Project


def _site():
    button = generate_graph_from_template("hover_highlight")
    button.id = "btn"
    nav = generate_graph_from_template("click_navigate")
    nav.id = "nav"
    nav.get_node("go").data.value = "about"
    return Project(
        name="Demo <site>",
        pages=[Page(id="home", name="Home"), Page(id="about", name="About")],
        components=[button],
        scripts=[nav],
        elements=[
            Element(id="cta", type="CUSTOM", page_id="home", custom_component_id="btn",
                    x=120, y=80, width=240, height=60, prop_overrides={"caption": "Go </script>"}),
            Element(id="next", type="BUTTON", page_id="home", scripts=["nav"], x=0, y=0, width=120, height=40),
            Element(id="title", type="HEADING", page_id="about", content="About us"),
            Element(id="inner", type="BADGE", page_id="about", parent_id="title", content="new"),
        ],
    )


def _bundle_from_html(doc: str):
    match = re.search(r"window\.SITEGRAPH_PROJECT = (.*?);\n", doc)
    return json.loads(match.group(1))


def test_bundle_carries_only_used_semantics():
    bundle = build_bundle(_site())
    assert set(bundle["semantics"]) == {
        "OUTPUT", "INTERACTION_HOVER", "INTERACTION_CLICK", "COLOR", "IF_ELSE",
        "STYLE", "TRANSITION", "MERGE", "TEXT", "NAVIGATE",
    }
    assert bundle["semantics"]["NAVIGATE"]["action"]["effect"] == "navigate"
    assert [e["id"] for e in bundle["elements"]] == ["cta", "next", "title", "inner"]
    assert bundle["elements"][0]["propOverrides"] == {"caption": "Go </script>"}
    assert "x" not in bundle["elements"][0]


def test_html_document_layout():
    doc = generate_html(_site(), ExportSettings(title="My Export"))
    assert doc.startswith("<!DOCTYPE html>")
    assert "<title>My Export</title>" in doc
    assert 'id="page-home" class="page-container absolute inset-0 w-full h-full"' in doc
    assert 'id="page-about" class="page-container absolute inset-0 w-full h-full hidden"' in doc
    assert "window.SITEGRAPH_RUNTIME" in doc
    assert runtime_source() in doc


def test_static_markup_reflects_initial_evaluation():
    doc = generate_html(_site())
    assert "<title>Demo &lt;site&gt;</title>" in doc
    assert "background-color: #2563eb;" in doc
    assert "Go &lt;/script&gt;" in doc
    # nested element sits inside its parent's wrapper, positioned relative to it
    assert doc.index('id="title-wrapper"') < doc.index('id="inner-wrapper"')


def test_script_payload_cannot_close_the_tag():
    doc = generate_html(_site())
    assert doc.count("</script>") == 3
    assert _script_json({"a": "</script>"}) == '{"a": "<\\/script>"}'
    bundle = _bundle_from_html(doc)
    assert bundle["elements"][0]["propOverrides"]["caption"] == "Go </script>"


def test_config_passed_to_runtime():
    doc = generate_html(_site(), ExportSettings(width=1440, frame_loop=False))
    assert 'window.SITEGRAPH_CONFIG = {"canvasWidth": 1440.0, "frameLoop": false};' in doc


def test_pixel_geometry_scales_to_viewport_width():
    css = element_css(
        {"fontSize": 256, "padding": 128, "borderWidth": 2, "borderColor": "#000", "boxShadow": "0px 64px 512px #000"},
        200, 50, "", 1024,
    )
    assert css["font-size"] == "25vw"
    assert css["padding"] == "12.5vw"
    assert css["border-width"] == "0.1953125vw"
    assert css["border-color"] == "#000"
    assert css["border-style"] == "solid"
    assert css["box-shadow"] == "0vw 6.25vw 50vw #000"


def test_auto_font_size_fits_box():
    assert auto_font_size(200, 50, "Hi") == 30
    assert auto_font_size(200, 50, "A much longer label") == 19
    css = element_css({"autoFontSize": True, "fontSize": 99}, 200, 50, "Hi", 1024)
    assert css["font-size"] == "2.9296875vw"
    assert css["white-space"] == "nowrap"


def test_tailwind_classes_follow_alignment():
    assert "justify-start" in tailwind_classes("BUTTON", {"textAlign": "left"})
    assert "justify-center" in tailwind_classes("BADGE", {})
    assert tailwind_classes("SOMETHING", {}) == "w-full h-full"
