import json

import pytest

from engines.card_engine.core.legacy import from_legacy_design
from engines.card_engine.core.types import ImageElement, ShapeElement, Template, TextElement
from engines.card_engine.core.validator import validate


LEGACY = {
    "backgroundColor": "#0f172a",
    "textColor": "#ffffff",
    "aspectRatio": "16:9",
    "elements": [
        {"type": "Rect", "x": 0, "y": 0, "width": 800, "height": 450, "fill": "#111", "stroke": "#333", "strokeWidth": 2},
        {"type": "Text", "x": 50, "y": 50, "text": "{{fullName}}", "fontSize": 32, "fontWeight": "bold", "textAlign": "center"},
        {"type": "Text", "x": 50, "y": 100, "text": "Call {{phone}}", "color": "#ccc"},
        {"type": "Circle", "x": 700, "y": 80, "radius": 40, "fill": "#f00"},
        {"type": "Image", "id": "logo", "x": 10, "y": 10, "src": "https://cdn.example/logo.png"},
        {"type": "Line", "points": [0, 0, 100, 0]},
        "garbage",
    ],
}


def test_converts_legacy_elements() -> None:
    design = from_legacy_design(LEGACY)
    rect, name, phone, circle, image, line = design.elements

    assert isinstance(rect, ShapeElement)
    assert rect.strokeColor == "#333"
    assert rect.id == "rect-0"

    assert isinstance(name, TextElement)
    assert name.isBinding and name.content == "fullName"
    assert name.fontStyle == "bold"
    assert name.align == "center"

    assert not phone.isBinding
    assert phone.content == "Call {{phone}}"
    assert phone.fill == "#ccc"

    assert (circle.x, circle.y, circle.width, circle.height) == (660, 40, 80, 80)

    assert isinstance(image, ImageElement)
    assert image.id == "logo"
    assert image.sourceRef == "https://cdn.example/logo.png"

    assert isinstance(line, ShapeElement)
    assert line.id == "line-5"
    assert (line.x, line.y, line.width, line.height) == (0, -0.5, 100, 1)
    assert line.fill == "#000000"

    assert design.referenceWidth == 800
    assert design.referenceHeight == pytest.approx(450)
    assert design.backgroundColor == "#0f172a"


def test_accepts_double_encoded_json_and_bare_arrays() -> None:
    doubled = json.dumps(json.dumps({"elements": [{"type": "text", "text": "Hi"}], "stageWidth": 500, "stageHeight": 300}))
    design = from_legacy_design(doubled)
    assert design.elements[0].content == "Hi"
    assert (design.referenceWidth, design.referenceHeight) == (500, 300)

    bare = from_legacy_design([{"type": "Rect"}])
    assert isinstance(bare.elements[0], ShapeElement)


def test_reference_width_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("CARD_REFERENCE_WIDTH", "1200")
    design = from_legacy_design({"aspectRatio": "4:3", "elements": []})
    assert design.referenceWidth == 1200
    assert design.referenceHeight == pytest.approx(900)


def test_imported_design_validates() -> None:
    design = from_legacy_design(LEGACY)
    assert validate(Template(id="legacy", name="Legacy", design=design)).ok


@pytest.mark.parametrize("payload", ["{not json", json.dumps({"elements": "nope"}), 5])
def test_rejects_unreadable_payloads(payload) -> None:
    with pytest.raises(ValueError):
        from_legacy_design(payload)


def test_groups_are_flattened_with_offsets() -> None:
    design = from_legacy_design(
        [
            {"type": "Rect", "id": "bg", "width": 800, "height": 450},
            {
                "type": "Group",
                "x": 10,
                "y": 10,
                "children": [
                    {"type": "Text", "x": 5, "y": 7, "text": "{{fullName}}"},
                    {"type": "Rect", "x": 20, "y": 30, "width": 40, "height": 10},
                    {"type": "Group", "x": 100, "children": [{"type": "Circle", "x": 0, "y": 0, "radius": 5}]},
                ],
            },
            {"type": "Text", "id": "top", "text": "Above"},
        ]
    )
    ids = [e.id for e in design.elements]
    assert ids == ["bg", "text-1-0", "rect-1-1", "circle-1-2-0", "top"]

    _, name, box, dot, _ = design.elements
    assert name.isBinding and name.content == "fullName"
    assert (name.x, name.y) == (15, 17)
    assert (box.x, box.y) == (30, 40)
    assert (dot.x, dot.y, dot.width) == (105, 5, 10)


def test_vertical_line_uses_stroke_width_and_colour() -> None:
    (line,) = from_legacy_design(
        [{"type": "Line", "x": 50, "y": 20, "points": [0, 0, 0, 80], "stroke": "#f00", "strokeWidth": 4}]
    ).elements
    assert (line.x, line.y, line.width, line.height) == (48, 20, 4, 80)
    assert line.fill == "#f00"


def test_circle_radius_defaults_to_fifty() -> None:
    (circle,) = from_legacy_design([{"type": "Circle", "x": 100, "y": 100}]).elements
    assert (circle.x, circle.y, circle.width, circle.height) == (50, 50, 100, 100)


def test_missing_stage_uses_reference_canvas_not_fixed_stage(monkeypatch) -> None:
    monkeypatch.delenv("CARD_REFERENCE_WIDTH", raising=False)
    design = from_legacy_design({"aspectRatio": "1:1", "elements": []})
    assert (design.referenceWidth, design.referenceHeight) == (800, 800)
