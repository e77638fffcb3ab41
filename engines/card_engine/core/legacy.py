"""Import of legacy free-form design documents.

Older cards stored their design as loosely typed JSON: element types such
as "Rect" or "Circle", placeholder text like "{{fullName}}", image `src`
and, sometimes, the whole document JSON-encoded twice. This module maps
those documents onto TemplateDesign.

Groups are flattened in paint order with their children offset by the
group position. Lines become thin Shapes covering their points.

Defaults follow the template card view rather than the free-form canvas
editor: a Circle without a radius gets 50, not 30, and a document without
a stage size is placed on the configured reference canvas
(`CARD_REFERENCE_WIDTH` wide, height from its aspect ratio) instead of a
fixed 500x300 stage.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from engines.card_engine.core.types import ImageElement, ShapeElement, TemplateDesign, TextElement
from engines.card_engine.core.validator import parse_aspect_ratio
from engines.config import runtime_config

logger = logging.getLogger(__name__)

_WHOLE_BINDING = re.compile(r"^\s*\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}\s*$")
_ALIGNMENTS = {"left", "center", "right"}


def _num(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _decode(payload: Any) -> Any:
    # Stored designs were sometimes stringified twice.
    for _ in range(2):
        if not isinstance(payload, str):
            break
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid design JSON: {exc.msg}") from exc
    return payload


def _text(raw: Dict[str, Any], element_id: str) -> TextElement:
    text = raw.get("text")
    if text is None:
        text = raw.get("content", "")
    text = str(text)
    match = _WHOLE_BINDING.match(text)
    font_style = raw.get("fontStyle")
    if not font_style:
        font_style = "bold" if raw.get("fontWeight") == "bold" else "normal"
    align = raw.get("align") or raw.get("textAlign") or "left"
    return TextElement(
        id=element_id,
        x=_num(raw.get("x"), 0.0),
        y=_num(raw.get("y"), 0.0),
        content=match.group(1) if match else text,
        isBinding=bool(match) or bool(raw.get("isBinding")),
        fontSize=_num(raw.get("fontSize"), 16.0),
        fill=raw.get("fill") or raw.get("color"),
        fontFamily=raw.get("fontFamily"),
        fontStyle=str(font_style),
        align=align if align in _ALIGNMENTS else "left",
    )


def _rect(raw: Dict[str, Any], element_id: str) -> ShapeElement:
    return ShapeElement(
        id=element_id,
        x=_num(raw.get("x"), 0.0),
        y=_num(raw.get("y"), 0.0),
        width=_num(raw.get("width"), 100.0),
        height=_num(raw.get("height"), 100.0),
        fill=raw.get("fill") or "#ffffff",
        strokeColor=raw.get("stroke") or raw.get("strokeColor"),
        strokeWidth=_num(raw.get("strokeWidth"), 0.0),
        cornerRadius=_num(raw.get("cornerRadius"), 0.0),
    )


def _circle(raw: Dict[str, Any], element_id: str) -> ShapeElement:
    # Circles were positioned by their centre.
    radius = _num(raw.get("radius"), 50.0)
    return ShapeElement(
        id=element_id,
        x=_num(raw.get("x"), 0.0) - radius,
        y=_num(raw.get("y"), 0.0) - radius,
        width=radius * 2,
        height=radius * 2,
        fill=raw.get("fill") or "#ffffff",
        strokeColor=raw.get("stroke") or raw.get("strokeColor"),
        strokeWidth=_num(raw.get("strokeWidth"), 0.0),
        cornerRadius=radius,
    )


def _image(raw: Dict[str, Any], element_id: str) -> ImageElement:
    return ImageElement(
        id=element_id,
        x=_num(raw.get("x"), 0.0),
        y=_num(raw.get("y"), 0.0),
        width=_num(raw.get("width"), 50.0),
        height=_num(raw.get("height"), 50.0),
        sourceRef=str(raw.get("src") or raw.get("sourceRef") or ""),
    )


def _line(raw: Dict[str, Any], element_id: str) -> ShapeElement:
    # A line becomes a thin filled box spanning its points.
    points = raw.get("points")
    if not isinstance(points, list) or len(points) < 4:
        points = [0, 0, 100, 0]
    xs = [_num(p, 0.0) for p in points[0::2]]
    ys = [_num(p, 0.0) for p in points[1::2]]
    thickness = _num(raw.get("strokeWidth"), 0.0) or 1.0
    left, top = min(xs), min(ys)
    width, height = max(xs) - left, max(ys) - top
    if width < thickness:
        left -= (thickness - width) / 2
        width = thickness
    if height < thickness:
        top -= (thickness - height) / 2
        height = thickness
    return ShapeElement(
        id=element_id,
        x=_num(raw.get("x"), 0.0) + left,
        y=_num(raw.get("y"), 0.0) + top,
        width=width,
        height=height,
        fill=raw.get("stroke") or raw.get("strokeColor") or "#000000",
    )


_CONVERTERS = {
    "text": _text,
    "rect": _rect,
    "shape": _rect,
    "circle": _circle,
    "image": _image,
    "line": _line,
}


def _convert_elements(
    raw_elements: List[Any],
    prefix: str = "",
    dx: float = 0.0,
    dy: float = 0.0,
) -> List[Any]:
    elements: List[Any] = []
    for index, raw in enumerate(raw_elements):
        label = f"{prefix}{index}"
        if not isinstance(raw, dict) or not raw.get("type"):
            logger.warning(f"Skipping legacy element {label}: not an object with a type")
            continue
        kind = str(raw["type"]).lower()
        x = _num(raw.get("x"), 0.0) + dx
        y = _num(raw.get("y"), 0.0) + dy
        if kind == "group":
            # Children are positioned relative to the group; flatten in paint order.
            children = raw.get("children")
            if isinstance(children, list):
                elements.extend(_convert_elements(children, f"{label}-", x, y))
            continue
        converter = _CONVERTERS.get(kind)
        if converter is None:
            logger.warning(f"Skipping legacy element {label}: unsupported type {raw['type']}")
            continue
        element_id = str(raw.get("id") or f"{kind}-{label}")
        elements.append(converter({**raw, "x": x, "y": y}, element_id))
    return elements


def from_legacy_design(payload: Any, reference_width: Optional[float] = None) -> TemplateDesign:
    data = _decode(payload)
    if isinstance(data, list):
        data = {"elements": data}
    if not isinstance(data, dict) or not isinstance(data.get("elements", []), list):
        raise ValueError("Legacy design must be an elements array or an object with 'elements'")

    aspect_ratio = str(data.get("aspectRatio") or "16:9")
    ratio = parse_aspect_ratio(aspect_ratio) or 16 / 9
    width = _num(data.get("stageWidth"), 0.0)
    height = _num(data.get("stageHeight"), 0.0)
    if width <= 0 or height <= 0:
        width = reference_width or runtime_config.get_reference_width()
        height = width / ratio

    return TemplateDesign(
        backgroundColor=data.get("backgroundColor") or "#ffffff",
        textColor=data.get("textColor") or "#000000",
        fontFamily=data.get("fontFamily") or "Arial",
        layout=data.get("layout") or "standard",
        aspectRatio=aspect_ratio,
        referenceWidth=width,
        referenceHeight=height,
        elements=tuple(_convert_elements(data.get("elements", []))),
    )
