"""Card renderer: (Template, ResolvedCardView, RenderSurface) -> SceneGraph.

Pure and synchronous. The same SceneGraph feeds the thumbnail grid, the
builder canvas and the public view; those adapters only differ in how
they paint it.

Content is letterboxed: one uniform scale fits the reference canvas into
the surface and the result is centred. Node order equals element order.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Any, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from engines.card_engine.core.defaults import DEFAULT_TEMPLATE, template_or_default
from engines.card_engine.core.errors import BindingResolutionWarning, RenderSurfaceError
from engines.card_engine.core.resolver import resolve
from engines.card_engine.core.types import (
    ElementType,
    ImageElement,
    RenderNode,
    RenderStyle,
    RenderSurface,
    ResolvedCardView,
    SceneGraph,
    ShapeElement,
    Template,
    TemplateDesign,
    TextElement,
)

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def binding_marker(key: str) -> str:
    return "{{" + key + "}}"


def check_surface(surface: Union[RenderSurface, Mapping[str, Any]]) -> RenderSurface:
    """Coerce and check the requested surface; degenerate sizes raise RenderSurfaceError."""
    if not isinstance(surface, RenderSurface):
        try:
            surface = RenderSurface.model_validate(dict(surface))
        except (ValidationError, TypeError, ValueError) as exc:
            raise RenderSurfaceError(f"Invalid render surface: {exc}") from exc
    for name in ("width", "height", "pixelRatio"):
        value = getattr(surface, name)
        if not math.isfinite(value) or value <= 0:
            raise RenderSurfaceError(f"Render surface {name} must be > 0, got {value}")
    return surface


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _clamp(value: float, upper: float) -> float:
    return min(max(_finite(value), 0.0), upper)


def _usable_reference(design: TemplateDesign) -> bool:
    return all(
        math.isfinite(v) and v > 0 for v in (design.referenceWidth, design.referenceHeight)
    )


class _Frame:
    """Letterbox transform from reference space to surface space."""

    def __init__(self, design: TemplateDesign, surface: RenderSurface) -> None:
        self.ref_w = design.referenceWidth
        self.ref_h = design.referenceHeight
        self.scale = min(surface.width / self.ref_w, surface.height / self.ref_h)
        self.content_w = self.ref_w * self.scale
        self.content_h = self.ref_h * self.scale
        self.offset_x = (surface.width - self.content_w) / 2
        self.offset_y = (surface.height - self.content_h) / 2

    def point(self, x: float, y: float) -> Tuple[float, float]:
        cx = _clamp(x, self.ref_w)
        cy = _clamp(y, self.ref_h)
        return self.offset_x + cx * self.scale, self.offset_y + cy * self.scale

    def extent(self, x: float, y: float, w: float, h: float) -> Tuple[float, float]:
        # Clip so the box never leaves the reference canvas.
        cw = min(max(_finite(w), 0.0), self.ref_w - _clamp(x, self.ref_w))
        ch = min(max(_finite(h), 0.0), self.ref_h - _clamp(y, self.ref_h))
        return cw * self.scale, ch * self.scale

    def length(self, value: float) -> float:
        return max(_finite(value), 0.0) * self.scale


def _resolve_text(
    element: TextElement, view: ResolvedCardView, warnings: List[BindingResolutionWarning]
) -> str:
    if element.isBinding:
        key = element.content.strip()
        value = view.lookup(key)
        if value is None:
            logger.warning(f"Unknown binding '{key}' on element {element.id}; rendering marker")
            warnings.append(BindingResolutionWarning(elementId=element.id, key=key))
            return binding_marker(key)
        return value

    def _sub(match: "re.Match[str]") -> str:
        key = match.group(1)
        value = view.lookup(key)
        if value is None:
            logger.warning(f"Unknown inline binding '{key}' on element {element.id}")
            warnings.append(BindingResolutionWarning(elementId=element.id, key=key))
            return binding_marker(key)
        return value

    return _TOKEN.sub(_sub, element.content)


def _text_node(
    element: TextElement,
    design: TemplateDesign,
    frame: _Frame,
    view: ResolvedCardView,
    warnings: List[BindingResolutionWarning],
) -> RenderNode:
    abs_x, abs_y = frame.point(element.x, element.y)
    return RenderNode(
        type=ElementType.text,
        id=element.id,
        absX=abs_x,
        absY=abs_y,
        fontSize=frame.length(element.fontSize),
        resolvedContent=_resolve_text(element, view, warnings),
        style=RenderStyle(
            fill=element.fill or design.textColor,
            fontFamily=element.fontFamily or design.fontFamily,
            fontStyle=element.fontStyle,
            align=element.align,
        ),
    )


def _shape_node(element: ShapeElement, frame: _Frame) -> RenderNode:
    abs_x, abs_y = frame.point(element.x, element.y)
    abs_w, abs_h = frame.extent(element.x, element.y, element.width, element.height)
    return RenderNode(
        type=ElementType.shape,
        id=element.id,
        absX=abs_x,
        absY=abs_y,
        absWidth=abs_w,
        absHeight=abs_h,
        strokeWidth=frame.length(element.strokeWidth),
        cornerRadius=frame.length(element.cornerRadius),
        style=RenderStyle(fill=element.fill, strokeColor=element.strokeColor),
    )


def _image_node(element: ImageElement, frame: _Frame) -> RenderNode:
    abs_x, abs_y = frame.point(element.x, element.y)
    abs_w, abs_h = frame.extent(element.x, element.y, element.width, element.height)
    return RenderNode(
        type=ElementType.image,
        id=element.id,
        absX=abs_x,
        absY=abs_y,
        absWidth=abs_w,
        absHeight=abs_h,
        resolvedContent=element.sourceRef,
    )


def render(
    template: Optional[Union[Template, Mapping[str, Any]]],
    view: ResolvedCardView,
    surface: Union[RenderSurface, Mapping[str, Any]],
) -> SceneGraph:
    surface = check_surface(surface)
    template = template_or_default(template)
    if not _usable_reference(template.design):
        logger.warning(f"Template {template.id} has no usable reference canvas; using default")
        template = DEFAULT_TEMPLATE

    design = template.design
    frame = _Frame(design, surface)
    warnings: List[BindingResolutionWarning] = []
    nodes: List[RenderNode] = []
    for element in design.elements:
        if isinstance(element, TextElement):
            nodes.append(_text_node(element, design, frame, view, warnings))
        elif isinstance(element, ShapeElement):
            nodes.append(_shape_node(element, frame))
        elif isinstance(element, ImageElement):
            nodes.append(_image_node(element, frame))
        else:
            raise TypeError(f"Unsupported element type: {type(element).__name__}")

    return SceneGraph(
        width=surface.width,
        height=surface.height,
        pixelRatio=surface.pixelRatio,
        scale=frame.scale,
        offsetX=frame.offset_x,
        offsetY=frame.offset_y,
        contentWidth=frame.content_w,
        contentHeight=frame.content_h,
        backgroundColor=design.backgroundColor,
        nodes=tuple(nodes),
        warnings=tuple(warnings),
    )


def render_card(
    template: Optional[Union[Template, Mapping[str, Any]]],
    card: Any,
    surface: Union[RenderSurface, Mapping[str, Any]],
    owner_profile: Any = None,
) -> SceneGraph:
    """Resolve `card` (with its owner's profile as fallback) and render it."""
    return render(template, resolve(card, owner_profile), surface)
