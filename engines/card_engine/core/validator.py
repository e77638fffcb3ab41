"""Template validator.

Collects every authoring problem in one pass so a builder can show them
together; never raises. Elements positioned outside the reference canvas
are accepted here and clamped by the renderer.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from engines.card_engine.core.errors import TemplateValidationError
from engines.card_engine.core.types import (
    Element,
    ImageElement,
    ShapeElement,
    Template,
    TemplateDesign,
    TextElement,
)

_element_adapter: TypeAdapter = TypeAdapter(Element)

LAYOUTS = ("standard", "modern", "creative", "minimal")

ASPECT_RATIO_PRESETS: Dict[str, float] = {
    "16:9": 16 / 9,
    "4:3": 4 / 3,
    "1:1": 1.0,
    "3:2": 3 / 2,
}


class ValidationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    errors: List[TemplateValidationError] = []

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_aspect_ratio(value: Any) -> Optional[float]:
    """Return width/height for a preset or custom "W:H" string, None if invalid."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text in ASPECT_RATIO_PRESETS:
        return ASPECT_RATIO_PRESETS[text]
    parts = text.split(":")
    if len(parts) != 2:
        return None
    try:
        w, h = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(w) and math.isfinite(h)) or w <= 0 or h <= 0:
        return None
    return w / h


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _error(code: str, path: str, message: str) -> TemplateValidationError:
    return TemplateValidationError(code=code, path=path, message=message)


def _join(prefix: str, loc: Tuple[Any, ...]) -> str:
    parts = [prefix] if prefix else []
    parts.extend(str(p) for p in loc)
    return ".".join(parts) or "$"


def _payload_errors(exc: ValidationError, prefix: str = "") -> List[TemplateValidationError]:
    errors: List[TemplateValidationError] = []
    for item in exc.errors():
        loc = tuple(item.get("loc", ()))
        path = _join(prefix, loc)
        if not prefix and item.get("type") == "missing" and loc in {("id",), ("name",)}:
            errors.append(_error(f"template.{loc[0]}_required", path, f"{loc[0]} is required"))
            continue
        errors.append(_error("template.invalid_payload", path, item.get("msg", "invalid value")))
    return errors


def _bad_keys(exc: ValidationError) -> Set[Any]:
    return {item["loc"][0] for item in exc.errors() if item.get("loc")}


def _parse_design(raw: Any) -> Tuple[Optional[TemplateDesign], List[Any], List[TemplateValidationError]]:
    """Split a raw design into its parsed scalar fields and its raw element list.

    Fields pydantic rejects are reported and fall back to their defaults so the
    remaining fields still get checked.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        return None, [], [_error("template.invalid_payload", "design", "design must be an object")]
    fields = dict(raw)
    raw_elements = fields.pop("elements", None)
    errors: List[TemplateValidationError] = []
    if raw_elements is None:
        raw_elements = []
    elif not isinstance(raw_elements, (list, tuple)):
        errors.append(_error("template.invalid_payload", "design.elements", "elements must be an array"))
        raw_elements = []
    try:
        design = TemplateDesign.model_validate(fields)
    except ValidationError as exc:
        errors.extend(_payload_errors(exc, prefix="design"))
        bad = _bad_keys(exc)
        design = TemplateDesign.model_validate({k: v for k, v in fields.items() if k not in bad})
    return design, list(raw_elements), errors


def _parse_element(raw: Any, path: str) -> Tuple[Optional[Element], List[TemplateValidationError]]:
    if not isinstance(raw, Mapping):
        return None, [_error("template.invalid_payload", path, "element must be an object")]
    data = dict(raw)
    try:
        return _element_adapter.validate_python(data), []
    except ValidationError as exc:
        failure = exc

    errors: List[TemplateValidationError] = []
    bad: Set[Any] = set()
    tag_ok = True
    for item in failure.errors():
        loc = tuple(item.get("loc", ()))
        # Tagged-union errors are located under the element type.
        if loc and loc[0] == data.get("type"):
            loc = loc[1:]
        if not loc:
            tag_ok = False
            errors.append(_error("template.invalid_payload", path, item.get("msg", "invalid value")))
            continue
        bad.add(loc[0])
        if loc == ("id",) and item.get("type") == "missing":
            # Reported as element.id_required by the element checks.
            continue
        errors.append(
            _error("template.invalid_payload", _join(path, loc), item.get("msg", "invalid value"))
        )
    if not tag_ok:
        return None, errors

    retry = {k: v for k, v in data.items() if k not in bad}
    retry.setdefault("id", "")
    try:
        return _element_adapter.validate_python(retry), errors
    except ValidationError:
        return None, errors


def _check_identity(id_value: Any, name_value: Any) -> List[TemplateValidationError]:
    errors: List[TemplateValidationError] = []
    if isinstance(id_value, str) and not id_value.strip():
        errors.append(_error("template.id_required", "id", "id is required"))
    if isinstance(name_value, str) and not name_value.strip():
        errors.append(_error("template.name_required", "name", "name is required"))
    return errors


def _check_design(design: TemplateDesign) -> List[TemplateValidationError]:
    errors: List[TemplateValidationError] = []
    if design.layout not in LAYOUTS:
        errors.append(
            _error("design.invalid_layout", "design.layout", f"unknown layout '{design.layout}'")
        )
    if parse_aspect_ratio(design.aspectRatio) is None:
        errors.append(
            _error(
                "design.invalid_aspect_ratio",
                "design.aspectRatio",
                f"'{design.aspectRatio}' is not a preset or a positive W:H ratio",
            )
        )
    for dim in ("referenceWidth", "referenceHeight"):
        if not _positive(getattr(design, dim)):
            errors.append(
                _error("design.invalid_reference_size", f"design.{dim}", f"{dim} must be > 0")
            )
    return errors


def _check_elements(indexed: Iterable[Tuple[int, Element]]) -> List[TemplateValidationError]:
    errors: List[TemplateValidationError] = []
    seen = set()
    for index, element in indexed:
        path = f"design.elements[{index}]"
        if not element.id or not element.id.strip():
            errors.append(_error("element.id_required", f"{path}.id", "element id is required"))
        elif element.id in seen:
            errors.append(
                _error("element.duplicate_id", f"{path}.id", f"duplicate element id '{element.id}'")
            )
        else:
            seen.add(element.id)

        if not (math.isfinite(element.x) and math.isfinite(element.y)):
            errors.append(_error("element.invalid_position", path, "x and y must be finite numbers"))

        if isinstance(element, TextElement):
            if not _positive(element.fontSize):
                errors.append(
                    _error("element.invalid_font_size", f"{path}.fontSize", "fontSize must be > 0")
                )
            if element.isBinding and not element.content.strip():
                errors.append(
                    _error("element.binding_empty", f"{path}.content", "bound text needs a field name")
                )
        elif isinstance(element, (ShapeElement, ImageElement)):
            for dim in ("width", "height"):
                if not _positive(getattr(element, dim)):
                    errors.append(
                        _error("element.invalid_size", f"{path}.{dim}", f"{dim} must be > 0")
                    )
    return errors


def _validate_mapping(candidate: Mapping[str, Any]) -> List[TemplateValidationError]:
    fields = dict(candidate)
    design, raw_elements, errors = _parse_design(fields.pop("design", None))
    try:
        Template.model_validate(fields)
    except ValidationError as exc:
        errors[:0] = _payload_errors(exc)
    errors[:0] = _check_identity(fields.get("id"), fields.get("name"))
    if design is not None:
        errors.extend(_check_design(design))

    parsed: List[Tuple[int, Element]] = []
    for index, raw in enumerate(raw_elements):
        element, element_errors = _parse_element(raw, f"design.elements[{index}]")
        errors.extend(element_errors)
        if element is not None:
            parsed.append((index, element))
    errors.extend(_check_elements(parsed))
    return errors


def validate(candidate: Any) -> ValidationReport:
    if isinstance(candidate, Mapping):
        return ValidationReport(errors=_validate_mapping(candidate))
    working = getattr(candidate, "working", None)
    if isinstance(working, Template):
        candidate = working
    if not isinstance(candidate, Template):
        message = f"Cannot validate {type(candidate).__name__}"
        return ValidationReport(errors=[_error("template.invalid_payload", "$", message)])

    errors = _check_identity(candidate.id, candidate.name)
    errors.extend(_check_design(candidate.design))
    errors.extend(_check_elements(enumerate(candidate.design.elements)))
    return ValidationReport(errors=errors)
