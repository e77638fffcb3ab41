"""Template builder session: copy-on-write edits on a Draft, validated commit."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import TypeAdapter, ValidationError

from engines.card_engine.builder.models import CommitResult, Draft, DraftState
from engines.card_engine.core.errors import DraftError, TemplateValidationError
from engines.card_engine.core.types import Element, Template, TemplateDesign
from engines.card_engine.core.validator import validate

logger = logging.getLogger(__name__)

_element_adapter: TypeAdapter = TypeAdapter(Element)

DESIGN_FIELDS = frozenset(
    {
        "backgroundColor",
        "textColor",
        "fontFamily",
        "layout",
        "aspectRatio",
        "referenceWidth",
        "referenceHeight",
    }
)
META_FIELDS = frozenset({"name", "description", "category", "tags", "isActive", "isFeatured"})


def open_draft(template: Template) -> Draft:
    return Draft(base=template, working=template)


def new_draft(template_id: str, name: str, **meta: Any) -> Draft:
    """Start a draft for a template that has no committed version yet."""
    _check_keys(meta, META_FIELDS - {"name"}, "template")
    base = Template(id=template_id, name=name, version=0, **meta)
    return open_draft(base)


def _check_keys(fields: Iterable[str], allowed: frozenset, what: str) -> None:
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise DraftError(f"Cannot set {what} field(s): {', '.join(unknown)}")


def _ensure_open(draft: Draft) -> None:
    if draft.state == DraftState.COMMITTED:
        raise DraftError("Draft already committed; open a new draft from the committed template")


def _index_of(draft: Draft, element_id: str) -> int:
    for index, element in enumerate(draft.elements):
        if element.id == element_id:
            return index
    raise DraftError(f"Element {element_id} not found")


def _with_elements(draft: Draft, elements: List[Element], **updates: Any) -> Draft:
    design = draft.working.design.model_copy(update={"elements": tuple(elements)})
    working = draft.working.model_copy(update={"design": design})
    return draft.model_copy(update={"working": working, "state": DraftState.EDITING, **updates})


def _parse_element(payload: Union[Element, Mapping[str, Any]]) -> Element:
    if isinstance(payload, Mapping):
        try:
            return _element_adapter.validate_python(dict(payload))
        except ValidationError as exc:
            raise DraftError(f"Invalid element: {exc}") from exc
    return payload


def add_element(draft: Draft, element: Union[Element, Mapping[str, Any]]) -> Draft:
    """Append `element` on top of the paint order under a fresh id."""
    _ensure_open(draft)
    if isinstance(element, Mapping):
        element = {**element, "id": "pending"}
    parsed = _parse_element(element)

    taken = {e.id for e in draft.elements}
    seq = draft.next_seq
    new_id = f"{parsed.type.lower()}-{seq}"
    while new_id in taken:
        seq += 1
        new_id = f"{parsed.type.lower()}-{seq}"

    elements = list(draft.elements)
    elements.append(parsed.model_copy(update={"id": new_id}))
    return _with_elements(draft, elements, next_seq=seq + 1)


def update_element(draft: Draft, element_id: str, partial: Mapping[str, Any]) -> Draft:
    _ensure_open(draft)
    if "id" in partial or "type" in partial:
        raise DraftError("Element id and type cannot be changed")
    index = _index_of(draft, element_id)
    current = draft.elements[index]
    updated = _parse_element({**current.model_dump(), **dict(partial)})
    elements = list(draft.elements)
    elements[index] = updated
    return _with_elements(draft, elements)


def remove_element(draft: Draft, element_id: str) -> Draft:
    _ensure_open(draft)
    index = _index_of(draft, element_id)
    elements = list(draft.elements)
    del elements[index]
    return _with_elements(draft, elements)


def reorder(draft: Draft, element_id: str, new_index: int) -> Draft:
    """Move an element in the paint order; out-of-range indexes clamp to the ends."""
    _ensure_open(draft)
    index = _index_of(draft, element_id)
    elements = list(draft.elements)
    element = elements.pop(index)
    target = min(max(new_index, 0), len(elements))
    elements.insert(target, element)
    return _with_elements(draft, elements)


def set_design(draft: Draft, **fields: Any) -> Draft:
    _ensure_open(draft)
    _check_keys(fields, DESIGN_FIELDS, "design")
    current = draft.working.design
    try:
        design = TemplateDesign.model_validate({**current.model_dump(), **fields})
    except ValidationError as exc:
        raise DraftError(f"Invalid design update: {exc}") from exc
    working = draft.working.model_copy(update={"design": design})
    return draft.model_copy(update={"working": working, "state": DraftState.EDITING})


def set_meta(draft: Draft, **fields: Any) -> Draft:
    _ensure_open(draft)
    _check_keys(fields, META_FIELDS, "template")
    try:
        working = Template.model_validate({**draft.working.model_dump(), **fields})
    except ValidationError as exc:
        raise DraftError(f"Invalid template update: {exc}") from exc
    return draft.model_copy(update={"working": working, "state": DraftState.EDITING})


def commit(draft: Draft, head_version: Optional[int] = None) -> CommitResult:
    """Validate the draft and, if clean, produce the next immutable version.

    `head_version` is the persisted head at commit time; when given, a
    draft opened from an older version is rejected instead of overwriting.
    """
    _ensure_open(draft)
    validating = draft.model_copy(update={"state": DraftState.VALIDATING})
    errors: List[TemplateValidationError] = list(validate(validating).errors)
    if head_version is not None and head_version != draft.base_version:
        errors.append(
            TemplateValidationError(
                code="template.version_conflict",
                path="version",
                message=f"Draft based on version {draft.base_version}, head is {head_version}",
            )
        )

    if errors:
        logger.info(f"Commit of template {draft.working.id} rejected with {len(errors)} error(s)")
        rejected = validating.model_copy(
            update={"state": DraftState.REJECTED, "errors": tuple(errors)}
        )
        return CommitResult(status="rejected", draft=rejected, errors=tuple(errors))

    template = validating.working.model_copy(update={"version": draft.base_version + 1})
    committed = validating.model_copy(
        update={"state": DraftState.COMMITTED, "working": template, "errors": ()}
    )
    logger.info(f"Committed template {template.id} version {template.version}")
    return CommitResult(status="committed", draft=committed, template=template)
