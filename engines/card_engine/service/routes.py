"""HTTP routes for the Card Engine service."""
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from engines.card_engine.core.defaults import DEFAULT_TEMPLATE
from engines.card_engine.core.errors import RenderSurfaceError
from engines.card_engine.core.renderer import render
from engines.card_engine.core.resolver import resolve
from engines.card_engine.core.types import ResolvedCardView, SceneGraph, Template
from engines.card_engine.core.validator import validate
from engines.card_engine.core.vcard import to_vcard
from engines.card_engine.service.schemas import (
    RenderRequest,
    ResolveRequest,
    ValidateTemplateRequest,
    ValidateTemplateResponse,
)
from engines.common.error_envelope import error_response

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.post("/cards/resolve", response_model=ResolvedCardView)
def resolve_card(request: ResolveRequest) -> ResolvedCardView:
    return resolve(request.card, request.ownerProfile)


@router.post("/cards/render", response_model=SceneGraph)
def render_card(request: RenderRequest) -> SceneGraph:
    view = resolve(request.card, request.ownerProfile)
    try:
        return render(request.template, view, request.surface)
    except RenderSurfaceError as exc:
        error_response(
            code="card_engine.render_surface_invalid",
            message=str(exc),
            status_code=422,
            resource_kind="surface",
            details=request.surface.model_dump(),
        )


@router.post("/cards/vcard", response_class=PlainTextResponse)
def card_vcard(request: ResolveRequest) -> PlainTextResponse:
    view = resolve(request.card, request.ownerProfile)
    return PlainTextResponse(to_vcard(view), media_type="text/vcard")


@router.post("/templates/validate", response_model=ValidateTemplateResponse)
def validate_template(request: ValidateTemplateRequest) -> ValidateTemplateResponse:
    # version is server-assigned; a submitted draft never carries it into validation.
    payload = {k: v for k, v in request.template.items() if k != "version"}
    report = validate(payload)
    return ValidateTemplateResponse(errors=report.errors)


@router.get("/templates/default", response_model=Template)
def default_template() -> Template:
    return DEFAULT_TEMPLATE
