"""Service-layer schemas for the Card Engine HTTP surface."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from engines.card_engine.core.errors import TemplateValidationError
from engines.card_engine.core.types import RenderSurface


class ResolveRequest(BaseModel):
    card: Dict[str, Any] = Field(default_factory=dict)
    ownerProfile: Optional[Dict[str, Any]] = None


class RenderRequest(BaseModel):
    # Raw payload: an unloadable template degrades to the default one.
    template: Optional[Dict[str, Any]] = None
    card: Dict[str, Any] = Field(default_factory=dict)
    ownerProfile: Optional[Dict[str, Any]] = None
    surface: RenderSurface


class ValidateTemplateRequest(BaseModel):
    template: Dict[str, Any]


class ValidateTemplateResponse(BaseModel):
    errors: List[TemplateValidationError] = Field(default_factory=list)
