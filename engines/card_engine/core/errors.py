"""Error taxonomy for the Card Engine.

Only RenderSurfaceError stops a render. Everything else degrades:
validation errors are collected and block commit, missing templates are
replaced by the default template, unknown bindings render as markers.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TemplateValidationError(BaseModel):
    """One authoring problem found by the validator."""

    model_config = ConfigDict(frozen=True)

    code: str
    path: str
    message: str


class RenderSurfaceError(ValueError):
    """Raised when the requested render surface has unusable dimensions."""


class MissingTemplateError(LookupError):
    """A template could not be loaded; callers substitute DEFAULT_TEMPLATE."""


class BindingResolutionWarning(BaseModel):
    """A bound element references a field the resolved view does not carry.

    Non-fatal: the element renders an inline `{{key}}` marker instead.
    """

    model_config = ConfigDict(frozen=True)

    elementId: str
    key: str


class DraftError(ValueError):
    """Invalid builder operation (unknown element, closed draft)."""
