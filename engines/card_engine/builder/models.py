"""Draft and commit models for the template builder."""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from engines.card_engine.core.errors import TemplateValidationError
from engines.card_engine.core.types import Element, Template


class DraftState(str, Enum):
    EDITING = "editing"
    VALIDATING = "validating"
    COMMITTED = "committed"
    REJECTED = "rejected"


class Draft(BaseModel):
    """Working copy of one template version.

    Every builder operation returns a new Draft; `base` is never touched.
    `errors` holds the findings of the last rejected commit until the next
    commit attempt.
    """

    model_config = ConfigDict(frozen=True)

    base: Template
    working: Template
    state: DraftState = DraftState.EDITING
    errors: Tuple[TemplateValidationError, ...] = ()
    next_seq: int = 1

    @property
    def elements(self) -> Tuple[Element, ...]:
        return self.working.design.elements

    @property
    def base_version(self) -> int:
        return self.base.version


class CommitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["committed", "rejected"]
    draft: Draft
    template: Optional[Template] = None
    errors: Tuple[TemplateValidationError, ...] = ()
