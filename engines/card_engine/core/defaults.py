"""Built-in fallback template and the caller-side substitution helpers."""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from engines.card_engine.core.errors import MissingTemplateError
from engines.card_engine.core.types import ShapeElement, Template, TemplateDesign, TextElement

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "default"

DEFAULT_TEMPLATE = Template(
    id=DEFAULT_TEMPLATE_ID,
    name="Default",
    description="Built-in card shown when a card's template cannot be loaded",
    category="Minimal",
    version=1,
    design=TemplateDesign(
        backgroundColor="#667eea",
        textColor="#ffffff",
        fontFamily="Arial",
        layout="minimal",
        aspectRatio="16:9",
        referenceWidth=800,
        referenceHeight=450,
        elements=(
            ShapeElement(
                id="background",
                x=0,
                y=0,
                width=800,
                height=450,
                fill="linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
            ),
            TextElement(
                id="full-name",
                x=400,
                y=205,
                content="fullName",
                isBinding=True,
                fontSize=40,
                fill="#ffffff",
                fontStyle="bold",
                align="center",
            ),
        ),
    ),
)


def template_or_default(template: Any) -> Template:
    """Return `template` as a Template, or DEFAULT_TEMPLATE when it is unusable."""
    if isinstance(template, Template):
        return template
    if template is None:
        logger.info("No template supplied; rendering default template")
        return DEFAULT_TEMPLATE
    if isinstance(template, Mapping):
        try:
            return Template.model_validate(dict(template))
        except ValidationError as exc:
            logger.warning(f"Template payload failed to load ({exc.error_count()} errors); using default")
            return DEFAULT_TEMPLATE
    logger.warning(f"Unsupported template value {type(template).__name__}; using default")
    return DEFAULT_TEMPLATE


def load_template(
    loader: Callable[[str], Optional[Template]], template_id: Optional[str]
) -> Template:
    """Fetch a template through `loader`, substituting the default on failure.

    `loader` is the persistence layer's lookup; it may return None or raise
    MissingTemplateError for unknown ids.
    """
    if not template_id:
        return DEFAULT_TEMPLATE
    try:
        found = loader(template_id)
        if found is None:
            raise MissingTemplateError(template_id)
    except MissingTemplateError:
        logger.warning(f"Template {template_id} not found; using default")
        return DEFAULT_TEMPLATE
    return template_or_default(found)
