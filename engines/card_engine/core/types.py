"""Core types for the Card Engine.

Template documents, card records and the render output (SceneGraph).
Field names follow the Template wire schema (camelCase) so documents
round-trip through the Template API verbatim.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from engines.card_engine.core.errors import BindingResolutionWarning


class ElementType(str, Enum):
    text = "Text"
    shape = "Shape"
    image = "Image"


class TextElement(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["Text"] = "Text"
    id: str
    x: float = 0.0
    y: float = 0.0
    content: str = ""
    isBinding: bool = False
    fontSize: float = 16.0
    fill: Optional[str] = None  # design.textColor when unset
    fontFamily: Optional[str] = None  # design.fontFamily when unset
    fontStyle: str = "normal"
    align: Literal["left", "center", "right"] = "left"


class ShapeElement(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["Shape"] = "Shape"
    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0
    fill: str = "#ffffff"
    strokeColor: Optional[str] = None
    strokeWidth: float = 0.0
    cornerRadius: float = 0.0


class ImageElement(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["Image"] = "Image"
    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0
    sourceRef: str = ""


Element = Annotated[
    Union[TextElement, ShapeElement, ImageElement],
    Field(discriminator="type"),
]


class TemplateDesign(BaseModel):
    model_config = ConfigDict(frozen=True)

    backgroundColor: str = "#ffffff"
    textColor: str = "#000000"
    fontFamily: str = "Arial"
    layout: str = "standard"
    aspectRatio: str = "16:9"
    referenceWidth: float = 800.0
    referenceHeight: float = 450.0
    # Paint order, back to front.
    elements: Tuple[Element, ...] = ()


class Template(BaseModel):
    """A committed, immutable template version."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: str = "Professional"
    tags: Tuple[str, ...] = ()
    isActive: bool = True
    isFeatured: bool = False
    version: int = 0
    design: TemplateDesign = Field(default_factory=TemplateDesign)


class Card(BaseModel):
    """Sparse card record as handed over by the card CRUD layer."""

    model_config = ConfigDict(extra="ignore")

    fullName: Optional[Any] = None
    jobTitle: Optional[Any] = None
    company: Optional[Any] = None
    email: Optional[Any] = None
    phone: Optional[Any] = None
    website: Optional[Any] = None
    address: Optional[Any] = None
    bio: Optional[Any] = None
    views: Optional[Any] = None
    loveCount: Optional[Any] = None
    shares: Optional[Any] = None
    downloads: Optional[Any] = None
    templateId: Optional[Any] = None


class OwnerProfile(BaseModel):
    """Profile of the card owner; only ever used as a fallback source."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[Any] = None
    jobTitle: Optional[Any] = None
    company: Optional[Any] = None
    email: Optional[Any] = None
    phone: Optional[Any] = None
    website: Optional[Any] = None
    location: Optional[Any] = None
    bio: Optional[Any] = None


class ResolvedCardView(BaseModel):
    """Total view of a card: every canonical field carries a display value."""

    model_config = ConfigDict(frozen=True)

    fullName: str
    jobTitle: str
    company: str
    email: str
    phone: str
    website: str
    address: str
    bio: str
    templateId: str
    views: int
    loveCount: int
    shares: int
    downloads: int

    def lookup(self, key: str) -> Optional[str]:
        if key not in type(self).model_fields:
            return None
        return str(getattr(self, key))


class RenderSurface(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    pixelRatio: float = 1.0


class RenderStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    fill: Optional[str] = None
    fontFamily: Optional[str] = None
    fontStyle: Optional[str] = None
    align: Optional[str] = None
    strokeColor: Optional[str] = None


class RenderNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ElementType
    id: str
    absX: float
    absY: float
    absWidth: Optional[float] = None
    absHeight: Optional[float] = None
    fontSize: Optional[float] = None
    strokeWidth: Optional[float] = None
    cornerRadius: Optional[float] = None
    resolvedContent: Optional[str] = None
    style: RenderStyle = Field(default_factory=RenderStyle)


class SceneGraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    pixelRatio: float = 1.0
    scale: float
    offsetX: float
    offsetY: float
    contentWidth: float
    contentHeight: float
    backgroundColor: str
    nodes: Tuple[RenderNode, ...] = ()
    warnings: Tuple[BindingResolutionWarning, ...] = ()

    def to_json(self) -> str:
        return self.model_dump_json()


__all__ = [
    "ElementType",
    "TextElement",
    "ShapeElement",
    "ImageElement",
    "Element",
    "TemplateDesign",
    "Template",
    "Card",
    "OwnerProfile",
    "ResolvedCardView",
    "RenderSurface",
    "RenderStyle",
    "RenderNode",
    "SceneGraph",
]
