"""Binding resolver: sparse card + owner profile -> total ResolvedCardView.

One fixed fallback chain for every call site:

    card[field] -> ownerProfile[mapped field] -> FIELD_DEFAULTS[field]

Values are coerced rather than rejected (see `stringify` and
`numeric`), so resolution never raises.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from engines.card_engine.core.types import ResolvedCardView

STRING_FIELDS = (
    "fullName",
    "jobTitle",
    "company",
    "email",
    "phone",
    "website",
    "address",
    "bio",
    "templateId",
)
NUMERIC_FIELDS = ("views", "loveCount", "shares", "downloads")

FIELD_DEFAULTS: Dict[str, Any] = {
    "fullName": "Your Name",
    "jobTitle": "Job Title",
    "company": "Company",
    "email": "email@example.com",
    "phone": "+(977) 9xxxxxxxxx",
    "website": "www.example.com",
    "address": "Address",
    "bio": "Bio description",
    "templateId": "default",
    "views": 0,
    "loveCount": 0,
    "shares": 0,
    "downloads": 0,
}

# Profile records name two fields differently from cards.
OWNER_FIELD_MAP: Dict[str, str] = {
    "fullName": "name",
    "address": "location",
}

# Counters and the template reference belong to the card alone.
CARD_ONLY_FIELDS = frozenset(NUMERIC_FIELDS + ("templateId",))


def _read(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def stringify(value: Any) -> Optional[str]:
    """Coerce a raw field value to display text; None means absent."""
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return text or None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        parts = [p for p in (stringify(v) for v in value) if p]
        return ", ".join(parts) or None
    text = str(value).strip()
    return text or None


def numeric(value: Any) -> Optional[int]:
    """Coerce a raw counter value to a non-negative int; None means absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return max(0, int(value))
    if isinstance(value, str):
        text = value.strip()
        try:
            return max(0, int(text))
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return None
        return numeric(parsed)
    return None


def _owner_value(owner: Any, field: str) -> Any:
    if field in CARD_ONLY_FIELDS:
        return None
    mapped = OWNER_FIELD_MAP.get(field)
    if mapped is not None:
        value = _read(owner, mapped)
        if value is not None:
            return value
    return _read(owner, field)


def resolve(card: Any, owner_profile: Any = None) -> ResolvedCardView:
    values: Dict[str, Any] = {}
    for field in STRING_FIELDS:
        value = stringify(_read(card, field))
        if value is None:
            value = stringify(_owner_value(owner_profile, field))
        values[field] = value if value is not None else FIELD_DEFAULTS[field]
    for field in NUMERIC_FIELDS:
        value = numeric(_read(card, field))
        values[field] = value if value is not None else FIELD_DEFAULTS[field]
    return ResolvedCardView(**values)
