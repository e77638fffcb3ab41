"""vCard export for the public card view."""
from __future__ import annotations

from typing import List

from engines.card_engine.core.types import ResolvedCardView


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def to_vcard(view: ResolvedCardView) -> str:
    parts = view.fullName.split()
    first = parts[0] if parts else ""
    last = " ".join(parts[1:])
    lines: List[str] = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"N:{_escape(last)};{_escape(first)};;;",
        f"FN:{_escape(view.fullName)}",
        f"ORG:{_escape(view.company)}",
        f"TITLE:{_escape(view.jobTitle)}",
        f"TEL:{_escape(view.phone)}",
        f"EMAIL:{_escape(view.email)}",
        f"URL:{_escape(view.website)}",
        f"ADR:;;{_escape(view.address)};;;;",
        f"NOTE:{_escape(view.bio)}",
        "END:VCARD",
    ]
    return "\r\n".join(lines) + "\r\n"
