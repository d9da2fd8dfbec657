"""Plain-text extraction from polymorphic message content."""

from __future__ import annotations

import json
from typing import Any


def extract_text(content: Any) -> str:
    """Return the plain text carried by a message ``content`` value.

    Rules, first match wins:

    1. ``None`` -> ``""``
    2. a string -> returned verbatim
    3. an object with a ``parts`` list -> string parts joined by ``"\\n"``
       (non-string parts are skipped, not coerced)
    4. an object with a string ``text`` field -> that field
    5. anything else -> JSON serialization, or ``str()`` if that fails

    Never raises.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        parts = content.get("parts")
        if isinstance(parts, list):
            return "\n".join(p for p in parts if isinstance(p, str))
        text = content.get("text")
        if isinstance(text, str):
            return text
    try:
        return json.dumps(content, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        pass
    try:
        return str(content)
    except Exception:
        return object.__repr__(content)
