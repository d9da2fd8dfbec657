"""Finding and filtering raw conversation records."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from chat_ledger.providers.chatgpt.timestamps import normalize_timestamp, sort_key

_SHARE_URL_ID = re.compile(r"/c/([^/?#]+)")


def conversation_id_from_url(value: str) -> str:
    """Return the conversation id from a ``https://chatgpt.com/c/<id>`` URL.

    A value that is not a share URL is assumed to be a bare id.
    """
    value = value.strip()
    match = _SHARE_URL_ID.search(value)
    if match:
        return match.group(1)
    if "://" in value:
        raise ValueError(f"Could not parse conversation id from URL: {value}")
    return value


def find_conversation(
    records: Sequence[Any], conversation_id: str
) -> dict[str, Any] | None:
    for record in records:
        if isinstance(record, dict) and record.get("id") == conversation_id:
            return record
    return None


def filter_by_updated(
    records: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[dict[str, Any]]:
    """Keep conversations whose update instant lies in ``[start, end]``.

    Conversations with an unknown update instant are excluded.  The
    result is ordered most recently updated first.
    """
    kept: list[tuple[datetime, dict[str, Any]]] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        updated = normalize_timestamp(record.get("update_time"))
        if updated is None:
            continue
        if start is not None and updated < start:
            continue
        if end is not None and updated > end:
            continue
        kept.append((updated, record))
    kept.sort(key=lambda pair: sort_key(pair[0]), reverse=True)
    return [record for _, record in kept]
