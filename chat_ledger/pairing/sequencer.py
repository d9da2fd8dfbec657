"""Chronological ordering and filtering of normalized messages."""

from __future__ import annotations

from collections.abc import Iterable

from chat_ledger.etl.core.types import NormalizedMessage
from chat_ledger.providers.chatgpt.timestamps import sort_key

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
CONVERSATIONAL_ROLES = frozenset({USER_ROLE, ASSISTANT_ROLE})


def order_messages(messages: Iterable[NormalizedMessage]) -> list[NormalizedMessage]:
    """Stable sort by creation instant; unknown instants sort first.

    Messages comparing equal keep their input order.
    """
    return sorted(messages, key=lambda m: sort_key(m.created_at))


def filter_conversational(
    messages: Iterable[NormalizedMessage],
) -> list[NormalizedMessage]:
    """Keep user/assistant messages with non-blank text, text trimmed."""
    kept: list[NormalizedMessage] = []
    for message in messages:
        if message.role not in CONVERSATIONAL_ROLES:
            continue
        text = message.text.strip()
        if not text:
            continue
        if text != message.text:
            message = NormalizedMessage(
                id=message.id,
                role=message.role,
                text=text,
                created_at=message.created_at,
            )
        kept.append(message)
    return kept


def sequence_for_pairing(
    messages: Iterable[NormalizedMessage],
    *,
    reorder: bool = True,
) -> list[NormalizedMessage]:
    """Prepare messages for pairing.

    Pass ``reorder=False`` when *messages* are already in chronological
    source order (the flat ``messages`` encoding); they are then only
    filtered.
    """
    if reorder:
        messages = order_messages(messages)
    return filter_conversational(messages)
