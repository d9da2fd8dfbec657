"""Encoding detection for conversation records.

A conversation carries its messages either as a flat ``messages`` array
(newer exports) or as a ``mapping`` graph of nodes (older exports).  The
choice is made once here; everything downstream sees a flat list of
:class:`NormalizedMessage` in source order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from chat_ledger.etl.core.types import NormalizedMessage
from chat_ledger.providers.chatgpt.content import extract_text
from chat_ledger.providers.chatgpt.schemas import ExportMessage, ExportNode
from chat_ledger.providers.chatgpt.timestamps import normalize_timestamp

logger = logging.getLogger(__name__)

# Missing author roles are attributed to the assistant.
DEFAULT_ROLE = "assistant"


class EncodingKind(StrEnum):
    FLAT = "flat"
    GRAPH = "graph"
    EMPTY = "empty"


@dataclass(frozen=True)
class FlatEncoding:
    """``messages`` array; element order is source (chronological) order."""

    messages: list[Any]
    kind: EncodingKind = EncodingKind.FLAT


@dataclass(frozen=True)
class GraphEncoding:
    """``mapping`` graph; iteration order is storage order, not chronology."""

    nodes: dict[str, Any]
    kind: EncodingKind = EncodingKind.GRAPH


@dataclass(frozen=True)
class EmptyEncoding:
    """Neither encoding present, e.g. a conversation stub."""

    kind: EncodingKind = EncodingKind.EMPTY


ConversationEncoding = FlatEncoding | GraphEncoding | EmptyEncoding


def detect_encoding(record: dict[str, Any]) -> ConversationEncoding:
    """Pick the authoritative message encoding of a raw conversation record.

    A present ``messages`` list wins, even when empty.  Otherwise a
    ``mapping`` object is used.  Anything else yields no messages.
    """
    messages = record.get("messages")
    if isinstance(messages, list):
        return FlatEncoding(messages=messages)
    mapping = record.get("mapping")
    if isinstance(mapping, dict):
        return GraphEncoding(nodes=mapping)
    return EmptyEncoding()


def normalize_message(message: ExportMessage) -> NormalizedMessage:
    return NormalizedMessage(
        id=message.id,
        role=message.role or DEFAULT_ROLE,
        text=extract_text(message.content),
        created_at=normalize_timestamp(message.create_time),
    )


def _parse_message(raw: Any) -> ExportMessage:
    if isinstance(raw, dict):
        return ExportMessage.model_validate(raw)
    return ExportMessage()


def collect_messages(encoding: ConversationEncoding) -> list[NormalizedMessage]:
    """Flatten an encoding into normalized messages, in source order.

    Graph nodes without a message payload are structural and skipped.
    """
    match encoding:
        case FlatEncoding(messages=messages):
            return [normalize_message(_parse_message(m)) for m in messages]
        case GraphEncoding(nodes=nodes):
            collected: list[NormalizedMessage] = []
            for node_id, raw_node in nodes.items():
                if not isinstance(raw_node, dict):
                    logger.debug("Skipping non-object mapping node %s", node_id)
                    continue
                node = ExportNode.model_validate(raw_node)
                if node.message is None:
                    continue
                collected.append(normalize_message(node.message))
            return collected
        case _:
            return []


def adapt_conversation(
    record: dict[str, Any],
) -> tuple[EncodingKind, list[NormalizedMessage]]:
    """Detect the encoding of *record* and return its messages."""
    encoding = detect_encoding(record)
    return encoding.kind, collect_messages(encoding)
