"""ChatGPT conversations pipe: record -> messages -> entries."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from chat_ledger.etl.core.pipe import Pipe
from chat_ledger.etl.core.types import ConversationResult, ConversationSummary
from chat_ledger.pairing.engine import pair_entries
from chat_ledger.pairing.sequencer import sequence_for_pairing
from chat_ledger.projects.assignment import NO_PROJECT, resolve_project
from chat_ledger.projects.membership import ProjectMembership
from chat_ledger.providers.chatgpt.adapter import EncodingKind, adapt_conversation
from chat_ledger.providers.chatgpt.schemas import ExportConversation
from chat_ledger.providers.chatgpt.timestamps import normalize_timestamp
from chat_ledger.validation import is_processable

logger = logging.getLogger(__name__)


class ChatGPTConversationsPipe(Pipe[ExportConversation]):
    provider = "chatgpt"
    record_schema = ExportConversation

    def __init__(self, membership: ProjectMembership | None = None) -> None:
        self._membership = membership

    def extract_record(self, index: int, raw: Any) -> ExportConversation | None:
        if not is_processable(raw):
            logger.warning("Skipping conversation at index %d: no usable id", index)
            return None
        try:
            return ExportConversation.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Skipping conversation at index %d: %s", index, exc)
            return None

    def transform(self, raw: Any, record: ExportConversation) -> ConversationResult:
        encoding, messages = adapt_conversation(raw)
        # flat arrays are already in chronological order
        paired_messages = sequence_for_pairing(
            messages, reorder=encoding is EncodingKind.GRAPH
        )
        entries = pair_entries(record.id, paired_messages)
        project = resolve_project(raw, self._membership)

        return ConversationResult(
            summary=ConversationSummary(
                id=record.id,
                title=record.title or "",
                created_at=normalize_timestamp(record.create_time),
                updated_at=normalize_timestamp(record.update_time),
            ),
            project=project or NO_PROJECT,
            has_project=project is not None,
            encoding=encoding.value,
            messages=messages,
            paired_messages=paired_messages,
            entries=entries,
        )
