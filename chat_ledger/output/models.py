"""Output payloads for the normalized projects + entries document."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chat_ledger.etl.core.types import ConversationSummary, Entry
from chat_ledger.projects.assignment import ProjectGroup
from chat_ledger.providers.chatgpt.timestamps import format_instant


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase keys, unknown values omitted."""
        return json.loads(self.model_dump_json(by_alias=True, exclude_none=True))


class ChatSummary(_Payload):
    id: str
    title: str
    create_time: str | None = None
    update_time: str | None = None

    @classmethod
    def from_summary(cls, summary: ConversationSummary) -> ChatSummary:
        return cls(
            id=summary.id,
            title=summary.title,
            create_time=format_instant(summary.created_at),
            update_time=format_instant(summary.updated_at),
        )


class ProjectPayload(_Payload):
    id: str
    name: str
    chats: list[ChatSummary] = Field(default_factory=list)

    @classmethod
    def from_group(cls, group: ProjectGroup) -> ProjectPayload:
        return cls(
            id=group.project.id,
            name=group.project.name,
            chats=[ChatSummary.from_summary(s) for s in group.conversations],
        )


class ChatEntryPayload(_Payload):
    id: str
    chat_id: str
    prompt: str
    response: str = ""

    @classmethod
    def from_entry(cls, entry: Entry) -> ChatEntryPayload:
        return cls(
            id=entry.id,
            chat_id=entry.conversation_id,
            prompt=entry.prompt,
            response=entry.response,
        )


class LedgerDocument(_Payload):
    exported_at: str
    projects: list[ProjectPayload] = Field(default_factory=list)
    chat_entries: list[ChatEntryPayload] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        groups: list[ProjectGroup],
        entries: list[Entry],
        exported_at: datetime | None = None,
    ) -> LedgerDocument:
        return cls(
            exported_at=format_instant(exported_at or datetime.now(UTC)) or "",
            projects=[ProjectPayload.from_group(g) for g in groups],
            chat_entries=[ChatEntryPayload.from_entry(e) for e in entries],
        )
