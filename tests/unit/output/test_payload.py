from __future__ import annotations

from datetime import UTC, datetime

from chat_ledger.etl.core.types import ConversationSummary, Entry, ProjectRef
from chat_ledger.output.models import ChatEntryPayload, ChatSummary, LedgerDocument
from chat_ledger.projects.assignment import ProjectGroup

EXPORTED_AT = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def _document() -> LedgerDocument:
    group = ProjectGroup(
        project=ProjectRef("p1", "Travel"),
        conversations=[
            ConversationSummary(
                id="c1",
                title="Trip",
                created_at=datetime.fromtimestamp(1700000000, tz=UTC),
            )
        ],
    )
    entries = [Entry(id="a1", conversation_id="c1", prompt="Q", response="A")]
    return LedgerDocument.build([group], entries, exported_at=EXPORTED_AT)


class TestPayloads:
    def test_document_shape(self):
        assert _document().to_dict() == {
            "exportedAt": "2025-01-02T03:04:05.000Z",
            "projects": [
                {
                    "id": "p1",
                    "name": "Travel",
                    "chats": [
                        {
                            "id": "c1",
                            "title": "Trip",
                            "createTime": "2023-11-14T22:13:20.000Z",
                        }
                    ],
                }
            ],
            "chatEntries": [
                {"id": "a1", "chatId": "c1", "prompt": "Q", "response": "A"}
            ],
        }

    def test_unknown_times_omitted(self):
        chat = ChatSummary.from_summary(ConversationSummary(id="c", title="t"))
        assert chat.to_dict() == {"id": "c", "title": "t"}

    def test_empty_response_kept(self):
        payload = ChatEntryPayload.from_entry(
            Entry(id="u1", conversation_id="c", prompt="Q")
        )
        assert payload.to_dict()["response"] == ""

    def test_exported_at_defaults_to_now(self):
        document = LedgerDocument.build([], [])
        assert document.exported_at.endswith("Z")
        assert document.projects == []
        assert document.chat_entries == []
