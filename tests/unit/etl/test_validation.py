from __future__ import annotations

from chat_ledger.validation import (
    is_processable,
    iter_record_issues,
    validate_conversations,
)


def _fields(record) -> list[str]:
    return [issue.field for issue in iter_record_issues(0, record)]


class TestValidateConversations:
    def test_fixture_issues(self, conversations):
        issues = validate_conversations(conversations)
        found = {(i.index, i.field) for i in issues}
        assert found == {
            (2, "messages/mapping"),
            (4, "id"),
            (5, "project"),
        }

    def test_issue_tagged_with_id(self, conversations):
        issues = validate_conversations(conversations)
        by_index = {i.index: i for i in issues}
        assert by_index[2].conversation_id == "conv-stub"
        assert by_index[4].conversation_id is None
        assert by_index[2].describe().startswith("[2] conv-stub messages/mapping:")

    def test_top_level_not_array(self):
        [issue] = validate_conversations({"id": "x"})
        assert issue.index == -1
        assert issue.field == "document"

    def test_string_is_not_an_array(self):
        assert validate_conversations("[]")[0].index == -1

    def test_valid_record(self):
        record = {
            "id": "c1",
            "title": "t",
            "messages": [],
            "project": {"id": "p", "name": "P"},
            "create_time": 1.5,
            "update_time": None,
        }
        assert validate_conversations([record]) == []

    def test_reports_every_problem(self):
        record = {
            "id": "",
            "title": 3,
            "mapping": [],
            "project": "p",
            "create_time": True,
            "update_time": {},
        }
        assert _fields(record) == [
            "id",
            "title",
            "messages/mapping",
            "project",
            "create_time",
            "update_time",
        ]

    def test_wrong_typed_messages_with_mapping(self):
        record = {"id": "c", "title": "t", "messages": "x", "mapping": {}}
        assert _fields(record) == ["messages"]

    def test_wrong_typed_mapping_with_messages(self):
        record = {"id": "c", "title": "t", "messages": [], "mapping": "x"}
        assert _fields(record) == ["mapping"]

    def test_non_object_record(self):
        assert _fields("nope") == ["record"]

    def test_string_timestamps_accepted(self):
        record = {"id": "c", "title": "t", "messages": [], "update_time": "2024"}
        assert _fields(record) == []


class TestIsProcessable:
    def test_needs_non_blank_string_id(self):
        assert is_processable({"id": "c"})
        assert not is_processable({"id": " "})
        assert not is_processable({"id": 3})
        assert not is_processable(["c"])
