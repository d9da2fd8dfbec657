from __future__ import annotations

import pytest

from chat_ledger.projects.assignment import NO_PROJECT
from chat_ledger.projects.membership import ProjectMembership
from chat_ledger.providers.chatgpt.conversations import ChatGPTConversationsPipe
from chat_ledger.providers.chatgpt.schemas import ExportConversation


class TestChatGPTConversationsPipe:
    @pytest.fixture()
    def results(self, conversations):
        pipe = ChatGPTConversationsPipe()
        return pipe, {r.summary.id: r for r in pipe.run(conversations)}

    def test_counts(self, results):
        pipe, by_id = results
        assert pipe.extracted_count == 5
        assert pipe.transformed_count == 5
        assert pipe.skipped_count == 1
        assert "conv-flat-1" in by_id

    def test_record_schema(self):
        assert ChatGPTConversationsPipe.record_schema is ExportConversation
        assert ChatGPTConversationsPipe.provider == "chatgpt"

    def test_flat_entries(self, results):
        _, by_id = results
        result = by_id["conv-flat-1"]
        assert result.encoding == "flat"
        assert len(result.messages) == 5
        assert "system" not in [m.role for m in result.paired_messages]
        assert [(e.id, e.prompt, e.response) for e in result.entries] == [
            ("m2", "Plan a trip to Lisbon", "Day 1: Alfama"),
            ("m4", "And food?", "Try pastel de nata"),
        ]

    def test_graph_entries_ordered_by_time(self, results):
        _, by_id = results
        entries = by_id["conv-graph-1"].entries
        assert [(e.id, e.prompt, e.response) for e in entries] == [
            ("n2", "Hello", "Hi there!")
        ]

    def test_merged_prompt_and_response(self, results):
        _, by_id = results
        [entry] = by_id["conv-map-1"].entries
        assert entry.id == "r3"
        assert entry.conversation_id == "conv-map-1"
        assert entry.prompt == "Soup ideas?\nVegetarian please"
        assert entry.response == "Lentil soup\nOr minestrone"

    def test_assistant_only_has_no_entries(self, results):
        _, by_id = results
        result = by_id["conv-assistant-only"]
        assert result.entries == []
        assert len(result.paired_messages) == 1

    def test_projects(self, results):
        _, by_id = results
        assert by_id["conv-flat-1"].project.name == "Travel"
        assert by_id["conv-flat-1"].has_project
        assert by_id["conv-assistant-only"].project.name == "g-p-work"
        assert by_id["conv-map-1"].project == NO_PROJECT
        assert not by_id["conv-map-1"].has_project

    def test_summary_fields(self, results):
        _, by_id = results
        summary = by_id["conv-assistant-only"].summary
        assert summary.title == "Orphan"
        assert summary.created_at is not None
        assert summary.updated_at is None

    def test_membership_used_for_untagged(self, conversations, project_map):
        membership = ProjectMembership.from_lists(project_map)
        pipe = ChatGPTConversationsPipe(membership=membership)
        by_id = {r.summary.id: r for r in pipe.run(conversations)}
        assert by_id["conv-map-1"].project.name == "Cooking"
        assert by_id["conv-map-1"].project.id == "manual_cooking"
        assert by_id["conv-stub"].project == NO_PROJECT

    def test_non_object_records_skipped(self):
        pipe = ChatGPTConversationsPipe()
        results = list(pipe.run(["nope", 3, {"id": "  "}, {"id": "ok"}]))
        assert [r.summary.id for r in results] == ["ok"]
        assert pipe.skipped_count == 3
        assert results[0].summary.title == ""

    def test_flat_array_order_is_kept_when_times_are_partial(self):
        def message(mid, role, text, at=None):
            raw = {"id": mid, "author": {"role": role}, "content": text}
            if at is not None:
                raw["create_time"] = at
            return raw

        record = {
            "id": "c-partial",
            "messages": [
                message("u1", "user", "q1", 100),
                message("a1", "assistant", "r1"),
                message("u2", "user", "q2", 200),
                message("a2", "assistant", "r2", 210),
            ],
        }
        [result] = ChatGPTConversationsPipe().run([record])
        assert [m.id for m in result.paired_messages] == ["u1", "a1", "u2", "a2"]
        assert [(e.prompt, e.response) for e in result.entries] == [
            ("q1", "r1"),
            ("q2", "r2"),
        ]

    def test_graph_messages_still_reordered_by_time(self):
        record = {
            "id": "c-graph",
            "mapping": {
                "root": {"id": "root", "message": None, "children": ["x"]},
                "x": {
                    "id": "x",
                    "parent": "root",
                    "children": ["y"],
                    "message": {
                        "id": "x",
                        "author": {"role": "assistant"},
                        "content": "answer",
                        "create_time": 20,
                    },
                },
                "y": {
                    "id": "y",
                    "parent": "x",
                    "children": [],
                    "message": {
                        "id": "y",
                        "author": {"role": "user"},
                        "content": "question",
                        "create_time": 10,
                    },
                },
            },
        }
        [result] = ChatGPTConversationsPipe().run([record])
        assert [(e.id, e.prompt, e.response) for e in result.entries] == [
            ("x", "question", "answer")
        ]
