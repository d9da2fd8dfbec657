from __future__ import annotations

from datetime import UTC, datetime

import pytest

from chat_ledger.providers.chatgpt.lookup import (
    conversation_id_from_url,
    filter_by_updated,
    find_conversation,
)


class TestConversationIdFromUrl:
    @pytest.mark.parametrize(
        "value",
        [
            "https://chatgpt.com/c/abc-123",
            "https://chatgpt.com/c/abc-123?model=gpt-4o",
            "https://chat.openai.com/c/abc-123#bottom",
            "https://chatgpt.com/g/g-p-xyz/c/abc-123/",
            "  abc-123  ",
        ],
    )
    def test_extracts_id(self, value):
        assert conversation_id_from_url(value) == "abc-123"

    def test_url_without_conversation(self):
        with pytest.raises(ValueError):
            conversation_id_from_url("https://chatgpt.com/share/xyz")


class TestFindConversation:
    def test_found(self, conversations):
        record = find_conversation(conversations, "conv-graph-1")
        assert record is not None
        assert record["title"] == "Old chat"

    def test_missing(self, conversations):
        assert find_conversation(conversations, "nope") is None


class TestFilterByUpdated:
    def test_no_bounds_orders_most_recent_first(self, conversations):
        ids = [r["id"] for r in filter_by_updated(conversations)]
        assert ids == ["conv-map-1", "conv-flat-1", "conv-stub", "conv-graph-1"]

    def test_unknown_update_time_excluded(self, conversations):
        ids = [r["id"] for r in filter_by_updated(conversations)]
        assert "conv-assistant-only" not in ids

    def test_window_is_inclusive(self, conversations):
        start = datetime.fromtimestamp(1695000000, tz=UTC)
        end = datetime.fromtimestamp(1700003600, tz=UTC)
        ids = [r["id"] for r in filter_by_updated(conversations, start, end)]
        assert ids == ["conv-flat-1", "conv-stub"]

    def test_open_ended(self, conversations):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        ids = [r["id"] for r in filter_by_updated(conversations, start=start)]
        assert ids == ["conv-map-1"]
