from __future__ import annotations

from datetime import UTC, datetime

from chat_ledger.etl.core.types import NormalizedMessage
from chat_ledger.pairing.sequencer import (
    filter_conversational,
    order_messages,
    sequence_for_pairing,
)


def _at(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


class TestOrderMessages:
    def test_sorts_by_creation(self):
        late = NormalizedMessage("assistant", "b", "2", _at(20))
        early = NormalizedMessage("user", "a", "1", _at(10))
        assert order_messages([late, early]) == [early, late]

    def test_stable_for_ties(self):
        first = NormalizedMessage("user", "a", "1", _at(10))
        second = NormalizedMessage("assistant", "b", "2", _at(10))
        third = NormalizedMessage("user", "c", "3", _at(10))
        assert order_messages([first, second, third]) == [first, second, third]

    def test_unknown_instants_first_in_input_order(self):
        known = NormalizedMessage("user", "k", "k", _at(5))
        unknown_a = NormalizedMessage("user", "a", "a")
        unknown_b = NormalizedMessage("user", "b", "b")
        ordered = order_messages([known, unknown_a, unknown_b])
        assert [m.id for m in ordered] == ["a", "b", "k"]


class TestFilterConversational:
    def test_drops_other_roles_and_blank_text(self):
        messages = [
            NormalizedMessage("system", "rules"),
            NormalizedMessage("tool", "output"),
            NormalizedMessage("user", "   "),
            NormalizedMessage("assistant", ""),
            NormalizedMessage("user", "keep"),
        ]
        assert [m.text for m in filter_conversational(messages)] == ["keep"]

    def test_trims_text_and_keeps_fields(self):
        original = NormalizedMessage("user", "  hi \n", "u1", _at(1))
        [kept] = filter_conversational([original])
        assert kept.text == "hi"
        assert kept.id == "u1"
        assert kept.created_at == _at(1)
        assert original.text == "  hi \n"


def test_sequence_for_pairing_orders_then_filters():
    messages = [
        NormalizedMessage("assistant", "answer", "a", _at(2)),
        NormalizedMessage("system", "setup", "s", _at(0)),
        NormalizedMessage("user", " question ", "u", _at(1)),
    ]
    assert [(m.id, m.text) for m in sequence_for_pairing(messages)] == [
        ("u", "question"),
        ("a", "answer"),
    ]


def test_sequence_for_pairing_without_reorder_keeps_source_order():
    messages = [
        NormalizedMessage("user", "q1", "u1", _at(100)),
        NormalizedMessage("assistant", "r1", "a1"),
        NormalizedMessage("system", "setup", "s"),
        NormalizedMessage("user", "q2", "u2", _at(200)),
    ]
    sequenced = sequence_for_pairing(messages, reorder=False)
    assert [m.id for m in sequenced] == ["u1", "a1", "u2"]
