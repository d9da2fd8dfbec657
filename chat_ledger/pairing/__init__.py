from chat_ledger.pairing.engine import PairingState, pair_entries
from chat_ledger.pairing.sequencer import (
    CONVERSATIONAL_ROLES,
    filter_conversational,
    order_messages,
    sequence_for_pairing,
)

__all__ = [
    "CONVERSATIONAL_ROLES",
    "PairingState",
    "filter_conversational",
    "order_messages",
    "pair_entries",
    "sequence_for_pairing",
]
