from chat_ledger.providers.chatgpt.adapter import (
    EncodingKind,
    adapt_conversation,
    collect_messages,
    detect_encoding,
)
from chat_ledger.providers.chatgpt.content import extract_text
from chat_ledger.providers.chatgpt.schemas import ExportConversation, ExportMessage
from chat_ledger.providers.chatgpt.timestamps import (
    format_instant,
    normalize_timestamp,
)

__all__ = [
    "EncodingKind",
    "ExportConversation",
    "ExportMessage",
    "adapt_conversation",
    "collect_messages",
    "detect_encoding",
    "extract_text",
    "format_instant",
    "normalize_timestamp",
]
