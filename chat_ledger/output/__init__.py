from chat_ledger.output.models import (
    ChatEntryPayload,
    ChatSummary,
    LedgerDocument,
    ProjectPayload,
)
from chat_ledger.output.serialize import (
    OutputFormat,
    RecordType,
    parse_jsonl,
    to_json,
    to_jsonl,
)

__all__ = [
    "ChatEntryPayload",
    "ChatSummary",
    "LedgerDocument",
    "OutputFormat",
    "ProjectPayload",
    "RecordType",
    "parse_jsonl",
    "to_json",
    "to_jsonl",
]
