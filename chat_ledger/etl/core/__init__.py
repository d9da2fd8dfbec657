from chat_ledger.etl.core.exceptions import (
    ExportFormatError,
    ExportNotFoundError,
    LedgerProcessingError,
    ProjectMapFormatError,
    TransformFailedException,
)
from chat_ledger.etl.core.pipe import Pipe
from chat_ledger.etl.core.types import (
    ConversationResult,
    ConversationSummary,
    Entry,
    NormalizedMessage,
    ProjectRef,
    RunSummary,
    ValidationIssue,
)

__all__ = [
    "ConversationResult",
    "ConversationSummary",
    "Entry",
    "ExportFormatError",
    "ExportNotFoundError",
    "LedgerProcessingError",
    "NormalizedMessage",
    "Pipe",
    "ProjectMapFormatError",
    "ProjectRef",
    "RunSummary",
    "TransformFailedException",
    "ValidationIssue",
]
