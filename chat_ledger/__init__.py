from chat_ledger.etl.core.exceptions import (
    ExportFormatError,
    ExportNotFoundError,
    LedgerProcessingError,
    ProjectMapFormatError,
)
from chat_ledger.etl.core.types import Entry, NormalizedMessage, RunSummary
from chat_ledger.ledger import ChatLedger, LedgerResult, parse_export
from chat_ledger.output import LedgerDocument, OutputFormat
from chat_ledger.projects import ProjectMembership
from chat_ledger.storage import DiskStorage

__all__ = [
    "ChatLedger",
    "DiskStorage",
    "Entry",
    "ExportFormatError",
    "ExportNotFoundError",
    "LedgerDocument",
    "LedgerProcessingError",
    "LedgerResult",
    "NormalizedMessage",
    "OutputFormat",
    "ProjectMapFormatError",
    "ProjectMembership",
    "RunSummary",
    "parse_export",
]
