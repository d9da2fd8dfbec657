from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class NormalizedMessage:
    """One message after content extraction and time normalization.

    ``text`` is always a string (possibly empty). ``created_at`` is
    ``None`` when the source timestamp was missing or unusable.
    """

    role: str
    text: str
    id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Entry:
    """A paired prompt/response derived from one conversation."""

    id: str
    conversation_id: str
    prompt: str
    response: str = ""


@dataclass(frozen=True)
class ProjectRef:
    """Resolved project bucket for a conversation."""

    id: str
    name: str


@dataclass(frozen=True)
class ConversationSummary:
    id: str
    title: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ConversationResult:
    """Everything derived from a single conversation record."""

    summary: ConversationSummary
    project: ProjectRef
    encoding: str
    messages: list[NormalizedMessage] = field(default_factory=list)
    paired_messages: list[NormalizedMessage] = field(default_factory=list)
    entries: list[Entry] = field(default_factory=list)
    has_project: bool = True


@dataclass(frozen=True)
class ValidationIssue:
    """A single violation found while validating an input record."""

    index: int
    field: str
    message: str
    conversation_id: str | None = None

    def describe(self) -> str:
        where = f"[{self.index}]"
        if self.conversation_id:
            where += f" {self.conversation_id}"
        return f"{where} {self.field}: {self.message}"


@dataclass
class RunSummary:
    """Counters for one run.

    Any conversation that contributes nothing to the output can be
    attributed through these counts.
    """

    conversations_seen: int = 0
    conversations_skipped: int = 0
    conversations_without_messages: int = 0
    conversations_without_entries: int = 0
    conversations_without_project: int = 0
    messages_normalized: int = 0
    messages_paired: int = 0
    entries_created: int = 0
    projects: int = 0
    conflicts: dict[str, list[str]] = field(default_factory=dict)
    issues: list[ValidationIssue] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)

    @property
    def conversations_processed(self) -> int:
        return self.conversations_seen - self.conversations_skipped
