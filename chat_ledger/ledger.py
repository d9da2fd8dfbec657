from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from chat_ledger.etl.core.exceptions import (
    ExportFormatError,
    ExportNotFoundError,
    LedgerProcessingError,
    ProjectMapFormatError,
    TransformFailedException,
)
from chat_ledger.etl.core.types import ConversationResult, RunSummary
from chat_ledger.output.models import LedgerDocument
from chat_ledger.output.serialize import OutputFormat, to_json, to_jsonl
from chat_ledger.projects.assignment import apply_project_map, group_into_projects
from chat_ledger.projects.membership import ProjectMembership, log_conflicts
from chat_ledger.providers.chatgpt.conversations import ChatGPTConversationsPipe
from chat_ledger.providers.chatgpt.lookup import filter_by_updated
from chat_ledger.storage.base import StorageBackend
from chat_ledger.validation import validate_conversations

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_STEM = "structured-chatgpt"
DEFAULT_TAGGED_EXPORT = "conversations-with-projects.json"


@dataclass
class LedgerResult:
    """Result returned from :meth:`ChatLedger.build`."""

    document: LedgerDocument
    summary: RunSummary
    conversations: list[ConversationResult] = field(default_factory=list)


def parse_json_document(data: bytes, source: str) -> Any:
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ExportFormatError(source, str(exc)) from exc


def parse_export(data: bytes, source: str = "conversations.json") -> list[Any]:
    """Parse an export document; the top level must be an array."""
    document = parse_json_document(data, source)
    if not isinstance(document, list):
        kind = type(document).__name__
        raise ExportFormatError(
            source, f"expected an array of conversations, got {kind}"
        )
    return document


class ChatLedger:
    """Main entry point: turns a conversations export into projects + entries.

    Usage::

        ledger = ChatLedger(storage=DiskStorage("./data"))
        result = await ledger.process_export(
            "/path/to/export/conversations.json",
            project_map_key="/path/to/project-map.json",
        )

    The whole export is read before processing starts and outputs are
    written only once processing has finished.
    """

    def __init__(
        self,
        storage: StorageBackend,
        *,
        output_format: OutputFormat = OutputFormat.JSON,
        indent: int | None = 2,
    ) -> None:
        self._storage = storage
        self._output_format = OutputFormat(output_format)
        self._indent = indent

    # ---- reading ----

    async def load_export(self, key: str) -> list[Any]:
        if not await asyncio.to_thread(self._storage.exists, key):
            raise ExportNotFoundError(f"Export not found: {key}")
        data = await asyncio.to_thread(self._storage.read, key)
        records = parse_export(data, key)
        logger.info("Loaded %d conversations from %s", len(records), key)
        return records

    async def load_project_map(self, key: str) -> ProjectMembership:
        if not await asyncio.to_thread(self._storage.exists, key):
            raise ExportNotFoundError(f"Project map not found: {key}")
        data = await asyncio.to_thread(self._storage.read, key)
        try:
            membership = ProjectMembership.from_lists(parse_json_document(data, key))
        except ProjectMapFormatError as exc:
            raise ProjectMapFormatError(f"{key}: {exc}") from exc
        log_conflicts(membership)
        return membership

    # ---- processing ----

    def build(
        self,
        records: list[Any],
        membership: ProjectMembership | None = None,
        *,
        exported_at: datetime | None = None,
    ) -> LedgerResult:
        """Run the pipe over in-memory records and assemble the document."""
        summary = RunSummary(conversations_seen=len(records))
        summary.issues = validate_conversations(records)
        if membership is not None:
            summary.conflicts = {
                cid: sorted(names) for cid, names in membership.conflicts.items()
            }

        pipe = ChatGPTConversationsPipe(membership=membership)
        results: list[ConversationResult] = []
        try:
            for result in pipe.run(records):
                results.append(result)
        except Exception as exc:
            raise TransformFailedException(str(exc)) from exc

        summary.conversations_skipped = pipe.skipped_count
        for result in results:
            summary.messages_normalized += len(result.messages)
            summary.messages_paired += len(result.paired_messages)
            summary.entries_created += len(result.entries)
            if not result.messages:
                summary.conversations_without_messages += 1
            if not result.entries:
                summary.conversations_without_entries += 1
            if not result.has_project:
                summary.conversations_without_project += 1

        groups = group_into_projects(
            (r.project if r.has_project else None, r.summary) for r in results
        )
        summary.projects = len(groups)
        entries = [e for r in results for e in r.entries]
        document = LedgerDocument.build(groups, entries, exported_at=exported_at)

        logger.info(
            "Projects: %d | Conversations: %d | Messages: %d | Entries: %d",
            summary.projects,
            summary.conversations_processed,
            summary.messages_normalized,
            summary.entries_created,
        )
        return LedgerResult(document=document, summary=summary, conversations=results)

    # ---- writing ----

    def render(self, document: LedgerDocument) -> dict[str, bytes]:
        """Render *document* in the configured format(s), keyed by extension."""
        rendered: dict[str, bytes] = {}
        if self._output_format in (OutputFormat.JSON, OutputFormat.BOTH):
            rendered["json"] = to_json(document, self._indent).encode("utf-8")
        if self._output_format in (OutputFormat.JSONL, OutputFormat.BOTH):
            rendered["jsonl"] = to_jsonl(document).encode("utf-8")
        return rendered

    async def write_document(self, document: LedgerDocument, stem: str) -> list[str]:
        written: list[str] = []
        for ext, data in self.render(document).items():
            key = f"{stem}.{ext}"
            await asyncio.to_thread(self._storage.write, key, data)
            logger.info("Wrote %s", key)
            written.append(self._storage.resolve_uri(key))
        return written

    async def process_export(
        self,
        export_key: str,
        *,
        project_map_key: str | None = None,
        output_stem: str | None = DEFAULT_OUTPUT_STEM,
        updated_since: datetime | None = None,
        updated_until: datetime | None = None,
    ) -> LedgerResult:
        """Load, normalize, pair and (optionally) write one export.

        Args:
            export_key: Storage key of the ``conversations.json`` document.
            project_map_key: Optional key of a ``{name: [ids]}`` membership map.
            output_stem: Key without extension for the output file(s);
                ``None`` skips writing.
            updated_since: Keep only conversations updated at or after this.
            updated_until: Keep only conversations updated at or before this.

        Returns:
            A :class:`LedgerResult` with the document and run summary.
        """
        try:
            records = await self.load_export(export_key)
            membership = (
                await self.load_project_map(project_map_key)
                if project_map_key
                else None
            )

            if updated_since is not None or updated_until is not None:
                records = filter_by_updated(records, updated_since, updated_until)
                logger.info("%d conversations in update window", len(records))

            result = self.build(records, membership)

            if output_stem is not None:
                result.summary.outputs = await self.write_document(
                    result.document, output_stem
                )
        except (ExportFormatError, ExportNotFoundError, ProjectMapFormatError):
            raise
        except Exception as exc:
            logger.error("process_export failed: %s", exc)
            raise LedgerProcessingError(str(exc)) from exc

        return result

    async def write_with_projects(
        self,
        export_key: str,
        project_map_key: str,
        output_key: str = DEFAULT_TAGGED_EXPORT,
    ) -> str:
        """Write a copy of the export with project tags from a membership map.

        Untagged conversations listed in the map get a synthesized
        ``project`` tag; existing tags are kept.  The input export is not
        modified.  Returns the URI of the written document.
        """
        try:
            records = await self.load_export(export_key)
            membership = await self.load_project_map(project_map_key)
            updated = apply_project_map(records, membership)
            data = json.dumps(updated, indent=self._indent, ensure_ascii=False)
            await asyncio.to_thread(self._storage.write, output_key, data.encode())
            logger.info("Wrote %s", output_key)
        except (ExportFormatError, ExportNotFoundError, ProjectMapFormatError):
            raise
        except Exception as exc:
            logger.error("write_with_projects failed: %s", exc)
            raise LedgerProcessingError(str(exc)) from exc

        return self._storage.resolve_uri(output_key)
