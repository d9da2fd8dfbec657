"""Structured and line-delimited renderings of a :class:`LedgerDocument`.

Both carry identical project and entry payloads; only the envelope
differs.  The line-delimited form writes every project, then every
entry, each tagged with ``"type"``.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from chat_ledger.etl.core.exceptions import ExportFormatError
from chat_ledger.output.models import LedgerDocument


class RecordType(StrEnum):
    PROJECT = "project"
    CHAT_ENTRY = "chatEntry"


class OutputFormat(StrEnum):
    JSON = "json"
    JSONL = "jsonl"
    BOTH = "both"


def to_json(document: LedgerDocument, indent: int | None = 2) -> str:
    return json.dumps(document.to_dict(), indent=indent, ensure_ascii=False)


def jsonl_records(document: LedgerDocument) -> list[dict[str, Any]]:
    data = document.to_dict()
    records: list[dict[str, Any]] = []
    for project in data["projects"]:
        records.append({"type": RecordType.PROJECT.value, **project})
    for entry in data["chatEntries"]:
        records.append({"type": RecordType.CHAT_ENTRY.value, **entry})
    return records


def to_jsonl(document: LedgerDocument) -> str:
    lines = [json.dumps(r, ensure_ascii=False) for r in jsonl_records(document)]
    return "\n".join(lines) + ("\n" if lines else "")


def parse_jsonl(text: str) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Read a line-delimited document back into ``(projects, entries)``."""
    projects: list[dict[str, Any]] = []
    entries: list[dict[str, Any]] = []
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ExportFormatError(f"line {lineno}", str(exc)) from exc
        if not isinstance(record, dict):
            raise ExportFormatError(f"line {lineno}", "expected a JSON object")
        kind = record.pop("type", None)
        if kind == RecordType.PROJECT:
            projects.append(record)
        elif kind == RecordType.CHAT_ENTRY:
            entries.append(record)
        else:
            raise ExportFormatError(f"line {lineno}", f"unknown record type {kind!r}")
    return projects, entries
