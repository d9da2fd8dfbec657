"""Structural validation of conversation export records.

Validation is a pass/fail pre-check that runs independently of pairing.
It reports every violation it finds, each tagged with the record's
position and id.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from numbers import Real
from typing import Any

from chat_ledger.etl.core.types import ValidationIssue

logger = logging.getLogger(__name__)


def _is_timestamp(value: Any) -> bool:
    if value is None or isinstance(value, str):
        return True
    return isinstance(value, Real) and not isinstance(value, bool)


def _check_project(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        return "expected null or { id, name }"
    if not isinstance(value.get("id"), str) or not isinstance(value.get("name"), str):
        return "expected null or { id: string, name: string }"
    return None


def iter_record_issues(index: int, record: Any) -> Iterator[ValidationIssue]:
    if not isinstance(record, dict):
        yield ValidationIssue(index, "record", "conversation is not an object")
        return

    raw_id = record.get("id")
    cid = raw_id if isinstance(raw_id, str) and raw_id.strip() else None

    def issue(field: str, message: str) -> ValidationIssue:
        return ValidationIssue(index, field, message, conversation_id=cid)

    if cid is None:
        yield issue("id", "missing or not a non-empty string")
    if not isinstance(record.get("title"), str):
        yield issue("title", "missing or not a string")

    messages = record.get("messages")
    mapping = record.get("mapping")
    if not isinstance(messages, list) and not isinstance(mapping, dict):
        yield issue(
            "messages/mapping",
            "neither a messages array nor a mapping object is present",
        )
    elif "messages" in record and messages is not None and not isinstance(
        messages, list
    ):
        yield issue("messages", "expected an array")
    elif "mapping" in record and mapping is not None and not isinstance(
        mapping, dict
    ):
        yield issue("mapping", "expected an object")

    if "project" in record:
        problem = _check_project(record["project"])
        if problem:
            yield issue("project", problem)

    for field in ("create_time", "update_time"):
        if not _is_timestamp(record.get(field)):
            yield issue(field, "expected number, string or null")


def validate_conversations(records: Any) -> list[ValidationIssue]:
    """Return every violation found in an export's conversation records.

    A top-level value that is not an array yields a single issue at
    index ``-1``.
    """
    if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
        return [ValidationIssue(-1, "document", "expected an array of conversations")]

    issues: list[ValidationIssue] = []
    for index, record in enumerate(records):
        issues.extend(iter_record_issues(index, record))

    if issues:
        logger.warning(
            "Validation found %d issue(s) in %d conversation(s)",
            len(issues),
            len(records),
        )
    return issues


def is_processable(record: Any) -> bool:
    """Whether a record can be processed at all (it has a usable id)."""
    if not isinstance(record, dict):
        return False
    cid = record.get("id")
    return isinstance(cid, str) and bool(cid.strip())
