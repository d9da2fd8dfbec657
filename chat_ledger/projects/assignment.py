"""Project assignment and grouping of conversations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from chat_ledger.etl.core.types import ConversationSummary, ProjectRef
from chat_ledger.projects.membership import ProjectMembership
from chat_ledger.providers.chatgpt.timestamps import sort_key

logger = logging.getLogger(__name__)

NO_PROJECT_ID = "none"
NO_PROJECT_NAME = "No Project"
NO_PROJECT = ProjectRef(id=NO_PROJECT_ID, name=NO_PROJECT_NAME)


def project_from_tag(tag: Any) -> ProjectRef | None:
    """Read an inline ``project`` tag; malformed tags count as absent."""
    if not isinstance(tag, dict):
        return None
    pid = tag.get("id")
    if not isinstance(pid, str) or not pid:
        return None
    name = tag.get("name")
    return ProjectRef(id=pid, name=name if isinstance(name, str) and name else pid)


def resolve_project(
    record: dict[str, Any],
    membership: ProjectMembership | None = None,
) -> ProjectRef | None:
    """Return the project for a conversation, or ``None`` if it has none.

    An inline tag is authoritative; the membership map is consulted only
    for untagged conversations.
    """
    tagged = project_from_tag(record.get("project"))
    if tagged is not None:
        return tagged
    cid = record.get("id")
    if membership is not None and isinstance(cid, str):
        return membership.project_for(cid)
    return None


def apply_project_map(
    records: Sequence[Any],
    membership: ProjectMembership,
) -> list[Any]:
    """Return copies of *records* with synthesized ``project`` tags.

    The input records are not modified.  Untagged conversations listed
    in *membership* get ``{"id": "manual_<name>", "name": <name>}``;
    other untagged conversations get ``project: null``.
    """
    updated: list[Any] = []
    assigned = 0
    for record in records:
        if not isinstance(record, dict):
            updated.append(record)
            continue
        copy = dict(record)
        project = resolve_project(record, membership)
        if project is None:
            copy["project"] = None
        elif project_from_tag(record.get("project")) is None:
            copy["project"] = {"id": project.id, "name": project.name}
            assigned += 1
        updated.append(copy)
    logger.info("Applied project map to %d conversation(s)", assigned)
    return updated


@dataclass
class ProjectGroup:
    project: ProjectRef
    conversations: list[ConversationSummary] = field(default_factory=list)
    # False only for the bucket of conversations without a project
    assigned: bool = True


def _recency(summary: ConversationSummary) -> float:
    return sort_key(summary.updated_at or summary.created_at)


def group_into_projects(
    assignments: Iterable[tuple[ProjectRef | None, ConversationSummary]],
) -> list[ProjectGroup]:
    """Bucket conversation summaries by project.

    Conversations without a project go to a separate bucket rendered as
    ``NO_PROJECT``; it never merges with a real project, even one whose
    id is ``"none"``.  Named projects are ordered by name, the unassigned
    bucket last; within a project the most recently updated conversation
    comes first.  The first name seen for a project id is kept and any
    other name for the same id is logged.
    """
    unassigned = ProjectGroup(project=NO_PROJECT, assigned=False)
    buckets: dict[str, ProjectGroup] = {}
    renamed: set[tuple[str, str]] = set()
    for project, summary in assignments:
        if project is None:
            unassigned.conversations.append(summary)
            continue
        group = buckets.get(project.id)
        if group is None:
            group = buckets[project.id] = ProjectGroup(project=project)
        elif group.project.name != project.name and (
            (project.id, project.name) not in renamed
        ):
            renamed.add((project.id, project.name))
            logger.warning(
                "Project id %s is used by %r and %r; grouping under %r",
                project.id,
                group.project.name,
                project.name,
                group.project.name,
            )
        group.conversations.append(summary)

    groups = sorted(
        buckets.values(),
        key=lambda g: (g.project.name.casefold(), g.project.id),
    )
    if unassigned.conversations:
        groups.append(unassigned)
    # reverse sort is still stable; unknown instants end up last
    for group in groups:
        group.conversations.sort(key=_recency, reverse=True)
    return groups


@dataclass
class CrossCheckReport:
    """Differences between a membership map and the export's project tags."""

    missing_ids: list[str] = field(default_factory=list)
    mismatches: list[tuple[str, str, str | None]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_ids and not self.mismatches


def cross_check(
    records: Sequence[Any],
    membership: ProjectMembership,
) -> CrossCheckReport:
    """Verify each mapped id exists and carries the expected project name."""
    actual: dict[str, str | None] = {}
    for record in records:
        if isinstance(record, dict) and isinstance(record.get("id"), str):
            project = resolve_project(record, membership)
            actual[record["id"]] = project.name if project else None

    report = CrossCheckReport()
    for cid, expected in membership.assignments.items():
        if cid not in actual:
            report.missing_ids.append(cid)
        elif actual[cid] != expected:
            report.mismatches.append((cid, expected, actual[cid]))
    return report
