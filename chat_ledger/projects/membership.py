"""Project membership maps built from per-project conversation id lists.

A membership map is the ``{"Project Name": ["conv-id", ...], ...}``
document produced outside this package.  The same conversation id may be
listed under several projects; that is reported, and the project merged
last wins.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from chat_ledger.etl.core.exceptions import ProjectMapFormatError
from chat_ledger.etl.core.types import ProjectRef

logger = logging.getLogger(__name__)

MANUAL_PROJECT_PREFIX = "manual_"


def manual_project_id(name: str) -> str:
    """Derive the id of a project reconstructed from a membership list."""
    return MANUAL_PROJECT_PREFIX + re.sub(r"\s+", "_", name.lower())


def _clean_ids(ids: Iterable[Any]) -> list[str]:
    seen: dict[str, None] = {}
    for raw in ids:
        if not isinstance(raw, str):
            continue
        cid = raw.strip()
        if cid:
            seen.setdefault(cid, None)
    return list(seen)


@dataclass
class ProjectMembership:
    """Reverse lookup from conversation id to project, with conflicts."""

    projects: dict[str, list[str]] = field(default_factory=dict)
    assignments: dict[str, str] = field(default_factory=dict)
    claims: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_lists(cls, lists: Mapping[str, Any]) -> ProjectMembership:
        """Merge id lists in mapping order.

        Raises :class:`ProjectMapFormatError` if *lists* is not a mapping.
        Entries whose value is not a list are skipped with a warning.
        """
        if not isinstance(lists, Mapping):
            raise ProjectMapFormatError(
                f"Project map must be an object of name -> id list, "
                f"got {type(lists).__name__}"
            )

        membership = cls()
        for name, ids in lists.items():
            if not isinstance(ids, list):
                logger.warning("Skipping project %r: id list is not an array", name)
                continue
            membership.add_list(str(name), ids)
        return membership

    def add_list(self, name: str, ids: Iterable[Any]) -> None:
        project_id = manual_project_id(name)
        for other in self.projects:
            if other != name and manual_project_id(other) == project_id:
                logger.warning(
                    "Projects %r and %r share id %s and will be grouped together",
                    other,
                    name,
                    project_id,
                )
        unique = _clean_ids(ids)
        existing = self.projects.setdefault(name, [])
        for cid in unique:
            if cid not in existing:
                existing.append(cid)
            names = self.claims.setdefault(cid, [])
            if name not in names:
                names.append(name)
            # last write wins
            self.assignments[cid] = name
        logger.info("%s: +%d (total %d)", name, len(unique), len(existing))

    @property
    def conflicts(self) -> dict[str, set[str]]:
        """Conversation ids claimed by more than one project."""
        return {cid: set(names) for cid, names in self.claims.items() if len(names) > 1}

    def project_for(self, conversation_id: str) -> ProjectRef | None:
        name = self.assignments.get(conversation_id)
        if name is None:
            return None
        return ProjectRef(id=manual_project_id(name), name=name)

    def __len__(self) -> int:
        return len(self.assignments)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self.assignments


def log_conflicts(membership: ProjectMembership, limit: int = 10) -> None:
    conflicts = membership.conflicts
    if not conflicts:
        return
    logger.warning(
        "Found %d conversation id(s) that appear in multiple projects "
        "(last merged list wins)",
        len(conflicts),
    )
    for cid in list(conflicts)[:limit]:
        logger.warning(
            "  %s -> %s (assigned to %s)",
            cid,
            ", ".join(membership.claims[cid]),
            membership.assignments[cid],
        )
