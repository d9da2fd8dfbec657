"""Pydantic schemas for raw ChatGPT export data.

Export files are not contractually stable, so every optional field is
coerced to ``None`` when it has the wrong type instead of failing
validation.  ``content`` and the timestamps stay untyped: the content
extractor and the time normalizer own those shapes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Raw archive schemas (model the nested JSON inside conversations.json)
# ---------------------------------------------------------------------------


class ExportAuthor(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> str | None:
        return _str_or_none(value)


class ExportMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    author: ExportAuthor | None = None
    content: Any = None
    create_time: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str | None:
        return _str_or_none(value)

    @field_validator("author", mode="before")
    @classmethod
    def _coerce_author(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @property
    def role(self) -> str | None:
        return self.author.role if self.author else None


class ExportNode(BaseModel):
    """One node of the older ``mapping`` graph encoding."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    message: ExportMessage | None = None
    parent: str | None = None
    children: list[str] = []

    @field_validator("id", "parent", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> str | None:
        return _str_or_none(value)

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None

    @field_validator("children", mode="before")
    @classmethod
    def _coerce_children(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [c for c in value if isinstance(c, str)]


class ExportProjectTag(BaseModel):
    """UI "Projects" tag. ``name`` may be absent in some exports."""

    id: str
    name: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str | None:
        return _str_or_none(value)


class ExportConversation(BaseModel):
    """Conversation-level fields shared by both encodings.

    ``messages`` and ``mapping`` are kept raw: which of the two is
    authoritative is decided once, by :func:`detect_encoding`.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    title: str | None = None
    create_time: Any = None
    update_time: Any = None
    messages: Any = None
    mapping: Any = None
    project: ExportProjectTag | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str | None:
        return _str_or_none(value)

    @field_validator("project", mode="before")
    @classmethod
    def _coerce_project(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get("id"), str):
            return value
        return None
