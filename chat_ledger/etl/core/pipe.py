from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from chat_ledger.etl.core.types import ConversationResult

Record = TypeVar("Record", bound=BaseModel)


class Pipe(ABC, Generic[Record]):
    """Base class for export-format pipes.

    A Pipe encapsulates the **Extract** and **Transform** steps for one
    export format.  Subclasses implement :meth:`extract_record` (validate
    one raw record) and :meth:`transform` (derive messages, entries and
    project for it).

    Writing output is handled separately by the facade.
    """

    provider: ClassVar[str]
    """Provider identifier (e.g. ``"chatgpt"``)."""

    record_schema: ClassVar[type[BaseModel]]
    """Runtime-accessible record type.  Must match the type parameter ``Record``."""

    @abstractmethod
    def extract_record(self, index: int, raw: Any) -> Record | None:
        """Validate one raw record; ``None`` means it cannot be processed."""
        ...

    def extract(self, records: Sequence[Any]) -> Iterator[tuple[Any, Record]]:
        """Yield ``(raw, record)`` pairs for every processable record.

        Not intended to be overridden.  Unprocessable records are counted
        in :attr:`skipped_count`.
        """
        self.skipped_count = 0
        for index, raw in enumerate(records):
            record = self.extract_record(index, raw)
            if record is None:
                self.skipped_count += 1
                continue
            yield raw, record

    @abstractmethod
    def transform(self, raw: Any, record: Record) -> ConversationResult:
        """Convert one extracted record into a :class:`ConversationResult`."""
        ...

    def run(self, records: Sequence[Any]) -> Iterator[ConversationResult]:
        """Run the extract -> transform loop.

        After the iterator is fully consumed, :attr:`extracted_count`,
        :attr:`skipped_count` and :attr:`transformed_count` reflect the
        totals.
        """
        self.extracted_count: int = 0
        self.transformed_count: int = 0
        for raw, record in self.extract(records):
            self.extracted_count += 1
            result = self.transform(raw, record)
            self.transformed_count += 1
            yield result
