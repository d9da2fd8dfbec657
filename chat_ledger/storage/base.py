from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Whole-object storage used for reading exports and writing outputs."""

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Write data to the given key in a single replace-in-place step."""
        ...

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Read data from the given key."""
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if the key exists."""
        ...

    @abstractmethod
    def resolve_uri(self, key: str) -> str:
        """Return a URI suitable for external consumption."""
        ...
