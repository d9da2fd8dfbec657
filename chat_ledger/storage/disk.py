from __future__ import annotations

import os
import tempfile
from pathlib import Path

from chat_ledger.storage.base import StorageBackend


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once at import, before any write runs in a worker thread.
_FILE_MODE = 0o666 & ~_current_umask()


class DiskStorage(StorageBackend):
    """Local filesystem storage backend.

    Keys are paths relative to ``base_path``; an absolute key is used
    as-is, so callers can point at files anywhere on disk.
    """

    def __init__(self, base_path: str) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        return self._base / key

    # ---- interface ----

    def write(self, key: str, data: bytes) -> None:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Readers see either the old file or the complete new one.
        fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates 0600; match what a plain open() would give
            os.chmod(tmp, _FILE_MODE)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def read(self, key: str) -> bytes:
        return self._resolve(key).read_bytes()

    def exists(self, key: str) -> bool:
        return self._resolve(key).is_file()

    def resolve_uri(self, key: str) -> str:
        return self._resolve(key).resolve().as_uri()
