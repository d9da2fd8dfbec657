from chat_ledger.storage.base import StorageBackend
from chat_ledger.storage.disk import DiskStorage

__all__ = [
    "StorageBackend",
    "DiskStorage",
]
