"""Services package."""

from pocketledger.services.storage import (
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
    InvalidKeyError,
    KeyValueStorage,
    PartitionRepository,
    StorageError,
)

__all__ = [
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
    "InvalidKeyError",
    "KeyValueStorage",
    "PartitionRepository",
    "StorageError",
]
