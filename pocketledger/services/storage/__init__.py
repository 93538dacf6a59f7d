"""
Storage Services Package

Provides the abstract key/value interface, a local directory backend,
an in-memory backend and the per-user partition repository.
"""

from pocketledger.services.storage.interface import (
    InvalidKeyError,
    KeyValueStorage,
    StorageError,
)
from pocketledger.services.storage.file_store import FileKeyValueStorage
from pocketledger.services.storage.memory_store import InMemoryKeyValueStorage
from pocketledger.services.storage.partitions import (
    ASSETS,
    BUDGETS,
    MISC_BUDGET,
    PartitionRepository,
    partition_key,
)

__all__ = [
    # Interfaces
    "KeyValueStorage",
    # Exceptions
    "InvalidKeyError",
    "StorageError",
    # Backends
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
    # Partitions
    "ASSETS",
    "BUDGETS",
    "MISC_BUDGET",
    "PartitionRepository",
    "partition_key",
]
