"""
Abstract Storage Interface

DESIGN DECISION: The store persists through a minimal key/value byte
interface. This allows us to:
1. Use a local directory on a real device
2. Use in-memory storage for testing
3. Keep encoding and key layout out of the backends

Every save is a full replace of the value under a key. Backends must make
that replace atomic: a crash mid-write leaves the previous value intact.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract interface for namespaced byte storage.

    Keys are plain strings such as "budgets.<user_id>".
    """

    @abstractmethod
    def load(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under a key.

        Returns:
            The stored bytes, or None if nothing was ever saved

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: str, data: bytes) -> None:
        """
        Atomically replace the value stored under a key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if something was deleted
        """
        pass

    def exists(self, key: str) -> bool:
        return self.load(key) is not None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class InvalidKeyError(StorageError):
    """Key contains characters the backend cannot store safely."""
    pass
