"""In-memory storage backend for tests and throwaway sessions."""

from typing import Optional

from pocketledger.services.storage.interface import KeyValueStorage


class InMemoryKeyValueStorage(KeyValueStorage):

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._data: dict[str, bytes] = dict(initial or {})

    def load(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)
