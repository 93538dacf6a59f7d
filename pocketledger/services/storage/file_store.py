"""
Local Directory Storage Implementation

DESIGN DECISION: Each key is one JSON file in the data directory.
Non-technical users can open the files and read their data, and a
backup is a copy of the directory.

Writes go to a temporary file in the same directory, are fsynced, and
then renamed over the target with os.replace. A crash mid-write leaves
the previous file untouched. Transient OS errors are retried with
tenacity before the save is reported as failed.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from pocketledger.services.storage.interface import (
    InvalidKeyError,
    KeyValueStorage,
    StorageError,
)


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._-]*$")


class FileKeyValueStorage(KeyValueStorage):
    """Stores each key as <data_dir>/<key>.json."""

    suffix = ".json"

    def __init__(
        self,
        data_dir: Path,
        retry_attempts: int = 3,
        retry_max_wait: float = 2.0,
    ):
        self._data_dir = Path(data_dir)
        self._retry_attempts = retry_attempts
        self._retry_max_wait = retry_max_wait

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or ".." in key:
            raise InvalidKeyError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{self.suffix}"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=0.1, max=self._retry_max_wait),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def _write_atomic(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def load(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def save(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        try:
            for attempt in self._retrying():
                with attempt:
                    self._write_atomic(path, data)
        except OSError as e:
            raise StorageError(f"Failed to save {key}: {e}") from e

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        if not self._data_dir.exists():
            return []
        return sorted(
            p.name[: -len(self.suffix)]
            for p in self._data_dir.iterdir()
            if p.is_file() and p.name.endswith(self.suffix) and not p.name.startswith(".")
        )
