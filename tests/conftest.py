"""Shared fixtures: an in-memory storage and a signed-up user."""

from decimal import Decimal

import pytest

from pocketledger.audit import AuditLogger
from pocketledger.config import Settings
from pocketledger.orchestrator import create_session_manager
from pocketledger.services.storage import (
    InMemoryKeyValueStorage,
    PartitionRepository,
    StorageError,
)


class FlakyStorage(InMemoryKeyValueStorage):
    """In-memory storage whose saves can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_saves = False
        self.fail_loads = False
        self.saved_keys: list[str] = []

    def save(self, key: str, data: bytes) -> None:
        if self.fail_saves:
            raise StorageError(f"disk full while writing {key}")
        self.saved_keys.append(key)
        super().save(key, data)

    def load(self, key: str):
        if self.fail_loads:
            raise StorageError(f"cannot read {key}")
        return super().load(key)


@pytest.fixture
def storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def repository(storage) -> PartitionRepository:
    return PartitionRepository(storage)


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def manager(storage, audit_logger):
    return create_session_manager(
        settings=Settings(),
        storage=storage,
        audit_logger=audit_logger,
        restore=False,
    )


@pytest.fixture
def store(manager):
    """Store for a freshly signed-up user starting with 10000."""
    manager.signup("Asha", "Rao", "asha@example.com", monthly_start_balance=Decimal("10000"))
    return manager.store
