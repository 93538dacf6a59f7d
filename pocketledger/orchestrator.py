"""
Application Wiring for pocketledger

Builds the object graph the presentation layer talks to:

    Settings -> FileKeyValueStorage -> PartitionRepository
             -> SessionContext + FinancialStore + SessionManager

DESIGN DECISION: Components receive their collaborators explicitly.
Tests build the same graph over InMemoryKeyValueStorage.
"""

from functools import partial
from typing import Optional

from pocketledger.audit import AuditLogger, configure_logging
from pocketledger.config import Settings, get_settings
from pocketledger.models.budget import make_miscellaneous_budget
from pocketledger.services.storage import (
    FileKeyValueStorage,
    KeyValueStorage,
    PartitionRepository,
)
from pocketledger.store import FinancialStore, SessionContext, SessionManager


def create_session_manager(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    audit_logger: Optional[AuditLogger] = None,
    restore: bool = True,
) -> SessionManager:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to get_settings()
        storage: Defaults to a FileKeyValueStorage under settings.data_dir
        audit_logger: Defaults to a fresh AuditLogger
        restore: Resume the previous session if there is one

    Returns:
        The session manager; its .store is the FinancialStore
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if storage is None:
        storage = FileKeyValueStorage(
            settings.data_dir,
            retry_attempts=settings.storage_retry_attempts,
            retry_max_wait=settings.storage_retry_max_wait,
        )

    audit_logger = audit_logger or AuditLogger()
    repository = PartitionRepository(storage)
    store = FinancialStore(
        SessionContext(),
        repository,
        audit_logger=audit_logger,
        misc_budget_factory=partial(
            make_miscellaneous_budget,
            name=settings.misc_budget_name,
            icon=settings.misc_budget_icon,
            color=settings.misc_budget_color,
        ),
    )
    manager = SessionManager(store, repository, audit_logger=audit_logger)

    if restore:
        manager.restore()
    return manager
