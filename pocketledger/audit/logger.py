"""
Audit Logger

DESIGN DECISION: Every significant action in the store is logged.
This provides:
1. Traceability of mutations per user partition
2. Visibility of persistence failures that do not interrupt the session
3. A short in-memory history the presentation layer can show

The audit logger:
- Is synchronous, like the store that calls it
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

import logging
import sys
from collections import deque
from typing import Any, Callable, Optional

import structlog

from pocketledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_level: str = "INFO") -> None:
    """
    Route structlog output through the stdlib root logger.

    Called by the application factory, not at import, so importing the
    package leaves the host application's logging alone.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    logging.getLogger("pocketledger").setLevel(log_level.upper())
    _configure_structlog()


# Configure structlog for local logging
_configure_structlog()


class AuditLogger:
    """
    Central audit logging service.

    Logs every event to the structured log and keeps the most recent
    events in memory.
    """

    def __init__(self, history_size: int = 200):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("pocketledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the structured log write failed.
        """
        self._history.append(event)
        log_dict = event.to_log_dict()
        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never break a store operation
            return False
        return True

    def recent_events(
        self,
        limit: int = 50,
        event_type: Optional[AuditEventType] = None,
    ) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = [
            e for e in reversed(self._history)
            if event_type is None or e.event_type == event_type
        ]
        return events[:limit]

    def _emit(self, build: Callable[..., AuditEvent], *args: Any, **kwargs: Any) -> bool:
        """Build an event and log it; a malformed event is dropped, not raised."""
        try:
            event = build(*args, **kwargs)
        except Exception:
            # Logging must never break a store operation
            return False
        return self.log(event)

    def log_entity_changed(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Any,
        user_id: Optional[str],
        **details: Any,
    ) -> None:
        self._emit(
            AuditEventBuilder.entity_changed,
            event_type, entity_type, entity_id, user_id, details,
        )

    def log_balance_recalculated(
        self,
        user_id: str,
        start_balance: Any,
        total_spent: Any,
        current_balance: Any,
    ) -> None:
        self._emit(
            AuditEventBuilder.balance_recalculated,
            user_id=user_id,
            start_balance=str(start_balance),
            total_spent=str(total_spent),
            current_balance=str(current_balance),
        )

    def log_session(
        self,
        event_type: AuditEventType,
        user_id: Optional[str],
        description: str,
        **details: Any,
    ) -> None:
        self._emit(AuditEventBuilder.session_changed, event_type, user_id, description, details)

    def log_emi_skipped(self, asset_id: Any, user_id: Optional[str]) -> None:
        self._emit(AuditEventBuilder.emi_payment_skipped, asset_id, user_id)

    def log_partition_saved(self, partition: str, user_id: Optional[str]) -> None:
        self._emit(AuditEventBuilder.partition_saved, partition, user_id)

    def log_save_failed(
        self,
        partition: str,
        user_id: Optional[str],
        error_message: str,
    ) -> None:
        self._emit(AuditEventBuilder.save_failed, partition, user_id, error_message)

    def log_load_failed(
        self,
        partition: str,
        user_id: Optional[str],
        error_message: str,
    ) -> None:
        self._emit(AuditEventBuilder.load_failed, partition, user_id, error_message)

    def log_rejected(
        self,
        operation: str,
        reason: str,
        user_id: Optional[str],
    ) -> None:
        self._emit(AuditEventBuilder.operation_rejected, operation, reason, user_id)
