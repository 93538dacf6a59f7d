"""
Audit Models for pocketledger

Every mutation of the financial store, every session transition and
every persistence failure produces an AuditEvent. Events are written to
the structured log; they are never edited after creation.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Budgets
    BUDGET_ADDED = "budget_added"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"

    # Expenses
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Assets
    ASSET_ADDED = "asset_added"
    ASSET_UPDATED = "asset_updated"
    ASSET_DELETED = "asset_deleted"
    EMI_PAYMENT_RECORDED = "emi_payment_recorded"
    EMI_PAYMENT_SKIPPED = "emi_payment_skipped"

    # Balance
    BALANCE_RECALCULATED = "balance_recalculated"
    MONTHLY_BALANCE_UPDATED = "monthly_balance_updated"

    # Session
    USER_SIGNED_UP = "user_signed_up"
    USER_LOGGED_IN = "user_logged_in"
    LOGIN_FAILED = "login_failed"
    USER_LOGGED_OUT = "user_logged_out"
    SESSION_RESTORED = "session_restored"

    # Persistence
    PARTITION_SAVED = "partition_saved"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"

    # Operations rejected by the store
    OPERATION_REJECTED = "operation_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'budget', 'asset', 'user')"
    )
    entity_id: Optional[str] = None

    # Which partition the event touched
    user_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_changed(AuditEventType.BUDGET_ADDED, "budget", budget.id, user_id)
        event = AuditEventBuilder.save_failed("assets", user_id, str(exc))
    """

    @staticmethod
    def entity_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Any,
        user_id: Optional[str],
        details: Optional[dict] = None,
    ) -> AuditEvent:
        action = event_type.value.rsplit("_", 1)[-1]
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=user_id,
            description=f"{entity_type.capitalize()} {action}",
            details=details or {},
        )

    @staticmethod
    def balance_recalculated(
        user_id: str,
        start_balance: str,
        total_spent: str,
        current_balance: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_RECALCULATED,
            severity=AuditSeverity.DEBUG,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"Current balance is now {current_balance}",
            details={
                "monthly_start_balance": start_balance,
                "total_spent": total_spent,
                "current_balance": current_balance,
            },
        )

    @staticmethod
    def session_changed(
        event_type: AuditEventType,
        user_id: Optional[str],
        description: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        severity = (
            AuditSeverity.WARNING
            if event_type == AuditEventType.LOGIN_FAILED
            else AuditSeverity.INFO
        )
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=description,
            details=details or {},
        )

    @staticmethod
    def emi_payment_skipped(asset_id: Any, user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMI_PAYMENT_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="asset",
            entity_id=str(asset_id),
            user_id=user_id,
            description="EMI payment ignored: asset has no loan details",
        )

    @staticmethod
    def partition_saved(partition: str, user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTITION_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="partition",
            entity_id=partition,
            user_id=user_id,
            description=f"Saved {partition}",
        )

    @staticmethod
    def save_failed(
        partition: str,
        user_id: Optional[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="partition",
            entity_id=partition,
            user_id=user_id,
            description=f"Failed to save {partition}; in-memory state kept",
            error_message=error_message,
        )

    @staticmethod
    def load_failed(
        partition: str,
        user_id: Optional[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="partition",
            entity_id=partition,
            user_id=user_id,
            description=f"Failed to load {partition}; using empty default",
            error_message=error_message,
        )

    @staticmethod
    def operation_rejected(
        operation: str,
        reason: str,
        user_id: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            description=f"{operation} rejected",
            error_message=reason,
            details={"operation": operation},
        )
