"""
Activity Models for Church Office

Significant actions (period rollover, record writes, logins, storage
failures) are described by an ActivityEvent and written to the
structured log. This gives operators and developers a diagnostic
trail of what happened in a session.

DESIGN DECISION: Activity events are log lines, not stored rows.
They are a diagnostic channel, not a tamper-proof audit trail.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Period lifecycle
    PERIOD_STARTED = "period_started"
    PERIOD_CLOSED = "period_closed"
    PERIOD_CREATED_IMPLICITLY = "period_created_implicitly"
    CONFIGURATION_UPDATED = "configuration_updated"

    # Module records
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    VALIDATION_FAILED = "validation_failed"

    # Session gate
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"

    # Export
    TABLE_EXPORTED = "table_exported"

    # System events
    STORAGE_ERROR = "storage_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """
    A single activity event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'period', 'diezmos', 'session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    period_id: Optional[str] = Field(
        default=None,
        description="Period the action happened in, when scoped"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered directly by an operator?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "period_id": self.period_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.period_started(period_id, name, previous_id)
        event = ActivityEventBuilder.record_created("diezmos", record_id, period_id)
    """

    @staticmethod
    def period_started(
        period_id: str,
        name: str,
        previous_period_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PERIOD_STARTED,
            entity_type="period",
            entity_id=period_id,
            period_id=period_id,
            description=f"Period started: {name}",
            details={
                "previous_period_id": previous_period_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def period_closed(period_id: str, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PERIOD_CLOSED,
            entity_type="period",
            entity_id=period_id,
            period_id=period_id,
            description=f"Period closed: {name}",
            is_user_action=True,
        )

    @staticmethod
    def period_created_implicitly(period_id: str, status: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PERIOD_CREATED_IMPLICITLY,
            severity=ActivitySeverity.WARNING,
            entity_type="period",
            entity_id=period_id,
            period_id=period_id,
            description=f"Period {period_id} did not exist and was created",
            details={"status": status},
        )

    @staticmethod
    def configuration_updated(period_id: str, lists: dict[str, list[str]]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.CONFIGURATION_UPDATED,
            entity_type="configuration",
            entity_id=period_id,
            period_id=period_id,
            description="Period configuration updated",
            details={name: len(options) for name, options in lists.items()},
            is_user_action=True,
        )

    @staticmethod
    def record_created(
        record_type: str,
        record_id: Any,
        period_id: Optional[str] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_CREATED,
            entity_type=record_type,
            entity_id=str(record_id),
            period_id=period_id,
            description=f"{record_type} record created",
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        record_type: str,
        record_id: Any,
        fields: list[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_UPDATED,
            entity_type=record_type,
            entity_id=str(record_id),
            description=f"{record_type} record updated",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(record_type: str, record_id: Any) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_DELETED,
            entity_type=record_type,
            entity_id=str(record_id),
            description=f"{record_type} record deleted",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(record_type: str, issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.VALIDATION_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_type=record_type,
            description=f"{record_type} validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def login_succeeded(cedula: str, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN_SUCCEEDED,
            entity_type="session",
            entity_id=cedula,
            description=f"Operator logged in: {name}",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(cedula: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_type="session",
            entity_id=cedula,
            description="Login rejected",
            is_user_action=True,
        )

    @staticmethod
    def logout(cedula: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGOUT,
            entity_type="session",
            entity_id=cedula,
            description="Operator logged out",
            is_user_action=True,
        )

    @staticmethod
    def table_exported(table_id: str, filename: str, row_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TABLE_EXPORTED,
            entity_type="payment_tables",
            entity_id=table_id,
            description=f"Payment table exported as {filename}",
            details={"row_count": row_count},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STORAGE_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details=details or {},
        )
