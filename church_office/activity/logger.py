"""
Activity Logger

DESIGN DECISION: Every significant action in the system is logged
as a structured JSON line. This provides:
1. Debugging capability
2. A trail of period rollovers and record writes
3. Visibility into storage failures the operator only saw as a
   generic message

The activity logger:
- Writes locally only (nothing is persisted to the database)
- Is synchronous, since a log line never waits on I/O we own
- Maps event severity to the log level
"""

from typing import Any, Optional

import structlog

from church_office.models.activity import ActivityEvent, ActivityEventBuilder


# Configure structlog for local logging
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


class ActivityLogger:
    """
    Central activity logging service.

    Services receive one instance and call the typed helpers below;
    `events` keeps what was logged during this process when
    `keep_history` is on (used by tests and the debug panel).
    """

    def __init__(self, name: str = "church_office", keep_history: bool = False):
        self._logger = structlog.get_logger(name)
        self._keep_history = keep_history
        self.events: list[ActivityEvent] = []

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("activity_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("activity_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        if self._keep_history:
            self.events.append(event)

    def log_period_started(
        self,
        period_id: str,
        name: str,
        previous_period_id: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.period_started(period_id, name, previous_period_id))

    def log_period_closed(self, period_id: str, name: str) -> None:
        self.log(ActivityEventBuilder.period_closed(period_id, name))

    def log_period_created_implicitly(self, period_id: str, status: str) -> None:
        self.log(ActivityEventBuilder.period_created_implicitly(period_id, status))

    def log_configuration_updated(self, period_id: str, lists: dict[str, list[str]]) -> None:
        self.log(ActivityEventBuilder.configuration_updated(period_id, lists))

    def log_record_created(
        self,
        record_type: str,
        record_id: Any,
        period_id: Optional[str] = None,
    ) -> None:
        self.log(ActivityEventBuilder.record_created(record_type, record_id, period_id))

    def log_record_updated(self, record_type: str, record_id: Any, fields: list[str]) -> None:
        self.log(ActivityEventBuilder.record_updated(record_type, record_id, fields))

    def log_record_deleted(self, record_type: str, record_id: Any) -> None:
        self.log(ActivityEventBuilder.record_deleted(record_type, record_id))

    def log_validation_failed(self, record_type: str, issues: list[dict]) -> None:
        self.log(ActivityEventBuilder.validation_failed(record_type, issues))

    def log_login(self, cedula: str, name: Optional[str], succeeded: bool) -> None:
        """Log a login attempt."""
        if succeeded:
            self.log(ActivityEventBuilder.login_succeeded(cedula, name or ""))
        else:
            self.log(ActivityEventBuilder.login_failed(cedula))

    def log_logout(self, cedula: Optional[str]) -> None:
        self.log(ActivityEventBuilder.logout(cedula))

    def log_table_exported(self, table_id: str, filename: str, row_count: int) -> None:
        self.log(ActivityEventBuilder.table_exported(table_id, filename, row_count))

    def log_storage_error(
        self,
        operation: str,
        error: Exception,
        details: Optional[dict] = None,
    ) -> None:
        """Log a storage failure caught at a screen."""
        self.log(ActivityEventBuilder.storage_error(
            operation=operation,
            error_message=f"{type(error).__name__}: {error}",
            details=details,
        ))
