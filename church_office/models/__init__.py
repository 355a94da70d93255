"""
Data Models Package

This package contains all Pydantic models used in the Church Office system.
All data flowing through the services must conform to these schemas.
"""

from church_office.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from church_office.models.census import (
    CENSUS_LISTS,
    CensusChurchRecord,
    CensusConfiguration,
    CensusPersonalRecord,
)
from church_office.models.period import (
    CONFIGURATION_LISTS,
    MONTH_NAMES,
    Period,
    PeriodConfiguration,
    PeriodState,
    PeriodStatus,
    month_bounds,
    parse_period_id,
    period_display_name,
    period_id_for,
)
from church_office.models.records import (
    INVENTORY_LISTS,
    AttendanceCell,
    AttendanceColumn,
    AttendanceDetail,
    AttendanceGrid,
    AttendanceStatus,
    DiscipleshipAttendance,
    DiscipleshipDate,
    DiscipleshipParticipant,
    DiscipleshipSheet,
    ExpenseEntry,
    GlobalConfiguration,
    IncomeEntry,
    InventoryItem,
    LedgerEntry,
    LedgerKind,
    LedgerTotals,
    PaymentRow,
    PaymentTable,
    PaymentTableWithRows,
    RecordModel,
    StatementLine,
    TitheEntry,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
    # Census models
    "CENSUS_LISTS",
    "CensusChurchRecord",
    "CensusConfiguration",
    "CensusPersonalRecord",
    # Period models
    "CONFIGURATION_LISTS",
    "MONTH_NAMES",
    "Period",
    "PeriodConfiguration",
    "PeriodState",
    "PeriodStatus",
    "month_bounds",
    "parse_period_id",
    "period_display_name",
    "period_id_for",
    # Module records
    "INVENTORY_LISTS",
    "AttendanceCell",
    "AttendanceColumn",
    "AttendanceDetail",
    "AttendanceGrid",
    "AttendanceStatus",
    "DiscipleshipAttendance",
    "DiscipleshipDate",
    "DiscipleshipParticipant",
    "DiscipleshipSheet",
    "ExpenseEntry",
    "GlobalConfiguration",
    "IncomeEntry",
    "InventoryItem",
    "LedgerEntry",
    "LedgerKind",
    "LedgerTotals",
    "PaymentRow",
    "PaymentTable",
    "PaymentTableWithRows",
    "RecordModel",
    "StatementLine",
    "TitheEntry",
    "ValidationIssue",
    "ValidationResult",
]
