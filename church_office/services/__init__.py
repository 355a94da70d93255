"""Services package."""

from church_office.services.attendance import (
    AttendanceCellRepository,
    AttendanceColumnRepository,
    AttendanceDetailRepository,
    AttendanceService,
)
from church_office.services.base import CellRepository, RecordRepository
from church_office.services.census import (
    CensusChurchRepository,
    CensusPersonalRepository,
    CensusService,
)
from church_office.services.discipleship import (
    DiscipleshipAttendanceRepository,
    DiscipleshipService,
    MeetingDateRepository,
    ParticipantRepository,
)
from church_office.services.inventory import (
    InventoryRepository,
    InventoryService,
    OptionListStore,
)
from church_office.services.ledger import ExpenseRepository, IncomeRepository, LedgerService
from church_office.services.payment_flow import (
    PaymentFlowService,
    PaymentRowRepository,
    PaymentTableRepository,
    export_filename,
    format_currency,
    render_payment_table_html,
)
from church_office.services.periods import PeriodLifecycleManager
from church_office.services.storage import (
    ConnectionError,
    DatabaseClient,
    DuplicateError,
    InMemoryGateway,
    NotFoundError,
    PersistenceGateway,
    SqlAlchemyGateway,
    StorageError,
)
from church_office.services.tithes import TitheRepository

__all__ = [
    # Period lifecycle
    "PeriodLifecycleManager",
    # Record access
    "CellRepository",
    "RecordRepository",
    "AttendanceCellRepository",
    "AttendanceColumnRepository",
    "AttendanceDetailRepository",
    "AttendanceService",
    "CensusChurchRepository",
    "CensusPersonalRepository",
    "CensusService",
    "DiscipleshipAttendanceRepository",
    "DiscipleshipService",
    "MeetingDateRepository",
    "ParticipantRepository",
    "InventoryRepository",
    "InventoryService",
    "OptionListStore",
    "ExpenseRepository",
    "IncomeRepository",
    "LedgerService",
    "PaymentFlowService",
    "PaymentRowRepository",
    "PaymentTableRepository",
    "TitheRepository",
    # Export
    "export_filename",
    "format_currency",
    "render_payment_table_html",
    # Storage services
    "ConnectionError",
    "DatabaseClient",
    "DuplicateError",
    "InMemoryGateway",
    "NotFoundError",
    "PersistenceGateway",
    "SqlAlchemyGateway",
    "StorageError",
]
