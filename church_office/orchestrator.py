"""
Application Wiring for Church Office

This module builds every service once, on one gateway, so the screens
only ever receive ready-made components.

DESIGN DECISION: The wiring enforces the boundaries:
- Screens use services, never the gateway
- Every period-scoped service shares the same PeriodLifecycleManager,
  so the active period and the "period exists" cache are per session
- Every service logs through the same ActivityLogger
"""

from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from church_office.activity import ActivityLogger
from church_office.config import get_settings
from church_office.queries import PeriodSummaryBuilder
from church_office.services import (
    AttendanceCellRepository,
    AttendanceColumnRepository,
    AttendanceDetailRepository,
    AttendanceService,
    CensusService,
    DatabaseClient,
    DiscipleshipAttendanceRepository,
    DiscipleshipService,
    ExpenseRepository,
    IncomeRepository,
    InMemoryGateway,
    InventoryService,
    LedgerService,
    MeetingDateRepository,
    ParticipantRepository,
    PaymentFlowService,
    PeriodLifecycleManager,
    PersistenceGateway,
    SqlAlchemyGateway,
    TitheRepository,
)
from church_office.services.storage.schema import utcnow
from church_office.session import SessionGate
from church_office.validation import RecordValidator


class AppComponents:
    """Everything a front end needs, built on one gateway."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        activity: ActivityLogger,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.gateway = gateway
        self.activity = activity
        validator = RecordValidator()

        self.periods = PeriodLifecycleManager(gateway, activity=activity, clock=clock)

        def scoped(repository_class):
            return repository_class(
                gateway, periods=self.periods, validator=validator, activity=activity
            )

        self.ledger = LedgerService(
            income=scoped(IncomeRepository),
            expenses=scoped(ExpenseRepository),
        )
        self.tithes = scoped(TitheRepository)
        self.attendance = AttendanceService(
            details=scoped(AttendanceDetailRepository),
            columns=scoped(AttendanceColumnRepository),
            cells=scoped(AttendanceCellRepository),
        )
        self.discipleship = DiscipleshipService(
            participants=ParticipantRepository(gateway, validator=validator, activity=activity),
            dates=scoped(MeetingDateRepository),
            attendance=scoped(DiscipleshipAttendanceRepository),
        )
        self.inventory = InventoryService.create(gateway, activity=activity)
        self.payment_flow = PaymentFlowService.create(gateway, activity=activity)
        self.census = CensusService.create(gateway, activity=activity)
        self.summary = PeriodSummaryBuilder(
            periods=self.periods,
            ledger=self.ledger,
            tithes=self.tithes,
            attendance=self.attendance,
            discipleship=self.discipleship,
        )

    def session_gate(self, store) -> SessionGate:
        """A session gate over one client's session store."""
        return SessionGate(store, activity=self.activity)


def create_app_components(
    use_database: bool = True,
    gateway: Optional[PersistenceGateway] = None,
    clock: Callable[[], datetime] = utcnow,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_database: Whether to connect to the configured database.
                      Set to False to run on the in-memory gateway.
        gateway: Use this gateway instead of building one
        clock: Returns "now" for the period lifecycle

    Returns:
        AppComponents
    """
    activity = ActivityLogger()

    if gateway is None:
        if use_database:
            try:
                client = DatabaseClient(get_settings().database)
                gateway = SqlAlchemyGateway(client)
            except PydanticValidationError as e:
                # Database not configured - continue in memory
                activity.log_storage_error("configure_database", e)
                gateway = InMemoryGateway()
        else:
            gateway = InMemoryGateway()

    return AppComponents(gateway, activity, clock=clock)
