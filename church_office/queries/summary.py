"""
Period Summary

DESIGN DECISION: The month overview is computed from stored records
only, on demand. Nothing is cached or denormalized, so a summary can
never disagree with the module screens.

Read-only: nothing here writes.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from church_office.models.period import Period
from church_office.services.attendance import AttendanceService
from church_office.services.discipleship import DiscipleshipService
from church_office.services.ledger import LedgerService
from church_office.services.periods import PeriodLifecycleManager
from church_office.services.tithes import TitheRepository


class PeriodSummary(BaseModel):
    """Totals per module for one period."""

    period: Period
    total_ingresos: Decimal = Decimal("0")
    ingresos_count: int = 0
    total_egresos: Decimal = Decimal("0")
    egresos_count: int = 0
    total_diezmos: Decimal = Decimal("0")
    diezmos_count: int = 0
    attendance_total: int = 0
    attendance_by_detail: dict[str, int] = Field(default_factory=dict)
    discipleship_dates: int = 0
    discipleship_present: int = 0

    @property
    def balance(self) -> Decimal:
        return self.total_ingresos - self.total_egresos


class SummaryError(Exception):
    """The requested period does not exist."""
    pass


class PeriodSummaryBuilder:
    """
    Builds the month detail view from the module services.

    GUARANTEES:
    - Only reads stored records
    - Missing module data counts as zero
    """

    def __init__(
        self,
        periods: PeriodLifecycleManager,
        ledger: LedgerService,
        tithes: TitheRepository,
        attendance: AttendanceService,
        discipleship: DiscipleshipService,
    ):
        self._periods = periods
        self._ledger = ledger
        self._tithes = tithes
        self._attendance = attendance
        self._discipleship = discipleship

    async def _find_period(self, period_id: Optional[str]) -> Period:
        if period_id is None:
            return await self._periods.require_active_period()
        active = await self._periods.get_active_period()
        if active is not None and active.id == period_id:
            return active
        for period in await self._periods.get_closed_periods():
            if period.id == period_id:
                return period
        raise SummaryError(f"Period {period_id} not found")

    async def build(self, period_id: Optional[str] = None) -> PeriodSummary:
        """Summarize a period (the active one by default)."""
        period = await self._find_period(period_id)

        income = await self._ledger.income.list(period.id)
        expenses = await self._ledger.expenses.list(period.id)
        tithes = await self._tithes.list(period.id)
        grid = await self._attendance.get_grid(period.id)
        sheet = await self._discipleship.get_sheet(period.id)

        return PeriodSummary(
            period=period,
            total_ingresos=sum((e.monto for e in income), Decimal("0")),
            ingresos_count=len(income),
            total_egresos=sum((e.monto for e in expenses), Decimal("0")),
            egresos_count=len(expenses),
            total_diezmos=sum((t.valor for t in tithes), Decimal("0")),
            diezmos_count=len(tithes),
            attendance_total=grid.grand_total,
            attendance_by_detail={
                detail.nombre: grid.row_total(detail.id) for detail in grid.details
            },
            discipleship_dates=len(sheet.dates),
            discipleship_present=sum(
                sheet.present_count_for_date(d.id) for d in sheet.dates
            ),
        )
