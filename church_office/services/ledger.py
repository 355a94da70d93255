"""
Income / Expense Ledger

Income (`ingresos`) and expense (`egresos`) entries of a period, and
the combined statement the ledger screen shows.
"""

from decimal import Decimal
from typing import Any, Optional

from church_office.errors import MISSING_FIELDS_MESSAGE, ValidationError
from church_office.models.records import (
    ExpenseEntry,
    IncomeEntry,
    LedgerEntry,
    LedgerKind,
    LedgerTotals,
    StatementLine,
    ValidationIssue,
    ValidationResult,
)
from church_office.services.base import RecordRepository


class IncomeRepository(RecordRepository[IncomeEntry]):
    table = "ingresos"
    model = IncomeEntry
    period_scoped = True
    order_by = "fecha"
    descending = True


class ExpenseRepository(RecordRepository[ExpenseEntry]):
    table = "egresos"
    model = ExpenseEntry
    period_scoped = True
    order_by = "fecha"
    descending = True


def _sum(entries: list[LedgerEntry]) -> Decimal:
    return sum((entry.monto for entry in entries), Decimal("0"))


class LedgerService:
    """
    Both sides of the ledger behind one entry point.

    Screens pass the entry kind ("Ingreso" / "Egreso") along with the
    form; it selects the table.
    """

    def __init__(self, income: IncomeRepository, expenses: ExpenseRepository):
        self.income = income
        self.expenses = expenses

    def repository(self, tipo: Any) -> RecordRepository:
        """The repository for an entry kind."""
        try:
            kind = LedgerKind(tipo)
        except ValueError:
            raise ValidationError(ValidationResult(
                record_type="ledger",
                issues=[ValidationIssue(
                    field="tipo",
                    issue_type="missing" if not tipo else "invalid_value",
                    message=MISSING_FIELDS_MESSAGE,
                    severity="error",
                )],
            ))
        return self.income if kind == LedgerKind.INCOME else self.expenses

    async def create_entry(
        self,
        tipo: Any,
        fields: dict[str, Any],
        *,
        period_id: Optional[str] = None,
    ) -> LedgerEntry:
        return await self.repository(tipo).create(fields, period_id=period_id)

    async def update_entry(self, tipo: Any, record_id: int, fields: dict[str, Any]) -> LedgerEntry:
        return await self.repository(tipo).update(record_id, fields)

    async def delete_entry(self, tipo: Any, record_id: int) -> None:
        await self.repository(tipo).delete(record_id)

    async def statement(self, period_id: Optional[str] = None) -> list[StatementLine]:
        """Income and expense entries of a period, oldest first, tagged by kind."""
        lines = [
            StatementLine(tipo=LedgerKind.INCOME, entry=entry)
            for entry in await self.income.list(period_id)
        ] + [
            StatementLine(tipo=LedgerKind.EXPENSE, entry=entry)
            for entry in await self.expenses.list(period_id)
        ]
        lines.sort(key=lambda line: (line.entry.fecha, line.entry.id or 0))
        return lines

    async def totals(self, period_id: Optional[str] = None) -> LedgerTotals:
        return LedgerTotals(
            total_ingresos=_sum(await self.income.list(period_id)),
            total_egresos=_sum(await self.expenses.list(period_id)),
        )
