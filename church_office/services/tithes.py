"""
Tithe Registry

Tithes (`diezmos`) of a period carry a running number, 1, 2, 3...

DESIGN DECISION: The next number is computed client-side as the
period's highest number plus one. Two operators saving at the same
instant could get the same number; with one operator per church this
is accepted, and there is no unique constraint on (mes_id, numero).
"""

from decimal import Decimal
from typing import Any, Optional

from church_office.models.records import TitheEntry
from church_office.services.base import RecordRepository


class TitheRepository(RecordRepository[TitheEntry]):
    table = "diezmos"
    model = TitheEntry
    period_scoped = True
    order_by = "numero"

    async def get_next_number(self, period_id: Optional[str] = None) -> int:
        """Highest number in the period plus one; 1 for an empty period."""
        period_id = await self._resolve_period(period_id)
        if period_id is None:
            return 1
        rows = await self._gateway.select(
            self.table,
            {"mes_id": period_id},
            order_by="numero",
            descending=True,
            limit=1,
        )
        return rows[0]["numero"] + 1 if rows else 1

    async def _prepare(self, fields: dict[str, Any], period_id: Optional[str]) -> dict[str, Any]:
        if fields.get("numero") in (None, ""):
            fields["numero"] = await self.get_next_number(period_id)
        return fields

    async def get_total(self, period_id: Optional[str] = None) -> Decimal:
        """Sum of all tithes in the period."""
        return sum(
            (entry.valor for entry in await self.list(period_id)),
            Decimal("0"),
        )
