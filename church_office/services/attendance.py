"""
Attendance Grid

Per-period tallies: rows (`asistencia_detalles`, e.g. "HOMBRES ASIST.
GRAL"), columns (`asistencia_columnas`, usually the service dates) and
the counts at each intersection (`asistencia_datos`).

Counts are sparse: a zero or empty count deletes the cell.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from church_office.models.records import (
    AttendanceCell,
    AttendanceColumn,
    AttendanceDetail,
    AttendanceGrid,
)
from church_office.services.base import CellRepository, RecordRepository


DEFAULT_DETAILS = [
    "HOMBRES ASIST. GRAL",
    "MUJERES ASIST. GRAL.",
    "NIÑOS EN AUDITORIO",
    "HER. BABYS 0-3",
    "HER. EXPLORADORES 3-5",
    "HER. KIDS 6-11",
    "HOMBRES NUEVOS ACEPT. CRISTO",
    "MUJERES NUEVOS ACEPT. CRISTO",
    "JOVENES NUEVOS ACEPT. CRISTO (13-18 AÑOS)",
]


class _OrderedRepository(RecordRepository):
    """Rows and columns are appended after the last one."""

    period_scoped = True
    order_by = "orden"

    async def next_order(self, period_id: Optional[str] = None) -> int:
        period_id = await self._resolve_period(period_id)
        if period_id is None:
            return 0
        rows = await self._gateway.select(
            self.table, {"mes_id": period_id}, order_by="orden", descending=True, limit=1
        )
        return rows[0]["orden"] + 1 if rows else 0

    async def _prepare(self, fields: dict[str, Any], period_id: Optional[str]) -> dict[str, Any]:
        if fields.get("orden") is None:
            fields["orden"] = await self.next_order(period_id)
        return fields


class AttendanceDetailRepository(_OrderedRepository):
    table = "asistencia_detalles"
    model = AttendanceDetail


class AttendanceColumnRepository(_OrderedRepository):
    table = "asistencia_columnas"
    model = AttendanceColumn


class AttendanceCellRepository(CellRepository[AttendanceCell]):
    table = "asistencia_datos"
    model = AttendanceCell
    key_columns = ("detalle_id", "columna_id")
    value_column = "cantidad"

    def is_empty(self, value: Any) -> bool:
        if value is None or value == "":
            return True
        try:
            return Decimal(str(value)) == 0
        except InvalidOperation:
            # Left to the model to reject
            return False


class AttendanceService:
    """The attendance grid screen's operations."""

    def __init__(
        self,
        details: AttendanceDetailRepository,
        columns: AttendanceColumnRepository,
        cells: AttendanceCellRepository,
    ):
        self.details = details
        self.columns = columns
        self.cells = cells

    async def get_grid(self, period_id: Optional[str] = None) -> AttendanceGrid:
        return AttendanceGrid(
            details=await self.details.list(period_id),
            columns=await self.columns.list(period_id),
            cells=await self.cells.list(period_id),
        )

    async def initialize_default_details(
        self,
        period_id: Optional[str] = None,
    ) -> list[AttendanceDetail]:
        """
        Give a new month the standard row labels.

        Does nothing when the period already has rows.
        """
        existing = await self.details.list(period_id)
        if existing:
            return existing
        return [
            await self.details.create({"nombre": name, "orden": index}, period_id=period_id)
            for index, name in enumerate(DEFAULT_DETAILS)
        ]

    async def add_detail(self, nombre: str, *, period_id: Optional[str] = None) -> AttendanceDetail:
        return await self.details.create({"nombre": nombre}, period_id=period_id)

    async def add_column(self, nombre: str, *, period_id: Optional[str] = None) -> AttendanceColumn:
        return await self.columns.create({"nombre": nombre}, period_id=period_id)

    async def rename_detail(self, detail_id: int, nombre: str) -> AttendanceDetail:
        return await self.details.update(detail_id, {"nombre": nombre})

    async def rename_column(self, column_id: int, nombre: str) -> AttendanceColumn:
        return await self.columns.update(column_id, {"nombre": nombre})

    async def delete_detail(self, detail_id: int) -> None:
        """Delete a row and every count in it."""
        await self.cells.delete_where(detalle_id=detail_id)
        await self.details.delete(detail_id)

    async def delete_column(self, column_id: int) -> None:
        """Delete a column and every count in it."""
        await self.cells.delete_where(columna_id=column_id)
        await self.columns.delete(column_id)

    async def set_count(
        self,
        detail_id: int,
        column_id: int,
        cantidad: Optional[int],
        *,
        period_id: Optional[str] = None,
    ) -> Optional[AttendanceCell]:
        """Write a count; zero or None clears the cell."""
        return await self.cells.upsert(period_id, detail_id, column_id, cantidad)
