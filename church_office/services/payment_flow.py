"""
Payment Flow

Named tables of payment lines (date, beneficiaries, detail, amount),
independent of the accounting period, and their HTML export.

DESIGN DECISION: The export is a standalone HTML document, not a PDF.
The operator opens it in a browser and prints it.
"""

import html
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from church_office.activity import ActivityLogger
from church_office.errors import NotFoundError
from church_office.models.records import PaymentRow, PaymentTable, PaymentTableWithRows
from church_office.services.base import RecordRepository
from church_office.services.storage import PersistenceGateway


class PaymentTableRepository(RecordRepository[PaymentTable]):
    table = "payment_tables"
    model = PaymentTable
    order_by = "created_at"
    descending = True
    client_ids = True


class PaymentRowRepository(RecordRepository[PaymentRow]):
    table = "payment_rows"
    model = PaymentRow
    order_by = "fecha"
    client_ids = True

    async def list_for_table(self, table_id: str) -> list[PaymentRow]:
        rows = await self._gateway.select(
            self.table, {"table_id": table_id}, order_by=self.order_by
        )
        return [self.model(**row) for row in rows]


# =============================================================================
# EXPORT
# =============================================================================

def format_currency(value: Decimal) -> str:
    """
    Colombian peso formatting: "$ 1.234.567", decimals only when present
    ("$ 1.234,5").
    """
    amount = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    whole, _, cents = f"{abs(amount):.2f}".partition(".")
    grouped = f"{int(whole):,}".replace(",", ".")
    cents = cents.rstrip("0")
    return f"{sign}$ {grouped}" + (f",{cents}" if cents else "")


def export_filename(name: str) -> str:
    """File name for an exported table: non-alphanumerics become "_"."""
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE) + ".html"


def _format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def render_payment_table_html(table: PaymentTableWithRows) -> str:
    """Standalone HTML document for one payment table."""
    e = html.escape
    body_rows = "".join(
        f"""
            <tr>
              <td>{_format_date(row.fecha)}</td>
              <td>{e(row.beneficiarios)}</td>
              <td>{e(row.detalle)}</td>
              <td class="text-right">{format_currency(row.valor)}</td>
            </tr>"""
        for row in table.rows
    )
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{e(table.table.nombre)}</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 20px; }}
    .header {{ text-align: center; margin-bottom: 30px; }}
    .table {{ width: 100%; border-collapse: collapse; margin-bottom: 20px; }}
    .table th, .table td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
    .table th {{ background-color: #f2f2f2; font-weight: bold; }}
    .total-row {{ background-color: #f9f9f9; font-weight: bold; }}
    .text-right {{ text-align: right; }}
  </style>
</head>
<body>
  <div class="header">
    <h1>{e(table.table.nombre)}</h1>
    <p>Fecha de creación: {_format_date(table.table.fecha_creacion)}</p>
    <p>Total de filas: {len(table.rows)}</p>
  </div>
  <table class="table">
    <thead>
      <tr>
        <th>Fecha</th>
        <th>Beneficiarios</th>
        <th>Detalle</th>
        <th class="text-right">Valor</th>
      </tr>
    </thead>
    <tbody>{body_rows}
      <tr class="total-row">
        <td colspan="3"><strong>TOTAL</strong></td>
        <td class="text-right"><strong>{format_currency(table.total)}</strong></td>
      </tr>
    </tbody>
  </table>
</body>
</html>
"""


# =============================================================================
# SERVICE
# =============================================================================

class PaymentFlowService:
    """Payment tables, their rows, totals and export."""

    def __init__(
        self,
        tables: PaymentTableRepository,
        rows: PaymentRowRepository,
        activity: Optional[ActivityLogger] = None,
    ):
        self.tables = tables
        self.rows = rows
        self._activity = activity or ActivityLogger()

    @classmethod
    def create(
        cls,
        gateway: PersistenceGateway,
        activity: Optional[ActivityLogger] = None,
    ) -> "PaymentFlowService":
        return cls(
            tables=PaymentTableRepository(gateway, activity=activity),
            rows=PaymentRowRepository(gateway, activity=activity),
            activity=activity,
        )

    async def create_table(self, nombre: str) -> PaymentTable:
        return await self.tables.create({"nombre": nombre})

    async def rename_table(self, table_id: str, nombre: str) -> PaymentTable:
        return await self.tables.update(table_id, {"nombre": nombre})

    async def delete_table(self, table_id: str) -> None:
        """Delete a table and all of its rows."""
        await self.rows.delete_where(table_id=table_id)
        await self.tables.delete(table_id)

    async def add_row(self, table_id: str, fields: dict[str, Any]) -> PaymentRow:
        if await self.tables.get(table_id) is None:
            raise NotFoundError(f"payment table {table_id} not found")
        return await self.rows.create({**fields, "table_id": table_id})

    async def update_row(self, row_id: str, fields: dict[str, Any]) -> PaymentRow:
        return await self.rows.update(row_id, fields)

    async def delete_row(self, row_id: str) -> None:
        await self.rows.delete(row_id)

    async def get_table(self, table_id: str) -> PaymentTableWithRows:
        table = await self.tables.get(table_id)
        if table is None:
            raise NotFoundError(f"payment table {table_id} not found")
        return PaymentTableWithRows(table=table, rows=await self.rows.list_for_table(table_id))

    async def get_all_tables(self) -> list[PaymentTableWithRows]:
        """Every table, newest first, each with its rows by date."""
        tables = await self.tables.list()
        rows = await self.rows.list()
        return [
            PaymentTableWithRows(
                table=table,
                rows=[row for row in rows if row.table_id == table.id],
            )
            for table in tables
        ]

    async def get_total(self, table_id: str) -> Decimal:
        return (await self.get_table(table_id)).total

    async def export_html(self, table_id: str) -> tuple[str, str]:
        """
        Render a table for download.

        Returns:
            (file name, HTML document)
        """
        table = await self.get_table(table_id)
        filename = export_filename(table.table.nombre)
        self._activity.log_table_exported(table_id, filename, len(table.rows))
        return filename, render_payment_table_html(table)
