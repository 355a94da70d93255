"""
Module Record Models

These models define the strict schemas for every record the
back-office modules store. Field names follow the database columns.

DESIGN DECISION: Records reject unknown fields (extra="forbid").
Free-form dictionaries coming from a screen are checked here,
at the boundary, instead of being passed through untyped.

Option values (ministry, category, detail...) are stored by name,
never by foreign key, so editing an option list never invalidates
existing records.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return str(uuid4())


class RecordModel(BaseModel):
    """Base for every stored record."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
        extra="forbid",
    )


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class LedgerKind(str, Enum):
    """Which side of the ledger an entry is on."""
    INCOME = "Ingreso"
    EXPENSE = "Egreso"


class AttendanceStatus(str, Enum):
    """
    Discipleship attendance marks.

    NONE is the "no data" sentinel: it is never stored, upserting it
    deletes the cell.
    """
    PRESENT = "A"
    ABSENT = "F"
    EXCUSED = "J"
    LATE = "AT"
    NONE = "none"


# =============================================================================
# INCOME / EXPENSE LEDGER
# =============================================================================

class LedgerEntry(RecordModel):
    """Common shape of income (`ingresos`) and expense (`egresos`) rows."""

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1, description="Owning period")
    concepto: Optional[str] = Field(default=None, max_length=200)
    monto: Decimal = Field(..., gt=0, decimal_places=2, description="Amount")
    fecha: date
    ministerio: str = Field(..., min_length=1)
    categoria_principal: str = Field(..., min_length=1)
    detalle: str = Field(..., min_length=1)
    observacion: Optional[str] = Field(default=None, max_length=1000)
    estado: Optional[str] = Field(default="Pendiente", max_length=50)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IncomeEntry(LedgerEntry):
    """An income row."""


class ExpenseEntry(LedgerEntry):
    """An expense row."""


class StatementLine(BaseModel):
    """One line of the combined income/expense statement."""

    tipo: LedgerKind
    entry: LedgerEntry


class LedgerTotals(BaseModel):
    """Income, expense and balance for one period."""

    total_ingresos: Decimal = Decimal("0")
    total_egresos: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.total_ingresos - self.total_egresos


# =============================================================================
# TITHES
# =============================================================================

class TitheEntry(RecordModel):
    """
    A tithe registry row (`diezmos`).

    `numero` is the running number within the period, starting at 1.
    """

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    numero: int = Field(..., ge=1)
    fecha: date
    donador: str = Field(..., min_length=1, max_length=200)
    valor: Decimal = Field(..., gt=0, decimal_places=2)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# ATTENDANCE GRID
# =============================================================================

class AttendanceDetail(RecordModel):
    """A row label of the attendance grid (e.g. "HOMBRES ASIST. GRAL")."""

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    nombre: str = Field(..., min_length=1, max_length=200)
    orden: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttendanceColumn(RecordModel):
    """A column of the attendance grid (usually a service date)."""

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    nombre: str = Field(..., min_length=1, max_length=200)
    orden: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttendanceCell(RecordModel):
    """A count at (detail, column). Zero counts are never stored."""

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    detalle_id: int
    columna_id: int
    cantidad: int = Field(..., ge=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttendanceGrid(BaseModel):
    """Everything the attendance screen needs for one period."""

    details: list[AttendanceDetail] = Field(default_factory=list)
    columns: list[AttendanceColumn] = Field(default_factory=list)
    cells: list[AttendanceCell] = Field(default_factory=list)

    def value(self, detalle_id: int, columna_id: int) -> int:
        for cell in self.cells:
            if cell.detalle_id == detalle_id and cell.columna_id == columna_id:
                return cell.cantidad
        return 0

    def row_total(self, detalle_id: int) -> int:
        return sum(self.value(detalle_id, column.id) for column in self.columns)

    def column_total(self, columna_id: int) -> int:
        return sum(self.value(detail.id, columna_id) for detail in self.details)

    @property
    def grand_total(self) -> int:
        return sum(cell.cantidad for cell in self.cells)


# =============================================================================
# DISCIPLESHIP
# =============================================================================

class DiscipleshipParticipant(RecordModel):
    """A discipleship participant. Participants are shared by all periods."""

    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DiscipleshipDate(RecordModel):
    """A meeting date within a period."""

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    fecha: date
    created_at: Optional[datetime] = None


class DiscipleshipAttendance(RecordModel):
    """An attendance mark at (participant, date)."""

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    participante_id: int
    fecha_id: int
    status: AttendanceStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DiscipleshipSheet(BaseModel):
    """Participants, dates and marks for one period."""

    participants: list[DiscipleshipParticipant] = Field(default_factory=list)
    dates: list[DiscipleshipDate] = Field(default_factory=list)
    attendance: list[DiscipleshipAttendance] = Field(default_factory=list)

    def status(self, participante_id: int, fecha_id: int) -> str:
        for mark in self.attendance:
            if mark.participante_id == participante_id and mark.fecha_id == fecha_id:
                return mark.status
        return AttendanceStatus.NONE.value

    def present_count_for_participant(self, participante_id: int) -> int:
        return sum(
            1 for mark in self.attendance
            if mark.participante_id == participante_id
            and mark.status == AttendanceStatus.PRESENT
        )

    def present_count_for_date(self, fecha_id: int) -> int:
        return sum(
            1 for mark in self.attendance
            if mark.fecha_id == fecha_id and mark.status == AttendanceStatus.PRESENT
        )


# =============================================================================
# INVENTORY (period-independent)
# =============================================================================

class InventoryItem(RecordModel):
    """An inventory article."""

    id: str = Field(default_factory=_new_id)
    cantidad: int = Field(..., gt=0)
    codigo: str = Field(..., min_length=1, max_length=50)
    detalle: str = Field(..., min_length=1, max_length=500)
    numero_serie: Optional[str] = Field(default=None, max_length=100)
    ubicacion: str = Field(..., min_length=1)
    ministerio: str = Field(..., min_length=1)
    estado: str = Field(..., min_length=1)
    fecha_registro: date = Field(default_factory=date.today)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


INVENTORY_LISTS = (
    "ministerios", "ubicaciones", "estados", "categorias_principales", "detalles",
)

DEFAULT_GLOBAL_OPTIONS = {
    "ministerios": [
        "Alabanza y Adoración", "Evangelismo", "Discipulado", "Niños",
        "Jóvenes", "Damas", "Caballeros", "Administración",
    ],
    "ubicaciones": [
        "Santuario Principal", "Salón de Niños", "Salón de Jóvenes",
        "Oficina Pastoral", "Bodega", "Cocina", "Baños", "Estacionamiento",
    ],
    "estados": ["Bueno", "Dañado", "En Reparación", "Perdido", "Prestado"],
    "categorias_principales": ["Ofrenda", "Diezmo", "Proyecto Especial"],
    "detalles": ["Detalle 1", "Detalle 2", "Detalle 3"],
}


class GlobalConfiguration(RecordModel):
    """
    Inventory option lists, a single row shared by all periods.

    DESIGN DECISION: inventory is period-independent, so its
    options are too. Ledger options live in PeriodConfiguration.
    """

    id: int = 1
    ministerios: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GLOBAL_OPTIONS["ministerios"])
    )
    ubicaciones: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GLOBAL_OPTIONS["ubicaciones"])
    )
    estados: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GLOBAL_OPTIONS["estados"])
    )
    categorias_principales: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GLOBAL_OPTIONS["categorias_principales"])
    )
    detalles: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GLOBAL_OPTIONS["detalles"])
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# PAYMENT FLOW (period-independent)
# =============================================================================

class PaymentTable(RecordModel):
    """A named payment-flow table."""

    id: str = Field(default_factory=_new_id)
    nombre: str = Field(..., min_length=1, max_length=200)
    fecha_creacion: date = Field(default_factory=date.today)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentRow(RecordModel):
    """A payment line inside a payment-flow table."""

    id: str = Field(default_factory=_new_id)
    table_id: str = Field(..., min_length=1)
    fecha: date
    beneficiarios: str = Field(..., min_length=1, max_length=500)
    detalle: str = Field(..., min_length=1, max_length=500)
    valor: Decimal = Field(..., gt=0, decimal_places=2)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentTableWithRows(BaseModel):
    """A payment table together with its rows, as the screen shows it."""

    table: PaymentTable
    rows: list[PaymentRow] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((row.valor for row in self.rows), Decimal("0"))


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a form before it reaches the gateway."""

    record_type: str = Field(
        ...,
        description="Kind of record being validated"
    )
    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
