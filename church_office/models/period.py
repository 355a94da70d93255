"""
Accounting Period Models

A period is one calendar month of church bookkeeping. Most module
records (ledger, tithes, attendance, discipleship) belong to exactly
one period through their `mes_id` column.

DESIGN DECISION: Periods are identified by a readable string
("2025-01") rather than a surrogate key. The identifier encodes
the year and month so any writer can derive them back.
"""

import calendar
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


MONTH_NAMES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]


class PeriodStatus(str, Enum):
    """
    Period lifecycle status.

    The only transition is ACTIVE -> CLOSED. There is no reopening.
    """
    ACTIVE = "active"
    CLOSED = "closed"


# Option lists that are copied forward from one period to the next
CONFIGURATION_LISTS = ("ministerios", "categorias_principales", "detalles")

DEFAULT_MINISTRIES = ["Pastoral", "Música", "Jóvenes", "Niños", "Evangelismo"]
DEFAULT_PRIMARY_CATEGORIES = [
    "Ofrenda", "Diezmo", "Donación", "Gastos Operativos", "Mantenimiento",
]
DEFAULT_DETAILS = [
    "Servicio Dominical", "Servicio Miércoles", "Evento Especial", "Gastos Generales",
]


def period_id_for(year: int, month: int) -> str:
    """Build the canonical period identifier, e.g. "2025-01"."""
    return f"{year:04d}-{month:02d}"


def parse_period_id(period_id: str) -> tuple[int, int]:
    """
    Read (year, month) back from a period identifier.

    Accepts "2025-01", "2025-1" and disambiguated forms such as
    "2025-1-1736000000000".
    """
    parts = period_id.split("-")
    if len(parts) < 2:
        raise ValueError(f"Invalid period identifier: {period_id!r}")
    try:
        year, month = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid period identifier: {period_id!r}")
    if not 1900 <= year <= 9999:
        raise ValueError(f"Invalid year in period identifier: {period_id!r}")
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in period identifier: {period_id!r}")
    return year, month


def period_display_name(year: int, month: int) -> str:
    """Human-readable name, e.g. "Enero 2025"."""
    return f"{MONTH_NAMES[month - 1]} {year}"


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last day of a calendar month (UTC midnight)."""
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime(year, month, 1, tzinfo=timezone.utc),
        datetime(year, month, last_day, tzinfo=timezone.utc),
    )


class Period(BaseModel):
    """
    One accounting period (a row of the `meses` table).

    CRITICAL: Once a period is CLOSED its id, year, month and
    start_date never change.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
        extra="forbid",
    )

    id: str = Field(..., min_length=1, description="Period identifier")
    name: str = Field(..., min_length=1, description="Display name")
    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)
    start_date: datetime = Field(..., description="When the period was opened")
    end_date: Optional[datetime] = Field(
        default=None,
        description="When the period was closed (absent while active)"
    )
    status: PeriodStatus = PeriodStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_date", "end_date", "created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Some drivers return naive timestamps; they are stored as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_active(self) -> bool:
        return self.status == PeriodStatus.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.status == PeriodStatus.CLOSED


class PeriodConfiguration(BaseModel):
    """
    Carried configuration: option lists snapshotted per period.

    A new period receives a copy (by value) of the previous period's
    lists. Removing an option never touches records that use it.
    """
    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    mes_id: str = Field(..., min_length=1)
    ministerios: list[str] = Field(default_factory=lambda: list(DEFAULT_MINISTRIES))
    categorias_principales: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRIMARY_CATEGORIES)
    )
    detalles: list[str] = Field(default_factory=lambda: list(DEFAULT_DETAILS))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode='after')
    def strip_options(self) -> 'PeriodConfiguration':
        """Trim options and drop blanks and duplicates, keeping order."""
        for list_name in CONFIGURATION_LISTS:
            cleaned: list[str] = []
            for option in getattr(self, list_name):
                option = option.strip()
                if option and option not in cleaned:
                    cleaned.append(option)
            setattr(self, list_name, cleaned)
        return self

    def as_row(self) -> dict:
        """Columns written to `configuraciones_mes`."""
        return {"mes_id": self.mes_id, **self.lists()}

    def copy_for(self, period_id: str) -> 'PeriodConfiguration':
        """Snapshot these lists for another period."""
        return PeriodConfiguration(
            mes_id=period_id,
            **{name: list(getattr(self, name)) for name in CONFIGURATION_LISTS},
        )

    def lists(self) -> dict[str, list[str]]:
        return {name: list(getattr(self, name)) for name in CONFIGURATION_LISTS}


class PeriodState(BaseModel):
    """What observers of the period lifecycle receive after each change."""

    active: Optional[Period] = None
    closed: list[Period] = Field(default_factory=list)
