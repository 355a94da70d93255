"""
Tests for Church Office models.

Test strategy:
1. Unit tests for models and their helpers
2. Service tests run on the in-memory gateway (see the other modules)
3. SQL tests run against an in-memory SQLite database
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from church_office.models import (
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
    AttendanceCell,
    AttendanceColumn,
    AttendanceDetail,
    AttendanceGrid,
    DiscipleshipAttendance,
    DiscipleshipDate,
    DiscipleshipParticipant,
    DiscipleshipSheet,
    IncomeEntry,
    Period,
    PeriodConfiguration,
    PeriodStatus,
    month_bounds,
    parse_period_id,
    period_display_name,
    period_id_for,
)


class TestPeriodHelpers:
    """Tests for period identifiers and names."""

    def test_period_id_is_zero_padded(self):
        """Test the canonical identifier."""
        assert period_id_for(2025, 1) == "2025-01"

    @pytest.mark.parametrize("period_id,expected", [
        ("2025-01", (2025, 1)),
        ("2025-1", (2025, 1)),
        ("2025-01-1736500000000", (2025, 1)),
        ("2024-12", (2024, 12)),
    ])
    def test_parse_period_id(self, period_id, expected):
        """Test year and month are read back from identifiers."""
        assert parse_period_id(period_id) == expected

    @pytest.mark.parametrize("period_id", ["2025", "2025-13", "abcd-ef", "", "0099-01", "10000-01"])
    def test_parse_invalid_period_id(self, period_id):
        """Test malformed identifiers."""
        with pytest.raises(ValueError):
            parse_period_id(period_id)

    def test_display_name(self):
        """Test the Spanish month name."""
        assert period_display_name(2025, 1) == "Enero 2025"
        assert period_display_name(2024, 12) == "Diciembre 2024"

    def test_month_bounds_leap_year(self):
        """Test February of a leap year."""
        start, end = month_bounds(2024, 2)
        assert start == datetime(2024, 2, 1, tzinfo=timezone.utc)
        assert end.day == 29


class TestPeriodModel:
    """Tests for the Period and PeriodConfiguration models."""

    def test_naive_timestamps_become_utc(self):
        """Test timestamps read without a timezone are taken as UTC."""
        period = Period(
            id="2025-01", name="Enero 2025", year=2025, month=1,
            start_date=datetime(2025, 1, 10, 12, 0),
        )
        assert period.start_date.tzinfo == timezone.utc
        assert period.is_active
        assert not period.is_closed

    def test_status_is_stored_as_value(self):
        """Test the status serializes as its plain value."""
        period = Period(
            id="2025-01", name="Enero 2025", year=2025, month=1,
            start_date=datetime(2025, 1, 10, tzinfo=timezone.utc),
            status=PeriodStatus.CLOSED,
        )
        assert period.model_dump()["status"] == "closed"

    def test_configuration_cleans_options(self):
        """Test options are trimmed and de-duplicated."""
        configuration = PeriodConfiguration(
            mes_id="2025-01", ministerios=[" Música ", "Música", "", "Niños"],
        )
        assert configuration.ministerios == ["Música", "Niños"]

    def test_copy_for_is_independent(self):
        """Test a snapshot does not share lists with its source."""
        source = PeriodConfiguration(mes_id="2025-01")
        copy = source.copy_for("2025-02")
        copy.detalles.append("Otro")

        assert copy.mes_id == "2025-02"
        assert "Otro" not in source.detalles
        assert set(copy.as_row()) == {"mes_id", "ministerios", "categorias_principales", "detalles"}


class TestRecordModels:
    """Tests for module record models."""

    def test_unknown_fields_are_rejected(self):
        """Test records forbid fields they do not define."""
        with pytest.raises(ValueError):
            IncomeEntry(
                mes_id="2025-01", monto=Decimal("10"), fecha=date(2025, 1, 5),
                ministerio="M", categoria_principal="C", detalle="D", color="rojo",
            )

    def test_amount_must_be_positive(self):
        """Test a zero amount."""
        with pytest.raises(ValueError):
            IncomeEntry(
                mes_id="2025-01", monto=Decimal("0"), fecha=date(2025, 1, 5),
                ministerio="M", categoria_principal="C", detalle="D",
            )

    def test_attendance_grid_totals(self):
        """Test grid lookups and totals."""
        grid = AttendanceGrid(
            details=[
                AttendanceDetail(id=1, mes_id="2025-01", nombre="HOMBRES"),
                AttendanceDetail(id=2, mes_id="2025-01", nombre="MUJERES", orden=1),
            ],
            columns=[AttendanceColumn(id=10, mes_id="2025-01", nombre="05/01")],
            cells=[
                AttendanceCell(mes_id="2025-01", detalle_id=1, columna_id=10, cantidad=4),
                AttendanceCell(mes_id="2025-01", detalle_id=2, columna_id=10, cantidad=6),
            ],
        )
        assert grid.value(1, 10) == 4
        assert grid.value(1, 99) == 0
        assert grid.column_total(10) == 10
        assert grid.grand_total == 10

    def test_discipleship_sheet_counts(self):
        """Test present counts ignore other marks."""
        sheet = DiscipleshipSheet(
            participants=[DiscipleshipParticipant(id=1, name="Ana")],
            dates=[DiscipleshipDate(id=5, mes_id="2025-01", fecha=date(2025, 1, 5))],
            attendance=[
                DiscipleshipAttendance(mes_id="2025-01", participante_id=1, fecha_id=5, status="A"),
            ],
        )
        assert sheet.present_count_for_participant(1) == 1
        assert sheet.present_count_for_date(5) == 1
        assert sheet.status(1, 6) == "none"


class TestActivityEvents:
    """Tests for activity event builders."""

    def test_record_created(self):
        """Test the record-created event."""
        event = ActivityEventBuilder.record_created("diezmos", 3, "2025-01")

        assert event.event_type == ActivityEventType.RECORD_CREATED
        assert event.entity_type == "diezmos"
        assert event.entity_id == "3"
        assert event.period_id == "2025-01"

    def test_storage_error_severity(self):
        """Test storage errors are logged as errors."""
        event = ActivityEventBuilder.storage_error("insert", "DuplicateError: x")

        assert event.severity == ActivitySeverity.ERROR
        assert event.to_log_dict()["error_message"] == "DuplicateError: x"

    def test_login_failed_is_a_warning(self):
        """Test failed logins are warnings."""
        event = ActivityEventBuilder.login_failed("12345678")
        assert event.severity == ActivitySeverity.WARNING
