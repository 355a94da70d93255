"""
Tests for the period lifecycle.

Covers rollover, archiving, carried configuration, implicit period
creation and the per-session "period exists" cache.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from church_office.activity import ActivityLogger
from church_office.errors import NoActivePeriodError, StorageError, ValidationError
from church_office.models.activity import ActivityEventType
from church_office.models.period import PeriodStatus, parse_period_id
from church_office.services import PeriodLifecycleManager


def active_rows(gateway):
    return asyncio.run(gateway.select("meses", {"status": "active"}))


class TestStartNewPeriod:
    """Tests for opening periods."""

    def test_first_period_uses_current_month(self, periods, clock):
        """Test the first period is named after the clock's month."""
        period = asyncio.run(periods.start_new_period())

        assert period.id == "2025-01"
        assert period.name == "Enero 2025"
        assert period.year == 2025
        assert period.month == 1
        assert period.status == PeriodStatus.ACTIVE
        assert period.start_date == clock.now
        assert period.end_date is None

    def test_rollover_closes_previous_period(self, periods, gateway, clock):
        """Test starting a period archives the active one."""
        first = asyncio.run(periods.start_new_period())
        clock.now = datetime(2025, 2, 3, 9, 0, tzinfo=timezone.utc)
        second = asyncio.run(periods.start_new_period())

        assert second.id == "2025-02"
        closed = asyncio.run(periods.get_closed_periods())
        assert [p.id for p in closed] == [first.id]
        assert closed[0].end_date == clock.now
        assert [row["id"] for row in active_rows(gateway)] == ["2025-02"]

    def test_same_month_gets_disambiguated_id(self, periods, gateway):
        """Test a second period in one month gets a suffixed identifier."""
        first = asyncio.run(periods.start_new_period())
        second = asyncio.run(periods.start_new_period())

        assert first.id == "2025-01"
        assert second.id != first.id
        assert second.id.startswith("2025-01-")
        assert parse_period_id(second.id) == (2025, 1)
        assert len(active_rows(gateway)) == 1

    def test_closed_periods_newest_first(self, periods, clock):
        """Test the archive lists the most recent period first."""
        asyncio.run(periods.start_new_period())
        clock.now = datetime(2025, 2, 1, tzinfo=timezone.utc)
        asyncio.run(periods.start_new_period())
        clock.now = datetime(2025, 3, 1, tzinfo=timezone.utc)
        asyncio.run(periods.start_new_period())

        closed = asyncio.run(periods.get_closed_periods())
        assert [p.id for p in closed] == ["2025-02", "2025-01"]

    def test_start_is_logged(self, periods, activity):
        """Test the rollover writes an activity event."""
        asyncio.run(periods.start_new_period())
        asyncio.run(periods.start_new_period())

        types = [event.event_type for event in activity.events]
        assert ActivityEventType.PERIOD_CLOSED in types
        assert types.count(ActivityEventType.PERIOD_STARTED) == 2

    def test_failed_insert_after_archive(self, periods, gateway, clock, monkeypatch):
        """Test a rollover that archived but could not insert leaves no active period."""
        asyncio.run(periods.start_new_period())
        seen = []
        periods.subscribe(seen.append)
        original_insert = gateway.insert

        async def rejecting_insert(table, row):
            if table == "meses":
                raise StorageError("insert rejected")
            return await original_insert(table, row)

        monkeypatch.setattr(gateway, "insert", rejecting_insert)
        clock.now = datetime(2025, 2, 1, tzinfo=timezone.utc)
        with pytest.raises(StorageError):
            asyncio.run(periods.start_new_period())

        assert asyncio.run(periods.get_active_period()) is None
        assert [p.id for p in asyncio.run(periods.get_closed_periods())] == ["2025-01"]
        assert active_rows(gateway) == []
        assert seen[-1].active is None


class TestClosePeriod:
    """Tests for closing without opening."""

    def test_close_leaves_no_active_period(self, periods, gateway):
        """Test closing archives the active period."""
        asyncio.run(periods.start_new_period())
        closed = asyncio.run(periods.close_current_period())

        assert closed.status == PeriodStatus.CLOSED
        assert closed.end_date is not None
        assert asyncio.run(periods.get_active_period()) is None
        assert active_rows(gateway) == []

    def test_close_without_active_period(self, periods):
        """Test closing with nothing active does nothing."""
        assert asyncio.run(periods.close_current_period()) is None

    def test_require_active_period(self, periods):
        """Test requiring a period when there is none."""
        with pytest.raises(NoActivePeriodError):
            asyncio.run(periods.require_active_period())


class TestCarriedConfiguration:
    """Tests for option lists copied between periods."""

    def test_new_period_gets_defaults(self, periods):
        """Test the first period starts with the default lists."""
        asyncio.run(periods.start_new_period())
        configuration = asyncio.run(periods.get_configuration())

        assert "Pastoral" in configuration.ministerios
        assert configuration.mes_id == "2025-01"

    def test_lists_are_carried_forward(self, periods, clock):
        """Test a new period copies the previous period's lists."""
        asyncio.run(periods.start_new_period())
        asyncio.run(periods.update_configuration(ministerios=["Alabanza", "Ujieres"]))

        clock.now = datetime(2025, 2, 1, tzinfo=timezone.utc)
        asyncio.run(periods.start_new_period())
        configuration = asyncio.run(periods.get_configuration())

        assert configuration.mes_id == "2025-02"
        assert configuration.ministerios == ["Alabanza", "Ujieres"]

    def test_carried_lists_are_copies(self, periods, clock):
        """Test editing the new period leaves the archived snapshot alone."""
        asyncio.run(periods.start_new_period())
        clock.now = datetime(2025, 2, 1, tzinfo=timezone.utc)
        asyncio.run(periods.start_new_period())
        asyncio.run(periods.add_option("ministerios", "Nuevo"))

        january = asyncio.run(periods.get_configuration("2025-01"))
        february = asyncio.run(periods.get_configuration("2025-02"))
        assert "Nuevo" in february.ministerios
        assert "Nuevo" not in january.ministerios

    def test_add_option_rejects_blank(self, periods):
        """Test adding an empty option."""
        asyncio.run(periods.start_new_period())
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(periods.add_option("detalles", "   "))
        assert exc_info.value.user_message == "Ingrese un valor para agregar"

    def test_add_option_ignores_duplicates(self, periods):
        """Test adding an option twice keeps one copy."""
        asyncio.run(periods.start_new_period())
        asyncio.run(periods.add_option("detalles", "Retiro"))
        configuration = asyncio.run(periods.add_option("detalles", " Retiro "))
        assert configuration.detalles.count("Retiro") == 1

    def test_remove_option(self, periods):
        """Test removing an option."""
        asyncio.run(periods.start_new_period())
        configuration = asyncio.run(periods.remove_option("ministerios", "Pastoral"))
        assert "Pastoral" not in configuration.ministerios

    def test_unknown_list_is_rejected(self, periods):
        """Test updating a list that does not exist."""
        asyncio.run(periods.start_new_period())
        with pytest.raises(ValueError):
            asyncio.run(periods.update_configuration(colores=["Rojo"]))


class TestEnsurePeriodExists:
    """Tests for implicit period creation."""

    def test_existing_period_is_untouched(self, periods):
        """Test an existing row is returned unchanged."""
        started = asyncio.run(periods.start_new_period())
        period = asyncio.run(periods.ensure_period_exists("2025-01"))

        assert period.id == started.id
        assert period.status == PeriodStatus.ACTIVE
        assert period.start_date == started.start_date

    def test_created_closed_while_another_is_active(self, periods, gateway):
        """Test a back-dated period does not steal the active slot."""
        asyncio.run(periods.start_new_period())
        period = asyncio.run(periods.ensure_period_exists("2024-12"))

        assert period.status == PeriodStatus.CLOSED
        assert period.name == "Diciembre 2024"
        assert period.start_date == datetime(2024, 12, 1, tzinfo=timezone.utc)
        assert period.end_date == datetime(2024, 12, 31, tzinfo=timezone.utc)
        assert len(active_rows(gateway)) == 1

    def test_created_active_when_none_is_active(self, periods):
        """Test the implicit period becomes active when nothing else is."""
        period = asyncio.run(periods.ensure_period_exists("2025-03"))

        assert period.status == PeriodStatus.ACTIVE
        assert period.end_date is None
        assert asyncio.run(periods.get_active_period()).id == "2025-03"

    def test_invalid_identifier(self, periods):
        """Test an identifier without year and month."""
        with pytest.raises(ValueError):
            asyncio.run(periods.ensure_period_exists("enero"))

    def test_repeated_calls_keep_one_row(self, periods, gateway):
        """Test ensuring the same period twice creates it once."""
        first = asyncio.run(periods.ensure_period_exists("2024-05"))
        second = asyncio.run(periods.ensure_period_exists("2024-05"))

        assert first == second
        assert gateway.count("meses") == 1

    def test_concurrent_creation_is_success(self, periods, gateway, activity, monkeypatch):
        """Test a row inserted by another writer after the read is returned as is."""
        other_writer = {
            "id": "2024-05",
            "name": "Mayo 2024",
            "year": 2024,
            "month": 5,
            "start_date": datetime(2024, 5, 3, tzinfo=timezone.utc),
        }
        original_get = gateway.get

        async def get_then_lose_race(table, filters):
            row = await original_get(table, filters)
            if table == "meses" and row is None and gateway.count("meses") == 0:
                await gateway.insert("meses", other_writer)
            return row

        monkeypatch.setattr(gateway, "get", get_then_lose_race)
        period = asyncio.run(periods.ensure_period_exists("2024-05"))

        assert period.start_date == other_writer["start_date"]
        assert gateway.count("meses") == 1
        types = [event.event_type for event in activity.events]
        assert ActivityEventType.PERIOD_CREATED_IMPLICITLY not in types

    def test_year_out_of_range(self, periods, gateway):
        """Test an identifier with an impossible year."""
        with pytest.raises(ValueError):
            asyncio.run(periods.ensure_period_exists("0099-01"))
        assert gateway.count("meses") == 0

    def test_implicit_creation_is_logged(self, periods, activity):
        """Test the implicit creation writes an activity event."""
        asyncio.run(periods.ensure_period_exists("2025-03"))
        types = [event.event_type for event in activity.events]
        assert ActivityEventType.PERIOD_CREATED_IMPLICITLY in types

    def test_select_period_checks_storage_once(self, periods, gateway):
        """Test repeated selection is answered from memory."""
        asyncio.run(periods.select_period("2024-11"))
        calls = len(gateway.calls)
        asyncio.run(periods.select_period("2024-11"))
        assert len(gateway.calls) == calls


class TestObservers:
    """Tests for lifecycle subscriptions."""

    def test_observer_receives_new_state(self, periods):
        """Test observers see the state after a rollover."""
        seen = []
        periods.subscribe(seen.append)
        asyncio.run(periods.start_new_period())

        assert seen[-1].active.id == "2025-01"

    def test_unsubscribe(self, periods):
        """Test an unsubscribed observer is not called again."""
        seen = []
        unsubscribe = periods.subscribe(seen.append)
        unsubscribe()
        asyncio.run(periods.start_new_period())
        assert seen == []

    def test_refresh_reads_storage(self, periods, gateway, clock):
        """Test a second manager sees periods written by the first."""
        asyncio.run(periods.start_new_period())
        other = PeriodLifecycleManager(gateway, activity=ActivityLogger(), clock=clock)

        assert asyncio.run(other.get_active_period()).id == "2025-01"


class TestMonthScenario:
    """End-to-end: open a month and register tithes in it."""

    def test_tithes_numbered_in_new_month(self, components):
        """Test the first tithes of a new month are numbered 1 and 2."""
        period = asyncio.run(components.periods.start_new_period())
        assert period.name == "Enero 2025"

        first = asyncio.run(components.tithes.create({
            "fecha": "2025-01-05", "donador": "Familia Pérez", "valor": Decimal("100000"),
        }))
        second = asyncio.run(components.tithes.create({
            "fecha": "2025-01-12", "donador": "Ana Gómez", "valor": Decimal("50000"),
        }))

        assert (first.numero, second.numero) == (1, 2)
        assert first.mes_id == second.mes_id == "2025-01"
        assert asyncio.run(components.tithes.get_total()) == Decimal("150000")

        closed = asyncio.run(components.periods.close_current_period())
        assert asyncio.run(components.periods.get_active_period()) is None
        assert closed.name == "Enero 2025"
        assert closed.end_date is not None
