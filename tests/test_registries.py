"""
Tests for the period-independent modules: inventory, payment flow
and census.
"""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from church_office.errors import NotFoundError, ValidationError
from church_office.models.activity import ActivityEventType
from church_office.services import export_filename, format_currency


def item(**overrides):
    fields = {
        "cantidad": 2,
        "codigo": "SON-001",
        "detalle": "Parlante activo",
        "ubicacion": "Santuario Principal",
        "ministerio": "Alabanza y Adoración",
        "estado": "Bueno",
    }
    fields.update(overrides)
    return fields


def payment(**overrides):
    fields = {
        "fecha": date(2025, 1, 15),
        "beneficiarios": "Empresa de Energía",
        "detalle": "Factura enero",
        "valor": Decimal("250000"),
    }
    fields.update(overrides)
    return fields


class TestInventory:
    """Tests for inventory items and their option lists."""

    def test_options_created_on_first_read(self, components, gateway):
        """Test the option row is created with defaults."""
        options = asyncio.run(components.inventory.get_options())

        assert "Bodega" in options.ubicaciones
        assert gateway.count("configuraciones_globales") == 1
        asyncio.run(components.inventory.get_options())
        assert gateway.count("configuraciones_globales") == 1

    def test_add_and_remove_option(self, components):
        """Test editing an option list."""
        asyncio.run(components.inventory.options.add_option("estados", "Donado"))
        options = asyncio.run(components.inventory.options.remove_option("estados", "Perdido"))

        assert "Donado" in options.estados
        assert "Perdido" not in options.estados

    def test_blank_option(self, components):
        """Test an empty option is rejected."""
        with pytest.raises(ValidationError):
            asyncio.run(components.inventory.options.add_option("estados", ""))

    def test_items_need_no_period(self, components):
        """Test inventory works without an active period."""
        created = asyncio.run(components.inventory.items.create(item()))

        assert len(created.id) == 36
        assert created.fecha_registro is not None
        assert [i.codigo for i in asyncio.run(components.inventory.items.list())] == ["SON-001"]

    def test_quantity_must_be_positive(self, components):
        """Test an item with zero quantity."""
        with pytest.raises(ValidationError):
            asyncio.run(components.inventory.items.create(item(cantidad=0)))

    def test_update_item(self, components):
        """Test changing the state of an item."""
        created = asyncio.run(components.inventory.items.create(item()))
        updated = asyncio.run(components.inventory.items.update(created.id, {"estado": "Dañado"}))

        assert updated.id == created.id
        assert updated.estado == "Dañado"


class TestCurrencyFormatting:
    """Tests for amounts as shown in exports."""

    @pytest.mark.parametrize("value,expected", [
        (Decimal("1234567"), "$ 1.234.567"),
        (Decimal("1234.5"), "$ 1.234,5"),
        (Decimal("1234.05"), "$ 1.234,05"),
        (Decimal("0"), "$ 0"),
        (Decimal("999"), "$ 999"),
    ])
    def test_format_currency(self, value, expected):
        """Test thousands and decimal separators."""
        assert format_currency(value) == expected

    def test_export_filename(self):
        """Test non-alphanumeric characters become underscores."""
        assert export_filename("Pagos Enero/2025") == "Pagos_Enero_2025.html"
        assert export_filename("Nómina") == "N_mina.html"


class TestPaymentFlow:
    """Tests for payment tables, rows and export."""

    def test_table_total(self, components):
        """Test the total of a table's rows."""
        table = asyncio.run(components.payment_flow.create_table("Servicios"))
        asyncio.run(components.payment_flow.add_row(table.id, payment()))
        asyncio.run(components.payment_flow.add_row(table.id, payment(valor=Decimal("80000.50"))))

        assert asyncio.run(components.payment_flow.get_total(table.id)) == Decimal("330000.50")

    def test_rows_belong_to_their_table(self, components):
        """Test each table only lists its own rows."""
        first = asyncio.run(components.payment_flow.create_table("Servicios"))
        second = asyncio.run(components.payment_flow.create_table("Nómina"))
        asyncio.run(components.payment_flow.add_row(first.id, payment()))

        tables = {t.table.nombre: t for t in asyncio.run(components.payment_flow.get_all_tables())}
        assert len(tables["Servicios"].rows) == 1
        assert tables["Nómina"].rows == []
        assert tables["Nómina"].table.id == second.id

    def test_row_for_missing_table(self, components):
        """Test adding a row to a table that does not exist."""
        with pytest.raises(NotFoundError):
            asyncio.run(components.payment_flow.add_row("missing", payment()))

    def test_blank_beneficiary(self, components):
        """Test a row needs beneficiaries."""
        table = asyncio.run(components.payment_flow.create_table("Servicios"))
        with pytest.raises(ValidationError):
            asyncio.run(components.payment_flow.add_row(table.id, payment(beneficiarios="")))

    def test_delete_table_deletes_rows(self, components, gateway):
        """Test deleting a table removes its rows."""
        table = asyncio.run(components.payment_flow.create_table("Servicios"))
        asyncio.run(components.payment_flow.add_row(table.id, payment()))
        asyncio.run(components.payment_flow.delete_table(table.id))

        assert gateway.count("payment_tables") == 0
        assert gateway.count("payment_rows") == 0

    def test_export_html(self, components, activity):
        """Test the exported document lists rows and the total."""
        table = asyncio.run(components.payment_flow.create_table("Pagos <Enero>"))
        asyncio.run(components.payment_flow.add_row(table.id, payment()))
        asyncio.run(components.payment_flow.add_row(
            table.id, payment(beneficiarios="Juan & María", valor=Decimal("1500.5"))
        ))

        filename, document = asyncio.run(components.payment_flow.export_html(table.id))

        assert filename == "Pagos__Enero_.html"
        assert document.startswith("<!DOCTYPE html>")
        assert "Pagos &lt;Enero&gt;" in document
        assert "Juan &amp; María" in document
        assert "15/01/2025" in document
        assert "Total de filas: 2" in document
        assert "$ 251.500,5" in document
        assert ActivityEventType.TABLE_EXPORTED in [e.event_type for e in activity.events]


class TestCensus:
    """Tests for census records."""

    def test_create_personal_record(self, components):
        """Test registering a member."""
        record = asyncio.run(components.census.personal.create({
            "cedula": " 1020304050 ",
            "apellidos_nombres": "Gómez Ana",
            "tipo_sangre": "O+",
        }))

        assert record.cedula == "1020304050"
        assert record.es_cristiano is False

    def test_personal_record_needs_names(self, components):
        """Test the census-specific missing-field message."""
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(components.census.personal.create({"cedula": "1020304050"}))
        assert exc_info.value.user_message == "Cédula y nombres son campos obligatorios"

    def test_church_record_needs_cedula(self, components):
        """Test a church record without cedula."""
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(components.census.church.create({"cargo": "Músico"}))
        assert exc_info.value.user_message == "Cédula es campo obligatorio"

    def test_get_member(self, components):
        """Test both records are found by cedula."""
        asyncio.run(components.census.personal.create({
            "cedula": "1020304050", "apellidos_nombres": "Gómez Ana",
        }))
        asyncio.run(components.census.church.create({
            "cedula": "1020304050", "cargo": "Músico", "sueldo": Decimal("0"),
        }))

        member = asyncio.run(components.census.get_member("1020304050"))
        assert member["personal"].apellidos_nombres == "Gómez Ana"
        assert member["church"].cargo == "Músico"
        assert asyncio.run(components.census.get_member("999"))["personal"] is None

    def test_census_options(self, components):
        """Test the census option lists have defaults."""
        options = asyncio.run(components.census.get_options())
        assert "O+" in options.tipos_sangre
        assert "DIEZMO" in options.tipos_pago
