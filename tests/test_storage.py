"""
Tests for the persistence gateways.

The same contract tests run against the in-memory gateway and the
SQLAlchemy gateway on an in-memory SQLite database.
"""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from church_office.services.storage import (
    DatabaseClient,
    DuplicateError,
    InMemoryGateway,
    SqlAlchemyGateway,
    StorageError,
)
from church_office.services.storage.schema import get_table


PERIOD_ROW = {
    "id": "2025-01",
    "name": "Enero 2025",
    "year": 2025,
    "month": 1,
    "start_date": datetime(2025, 1, 10, tzinfo=timezone.utc),
}


def sqlite_gateway() -> SqlAlchemyGateway:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    client = DatabaseClient(engine=engine)
    client.create_schema()
    return SqlAlchemyGateway(client)


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    if request.param == "memory":
        return InMemoryGateway()
    return sqlite_gateway()


def tithe_row(numero, **overrides):
    row = {
        "mes_id": "2025-01",
        "numero": numero,
        "fecha": date(2025, 1, 5),
        "donador": f"Donador {numero}",
        "valor": Decimal("1000.00"),
    }
    row.update(overrides)
    return row


class TestGatewayContract:
    """Behaviour both gateways share."""

    def test_insert_fills_generated_columns(self, store):
        """Test ids, defaults and timestamps are filled in."""
        period = asyncio.run(store.insert("meses", PERIOD_ROW))
        participant = asyncio.run(store.insert("discipulado_participantes", {"name": "Ana"}))

        assert period["status"] == "active"
        assert period["created_at"] is not None
        assert participant["id"] == 1

    def test_duplicate_key(self, store):
        """Test inserting the same primary key twice."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        with pytest.raises(DuplicateError):
            asyncio.run(store.insert("meses", PERIOD_ROW))

    def test_not_null_column(self, store):
        """Test a required column left empty."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        row = tithe_row(1)
        del row["donador"]
        with pytest.raises(StorageError):
            asyncio.run(store.insert("diezmos", row))

    def test_unknown_filter_column(self, store):
        """Test filtering on a column that does not exist."""
        with pytest.raises(StorageError):
            asyncio.run(store.select("diezmos", {"color": "rojo"}))

    def test_select_filters_orders_and_limits(self, store):
        """Test filters, descending order and limit together."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        for numero in (2, 5, 3):
            asyncio.run(store.insert("diezmos", tithe_row(numero)))
        asyncio.run(store.insert("diezmos", tithe_row(9, mes_id="2024-12")))

        rows = asyncio.run(store.select(
            "diezmos", {"mes_id": "2025-01"}, order_by="numero", descending=True, limit=2
        ))
        assert [row["numero"] for row in rows] == [5, 3]
        assert rows[0]["valor"] == Decimal("1000.00")
        assert rows[0]["fecha"] == date(2025, 1, 5)

    def test_null_filter(self, store):
        """Test filtering for an empty column."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        rows = asyncio.run(store.select("meses", {"end_date": None}))
        assert [row["id"] for row in rows] == ["2025-01"]

    def test_update_returns_rows(self, store):
        """Test update returns the rows after the change."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        updated = asyncio.run(store.update("meses", {"id": "2025-01"}, {"status": "closed"}))

        assert [row["status"] for row in updated] == ["closed"]
        assert asyncio.run(store.update("meses", {"id": "1999-01"}, {"status": "closed"})) == []

    def test_delete_counts_rows(self, store):
        """Test delete reports how many rows it removed."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        asyncio.run(store.insert("diezmos", tithe_row(1)))
        asyncio.run(store.insert("diezmos", tithe_row(2)))

        assert asyncio.run(store.delete("diezmos", {"mes_id": "2025-01"})) == 2
        assert asyncio.run(store.delete("diezmos", {"mes_id": "2025-01"})) == 0

    def test_upsert_inserts_then_updates(self, store):
        """Test a second upsert on the same key overwrites."""
        row = {"id": 1, "ministerios": ["A"], "ubicaciones": [], "estados": [],
               "categorias_principales": [], "detalles": []}
        asyncio.run(store.upsert("configuraciones_globales", row, conflict_keys=["id"]))
        stored = asyncio.run(store.upsert(
            "configuraciones_globales", {**row, "ministerios": ["A", "B"]}, conflict_keys=["id"]
        ))

        assert stored["ministerios"] == ["A", "B"]
        assert len(asyncio.run(store.select("configuraciones_globales"))) == 1

    def test_upsert_on_unique_pair(self, store):
        """Test an upsert keyed on a two-column unique constraint."""
        asyncio.run(store.insert("meses", PERIOD_ROW))
        key = {"detalle_id": 1, "columna_id": 2}
        asyncio.run(store.upsert(
            "asistencia_datos", {"mes_id": "2025-01", **key, "cantidad": 3},
            conflict_keys=list(key),
        ))
        stored = asyncio.run(store.upsert(
            "asistencia_datos", {"mes_id": "2025-01", **key, "cantidad": 8},
            conflict_keys=list(key),
        ))

        assert stored["cantidad"] == 8
        assert len(asyncio.run(store.select("asistencia_datos"))) == 1


class TestInMemoryGateway:
    """Behaviour specific to the in-memory gateway."""

    def test_returned_rows_are_copies(self):
        """Test callers cannot change stored rows by mutating results."""
        gateway = InMemoryGateway()
        stored = asyncio.run(gateway.insert("discipulado_participantes", {"name": "Ana"}))
        stored["name"] = "Otra"

        assert asyncio.run(gateway.get("discipulado_participantes", {"id": 1}))["name"] == "Ana"

    def test_calls_are_recorded(self):
        """Test every operation is recorded."""
        gateway = InMemoryGateway()
        asyncio.run(gateway.select("meses"))
        assert gateway.calls == [("select", "meses")]

    def test_unknown_table(self):
        """Test a table that is not in the schema."""
        with pytest.raises(StorageError):
            asyncio.run(InMemoryGateway().select("facturas"))


class TestSchema:
    """Tests for the table definitions."""

    def test_period_scoped_tables_reference_periods(self):
        """Test module tables point at meses through mes_id."""
        for name in ("ingresos", "egresos", "diezmos", "asistencia_datos", "discipulado_fechas"):
            foreign_keys = get_table(name).c.mes_id.foreign_keys
            assert [fk.target_fullname for fk in foreign_keys] == ["meses.id"]
