"""
Relational Database Storage Implementation

DESIGN DECISION: The hosted relational database is reached through
SQLAlchemy Core rather than the ORM because:
1. The services already own their pydantic models
2. Every operation is a single statement on a single table
3. Rows map one-to-one onto plain dictionaries

TRADEOFFS:
- No multi-statement transactions (accepted: single-operator use)
- Conditional inserts (ON CONFLICT) only where the dialect has them,
  a select-then-write fallback elsewhere

The implementation follows the abstract interface, so the services can
run against the in-memory gateway without changing business logic.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, delete, insert, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.sql.schema import Table
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from church_office.config import DatabaseSettings, get_settings
from church_office.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    PersistenceGateway,
    Row,
    StorageError,
)
from church_office.services.storage.schema import metadata, utcnow


class DatabaseClient:
    """
    Low-level database client wrapper.

    Owns the SQLAlchemy engine and provides retry logic for the
    initial connection. Individual statements are never retried.
    """

    def __init__(
        self,
        settings: Optional[DatabaseSettings] = None,
        engine: Optional[Engine] = None,
    ):
        self._settings = settings
        self._engine = engine

    def _get_settings(self) -> DatabaseSettings:
        if self._settings is None:
            self._settings = get_settings().database
        return self._settings

    def connect(self) -> Engine:
        """
        Establish the engine and check the database answers.

        Retries transient connection failures with exponential backoff.
        """
        if self._engine is None:
            settings = self._get_settings()
            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(settings.connect_attempts),
                    wait=wait_exponential(multiplier=1, min=2, max=10),
                    retry=retry_if_exception_type(OperationalError),
                    reraise=True,
                ):
                    with attempt:
                        engine = create_engine(
                            settings.url,
                            echo=settings.echo,
                            pool_pre_ping=settings.pool_pre_ping,
                        )
                        with engine.connect() as conn:
                            conn.execute(text("SELECT 1"))
            except SQLAlchemyError as e:
                raise ConnectionError(f"Failed to connect to database: {e}") from e
            self._engine = engine

        return self._engine

    def create_schema(self) -> None:
        """Create every table that does not exist yet (local development and tests)."""
        metadata.create_all(self.connect())

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


@contextmanager
def _translate_errors(operation: str, table: str) -> Iterator[None]:
    """Re-raise driver errors as storage errors."""
    try:
        yield
    except IntegrityError as e:
        if _is_unique_violation(e):
            raise DuplicateError(f"Duplicate key on {table} during {operation}") from e
        raise StorageError(f"Constraint violated on {table} during {operation}: {e.orig}") from e
    except (OperationalError, InterfaceError) as e:
        raise ConnectionError(f"Database unavailable during {operation} on {table}: {e}") from e
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to {operation} on {table}: {e}") from e


class SqlAlchemyGateway(PersistenceGateway):
    """
    SQLAlchemy implementation of the persistence gateway.

    Each call opens a connection from the pool and commits on exit.
    """

    def __init__(self, client: Optional[DatabaseClient] = None):
        self._client = client or DatabaseClient()

    @property
    def engine(self) -> Engine:
        return self._client.connect()

    def _table(self, name: str) -> Table:
        try:
            return metadata.tables[name]
        except KeyError:
            raise StorageError(f"Unknown table: {name}")

    def _where(self, table: Table, filters: Optional[dict[str, Any]]) -> list:
        clauses = []
        for column_name, value in (filters or {}).items():
            if column_name not in table.c:
                raise StorageError(f"Unknown column {column_name} on {table.name}")
            column = table.c[column_name]
            clauses.append(column.is_(None) if value is None else column == value)
        return clauses

    def _primary_key(self, table: Table, row: Any) -> dict[str, Any]:
        return {column.name: row[column.name] for column in table.primary_key.columns}

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        t = self._table(table)
        stmt = select(t).where(*self._where(t, filters))
        if order_by is not None:
            if order_by not in t.c:
                raise StorageError(f"Unknown column {order_by} on {table}")
            column = t.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        stmt = stmt.order_by(*t.primary_key.columns)
        if limit is not None:
            stmt = stmt.limit(limit)

        with _translate_errors("select", table):
            with self.engine.connect() as conn:
                return [dict(row) for row in conn.execute(stmt).mappings()]

    async def get(self, table: str, filters: dict[str, Any]) -> Optional[Row]:
        rows = await self.select(table, filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, row: Row) -> Row:
        t = self._table(table)
        with _translate_errors("insert", table):
            with self.engine.begin() as conn:
                result = conn.execute(insert(t).values(**row))
                key = dict(zip(
                    (column.name for column in t.primary_key.columns),
                    result.inserted_primary_key,
                ))
                stored = conn.execute(
                    select(t).where(*self._where(t, key))
                ).mappings().one()
                return dict(stored)

    async def insert_many(self, table: str, rows: list[Row]) -> list[Row]:
        return [await self.insert(table, row) for row in rows]

    async def update(
        self,
        table: str,
        filters: dict[str, Any],
        values: Row,
    ) -> list[Row]:
        t = self._table(table)
        where = self._where(t, filters)
        with _translate_errors("update", table):
            with self.engine.begin() as conn:
                keys = [
                    self._primary_key(t, row)
                    for row in conn.execute(
                        select(*t.primary_key.columns).where(*where)
                    ).mappings()
                ]
                if not keys:
                    return []
                conn.execute(update(t).where(*where).values(**values))
                updated = []
                for key in keys:
                    row = conn.execute(
                        select(t).where(*self._where(t, key))
                    ).mappings().first()
                    if row is not None:
                        updated.append(dict(row))
                return updated

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        t = self._table(table)
        with _translate_errors("delete", table):
            with self.engine.begin() as conn:
                result = conn.execute(delete(t).where(*self._where(t, filters)))
                return result.rowcount

    async def upsert(
        self,
        table: str,
        row: Row,
        conflict_keys: list[str],
    ) -> Row:
        t = self._table(table)
        key = {name: row[name] for name in conflict_keys}
        dialect = self.engine.dialect.name

        if dialect not in ("postgresql", "sqlite"):
            existing = await self.get(table, key)
            if existing is None:
                return await self.insert(table, row)
            changes = {k: v for k, v in row.items() if k not in conflict_keys}
            updated = await self.update(table, key, changes)
            return updated[0]

        dialect_insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = dialect_insert(t).values(**row)
        changes = {
            name: stmt.excluded[name]
            for name in row
            if name not in conflict_keys
        }
        # ON CONFLICT does not fire column onupdate hooks
        if "updated_at" in t.c:
            changes["updated_at"] = utcnow()
        stmt = stmt.on_conflict_do_update(index_elements=conflict_keys, set_=changes)

        with _translate_errors("upsert", table):
            with self.engine.begin() as conn:
                conn.execute(stmt)
                stored = conn.execute(
                    select(t).where(*self._where(t, key))
                ).mappings().one()
                return dict(stored)
