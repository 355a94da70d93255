"""
In-Memory Storage Implementation

Keeps every table as a list of dictionaries. Used by the test-suite
and for local demos without a database.

It reads the same table definitions as the SQL gateway, so generated
keys, column defaults and unique keys behave the same way.
"""

import copy
from itertools import count
from typing import Any, Optional

from sqlalchemy import Integer
from sqlalchemy.sql.schema import Table, UniqueConstraint

from church_office.services.storage.interface import (
    DuplicateError,
    PersistenceGateway,
    Row,
    StorageError,
)
from church_office.services.storage.schema import metadata, utcnow


class InMemoryGateway(PersistenceGateway):
    """
    Dictionary-backed persistence gateway.

    `calls` records (operation, table) for every call, so tests can
    assert that nothing reached storage.
    """

    def __init__(self):
        self._rows: dict[str, list[Row]] = {name: [] for name in metadata.tables}
        self._sequences: dict[str, count] = {name: count(1) for name in metadata.tables}
        self.calls: list[tuple[str, str]] = []

    def _table(self, name: str) -> Table:
        try:
            return metadata.tables[name]
        except KeyError:
            raise StorageError(f"Unknown table: {name}")

    def _check_columns(self, table: Table, names) -> None:
        unknown = [name for name in names if name not in table.c]
        if unknown:
            raise StorageError(f"Unknown columns on {table.name}: {unknown}")

    @staticmethod
    def _matches(row: Row, filters: Optional[dict[str, Any]]) -> bool:
        return all(row.get(name) == value for name, value in (filters or {}).items())

    def _unique_keys(self, table: Table) -> list[list[str]]:
        keys = [[column.name for column in table.primary_key.columns]]
        for constraint in table.constraints:
            if isinstance(constraint, UniqueConstraint):
                keys.append([column.name for column in constraint.columns])
        for column in table.columns:
            if column.unique:
                keys.append([column.name])
        return keys

    def _check_unique(self, table: Table, row: Row, ignore: Optional[Row] = None) -> None:
        for key in self._unique_keys(table):
            values = {name: row.get(name) for name in key}
            for existing in self._rows[table.name]:
                if existing is not ignore and self._matches(existing, values):
                    raise DuplicateError(f"Duplicate key {values} on {table.name}")

    def _record(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))

    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        self._record("select", table)
        t = self._table(table)
        self._check_columns(t, (filters or {}).keys())

        rows = [row for row in self._rows[table] if self._matches(row, filters)]
        rows.sort(key=lambda row: tuple(
            row[column.name] for column in t.primary_key.columns
        ))
        if order_by is not None:
            self._check_columns(t, [order_by])
            # Stable sort keeps primary-key order for ties; None sorts last
            present = [row for row in rows if row[order_by] is not None]
            missing = [row for row in rows if row[order_by] is None]
            present.sort(key=lambda row: row[order_by], reverse=descending)
            rows = present + missing
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def get(self, table: str, filters: dict[str, Any]) -> Optional[Row]:
        rows = await self.select(table, filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, row: Row) -> Row:
        self._record("insert", table)
        t = self._table(table)
        self._check_columns(t, row.keys())

        stored: Row = {column.name: None for column in t.columns}
        stored.update(copy.deepcopy(row))
        for column in t.columns:
            if stored[column.name] is not None:
                continue
            if column.primary_key and isinstance(column.type, Integer) and column.autoincrement is not False:
                stored[column.name] = next(self._sequences[table])
            elif column.default is not None:
                # Callable defaults are the timestamp columns
                stored[column.name] = utcnow() if column.default.is_callable else column.default.arg
            elif not column.nullable:
                raise StorageError(f"Column {column.name} on {table} cannot be empty")

        self._check_unique(t, stored)
        self._rows[table].append(stored)
        return copy.deepcopy(stored)

    async def insert_many(self, table: str, rows: list[Row]) -> list[Row]:
        return [await self.insert(table, row) for row in rows]

    async def update(
        self,
        table: str,
        filters: dict[str, Any],
        values: Row,
    ) -> list[Row]:
        self._record("update", table)
        t = self._table(table)
        self._check_columns(t, list(filters.keys()) + list(values.keys()))

        updated = []
        for row in self._rows[table]:
            if not self._matches(row, filters):
                continue
            candidate = {**row, **copy.deepcopy(values)}
            if "updated_at" in t.c and "updated_at" not in values:
                candidate["updated_at"] = utcnow()
            self._check_unique(t, candidate, ignore=row)
            row.update(candidate)
            updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        self._record("delete", table)
        t = self._table(table)
        self._check_columns(t, filters.keys())

        before = len(self._rows[table])
        self._rows[table] = [
            row for row in self._rows[table] if not self._matches(row, filters)
        ]
        return before - len(self._rows[table])

    async def upsert(
        self,
        table: str,
        row: Row,
        conflict_keys: list[str],
    ) -> Row:
        key = {name: row[name] for name in conflict_keys}
        existing = await self.get(table, key)
        if existing is None:
            return await self.insert(table, row)
        changes = {name: value for name, value in row.items() if name not in conflict_keys}
        updated = await self.update(table, key, changes)
        return updated[0]

    def count(self, table: str) -> int:
        """Number of stored rows in a table."""
        return len(self._rows[self._table(table).name])
