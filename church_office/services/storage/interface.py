"""
Abstract Persistence Gateway

DESIGN DECISION: Every module talks to the database through one small,
generic interface keyed by table name and equality filters.
This allows us to:
1. Run the same services against a hosted database or in memory
2. Keep business rules out of the storage layer
3. Test services without a database

The interface is intentionally simple - we're not building a full ORM.
Rows go in and come out as plain dictionaries; the services turn
them into models.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from church_office.errors import (  # noqa: F401  re-exported
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
)


Row = dict[str, Any]


class PersistenceGateway(ABC):
    """
    Abstract interface for table-level storage operations.

    Every write is a single-row (or single-statement) atomic operation.
    There are no multi-statement transactions.
    """

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Row]:
        """
        Read rows matching all equality filters.

        Args:
            table: Table name
            filters: {column: value} equality filters (AND-ed)
            order_by: Column to sort by
            descending: Sort direction
            limit: Maximum number of rows

        Returns:
            Matching rows (possibly empty)
        """
        pass

    @abstractmethod
    async def get(self, table: str, filters: dict[str, Any]) -> Optional[Row]:
        """
        Read the first row matching the filters.

        Returns:
            The row if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, table: str, row: Row) -> Row:
        """
        Insert one row.

        Returns:
            The stored row, including generated keys and timestamps

        Raises:
            DuplicateError: If a primary or unique key already exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def insert_many(self, table: str, rows: list[Row]) -> list[Row]:
        """
        Insert several rows, one statement each.

        A failure part-way leaves the earlier rows in place.
        """
        pass

    @abstractmethod
    async def update(
        self,
        table: str,
        filters: dict[str, Any],
        values: Row,
    ) -> list[Row]:
        """
        Overwrite the given columns on every matching row.

        Returns:
            The updated rows (empty when nothing matched)
        """
        pass

    @abstractmethod
    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        """
        Delete every row matching the filters.

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    async def upsert(
        self,
        table: str,
        row: Row,
        conflict_keys: list[str],
    ) -> Row:
        """
        Insert a row, or update the existing row with the same conflict keys.

        Args:
            table: Table name
            row: Full row to write
            conflict_keys: Columns forming the unique key

        Returns:
            The stored row
        """
        pass
