"""
Storage Services Package

Provides the abstract persistence gateway and two implementations:
SQLAlchemy for the hosted relational database and an in-memory
gateway for tests and demos.
"""

from church_office.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    PersistenceGateway,
    Row,
    StorageError,
)
from church_office.services.storage.memory import InMemoryGateway
from church_office.services.storage.sql_gateway import DatabaseClient, SqlAlchemyGateway

__all__ = [
    # Interface
    "PersistenceGateway",
    "Row",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "DatabaseClient",
    "InMemoryGateway",
    "SqlAlchemyGateway",
]
