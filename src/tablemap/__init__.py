"""tablemap - A lightweight table mapper and parameterized query builder for PostgreSQL."""

from importlib.metadata import version, PackageNotFoundError

from tablemap.adapters import ConnectionConfig, DatabaseAdapter, PostgresAdapter, QueryResult
from tablemap.models import (
    ColumnType,
    Entity,
    ModelMetadata,
    column,
    foreign_key,
    model,
    primary_generated_column,
    primary_key,
    register_model,
)
from tablemap.services.connection import Connection, create_connection, register_adapter
from tablemap.services.query_builder import QueryBuilder
from tablemap.services.repository import Repository

try:
    __version__ = version("tablemap")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "__version__",
    "ColumnType",
    "Connection",
    "ConnectionConfig",
    "DatabaseAdapter",
    "Entity",
    "ModelMetadata",
    "PostgresAdapter",
    "QueryBuilder",
    "QueryResult",
    "Repository",
    "column",
    "create_connection",
    "foreign_key",
    "model",
    "primary_generated_column",
    "primary_key",
    "register_adapter",
    "register_model",
]
