from tablemap.adapters.base import ConnectionConfig, DatabaseAdapter, FieldInfo, QueryResult
from tablemap.adapters.postgres import PostgresAdapter

__all__ = [
    "ConnectionConfig",
    "DatabaseAdapter",
    "FieldInfo",
    "PostgresAdapter",
    "QueryResult",
]
