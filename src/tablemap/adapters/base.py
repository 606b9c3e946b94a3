"""Adapter contract shared by every database backend."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from tablemap.models.base import ensure_identifier


class ConnectionConfig(BaseModel):
    """Connection settings handed to ``DatabaseAdapter.connect``.

    ``options`` is passed through to the backend's engine/pool factory.
    """

    host: str
    port: int = Field(default=5432, gt=0, le=65535)
    username: str
    password: SecretStr = SecretStr("")
    database: str
    ssl: bool = False
    options: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("host", "username", "database")
    @classmethod
    def _ensure_non_empty(cls, value: str) -> str:
        return ensure_identifier(value, "connection setting")


class FieldInfo(BaseModel):
    name: str
    data_type_id: int | None = None

    model_config = ConfigDict(frozen=True)


class QueryResult(BaseModel):
    """Rows returned by a statement plus the affected-row count."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int | None = None
    fields: list[FieldInfo] | None = None

    model_config = ConfigDict(frozen=True)


class DatabaseAdapter(ABC):
    """Backend-specific connect/query/disconnect implementation.

    The repository layer only ever calls ``query``; the table helpers are
    conveniences for setup code and tests.
    """

    @abstractmethod
    async def connect(self, config: ConnectionConfig) -> None:
        """Open the connection pool.

        Raises:
            ConnectionFailedError: If the database cannot be reached. The
                adapter is left disconnected.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Release all connections. Safe to call when not connected."""

    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    async def query(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        """Execute one statement with positional parameters.

        Raises:
            NotConnectedError: If connect() has not succeeded.
            QueryFailedError: If the database rejects the statement.
        """

    @abstractmethod
    async def create_table(self, table_name: str, columns: dict[str, str]) -> None:
        """Create ``table_name`` if missing; ``columns`` maps name to SQL type."""

    @abstractmethod
    async def drop_table(self, table_name: str) -> None: ...

    @abstractmethod
    async def table_exists(self, table_name: str) -> bool: ...
