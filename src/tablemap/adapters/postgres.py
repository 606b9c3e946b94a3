"""PostgreSQL adapter built on SQLAlchemy's async engine and asyncpg.

Statements are sent with ``exec_driver_sql`` so the ``$n`` placeholders the
query builder renders reach asyncpg untouched. Each statement runs in its own
short ``engine.begin()`` block; there is no multi-statement transaction API.
"""

from collections.abc import Callable, Sequence
from typing import Any

import structlog
from sqlalchemy import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tablemap.adapters.base import ConnectionConfig, DatabaseAdapter, FieldInfo, QueryResult
from tablemap.errors import ConnectionFailedError, NotConnectedError, QueryFailedError
from tablemap.models.base import quote_identifier

DRIVER_NAME = "postgresql+asyncpg"
DEFAULT_SCHEMA = "public"

EngineFactory = Callable[..., AsyncEngine]


def build_url(config: ConnectionConfig) -> URL:
    return URL.create(
        drivername=DRIVER_NAME,
        username=config.username,
        password=config.password.get_secret_value() or None,
        host=config.host,
        port=config.port,
        database=config.database,
    )


class PostgresAdapter(DatabaseAdapter):
    """DatabaseAdapter for PostgreSQL.

    Accepts an engine factory via dependency injection so tests can supply
    a fake engine instead of reaching a real server.
    """

    def __init__(
        self,
        engine_factory: EngineFactory = create_async_engine,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._engine_factory = engine_factory
        self._engine: AsyncEngine | None = None
        self._logger = logger or structlog.get_logger(__name__)

    async def connect(self, config: ConnectionConfig) -> None:
        if self._engine is not None:
            await self.disconnect()

        engine_kwargs: dict[str, Any] = dict(config.options)
        if config.ssl:
            connect_args = dict(engine_kwargs.pop("connect_args", {}))
            connect_args.setdefault("ssl", "require")
            engine_kwargs["connect_args"] = connect_args

        engine = self._engine_factory(build_url(config), **engine_kwargs)
        try:
            # Check out and release one connection to prove the server is reachable.
            async with engine.connect():
                pass
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            self._logger.error(
                "adapter_connect_failed",
                host=config.host,
                port=config.port,
                database=config.database,
                error=str(e),
            )
            raise ConnectionFailedError(f"Failed to connect to postgres: {e}") from e

        self._engine = engine
        self._logger.info(
            "adapter_connected",
            host=config.host,
            port=config.port,
            database=config.database,
        )

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        engine, self._engine = self._engine, None
        await engine.dispose()
        self._logger.info("adapter_disconnected")

    def is_connected(self) -> bool:
        return self._engine is not None

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        if self._engine is None:
            raise NotConnectedError("Not connected to database. Call connect() first.")

        bound = tuple(params or ())
        try:
            async with self._engine.begin() as conn:
                result = await conn.exec_driver_sql(sql, bound if bound else None)
                rows: list[dict[str, Any]] = []
                fields: list[FieldInfo] | None = None
                if result.returns_rows:
                    fields = [FieldInfo(name=key) for key in result.keys()]
                    rows = [dict(row) for row in result.mappings().all()]
                row_count = result.rowcount
        except SQLAlchemyError as e:
            self._logger.warning(
                "query_failed",
                sql=sql,
                param_count=len(bound),
                error=str(e),
            )
            raise QueryFailedError(f"Query failed: {e}", sql, bound) from e

        if row_count is None or row_count < 0:
            row_count = len(rows)

        self._logger.debug(
            "query_executed",
            sql=sql,
            param_count=len(bound),
            row_count=row_count,
        )
        return QueryResult(rows=rows, row_count=row_count, fields=fields)

    async def create_table(self, table_name: str, columns: dict[str, str]) -> None:
        # Column types are trusted DDL fragments supplied by setup code.
        column_definitions = ", ".join(f"{quote_identifier(name)} {sql_type}" for name, sql_type in columns.items())
        await self.query(f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} ({column_definitions})")

    async def drop_table(self, table_name: str) -> None:
        await self.query(f"DROP TABLE IF EXISTS {quote_identifier(table_name)}")

    async def table_exists(self, table_name: str) -> bool:
        result = await self.query(
            "SELECT EXISTS (SELECT FROM information_schema.tables WHERE table_schema = $1 AND table_name = $2)",
            [DEFAULT_SCHEMA, table_name],
        )
        if not result.rows:
            return False
        return bool(result.rows[0].get("exists", False))
