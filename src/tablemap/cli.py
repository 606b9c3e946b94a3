"""Operator CLI for checking connectivity and running ad-hoc SQL.

Connection settings come from options or the matching TABLEMAP_* environment
variables.
"""

import asyncio
import json
import sys
from typing import Any, Optional

import structlog
import typer

from tablemap.adapters.base import ConnectionConfig
from tablemap.errors import ConnectionFailedError, QueryFailedError
from tablemap.services.connection import Connection, create_connection

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    logger_factory=lambda name: structlog.PrintLogger(file=sys.stderr),
    wrapper_class=structlog.BoundLogger,
    context_class=dict,
    cache_logger_on_first_use=False,
)

logger = structlog.get_logger(__name__)

app = typer.Typer(
    name="tablemap",
    help="""Check database connectivity and run parameterized SQL.

Examples:

  # Verify the database is reachable
  uv run tablemap ping --host localhost --user app --database app

  # Run a query with bound parameters
  uv run tablemap query 'SELECT * FROM "users" WHERE "id" = $1' -p 42

  # Check whether a table exists
  uv run tablemap table-exists users""",
    rich_markup_mode="markdown",
)

HostOption = typer.Option("localhost", "--host", envvar="TABLEMAP_HOST", help="Database host")
PortOption = typer.Option(5432, "--port", envvar="TABLEMAP_PORT", help="Database port")
UserOption = typer.Option("postgres", "--user", "-U", envvar="TABLEMAP_USER", help="Database user")
PasswordOption = typer.Option("", "--password", envvar="TABLEMAP_PASSWORD", help="Database password")
DatabaseOption = typer.Option("postgres", "--database", "-d", envvar="TABLEMAP_DATABASE", help="Database name")
SslOption = typer.Option(False, "--ssl/--no-ssl", envvar="TABLEMAP_SSL", help="Require SSL")


def build_config(host: str, port: int, user: str, password: str, database: str, ssl: bool) -> ConnectionConfig:
    return ConnectionConfig(
        host=host,
        port=port,
        username=user,
        password=password,
        database=database,
        ssl=ssl,
    )


def parse_param(raw: str) -> Any:
    """Interpret a CLI parameter as JSON when possible, otherwise as text."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


async def _open(config: ConnectionConfig) -> Connection:
    try:
        return await create_connection(config)
    except ConnectionFailedError as e:
        logger.error("connection_failed", host=config.host, database=config.database, error=str(e))
        raise typer.Exit(1) from e


@app.command()
def ping(
    host: str = HostOption,
    port: int = PortOption,
    user: str = UserOption,
    password: str = PasswordOption,
    database: str = DatabaseOption,
    ssl: bool = SslOption,
) -> None:
    """Connect to the database and report success."""
    config = build_config(host, port, user, password, database, ssl)

    async def run_ping() -> None:
        connection = await _open(config)
        await connection.disconnect()

    asyncio.run(run_ping())
    typer.echo(f"Connected to {config.database} at {config.host}:{config.port}")


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL statement using $1, $2, ... placeholders"),
    param: Optional[list[str]] = typer.Option(
        None,
        "--param",
        "-p",
        help="Positional parameter value (JSON literals are decoded)",
    ),
    host: str = HostOption,
    port: int = PortOption,
    user: str = UserOption,
    password: str = PasswordOption,
    database: str = DatabaseOption,
    ssl: bool = SslOption,
) -> None:
    """Run a raw SQL statement and print each row as a JSON line."""
    config = build_config(host, port, user, password, database, ssl)
    params = [parse_param(raw) for raw in param or []]

    async def run_query() -> list[dict[str, Any]]:
        async with await _open(config) as connection:
            result = await connection.adapter.query(sql, params)
            return result.rows

    try:
        rows = asyncio.run(run_query())
    except QueryFailedError as e:
        logger.error("query_failed", sql=sql, error=str(e))
        raise typer.Exit(1) from e

    for row in rows:
        typer.echo(json.dumps(row, default=str))
    logger.info("query_completed", row_count=len(rows))


@app.command("table-exists")
def table_exists(
    table: str = typer.Argument(..., help="Table name in the public schema"),
    host: str = HostOption,
    port: int = PortOption,
    user: str = UserOption,
    password: str = PasswordOption,
    database: str = DatabaseOption,
    ssl: bool = SslOption,
) -> None:
    """Print whether TABLE exists; exits 1 when it does not."""
    config = build_config(host, port, user, password, database, ssl)

    async def run_check() -> bool:
        async with await _open(config) as connection:
            return await connection.adapter.table_exists(table)

    exists = asyncio.run(run_check())
    typer.echo("true" if exists else "false")
    if not exists:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from tablemap import __version__

    typer.echo(f"tablemap {__version__}")
