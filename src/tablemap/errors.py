"""Exception types raised by tablemap.

Every error derives from TablemapError and from the builtin exception that
best describes it, so callers can catch either.
"""

from collections.abc import Sequence
from typing import Any


class TablemapError(Exception):
    """Base class for all tablemap errors."""


class ConnectionFailedError(TablemapError, ConnectionError):
    """The adapter could not establish a connection to the database."""


class NotConnectedError(TablemapError, RuntimeError):
    """A query was attempted without an active connection."""


class QueryFailedError(TablemapError, RuntimeError):
    """The database rejected a statement.

    The driver exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, sql: str, params: Sequence[Any] | None = None) -> None:
        super().__init__(message)
        self.sql = sql
        self.params = list(params or [])


class MissingMetadataError(TablemapError, LookupError):
    """A model class was used without registered metadata."""


class ModelRegistrationError(TablemapError, ValueError):
    """A model registration conflicts with an existing one."""


class MissingPrimaryKeyError(TablemapError, ValueError):
    """No primary key column is declared, or the entity has no key value."""


class EmptyDataError(TablemapError, ValueError):
    """An INSERT or UPDATE was built with no columns to write."""


class UnsafeDeleteError(TablemapError, ValueError):
    """A DELETE was built without any WHERE condition."""


class UnsupportedQueryError(TablemapError, ValueError):
    """The builder is in a mode it cannot render."""


class InvalidOperatorError(TablemapError, ValueError):
    """A comparison operator outside the supported set was used."""


class UnknownColumnError(TablemapError, KeyError):
    """An entity was constructed with keys that are not declared columns."""

    def __init__(self, model_name: str, keys: Sequence[str]) -> None:
        self.model_name = model_name
        self.keys = list(keys)
        super().__init__(f"{model_name} has no declared column(s): {', '.join(self.keys)}")

    def __str__(self) -> str:
        return str(self.args[0])


class UnsupportedAdapterError(TablemapError, ValueError):
    """create_connection was given an adapter type with no registered factory."""
