"""Connection wiring: adapter lifecycle, model registration and repositories.

Adapters are selected by a string tag through ADAPTER_FACTORIES; new backends
are added with register_adapter().
"""

from collections.abc import Callable
from types import TracebackType
from typing import Any, Type, TypeVar

import structlog

from tablemap.adapters.base import ConnectionConfig, DatabaseAdapter
from tablemap.adapters.postgres import PostgresAdapter
from tablemap.errors import UnsupportedAdapterError
from tablemap.models.entity import Entity
from tablemap.models.metadata import ModelMetadata
from tablemap.services.repository import Repository

T_Entity = TypeVar("T_Entity", bound=Entity)

AdapterFactory = Callable[[], DatabaseAdapter]

ADAPTER_FACTORIES: dict[str, AdapterFactory] = {
    "postgres": PostgresAdapter,
}


def register_adapter(adapter_type: str, factory: AdapterFactory) -> None:
    """Make ``adapter_type`` available to create_connection."""
    ADAPTER_FACTORIES[adapter_type.strip().lower()] = factory


class Connection:
    """Owns one adapter plus the repositories created on top of it.

    Can be used as an async context manager, connecting on entry and
    disconnecting on exit.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        config: ConnectionConfig,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._adapter = adapter
        self._config = config
        self._logger = logger or structlog.get_logger(__name__)
        self._models: dict[str, type[Entity]] = {}
        self._repositories: dict[str, Repository[Any]] = {}

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    async def connect(self) -> None:
        await self._adapter.connect(self._config)

    async def disconnect(self) -> None:
        await self._adapter.disconnect()

    def is_connected(self) -> bool:
        return self._adapter.is_connected()

    def register_model(self, model_class: type[Entity]) -> ModelMetadata:
        """Record ``model_class`` as used by this connection.

        Raises:
            MissingMetadataError: If the class was never registered.
        """
        metadata = model_class.get_metadata()
        self._models[model_class.__name__] = model_class
        self._logger.debug("connection_model_registered", model=model_class.__name__, table=metadata.table_name)
        return metadata

    def registered_models(self) -> list[type[Entity]]:
        return list(self._models.values())

    def get_repository(self, model_class: Type[T_Entity]) -> Repository[T_Entity]:
        """Return the cached repository for ``model_class``, creating it once."""
        model_name = model_class.__name__
        repository = self._repositories.get(model_name)
        if repository is None or repository.model_class is not model_class:
            repository = Repository(model_class, self._adapter, logger=self._logger)
            self._repositories[model_name] = repository
        return repository

    async def __aenter__(self) -> "Connection":
        if not self.is_connected():
            await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()


async def create_connection(
    config: ConnectionConfig,
    adapter_type: str = "postgres",
    logger: structlog.stdlib.BoundLogger | None = None,
) -> Connection:
    """Create a Connection for ``adapter_type`` and connect it.

    Raises:
        UnsupportedAdapterError: If no factory is registered for the tag.
        ConnectionFailedError: If the adapter cannot connect.
    """
    factory = ADAPTER_FACTORIES.get(adapter_type.strip().lower())
    if factory is None:
        raise UnsupportedAdapterError(f"adapter type not supported: {adapter_type}")

    connection = Connection(factory(), config, logger=logger)
    await connection.connect()
    return connection
