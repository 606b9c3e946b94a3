"""Repository binding one entity type to the query builder and an adapter."""

from collections.abc import Mapping, Sequence
from typing import Any, Generic, Type, TypeVar

import structlog

from tablemap.adapters.base import DatabaseAdapter
from tablemap.errors import MissingPrimaryKeyError
from tablemap.models.entity import UNSET, Entity
from tablemap.models.metadata import ModelMetadata
from tablemap.services.query_builder import QueryBuilder

T_Entity = TypeVar("T_Entity", bound=Entity)


class Repository(Generic[T_Entity]):
    """Load, create, update and delete entities of one model type.

    Every operation starts from a fresh QueryBuilder so clause state never
    carries over between calls. Each operation issues at most one statement.
    """

    def __init__(
        self,
        model_class: Type[T_Entity],
        adapter: DatabaseAdapter,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._model_class = model_class
        self._metadata: ModelMetadata = model_class.get_metadata()
        self._adapter = adapter
        self._logger = (logger or structlog.get_logger(__name__)).bind(
            model=model_class.__name__,
            table=self._metadata.table_name,
        )

    @property
    def model_class(self) -> Type[T_Entity]:
        return self._model_class

    @property
    def metadata(self) -> ModelMetadata:
        return self._metadata

    def query_builder(self) -> QueryBuilder:
        """Return a new builder for this repository's table."""
        return QueryBuilder(self._metadata)

    async def find_all(self, conditions: Mapping[str, Any] | None = None) -> list[T_Entity]:
        builder = self.query_builder().select()
        if conditions:
            builder.where(conditions)
        built = builder.build()

        result = await self._adapter.query(built.sql, built.params)
        self._logger.debug("entities_loaded", row_count=len(result.rows))
        return [self._model_class.from_row(row) for row in result.rows]

    async def find_one(self, conditions: Mapping[str, Any]) -> T_Entity | None:
        built = self.query_builder().select().where(conditions).limit(1).build()

        result = await self._adapter.query(built.sql, built.params)
        if not result.rows:
            self._logger.debug("entity_not_found", condition_count=len(conditions))
            return None
        return self._model_class.from_row(result.rows[0])

    async def find_by_id(self, id: Any) -> T_Entity | None:
        primary_key = self._require_primary_key_column()
        return await self.find_one({primary_key: id})

    async def create(self, entity: T_Entity) -> T_Entity:
        """Insert ``entity`` and merge server-generated values back into it.

        Columns of the returned row that the model does not declare are ignored.

        Returns:
            The same entity, with its snapshot synchronized.
        """
        built = self.query_builder().insert(entity).build()

        result = await self._adapter.query(built.sql, built.params)
        if result.rows:
            entity.assign(result.rows[0], strict=False)
        entity.sync_original_values()

        self._logger.debug("entity_created", column_count=len(built.params))
        return entity

    async def update(self, entity: T_Entity) -> T_Entity:
        """Write only the changed columns of ``entity``.

        An entity without pending changes is returned as-is without issuing a
        query.

        The row is matched on the snapshot's primary key value, so changing the
        primary key itself updates the persisted row.

        Raises:
            MissingPrimaryKeyError: If the model has no primary key column or
                the entity has no primary key value.
        """
        if not entity.has_changes():
            self._logger.debug("entity_update_skipped")
            return entity

        primary_key, primary_value = self._require_primary_key_value(entity, "update", persisted=True)
        built = self.query_builder().update(entity).where({primary_key: primary_value}).build()

        result = await self._adapter.query(built.sql, built.params)
        if result.rows:
            entity.assign(result.rows[0], strict=False)
        entity.sync_original_values()

        self._logger.debug("entity_updated", primary_key=primary_value, row_count=result.row_count)
        return entity

    async def delete(self, entity: T_Entity) -> bool:
        """Delete ``entity`` by primary key.

        Returns:
            True if at least one row was deleted.
        """
        primary_key, primary_value = self._require_primary_key_value(entity, "delete")
        built = self.query_builder().delete().where({primary_key: primary_value}).build()

        result = await self._adapter.query(built.sql, built.params)
        deleted = (result.row_count or 0) > 0
        self._logger.debug("entity_deleted", primary_key=primary_value, deleted=deleted)
        return deleted

    async def query(self, sql: str, params: Sequence[Any] | None = None) -> list[dict[str, Any]]:
        """Run raw SQL, bypassing the builder, and return the raw rows."""
        result = await self._adapter.query(sql, list(params or []))
        return result.rows

    def _require_primary_key_column(self) -> str:
        primary_key = self._metadata.primary_key()
        if primary_key is None:
            raise MissingPrimaryKeyError(f"No primary key defined for {self._metadata.table_name}")
        return primary_key

    def _require_primary_key_value(self, entity: T_Entity, action: str, persisted: bool = False) -> tuple[str, Any]:
        primary_key = self._require_primary_key_column()
        value = entity.original_value(primary_key) if persisted else UNSET
        if value is UNSET or value is None:
            value = getattr(entity, primary_key, UNSET)
        if value is UNSET or value is None:
            raise MissingPrimaryKeyError(f"Cannot {action} entity without primary key value")
        return primary_key, value
