"""Per-model schema metadata and the process-wide model registry."""

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, field_validator

from tablemap.errors import MissingMetadataError, ModelRegistrationError
from tablemap.models.base import ensure_identifier
from tablemap.models.column import ColumnDefinition


class ModelMetadata(BaseModel):
    """Table name plus the property name to column definition map."""

    table_name: str
    columns: dict[str, ColumnDefinition]

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("table_name")
    @classmethod
    def _ensure_table_name(cls, value: str) -> str:
        return ensure_identifier(value, "table_name")

    @field_validator("columns")
    @classmethod
    def _ensure_property_names(cls, value: dict[str, ColumnDefinition]) -> dict[str, ColumnDefinition]:
        for property_name in value:
            ensure_identifier(property_name, "column property name")
        return value

    def primary_key(self) -> str | None:
        """Return the property name of the primary key column, if any."""
        for property_name, definition in self.columns.items():
            if definition.primary:
                return property_name
        return None

    def column_name(self, property_name: str) -> str:
        """Resolve a property name to its physical column name.

        Names without a column definition are returned verbatim so ad-hoc
        columns can still be referenced.
        """
        definition = self.columns.get(property_name)
        if definition is None:
            return property_name
        return definition.physical_name(property_name)

    def property_for(self, key: str) -> str | None:
        """Map a physical column name or property name back to its property."""
        if key in self.columns:
            return key
        for property_name, definition in self.columns.items():
            if definition.name == key:
                return property_name
        return None


class ModelRegistry:
    """Associates model classes with their metadata, keyed by class name.

    Populated once at import time and only read afterwards.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._entries: dict[str, tuple[type, ModelMetadata]] = {}
        self._logger = logger or structlog.get_logger(__name__)

    def register(self, model_class: type, metadata: ModelMetadata) -> ModelMetadata:
        name = model_class.__name__
        existing = self._entries.get(name)
        if existing is not None:
            existing_class, existing_metadata = existing
            if existing_class is not model_class:
                raise ModelRegistrationError(f"A different model named {name} is already registered")
            if existing_metadata != metadata:
                raise ModelRegistrationError(f"Model {name} is already registered with different metadata")
            return existing_metadata

        self._entries[name] = (model_class, metadata)
        self._logger.debug(
            "model_registered",
            model=name,
            table=metadata.table_name,
            column_count=len(metadata.columns),
        )
        return metadata

    def get(self, model_class: type) -> ModelMetadata | None:
        entry = self._entries.get(model_class.__name__)
        if entry is None or entry[0] is not model_class:
            return None
        return entry[1]

    def require(self, model_class: type) -> ModelMetadata:
        metadata = self.get(model_class)
        if metadata is None:
            raise MissingMetadataError(f"Model {model_class.__name__} has no metadata.")
        return metadata

    def __contains__(self, model_class: Any) -> bool:
        return isinstance(model_class, type) and self.get(model_class) is not None

    def __len__(self) -> int:
        return len(self._entries)


default_registry = ModelRegistry()
