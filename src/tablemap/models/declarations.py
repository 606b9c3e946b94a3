"""Explicit model registration and column declaration helpers.

Example:
    >>> @model("users", id=primary_generated_column(), user_name=column(ColumnType.STRING))
    ... class User(Entity):
    ...     pass
"""

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from tablemap.models.column import ColumnDefinition, ForeignKeyReference
from tablemap.models.enums import ColumnType
from tablemap.models.metadata import ModelMetadata, ModelRegistry, default_registry

T_Class = TypeVar("T_Class", bound=type)


def column(
    type: ColumnType | str,
    *,
    primary: bool = False,
    nullable: bool = True,
    unique: bool = False,
    default: Any = None,
    name: str | None = None,
    references: ForeignKeyReference | Mapping[str, str] | None = None,
) -> ColumnDefinition:
    return ColumnDefinition(
        type=ColumnType(type),
        primary=primary,
        nullable=nullable,
        unique=unique,
        default=default,
        name=name,
        references=references,
    )


def primary_key(type: ColumnType | str = ColumnType.NUMBER, **options: Any) -> ColumnDefinition:
    return column(type, primary=True, **options)


def primary_generated_column(type: ColumnType | str = ColumnType.NUMBER, **options: Any) -> ColumnDefinition:
    """Primary key whose value the database generates."""
    options.setdefault("default", "SERIAL")
    return primary_key(type, **options)


def foreign_key(
    table: str,
    column_name: str,
    type: ColumnType | str = ColumnType.NUMBER,
    **options: Any,
) -> ColumnDefinition:
    return column(type, references=ForeignKeyReference(table=table, column=column_name), **options)


def register_model(
    model_class: type,
    table_name: str,
    columns: Mapping[str, ColumnDefinition],
    registry: ModelRegistry | None = None,
) -> ModelMetadata:
    """Build immutable metadata for ``model_class`` and register it.

    Args:
        model_class: The entity class being described.
        table_name: Physical table name.
        columns: Property name to column definition.
        registry: Registry to use; defaults to the class's ``__registry__``
            and then to the process-wide registry.

    Returns:
        The registered ModelMetadata.

    Raises:
        ModelRegistrationError: If the name is taken by another class or the
            class is already registered with different metadata.
    """
    metadata = ModelMetadata(table_name=table_name, columns=dict(columns))
    if registry is None:
        registry = getattr(model_class, "__registry__", default_registry)
    return registry.register(model_class, metadata)


def model(
    table_name: str,
    registry: ModelRegistry | None = None,
    **columns: ColumnDefinition,
) -> Callable[[T_Class], T_Class]:
    """Class decorator form of register_model."""

    def decorator(model_class: T_Class) -> T_Class:
        register_model(model_class, table_name, columns, registry=registry)
        return model_class

    return decorator
