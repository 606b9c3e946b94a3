from tablemap.models.column import ColumnDefinition, ForeignKeyReference
from tablemap.models.declarations import (
    column,
    foreign_key,
    model,
    primary_generated_column,
    primary_key,
    register_model,
)
from tablemap.models.entity import UNSET, Entity
from tablemap.models.enums import ColumnType, JoinKind, OrderDirection, QueryKind
from tablemap.models.metadata import ModelMetadata, ModelRegistry, default_registry
from tablemap.models.query import BuiltQuery, JoinClause, OrderByClause, QueryCondition

__all__ = [
    "BuiltQuery",
    "ColumnDefinition",
    "ColumnType",
    "Entity",
    "ForeignKeyReference",
    "JoinClause",
    "JoinKind",
    "ModelMetadata",
    "ModelRegistry",
    "OrderByClause",
    "OrderDirection",
    "QueryCondition",
    "QueryKind",
    "UNSET",
    "column",
    "default_registry",
    "foreign_key",
    "model",
    "primary_generated_column",
    "primary_key",
    "register_model",
]
