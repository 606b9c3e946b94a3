from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from tablemap.models.base import ensure_identifier
from tablemap.models.enums import ColumnType


class ForeignKeyReference(BaseModel):
    table: str
    column: str

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("table", "column")
    @classmethod
    def _ensure_identifiers(cls, value: str) -> str:
        return ensure_identifier(value)


class ColumnDefinition(BaseModel):
    """Declared shape of one mapped column.

    ``name`` overrides the physical column name; when omitted the property
    name is used as-is.
    """

    type: ColumnType
    primary: bool = False
    nullable: bool = True
    unique: bool = False
    default: Any = None
    name: str | None = None
    references: ForeignKeyReference | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("name")
    @classmethod
    def _ensure_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return ensure_identifier(value)

    def physical_name(self, property_name: str) -> str:
        return self.name or property_name
