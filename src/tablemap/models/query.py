from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tablemap.errors import InvalidOperatorError
from tablemap.models.base import ensure_identifier
from tablemap.models.enums import JoinKind, OrderDirection

SUPPORTED_OPERATORS = frozenset(
    {
        "=",
        "!=",
        "<>",
        "<",
        "<=",
        ">",
        ">=",
        "LIKE",
        "NOT LIKE",
        "ILIKE",
        "NOT ILIKE",
        "IS DISTINCT FROM",
        "IS NOT DISTINCT FROM",
    }
)


def normalize_operator(operator: Any) -> str:
    if not isinstance(operator, str):
        raise InvalidOperatorError(f"operator must be a string, got {type(operator).__name__}")
    normalized = " ".join(operator.split()).upper()
    if normalized not in SUPPORTED_OPERATORS:
        raise InvalidOperatorError(f"unsupported operator: {operator!r}")
    return normalized


class QueryCondition(BaseModel):
    """A single ``column <operator> value`` filter, AND-combined with its siblings."""

    column: str
    operator: str = "="
    value: Any = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __init__(self, **data: Any) -> None:
        # Checked up front so callers get InvalidOperatorError, not ValidationError.
        if "operator" in data:
            data["operator"] = normalize_operator(data["operator"])
        super().__init__(**data)

    @field_validator("column")
    @classmethod
    def _ensure_column(cls, value: str) -> str:
        return ensure_identifier(value, "column")

    @field_validator("operator", mode="before")
    @classmethod
    def _normalize_operator(cls, value: Any) -> str:
        return normalize_operator(value)


class JoinClause(BaseModel):
    table: str
    left_column: str
    right_column: str
    kind: JoinKind = JoinKind.INNER
    alias: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("table", "left_column", "right_column")
    @classmethod
    def _ensure_identifiers(cls, value: str) -> str:
        return ensure_identifier(value)

    @field_validator("alias")
    @classmethod
    def _ensure_alias(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return ensure_identifier(value, "alias")

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class OrderByClause(BaseModel):
    column: str
    direction: OrderDirection = OrderDirection.ASC

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("column")
    @classmethod
    def _ensure_column(cls, value: str) -> str:
        return ensure_identifier(value, "column")

    @field_validator("direction", mode="before")
    @classmethod
    def _coerce_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class BuiltQuery(BaseModel):
    """Rendered SQL text with its positional parameters."""

    sql: str
    params: list[Any] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


__all__ = [
    "SUPPORTED_OPERATORS",
    "BuiltQuery",
    "JoinClause",
    "OrderByClause",
    "QueryCondition",
    "normalize_operator",
]
