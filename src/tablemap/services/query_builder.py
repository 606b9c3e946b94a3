"""Fluent builder that renders parameterized PostgreSQL statements.

Identifiers are always double-quoted and values are always bound as ``$n``
placeholders, numbered from 1 on every ``build()``. LIMIT and OFFSET are
bound parameters as well.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from tablemap.errors import EmptyDataError, UnsafeDeleteError, UnsupportedQueryError
from tablemap.models.base import quote_identifier
from tablemap.models.entity import Entity
from tablemap.models.enums import JoinKind, OrderDirection, QueryKind
from tablemap.models.metadata import ModelMetadata
from tablemap.models.query import BuiltQuery, JoinClause, OrderByClause, QueryCondition, normalize_operator

_MISSING: Any = object()


def render_placeholder(position: int) -> str:
    return f"${position}"


class QueryBuilder:
    """Accumulates clauses for one table and renders a single statement.

    Not safe to share between concurrent tasks; use one builder per
    statement, or call ``reset()`` before reusing it.
    """

    def __init__(self, metadata: ModelMetadata) -> None:
        self._metadata = metadata
        self._table_name = metadata.table_name
        self.reset()

    @property
    def kind(self) -> QueryKind:
        return self._kind

    def reset(self) -> "QueryBuilder":
        self._kind: QueryKind = QueryKind.SELECT
        self._select_columns: list[str] = ["*"]
        self._conditions: list[QueryCondition] = []
        self._order_by: list[OrderByClause] = []
        self._joins: list[JoinClause] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._insert_data: dict[str, Any] | None = None
        self._update_data: dict[str, Any] | None = None
        return self

    def select(self, columns: Sequence[str] | None = None) -> "QueryBuilder":
        self._kind = QueryKind.SELECT
        self._select_columns = list(columns) if columns else ["*"]
        return self

    def insert(self, data: Mapping[str, Any] | Entity) -> "QueryBuilder":
        """Switch to INSERT.

        Entities contribute only declared columns that have a value, so unset
        optional fields are left to their database defaults.
        """
        self._kind = QueryKind.INSERT
        if isinstance(data, Entity):
            self._insert_data = data.to_dict()
        else:
            self._insert_data = dict(data)
        return self

    def update(self, data: Mapping[str, Any] | Entity) -> "QueryBuilder":
        """Switch to UPDATE. Entities contribute only their changed columns."""
        self._kind = QueryKind.UPDATE
        if isinstance(data, Entity):
            self._update_data = data.get_changes()
        else:
            self._update_data = dict(data)
        return self

    def delete(self) -> "QueryBuilder":
        self._kind = QueryKind.DELETE
        return self

    def where(self, column_or_conditions: Any, operator_or_value: Any = _MISSING, value: Any = _MISSING) -> "QueryBuilder":
        """Append AND-combined conditions.

        Accepted call shapes:
            where({"status": "active", "role": "admin"})  # one ``=`` per entry
            where("status", "active")                     # implicit ``=``
            where("age", ">=", 18)                        # explicit operator

        The two-argument form always means ``(column, value)``; pass three
        arguments to use another operator.
        """
        if isinstance(column_or_conditions, Mapping):
            if operator_or_value is not _MISSING or value is not _MISSING:
                raise TypeError("where() takes a single mapping or positional column arguments, not both")
            conditions = [
                QueryCondition(column=column, operator="=", value=item)
                for column, item in column_or_conditions.items()
            ]
        elif operator_or_value is _MISSING:
            raise TypeError("where() requires a value when called with a column name")
        elif value is _MISSING:
            conditions = [QueryCondition(column=column_or_conditions, operator="=", value=operator_or_value)]
        else:
            conditions = [
                QueryCondition(
                    column=column_or_conditions,
                    operator=normalize_operator(operator_or_value),
                    value=value,
                )
            ]
        return self.where_conditions(conditions)

    def where_conditions(self, conditions: Sequence[QueryCondition]) -> "QueryBuilder":
        # model_construct skips validation, so operators are checked again here.
        for condition in conditions:
            normalize_operator(condition.operator)
        self._conditions.extend(conditions)
        return self

    def order_by(self, column: str, direction: OrderDirection | str = OrderDirection.ASC) -> "QueryBuilder":
        self._order_by.append(OrderByClause(column=column, direction=direction))
        return self

    def join(
        self,
        table: str,
        left_column: str,
        right_column: str,
        kind: JoinKind | str = JoinKind.INNER,
        alias: str | None = None,
    ) -> "QueryBuilder":
        self._joins.append(
            JoinClause(
                table=table,
                left_column=left_column,
                right_column=right_column,
                kind=kind,
                alias=alias,
            )
        )
        return self

    def limit(self, limit: int) -> "QueryBuilder":
        self._limit = self._ensure_bound(limit, "limit")
        return self

    def offset(self, offset: int) -> "QueryBuilder":
        self._offset = self._ensure_bound(offset, "offset")
        return self

    def build(self) -> BuiltQuery:
        if self._kind == QueryKind.SELECT:
            return self._build_select()
        if self._kind == QueryKind.INSERT:
            return self._build_insert()
        if self._kind == QueryKind.UPDATE:
            return self._build_update()
        if self._kind == QueryKind.DELETE:
            return self._build_delete()
        raise UnsupportedQueryError(f"Unsupported query type: {self._kind}")

    def _build_select(self) -> BuiltQuery:
        params: list[Any] = []
        columns = ", ".join(self._quote_column(column) for column in self._select_columns)
        parts = [f"SELECT {columns} FROM {quote_identifier(self._table_name)}"]

        for join in self._joins:
            table = quote_identifier(join.table)
            if join.alias:
                table = f"{table} AS {quote_identifier(join.alias)}"
            parts.append(
                f"{join.kind} JOIN {table} ON "
                f"{quote_identifier(join.left_column)} = {quote_identifier(join.right_column)}"
            )

        if self._conditions:
            parts.append(f"WHERE {self._render_conditions(params)}")

        if self._order_by:
            ordering = ", ".join(f"{self._quote_column(clause.column)} {clause.direction}" for clause in self._order_by)
            parts.append(f"ORDER BY {ordering}")

        if self._limit is not None:
            params.append(self._limit)
            parts.append(f"LIMIT {render_placeholder(len(params))}")

        if self._offset is not None:
            params.append(self._offset)
            parts.append(f"OFFSET {render_placeholder(len(params))}")

        return BuiltQuery(sql=" ".join(parts), params=params)

    def _build_insert(self) -> BuiltQuery:
        if not self._insert_data:
            raise EmptyDataError("No data provided for INSERT query")

        params: list[Any] = []
        columns: list[str] = []
        placeholders: list[str] = []
        for property_name, value in self._insert_data.items():
            params.append(value)
            columns.append(self._quote_column(property_name))
            placeholders.append(render_placeholder(len(params)))

        sql = (
            f"INSERT INTO {quote_identifier(self._table_name)} "
            f"({','.join(columns)}) VALUES ({','.join(placeholders)}) RETURNING *"
        )
        return BuiltQuery(sql=sql, params=params)

    def _build_update(self) -> BuiltQuery:
        if not self._update_data:
            raise EmptyDataError("No data provided for UPDATE query")

        params: list[Any] = []
        assignments: list[str] = []
        for property_name, value in self._update_data.items():
            params.append(value)
            assignments.append(f"{self._quote_column(property_name)} = {render_placeholder(len(params))}")

        sql = f"UPDATE {quote_identifier(self._table_name)} SET {', '.join(assignments)}"
        if self._conditions:
            sql += f" WHERE {self._render_conditions(params)}"
        sql += " RETURNING *"
        return BuiltQuery(sql=sql, params=params)

    def _build_delete(self) -> BuiltQuery:
        if not self._conditions:
            raise UnsafeDeleteError(
                f"Refusing to DELETE from {self._table_name} without a WHERE condition"
            )

        params: list[Any] = []
        sql = f"DELETE FROM {quote_identifier(self._table_name)} WHERE {self._render_conditions(params)}"
        return BuiltQuery(sql=sql, params=params)

    def _render_conditions(self, params: list[Any]) -> str:
        """Render the WHERE body, appending values to ``params`` in place."""
        rendered: list[str] = []
        for condition in self._conditions:
            params.append(condition.value)
            rendered.append(
                f"{self._quote_column(condition.column)} {condition.operator} {render_placeholder(len(params))}"
            )
        return " AND ".join(rendered)

    def _quote_column(self, property_name: str) -> str:
        return quote_identifier(self._metadata.column_name(property_name))

    @staticmethod
    def _ensure_bound(value: int, name: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} must be an integer")
        if value < 0:
            raise ValueError(f"{name} cannot be negative")
        return value
