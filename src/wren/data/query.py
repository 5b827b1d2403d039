"""Immutable query builder over ``Database``.

Accumulates clauses through chaining methods, compiles to a SQL string
plus a bindings tuple, and executes through the ``Database`` it was
created with. Every method returns a new ``QueryBuilder``; the original
is never mutated, so a builder resolved from the container can be shared.

Usage::

    users = (
        QueryBuilder(db)
        .table("users")
        .select("id", "name")
        .where("age", ">=", 18)
        .or_where("role", "admin")
        .order_by("name")
        .limit(20)
        .page(2)
        .get()
    )

Transparency: ``to_sql()`` and ``bindings`` show exactly what will run.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from wren.collection import Collection
from wren.data.database import Database, Row
from wren.data.errors import QueryError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

OPERATORS = frozenset(
    {"=", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE", "IN", "NOT IN", "IS", "IS NOT"}
)

_MISSING = object()


def _quote(name: str) -> str:
    if name == "*":
        return name
    if not _IDENTIFIER.match(name):
        msg = f"Invalid column or table name {name!r}"
        raise QueryError(msg)
    return ".".join(f'"{part}"' for part in name.split("."))


@dataclass(frozen=True, slots=True)
class Condition:
    """One WHERE term, already compiled to SQL with ``?`` placeholders."""

    separator: str
    sql: str
    params: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class QueryBuilder:
    """Chainable SELECT/INSERT/UPDATE/DELETE builder for one table."""

    db: Database | None = None
    _table: str | None = None
    _columns: tuple[str, ...] = ("*",)
    _conditions: tuple[Condition, ...] = ()
    _order: tuple[tuple[str, str], ...] = ()
    _limit: int | None = None
    _offset: int | None = None

    # -- Building --

    def table(self, name: str) -> QueryBuilder:
        """Set the table the query runs against."""
        _quote(name)
        return replace(self, _table=name)

    def select(self, *columns: str) -> QueryBuilder:
        """Set the columns to select. No arguments means ``*``."""
        for column in columns:
            _quote(column)
        return replace(self, _columns=columns or ("*",))

    def where(
        self,
        column: str | Callable[[QueryBuilder], QueryBuilder],
        operator: Any = _MISSING,
        value: Any = _MISSING,
        *,
        separator: str = "AND",
    ) -> QueryBuilder:
        """Add a condition, ANDed with the previous ones.

        ``where("age", ">", 18)`` compares with an operator;
        ``where("name", "alice")`` means equality. A callable receives an
        empty builder and its conditions are grouped in parentheses::

            .where(lambda q: q.where("a", 1).or_where("b", 2))
            # WHERE ("a" = ? OR "b" = ?)
        """
        if callable(column):
            group = column(QueryBuilder())
            if not group._conditions:
                return self
            sql, params = _compile_conditions(group._conditions)
            return self._add(Condition(separator, f"({sql})", params))

        if value is _MISSING:
            if operator is _MISSING:
                msg = f"where({column!r}) needs a value"
                raise QueryError(msg)
            operator, value = "=", operator

        op = str(operator).upper()
        if op not in OPERATORS:
            msg = f"Unsupported operator {operator!r}. Use one of: {', '.join(sorted(OPERATORS))}"
            raise QueryError(msg)

        target = _quote(column)
        if op in ("IN", "NOT IN"):
            values = tuple(value)
            if not values:
                # An empty IN list matches nothing; NOT IN matches everything
                return self._add(Condition(separator, "0 = 1" if op == "IN" else "1 = 1"))
            placeholders = ", ".join("?" for _ in values)
            return self._add(Condition(separator, f"{target} {op} ({placeholders})", values))
        if value is None and op in ("=", "IS"):
            return self._add(Condition(separator, f"{target} IS NULL"))
        if value is None and op in ("!=", "<>", "IS NOT"):
            return self._add(Condition(separator, f"{target} IS NOT NULL"))
        return self._add(Condition(separator, f"{target} {op} ?", (value,)))

    def or_where(
        self,
        column: str | Callable[[QueryBuilder], QueryBuilder],
        operator: Any = _MISSING,
        value: Any = _MISSING,
    ) -> QueryBuilder:
        """Add a condition, ORed with the previous ones."""
        return self.where(column, operator, value, separator="OR")

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        """Append an ORDER BY term. Calls accumulate in order."""
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            msg = f"Sort direction must be ASC or DESC, got {direction!r}"
            raise QueryError(msg)
        return replace(self, _order=(*self._order, (_quote(column), direction)))

    def limit(self, count: int) -> QueryBuilder:
        """Return at most *count* rows."""
        if count < 0:
            msg = f"limit must be non-negative, got {count}"
            raise QueryError(msg)
        return replace(self, _limit=count)

    def skip(self, count: int) -> QueryBuilder:
        """Skip the first *count* rows."""
        if count < 0:
            msg = f"skip must be non-negative, got {count}"
            raise QueryError(msg)
        return replace(self, _offset=count)

    def page(self, number: int, per_page: int | None = None) -> QueryBuilder:
        """Select page *number* (1-based) of size *per_page* or the current limit."""
        size = per_page if per_page is not None else self._limit
        if size is None:
            msg = "page() needs a page size: pass per_page or call limit() first"
            raise QueryError(msg)
        if number < 1:
            msg = f"Page numbers start at 1, got {number}"
            raise QueryError(msg)
        return replace(self, _limit=size, _offset=(number - 1) * size)

    def _add(self, condition: Condition) -> QueryBuilder:
        return replace(self, _conditions=(*self._conditions, condition))

    # -- Compilation --

    def to_sql(self) -> str:
        """The SELECT statement this builder runs."""
        columns = ", ".join(_quote(c) for c in self._columns)
        parts = [f"SELECT {columns} FROM {self._quoted_table()}"]
        parts.extend(self._where_sql())
        if self._order:
            terms = ", ".join(f"{column} {direction}" for column, direction in self._order)
            parts.append(f"ORDER BY {terms}")
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        if self._offset is not None:
            if self._limit is None:
                parts.append("LIMIT -1")
            parts.append(f"OFFSET {self._offset}")
        return " ".join(parts)

    @property
    def bindings(self) -> tuple[Any, ...]:
        """Values bound to the WHERE placeholders, in order."""
        return tuple(p for condition in self._conditions for p in condition.params)

    def _quoted_table(self) -> str:
        if self._table is None:
            msg = "No table set. Call table() first."
            raise QueryError(msg)
        return _quote(self._table)

    def _where_sql(self) -> list[str]:
        if not self._conditions:
            return []
        sql, _ = _compile_conditions(self._conditions)
        return [f"WHERE {sql}"]

    def _database(self) -> Database:
        if self.db is None:
            msg = "This QueryBuilder has no Database. Create it with QueryBuilder(db)."
            raise QueryError(msg)
        return self.db

    # -- Reading --

    def get(self) -> Collection[Row]:
        """Run the query and return every row."""
        return Collection(self._database().fetch(self.to_sql(), *self.bindings))

    def first(self) -> Row | None:
        """Run the query limited to one row and return it, or ``None``."""
        query = self.limit(1)
        return self._database().fetch_one(query.to_sql(), *query.bindings)

    def count(self) -> int:
        """Count matching rows. Ignores columns, ordering, limit and offset."""
        sql = " ".join([f"SELECT COUNT(*) FROM {self._quoted_table()}", *self._where_sql()])
        return int(self._database().fetch_val(sql, *self.bindings) or 0)

    def exists(self) -> bool:
        """Whether at least one row matches."""
        sql = " ".join([f"SELECT 1 FROM {self._quoted_table()}", *self._where_sql(), "LIMIT 1"])
        return self._database().fetch_val(sql, *self.bindings) is not None

    def table_exists(self) -> bool:
        """Whether the table itself exists in the database."""
        sql = "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ? LIMIT 1"
        return self._database().fetch_val(sql, self._table) is not None

    # -- Writing --

    def insert(self, data: Mapping[str, Any]) -> int | None:
        """Insert one row. Returns its row id."""
        if not data:
            msg = "insert() needs at least one column"
            raise QueryError(msg)
        columns = ", ".join(_quote(c) for c in data)
        placeholders = ", ".join("?" for _ in data)
        sql = f"INSERT INTO {self._quoted_table()} ({columns}) VALUES ({placeholders})"
        return self._database().insert(sql, *data.values())

    def update(self, data: Mapping[str, Any]) -> int:
        """Update matching rows. Returns the number of rows changed."""
        if not data:
            msg = "update() needs at least one column"
            raise QueryError(msg)
        assignments = ", ".join(f"{_quote(c)} = ?" for c in data)
        sql = " ".join([f"UPDATE {self._quoted_table()} SET {assignments}", *self._where_sql()])
        return self._database().execute(sql, *data.values(), *self.bindings)

    def delete(self) -> int:
        """Delete matching rows. Returns the number of rows removed."""
        sql = " ".join([f"DELETE FROM {self._quoted_table()}", *self._where_sql()])
        return self._database().execute(sql, *self.bindings)


def _compile_conditions(conditions: Sequence[Condition]) -> tuple[str, tuple[Any, ...]]:
    sql = conditions[0].sql
    for condition in conditions[1:]:
        sql = f"{sql} {condition.separator} {condition.sql}"
    params = tuple(p for condition in conditions for p in condition.params)
    return sql, params
