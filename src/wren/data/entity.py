"""Table-backed entities.

Subclass ``Entity``, name the table, and get the common record
operations over ``QueryBuilder``::

    class Users(Entity):
        table = "users"

    users = Users(db)
    user_id = users.create({"name": "alice"})
    users.find_or_fail(user_id)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from wren.collection import Collection
from wren.data.database import Database, Row
from wren.data.errors import QueryError
from wren.data.query import QueryBuilder
from wren.errors import NotFound


class Entity:
    """Base class for one database table."""

    table: ClassVar[str] = ""
    primary_key: ClassVar[str] = "id"

    def __init__(self, db: Database) -> None:
        self.db = db

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table!r})"

    def query(self) -> QueryBuilder:
        """A fresh builder scoped to this entity's table."""
        if not self.table:
            msg = f"{type(self).__name__} has no table"
            raise QueryError(msg)
        return QueryBuilder(self.db).table(self.table)

    def where(
        self,
        column: str | Callable[[QueryBuilder], QueryBuilder],
        *args: Any,
        **kwargs: Any,
    ) -> QueryBuilder:
        return self.query().where(column, *args, **kwargs)

    def all(self) -> Collection[Row]:
        return self.query().get()

    def find(self, id: Any) -> Row | None:  # noqa: A002
        """The record with primary key *id*, or ``None``."""
        return self.query().where(self.primary_key, id).first()

    def find_or_fail(self, id: Any) -> Row:  # noqa: A002
        """Like ``find``, but a missing record raises ``NotFound`` (a 404)."""
        row = self.find(id)
        if row is None:
            raise NotFound(f"{self.table} {id} not found")
        return row

    def create(self, attributes: Mapping[str, Any]) -> int | None:
        """Insert a record. Returns its row id."""
        return self.query().insert(attributes)

    def update(self, id: Any, attributes: Mapping[str, Any]) -> int:  # noqa: A002
        """Update the record with primary key *id*. Returns rows changed."""
        return self.query().where(self.primary_key, id).update(attributes)

    def delete(self, id: Any) -> int:  # noqa: A002
        return self.query().where(self.primary_key, id).delete()
