"""Minimal SQLite access: a connection wrapper, a chainable query builder
and table-backed entities.

Usage::

    from wren.data import Database, Entity, QueryBuilder

    db = Database("sqlite:///app.db")
    users = QueryBuilder(db).table("users").where("active", 1).order_by("name").get()

    class Users(Entity):
        table = "users"

    Users(db).find_or_fail(1)
"""

from wren.data.database import Database
from wren.data.entity import Entity
from wren.data.errors import DataError, QueryError
from wren.data.query import QueryBuilder

__all__ = ["DataError", "Database", "Entity", "QueryBuilder", "QueryError"]
