"""Tests for wren.data: Database and QueryBuilder over in-memory SQLite."""

import logging
from collections.abc import Iterator

import pytest

from wren.collection import Collection
from wren.data import Database, DataError, QueryBuilder, QueryError

SCHEMA = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    age INTEGER,
    role TEXT
);
"""


@pytest.fixture
def db() -> Iterator[Database]:
    database = Database("sqlite:///:memory:")
    database.connect()
    database.execute_script(SCHEMA)
    for name, age, role in [
        ("alice", 34, "admin"),
        ("bob", 17, "user"),
        ("carol", 25, "user"),
        ("dave", None, "guest"),
    ]:
        database.insert("INSERT INTO users (name, age, role) VALUES (?, ?, ?)", name, age, role)
    yield database
    database.disconnect()


@pytest.fixture
def users(db: Database) -> QueryBuilder:
    return QueryBuilder(db).table("users")


class TestDatabase:
    def test_url_parsing(self) -> None:
        assert repr(Database("sqlite:///:memory:")) == "Database('sqlite:///:memory:')"

    def test_unsupported_url(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL"):
            Database("postgres://localhost/app")

    def test_lazy_connect(self) -> None:
        database = Database("sqlite:///:memory:")
        assert not database.connected
        assert database.fetch_val("SELECT 1") == 1
        assert database.connected
        database.disconnect()
        assert not database.connected

    def test_context_manager(self) -> None:
        with Database("sqlite:///:memory:") as database:
            assert database.connected
        assert not database.connected

    def test_fetch_returns_dicts(self, db: Database) -> None:
        rows = db.fetch("SELECT name, age FROM users WHERE role = ? ORDER BY name", "user")
        assert rows == [{"name": "bob", "age": 17}, {"name": "carol", "age": 25}]

    def test_fetch_one(self, db: Database) -> None:
        assert db.fetch_one("SELECT name FROM users WHERE id = ?", 1) == {"name": "alice"}
        assert db.fetch_one("SELECT name FROM users WHERE id = ?", 99) is None

    def test_execute_returns_rowcount(self, db: Database) -> None:
        assert db.execute("UPDATE users SET role = ? WHERE role = ?", "member", "user") == 2

    def test_insert_returns_row_id(self, db: Database) -> None:
        assert db.insert("INSERT INTO users (name) VALUES (?)", "erin") == 5

    def test_sql_errors_become_query_errors(self, db: Database) -> None:
        with pytest.raises(QueryError):
            db.fetch("SELECT * FROM missing_table")

    def test_transaction_commits(self, db: Database) -> None:
        with db.transaction():
            db.execute("DELETE FROM users WHERE name = ?", "bob")
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 3

    def test_transaction_rolls_back(self, db: Database) -> None:
        with pytest.raises(RuntimeError), db.transaction():
            db.execute("DELETE FROM users")
            raise RuntimeError("abort")
        assert db.fetch_val("SELECT COUNT(*) FROM users") == 4

    def test_nested_transaction_joins_outer(self, db: Database) -> None:
        with pytest.raises(RuntimeError), db.transaction():
            with db.transaction():
                db.execute("DELETE FROM users WHERE name = ?", "alice")
            raise RuntimeError("abort")
        assert db.fetch_val("SELECT COUNT(*) FROM users WHERE name = ?", "alice") == 1

    def test_echo_logs_queries(self, caplog: pytest.LogCaptureFixture) -> None:
        with Database("sqlite:///:memory:", echo=True) as database:
            with caplog.at_level(logging.INFO, logger="wren.data"):
                database.fetch_val("SELECT ?", 1)
        assert "SELECT ?" in caplog.text


class TestQueryCompilation:
    def test_select_all(self) -> None:
        assert QueryBuilder().table("users").to_sql() == 'SELECT * FROM "users"'

    def test_columns_and_where(self) -> None:
        query = QueryBuilder().table("users").select("id", "name").where("age", ">", 18)
        assert query.to_sql() == 'SELECT "id", "name" FROM "users" WHERE "age" > ?'
        assert query.bindings == (18,)

    def test_two_argument_where_means_equality(self) -> None:
        query = QueryBuilder().table("users").where("name", "alice")
        assert query.to_sql() == 'SELECT * FROM "users" WHERE "name" = ?'

    def test_or_where(self) -> None:
        query = QueryBuilder().table("users").where("age", ">=", 18).or_where("role", "admin")
        assert query.to_sql().endswith('WHERE "age" >= ? OR "role" = ?')
        assert query.bindings == (18, "admin")

    def test_grouped_conditions(self) -> None:
        query = (
            QueryBuilder()
            .table("users")
            .where("role", "user")
            .where(lambda q: q.where("age", "<", 18).or_where("age", ">", 60))
        )
        assert query.to_sql().endswith('WHERE "role" = ? AND ("age" < ? OR "age" > ?)')
        assert query.bindings == ("user", 18, 60)

    def test_in_expands_placeholders(self) -> None:
        query = QueryBuilder().table("users").where("id", "in", [1, 2, 3])
        assert query.to_sql().endswith('WHERE "id" IN (?, ?, ?)')
        assert query.bindings == (1, 2, 3)

    def test_empty_in_matches_nothing(self) -> None:
        assert QueryBuilder().table("users").where("id", "IN", []).to_sql().endswith("0 = 1")

    def test_none_becomes_is_null(self) -> None:
        query = QueryBuilder().table("users").where("age", None)
        assert query.to_sql().endswith('WHERE "age" IS NULL')
        assert query.bindings == ()

    def test_order_limit_offset(self) -> None:
        query = (
            QueryBuilder()
            .table("users")
            .order_by("name")
            .order_by("age", "desc")
            .limit(10)
            .skip(20)
        )
        assert query.to_sql() == 'SELECT * FROM "users" ORDER BY "name" ASC, "age" DESC LIMIT 10 OFFSET 20'

    def test_offset_without_limit(self) -> None:
        assert QueryBuilder().table("users").skip(5).to_sql().endswith("LIMIT -1 OFFSET 5")

    def test_page(self) -> None:
        assert QueryBuilder().table("users").page(3, 10).to_sql().endswith("LIMIT 10 OFFSET 20")
        assert QueryBuilder().table("users").limit(5).page(2).to_sql().endswith("LIMIT 5 OFFSET 5")

    def test_page_needs_size(self) -> None:
        with pytest.raises(QueryError, match="page size"):
            QueryBuilder().table("users").page(2)

    def test_builder_is_immutable(self) -> None:
        base = QueryBuilder().table("users")
        base.where("id", 1)
        assert base.to_sql() == 'SELECT * FROM "users"'

    def test_invalid_identifier(self) -> None:
        with pytest.raises(QueryError, match="Invalid column or table name"):
            QueryBuilder().table("users; DROP TABLE users")

    def test_unsupported_operator(self) -> None:
        with pytest.raises(QueryError, match="Unsupported operator"):
            QueryBuilder().table("users").where("id", "~", 1)

    def test_no_table(self) -> None:
        with pytest.raises(QueryError, match="No table set"):
            QueryBuilder().to_sql()

    def test_no_database(self) -> None:
        with pytest.raises(QueryError, match="no Database"):
            QueryBuilder().table("users").get()


class TestQueryExecution:
    def test_get_returns_collection(self, users: QueryBuilder) -> None:
        rows = users.where("role", "user").order_by("name").get()
        assert isinstance(rows, Collection)
        assert rows.map(lambda r: r["name"]).all() == ["bob", "carol"]

    def test_first(self, users: QueryBuilder) -> None:
        row = users.order_by("age", "DESC").where("age", "!=", None).first()
        assert row is not None
        assert row["name"] == "alice"
        assert users.where("name", "nobody").first() is None

    def test_count(self, users: QueryBuilder) -> None:
        assert users.count() == 4
        assert users.where("age", ">=", 18).count() == 2

    def test_exists(self, users: QueryBuilder) -> None:
        assert users.where("name", "bob").exists()
        assert not users.where("name", "zed").exists()

    def test_table_exists(self, db: Database) -> None:
        assert QueryBuilder(db).table("users").table_exists()
        assert not QueryBuilder(db).table("posts").table_exists()

    def test_pagination(self, users: QueryBuilder) -> None:
        page = users.select("name").order_by("id").page(2, 2).get()
        assert page.map(lambda r: r["name"]).all() == ["carol", "dave"]

    def test_insert(self, users: QueryBuilder) -> None:
        row_id = users.insert({"name": "erin", "age": 40})
        assert row_id == 5
        assert users.where("id", row_id).first() == {
            "id": 5,
            "name": "erin",
            "age": 40,
            "role": None,
        }

    def test_update(self, users: QueryBuilder) -> None:
        assert users.where("role", "user").update({"role": "member"}) == 2
        assert users.where("role", "member").count() == 2

    def test_delete(self, users: QueryBuilder) -> None:
        assert users.where("age", "<", 18).delete() == 1
        assert users.count() == 3

    def test_empty_insert(self, users: QueryBuilder) -> None:
        with pytest.raises(QueryError):
            users.insert({})
