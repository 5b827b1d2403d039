"""Synchronous SQLite access over the stdlib ``sqlite3`` module.

Route handlers run synchronously in a worker thread, so the database
API is synchronous too. One connection is shared by every worker thread
and serialized with a re-entrant lock.

Connection URL format::

    sqlite:///path/to/db.sqlite    # SQLite file
    sqlite:///:memory:             # In-memory SQLite
"""

import logging
import sqlite3
import threading
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from wren.data.errors import DataError, QueryError

logger = logging.getLogger("wren.data")

Row = dict[str, Any]


class Database:
    """Thread-safe SQLite connection with dict rows.

    Usage::

        db = Database("sqlite:///app.db")

        db.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
        user_id = db.insert("INSERT INTO users (name) VALUES (?)", "Alice")
        rows = db.fetch("SELECT * FROM users WHERE id = ?", user_id)
        count = db.fetch_val("SELECT COUNT(*) FROM users")

        with db.transaction():
            db.execute("UPDATE users SET name = ? WHERE id = ?", "Bob", user_id)
            db.execute("DELETE FROM sessions WHERE user_id = ?", user_id)

    The connection opens lazily on the first statement. Call
    ``connect()`` to fail fast at startup.
    """

    __slots__ = ("_conn", "_echo", "_in_transaction", "_lock", "_path", "url")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self.url = url
        self._path = _parse_sqlite_path(url)
        self._echo = echo
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.RLock()
        self._in_transaction = False

    def __repr__(self) -> str:
        return f"Database({self.url!r})"

    # -- Lifecycle --

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> None:
        """Open the connection. Safe to call more than once."""
        with self._lock:
            if self._conn is not None:
                return
            try:
                self._conn = sqlite3.connect(
                    self._path, autocommit=True, check_same_thread=False
                )
            except sqlite3.Error as exc:
                msg = f"Cannot open {self.url!r}: {exc}"
                raise DataError(msg) from exc
            logger.debug("Connected to %s", self.url)

    def disconnect(self) -> None:
        """Close the connection. Safe to call when not connected."""
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            logger.debug("Disconnected from %s", self.url)

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *_: Any) -> None:
        self.disconnect()

    # -- Statements --

    def fetch(self, sql: str, /, *params: Any) -> list[Row]:
        """Run a query and return every row as a dict."""
        with self._cursor(sql, params) as cursor:
            rows = cursor.fetchall()
            return [_to_dict(cursor, row) for row in rows]

    def fetch_one(self, sql: str, /, *params: Any) -> Row | None:
        """Run a query and return the first row, or ``None``."""
        with self._cursor(sql, params) as cursor:
            row = cursor.fetchone()
            return None if row is None else _to_dict(cursor, row)

    def fetch_val(self, sql: str, /, *params: Any) -> Any:
        """Run a query and return the first column of the first row."""
        with self._cursor(sql, params) as cursor:
            row = cursor.fetchone()
            return None if row is None else row[0]

    def execute(self, sql: str, /, *params: Any) -> int:
        """Run an INSERT/UPDATE/DELETE/DDL statement. Returns the row count."""
        with self._cursor(sql, params) as cursor:
            return cursor.rowcount

    def insert(self, sql: str, /, *params: Any) -> int | None:
        """Run an INSERT and return the new row id."""
        with self._cursor(sql, params) as cursor:
            return cursor.lastrowid

    def execute_script(self, sql: str, /) -> None:
        """Run several ``;``-separated statements (schema setup)."""
        conn = self._connection()
        with self._lock:
            try:
                conn.executescript(sql)
            except sqlite3.Error as exc:
                raise QueryError(str(exc)) from exc

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed statements atomically.

        Commits on clean exit, rolls back on exception. Nested blocks join
        the outer transaction.
        """
        conn = self._connection()
        with self._lock:
            if self._in_transaction:
                yield
                return
            self._in_transaction = True
            conn.autocommit = False
            try:
                yield
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()
            finally:
                conn.autocommit = True
                self._in_transaction = False

    # -- Internal --

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    @contextmanager
    def _cursor(self, sql: str, params: Sequence[Any]) -> Iterator[sqlite3.Cursor]:
        conn = self._connection()
        t0 = time.perf_counter()
        with self._lock:
            try:
                cursor = conn.execute(sql, tuple(params))
            except sqlite3.Error as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)
            try:
                yield cursor
            finally:
                cursor.close()

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        if not self._echo:
            return
        param_str = f"  params={tuple(params)!r}" if params else ""
        logger.info("%6.1fms  %s%s", elapsed * 1000, sql, param_str)


def _to_dict(cursor: sqlite3.Cursor, row: Sequence[Any]) -> Row:
    columns = [desc[0] for desc in cursor.description]
    return dict(zip(columns, row, strict=True))


def _parse_sqlite_path(url: str) -> str:
    """Extract the file path from a sqlite:// URL."""
    # sqlite:///path/to/db  ->  path/to/db
    # sqlite:///:memory:    ->  :memory:
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            path = url[len(prefix) :]
            if path:
                return path
    msg = f"Unsupported database URL {url!r}. Use sqlite:///path or sqlite:///:memory:"
    raise DataError(msg)
