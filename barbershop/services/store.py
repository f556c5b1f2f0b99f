"""
Stores behind the data-access layer.

Both variants expose the same capability, ``query(sql, params) -> rows``,
plus ``transaction()``. Statements use SQLAlchemy ``text()`` named binds
(``:name``) and rows come back as plain dicts.
"""

import copy
import logging
import time
from contextlib import contextmanager

from sqlalchemy import event, text

from .retry import RetryPolicy

log = logging.getLogger(__name__)


def _execute(connection, sql, params=None):
    start = time.perf_counter()
    result = connection.execute(text(sql), params or {})
    rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
    duration_ms = (time.perf_counter() - start) * 1000
    count = len(rows) if result.returns_rows else max(result.rowcount, 0)
    statement = " ".join(sql.split())
    log.debug(f"Executed query {statement} ({duration_ms:.1f} ms, {count} rows)")
    return rows


def _sqlite_on_connect(dbapi_connection, connection_record):
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINT and DDL behave.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_on_begin(connection):
    connection.exec_driver_sql("BEGIN")


def configure_sqlite(engine):
    if not event.contains(engine, "connect", _sqlite_on_connect):
        event.listen(engine, "connect", _sqlite_on_connect)
    if not event.contains(engine, "begin", _sqlite_on_begin):
        event.listen(engine, "begin", _sqlite_on_begin)


class Transaction:
    """A connection with an open transaction, handed out by SqlStore.transaction()."""

    def __init__(self, connection):
        self.connection = connection

    def query(self, sql, params=None):
        return _execute(self.connection, sql, params)

    @contextmanager
    def savepoint(self):
        with self.connection.begin_nested():
            yield self


class SqlStore:
    """Query executor over a pooled SQLAlchemy engine."""

    supports_schema = True

    def __init__(self, engine, retry: RetryPolicy = None):
        self.engine = engine
        self.retry = retry or RetryPolicy()
        if engine.dialect.name == "sqlite":
            configure_sqlite(engine)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def _run(self, sql, params):
        with self.engine.begin() as connection:
            return _execute(connection, sql, params)

    def query(self, sql, params=None):
        return self.retry.call(self._run, sql, params)

    @contextmanager
    def transaction(self):
        """Commit on exit, roll back if the block raises."""
        with self.engine.begin() as connection:
            yield Transaction(connection)

    def ping(self):
        self.query("SELECT 1 AS connected")

    def describe(self) -> str:
        return self.engine.url.render_as_string(hide_password=True)


FIXTURE_DATA = {
    "customers": [
        {
            "id": 1,
            "name": "Ahmet Yılmaz",
            "phone": "555-1234",
            "email": "ahmet@example.com",
            "visits": 12,
            "last_visit": "2025-03-15",
        },
        {
            "id": 2,
            "name": "Ayşe Demir",
            "phone": "555-5678",
            "email": "ayse@example.com",
            "visits": 8,
            "last_visit": "2025-03-20",
        },
    ],
    "services": [
        {"id": 1, "name": "Haircut", "duration": 30, "price": 100, "description": "Standard haircut"},
        {"id": 2, "name": "Beard Trim", "duration": 20, "price": 50, "description": "Beard shaping"},
    ],
    "appointments": [],
}

INSERT_DEFAULTS = {
    "customers": {"name": "New Customer", "phone": "", "email": "", "visits": 0, "last_visit": None},
    "services": {"name": "New Service", "duration": 30, "price": 0, "description": ""},
}


class MemoryStore:
    """
    In-memory stand-in used when no database can be reached.

    Only listing, lookup by id and inserts for customers and services are
    understood. Any other statement yields no rows.
    """

    supports_schema = False
    dialect = "memory"

    def __init__(self):
        self.tables = copy.deepcopy(FIXTURE_DATA)

    def query(self, sql, params=None):
        params = params or {}
        statement = " ".join(sql.lower().split())
        log.debug(f"Mock query: {statement} {params}")

        for table, defaults in INSERT_DEFAULTS.items():
            if statement.startswith(f"select * from {table}"):
                rows = self.tables[table]
                if "where id" in statement:
                    rows = [row for row in rows if row["id"] == params.get("id")]
                return [dict(row) for row in rows]
            if statement.startswith(f"insert into {table}"):
                return [self._insert(table, defaults, params)]

        return []

    def _insert(self, table, defaults, params):
        rows = self.tables[table]
        row = {"id": max((r["id"] for r in rows), default=0) + 1}
        for column, default in defaults.items():
            value = params.get(column)
            row[column] = default if value in (None, "") and default is not None else value
        rows.append(row)
        return dict(row)

    @contextmanager
    def transaction(self):
        yield self

    @contextmanager
    def savepoint(self):
        yield self

    def ping(self):
        return None

    def describe(self) -> str:
        return "in-memory mock store"
