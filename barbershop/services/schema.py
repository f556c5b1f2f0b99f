"""
Schema creation and forward-only migrations.

Databases created by earlier releases lack the payment columns on
appointments, the products/sales/sale_items tables, and the current
sale_items column layout. ``MIGRATIONS`` lists the additive steps that
bring such a database up to date. Each step checks the live schema before
acting, so running the list again is a no-op.
"""

import logging
from typing import List

from sqlalchemy import inspect, text

from ..models import metadata

log = logging.getLogger(__name__)


class MigrationError(Exception):
    """Raised when a migration step fails; the whole run is rolled back."""


class AddColumn:
    def __init__(self, table: str, column: str, ddl: str):
        self.table = table
        self.column = column
        self.ddl = ddl

    @property
    def name(self) -> str:
        return f"{self.table}.{self.column}"

    def is_pending(self, connection) -> bool:
        inspector = inspect(connection)
        if not inspector.has_table(self.table):
            return False
        columns = {column["name"] for column in inspector.get_columns(self.table)}
        return self.column not in columns

    def apply(self, connection):
        connection.execute(
            text(f"ALTER TABLE {self.table} ADD COLUMN {self.column} {self.ddl}")
        )


class CreateTable:
    def __init__(self, table: str):
        self.table = table

    @property
    def name(self) -> str:
        return self.table

    def is_pending(self, connection) -> bool:
        return not inspect(connection).has_table(self.table)

    def apply(self, connection):
        metadata.tables[self.table].create(connection, checkfirst=True)


class CreateRoutine:
    """A stored routine, only for the dialect whose DDL it is written in."""

    def __init__(self, routine: str, ddl: str, dialect: str):
        self.routine = routine
        self.ddl = ddl
        self.dialect = dialect

    @property
    def name(self) -> str:
        return f"{self.routine}()"

    def is_pending(self, connection) -> bool:
        if connection.dialect.name != self.dialect:
            return False
        found = connection.execute(
            text("SELECT 1 FROM pg_proc WHERE proname = :name"),
            {"name": self.routine},
        ).first()
        return found is None

    def apply(self, connection):
        connection.execute(text(self.ddl))


INIT_SALE_ITEMS_ROUTINE = """
CREATE OR REPLACE FUNCTION public.init_sale_items_table() RETURNS void AS $$
BEGIN
  CREATE TABLE IF NOT EXISTS sale_items (
    id SERIAL PRIMARY KEY,
    sale_id INTEGER REFERENCES sales(id) ON DELETE CASCADE,
    item_id INTEGER,
    item_type VARCHAR(50) NOT NULL,
    name VARCHAR(255) NOT NULL,
    price DECIMAL(10, 2) NOT NULL,
    quantity INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
  );
END;
$$ LANGUAGE plpgsql;
"""

MIGRATIONS = [
    AddColumn("appointments", "payment_status", "VARCHAR(50) DEFAULT 'unpaid'"),
    AddColumn("appointments", "payment_method", "VARCHAR(50)"),
    CreateTable("products"),
    CreateTable("sales"),
    AddColumn("sales", "type", "VARCHAR(20) DEFAULT 'product'"),
    CreateTable("sale_items"),
    AddColumn("sale_items", "item_id", "INTEGER"),
    AddColumn("sale_items", "item_type", "VARCHAR(50) NOT NULL DEFAULT 'product'"),
    AddColumn("sale_items", "name", "VARCHAR(255) NOT NULL DEFAULT 'Unknown Product'"),
    AddColumn("sale_items", "quantity", "INTEGER NOT NULL DEFAULT 1"),
    CreateRoutine("init_sale_items_table", INIT_SALE_ITEMS_ROUTINE, "postgresql"),
]


def initialize_schema(store) -> bool:
    """Create any missing tables, parents before children."""
    if not store.supports_schema:
        log.info("Mock store in use, skipping schema initialization")
        return True

    try:
        with store.engine.begin() as connection:
            for table in metadata.sorted_tables:
                table.create(connection, checkfirst=True)
                log.info(f"{table.name} table created or already exists")
    except Exception as e:
        log.error(f"Error initializing database schema: {e}")
        return False

    log.info("Database schema initialized")
    return True


def reset_schema(store) -> bool:
    """Drop every table, children first, and create them again."""
    if not store.supports_schema:
        log.info("Mock store in use, skipping schema reset")
        return True

    try:
        with store.engine.begin() as connection:
            for table in reversed(metadata.sorted_tables):
                table.drop(connection, checkfirst=True)
        log.info("All tables dropped")
    except Exception as e:
        log.error(f"Error resetting database schema: {e}")
        return False

    return initialize_schema(store)


def pending_migrations(store) -> List[str]:
    if not store.supports_schema:
        return []
    with store.engine.connect() as connection:
        return [step.name for step in MIGRATIONS if step.is_pending(connection)]


def migrate_schema(store, steps=None) -> List[str]:
    """
    Apply the migration steps that are still pending.

    Returns the names of the steps that ran. On PostgreSQL and SQLite the
    run is a single transaction; on engines without transactional DDL a
    failure can leave earlier steps applied, which the next run skips.
    """
    if not store.supports_schema:
        log.info("Mock store in use, skipping schema migration")
        return []

    steps = MIGRATIONS if steps is None else steps
    applied = []
    try:
        with store.engine.begin() as connection:
            for step in steps:
                if not step.is_pending(connection):
                    continue
                log.info(f"Applying migration {step.name}")
                step.apply(connection)
                applied.append(step.name)
    except Exception as e:
        log.error(f"Error migrating database schema: {e}")
        raise MigrationError(str(e)) from e

    if applied:
        log.info(f"Database migration applied {len(applied)} step(s)")
    else:
        log.info("Database schema already up to date")
    return applied
