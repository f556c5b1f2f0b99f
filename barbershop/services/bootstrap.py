import logging

from .schema import MigrationError, initialize_schema, migrate_schema, reset_schema
from .seed import seed_if_empty

log = logging.getLogger(__name__)


def initialize_database(connection) -> dict:
    """Connect, create missing tables, migrate and seed. Never raises."""
    if not connection.ensure_connection():
        return {"success": False, "message": "Failed to connect to database"}

    store = connection.store
    if not initialize_schema(store):
        return {"success": False, "message": "Failed to initialize database tables"}

    try:
        migrations = migrate_schema(store)
    except MigrationError as e:
        return {"success": False, "message": f"Failed to migrate database schema: {e}"}

    seeded = seed_if_empty(store)
    return {
        "success": True,
        "message": "Database initialized, migrated, and seeded successfully",
        "migrations": migrations,
        "seeded": seeded,
        "mock": connection.is_mock,
    }


def reset_database(connection) -> dict:
    """Drop and recreate every table, then seed."""
    if not connection.ensure_connection():
        return {"status": "error", "message": "Failed to connect to database"}

    store = connection.store
    if not reset_schema(store):
        return {"status": "error", "message": "Failed to reset database"}
    if not seed_if_empty(store):
        return {"status": "error", "message": "Failed to seed initial data"}

    log.info("Database reset and seeded")
    return {"status": "success", "message": "Database reset and seeded successfully"}
