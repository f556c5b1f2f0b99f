from flask import current_app
from flask_sqlalchemy import SQLAlchemy

from .services.connection import ConnectionManager
from .services.retry import RetryPolicy

db = SQLAlchemy()


def init_connection(app) -> ConnectionManager:
    """
    Build the app's ConnectionManager.

    Flask-SQLAlchemy creates the pooled engine from the app config. Without
    a database URL, or when the engine cannot be created (missing driver,
    malformed URL), the manager falls back to the in-memory mock store.
    """
    engine = None
    if app.config.get("SQLALCHEMY_DATABASE_URI"):
        try:
            db.init_app(app)
            with app.app_context():
                engine = db.engine
        except Exception as e:
            app.logger.error(f"Error initializing database engine, using mock store: {e}")

    connection = ConnectionManager(
        engine=engine,
        retry=RetryPolicy(
            retries=app.config.get("DB_QUERY_RETRIES", 2),
            base_delay=app.config.get("DB_RETRY_BASE_DELAY", 1.0),
        ),
    )
    app.extensions["connection"] = connection
    return connection


def get_connection() -> ConnectionManager:
    return current_app.extensions["connection"]


def get_store():
    """The current app's store, connecting first if needed."""
    connection = get_connection()
    connection.ensure_connection()
    return connection.store
