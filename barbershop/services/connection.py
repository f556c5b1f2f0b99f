import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url

from ..config import engine_options_for
from .retry import RetryPolicy
from .store import MemoryStore, SqlStore

log = logging.getLogger(__name__)


def describe_database(url) -> str:
    """Host part of a connection string, safe to show to users."""
    url = make_url(url)
    if url.host:
        return url.host
    if url.get_backend_name() == "sqlite":
        return f"sqlite ({url.database or 'memory'})"
    return url.get_backend_name()


class ConnectionManager:
    """
    Owns the store for the life of the process.

    The store is built on first use: a SqlStore over ``engine`` (or one
    created from ``database_url``), or a MemoryStore when neither is
    available or the engine cannot be created.
    """

    def __init__(self, database_url=None, engine=None, engine_options=None, retry=None):
        self.database_url = database_url
        if engine_options is None:
            engine_options = engine_options_for(database_url)
        self.engine_options = engine_options
        self.retry = retry or RetryPolicy()
        self._engine = engine
        self._store = None
        self._verified = False

    @property
    def store(self):
        if self._store is None:
            self._store = self._create_store()
        return self._store

    @property
    def is_mock(self) -> bool:
        return isinstance(self.store, MemoryStore)

    def _create_store(self):
        if self._engine is None:
            if not self.database_url:
                log.warning("DATABASE_URL not set, using in-memory mock store")
                return MemoryStore()
            try:
                self._engine = create_engine(self.database_url, **self.engine_options)
            except Exception as e:
                log.error(f"Error initializing database pool, using mock store: {e}")
                return MemoryStore()

        log.info(f"Connecting to database: {describe_database(self._engine.url)}")
        return SqlStore(self._engine, retry=self.retry)

    def ensure_connection(self) -> bool:
        """Build the store if needed. False while the database cannot be reached."""
        store = self.store
        if isinstance(store, MemoryStore) or self._verified:
            return True
        try:
            store.ping()
        except Exception as e:
            log.error(f"Database connection error: {e}")
            return False
        self._verified = True
        log.info("Database connected successfully")
        return True

    def check_status(self, timeout: float = 5.0) -> dict:
        store = self.store
        if isinstance(store, MemoryStore):
            return {"connected": True, "mock": True, "message": "Using in-memory mock store"}

        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(store.query, "SELECT 1 AS connected")
        try:
            future.result(timeout=timeout)
        except FutureTimeout:
            message = f"Database query timed out after {timeout:g} seconds"
            log.error(message)
            return {"connected": False, "mock": False, "message": message}
        except Exception as e:
            log.error(f"Database status query error: {e}")
            return {"connected": False, "mock": False, "message": str(e)}
        finally:
            executor.shutdown(wait=False)

        return {"connected": True, "mock": False, "message": "Database connection successful"}

    def dispose(self):
        if self._engine is not None:
            self._engine.dispose()
