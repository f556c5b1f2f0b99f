import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

log = logging.getLogger(__name__)

# Under pytest only tests/.env.test is read
if "pytest" in sys.modules or os.environ.get("TESTING") == "True":
    test_env_path = Path(__file__).parent.parent / "tests" / ".env.test"
    if test_env_path.exists():
        load_dotenv(test_env_path, override=True)
        log.info(f"Loaded test environment from: {test_env_path}")
else:
    load_dotenv()

TESTING = os.environ.get("TESTING") == "True"
FLASK_ENV = os.environ.get("FLASK_ENV")


def env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def is_production_database(db_url: str) -> bool:
    """Check if a database URL appears to be production."""
    if not db_url:
        return False

    dangerous_patterns = [
        "neon.tech",
        "supabase.co",
        "pooler.supabase.com",
        "rlwy.net",
        "railway.internal",
        "production",
        "amazonaws.com",
        "azure.com",
    ]

    return any(pattern in db_url.lower() for pattern in dangerous_patterns)


def normalize_database_url(url: str) -> str:
    """Point bare postgres URLs at the psycopg2 driver."""
    if not url:
        return url
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg2://" + url[len(prefix):]
    return url


def engine_options_for(url: str) -> dict:
    """Pool and TLS settings for PostgreSQL; other backends use driver defaults."""
    if not url or not url.startswith("postgresql"):
        return {}
    return {
        "pool_size": int(os.environ.get("DB_POOL_SIZE", 10)),
        "pool_recycle": int(os.environ.get("DB_POOL_RECYCLE", 60)),
        "pool_pre_ping": True,
        "connect_args": {
            "sslmode": os.environ.get("DATABASE_SSLMODE", "require"),
            "connect_timeout": int(os.environ.get("DB_CONNECT_TIMEOUT", 30)),
        },
    }


def mask_database_url(url: str) -> str:
    if not url:
        return "not configured (mock store)"
    if "@" in url:
        protocol = url.split("://")[0]
        return f"{protocol}://****:****@{url.split('@', 1)[1]}"
    return url


url = normalize_database_url(os.environ.get("DATABASE_URL"))

if TESTING or FLASK_ENV == "testing":
    # Never let a test run touch a hosted database
    if is_production_database(url):
        log.warning("Test run configured with a production database URL, using in-memory SQLite")
        url = "sqlite://"
    log.info("TESTING MODE: Using test database")

if not url:
    log.warning("DATABASE_URL not set, the in-memory mock store will be used")
elif is_production_database(url):
    log.warning("Using production database - be careful!")

log.info(
    f"Configuration: environment={FLASK_ENV or 'production'} "
    f"testing={TESTING} database={mask_database_url(url)}"
)


class Config:
    SQLALCHEMY_DATABASE_URI = url
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(url)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get("SECRET_KEY", "supersecretdevkey123")

    TESTING = TESTING

    # Query executor and health check
    DB_QUERY_RETRIES = int(os.environ.get("DB_QUERY_RETRIES", 2))
    DB_RETRY_BASE_DELAY = float(os.environ.get("DB_RETRY_BASE_DELAY", 1.0))
    DB_STATUS_TIMEOUT = float(os.environ.get("DB_STATUS_TIMEOUT", 5.0))

    INIT_DB_ON_STARTUP = env_flag("INIT_DB_ON_STARTUP")
