import logging
import time

from sqlalchemy.exc import DBAPIError, DisconnectionError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

log = logging.getLogger(__name__)

TRANSIENT_MARKERS = ("connection", "timeout")


def is_transient_error(error: Exception) -> bool:
    """
    True for errors worth retrying: dropped connections and timeouts.

    For driver errors only the driver's own message is inspected, never
    the SQL statement or bound parameters SQLAlchemy appends to str(error).
    """
    if isinstance(error, (DisconnectionError, PoolTimeoutError)):
        return True
    if getattr(error, "connection_invalidated", False):
        return True
    if isinstance(error, DBAPIError):
        error = error.orig
    message = str(error).lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


class RetryPolicy:
    """
    Bounded retry with exponential backoff for transient database errors.

    With the defaults a failing call is attempted three times, sleeping
    1s and then 2s between attempts. Anything that is not transient is
    raised on the first failure.
    """

    def __init__(self, retries: int = 2, base_delay: float = 1.0, sleep=time.sleep):
        self.retries = retries
        self.base_delay = base_delay
        self.sleep = sleep

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** (attempt - 1))

    def call(self, fn, *args, **kwargs):
        attempt = 0
        while True:
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                if not is_transient_error(e) or attempt >= self.retries:
                    log.error(f"Query failed after {attempt + 1} attempt(s): {e}")
                    raise
                attempt += 1
                delay = self.delay_for(attempt)
                log.warning(
                    f"Query failed with connection error, retrying "
                    f"(attempt {attempt} of {self.retries}) in {delay:.1f}s"
                )
                self.sleep(delay)
