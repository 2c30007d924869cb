"""
Run a database-bound callable under a wall-clock ceiling.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from flask import current_app

from steelbuckle.errors import QueryTimeoutError

logger = logging.getLogger(__name__)

_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="query-timeout")


def run_with_timeout(func, timeout_seconds, *args, **kwargs):
    """Call `func` in a worker thread with its own app context.

    `func` must return plain data (no ORM objects): its session is closed when
    the worker's app context ends. Raises QueryTimeoutError when the ceiling
    is exceeded; the worker is left to finish on its own.
    """
    app = current_app._get_current_object()

    def call():
        with app.app_context():
            return func(*args, **kwargs)

    future = _EXECUTOR.submit(call)
    try:
        return future.result(timeout=timeout_seconds)
    except FutureTimeoutError:
        future.cancel()
        logger.error(f"{getattr(func, '__name__', func)} exceeded {timeout_seconds}s")
        raise QueryTimeoutError("Database query timed out")
