import functools
import inspect
import logging
import time
import warnings

logger = logging.getLogger("huddle.performance")

SLOW_THRESHOLD = 0.5  # seconds


def _report(func, start_time: float):
    execution_time = time.perf_counter() - start_time
    log = logger.warning if execution_time >= SLOW_THRESHOLD else logger.debug
    log(f"{func.__name__} completed in {humanize_milliseconds(execution_time * 1000)}")


def time_it(func):
    """Decorator to measure execution time of sync or async functions"""

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _report(func, start_time)

        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            _report(func, start_time)

    return sync_wrapper


def setup_logs():
    warnings.simplefilter("default")
    logging.getLogger("huddle").setLevel(logging.DEBUG)
    logging.basicConfig()


def humanize_milliseconds(elapsed):
    """Write a millisecond amount in a human-readable way.
    >>> humanize_milliseconds(0)
    '0 ms.'
    >>> humanize_milliseconds(11)
    '11 ms.'
    >>> humanize_milliseconds(30*1000)
    '30"'
    >>> humanize_milliseconds(30*1000+10)
    '30.0"'
    """
    elapsed = int(elapsed)
    if elapsed <= 5000:  # up to 5" we show milliseconds
        return f"{elapsed:,} ms."
    elapsed /= 1000.0
    if elapsed == int(elapsed):  # get rid of decimals
        return f'{int(elapsed)}"'
    return f'{elapsed:.1f}"'
