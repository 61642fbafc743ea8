"""Retry decorator for transient Google API failures."""
import time
import functools
import ssl
import socket
from googleapiclient.errors import HttpError

from spendflow.config.settings import get_settings
from spendflow.utils.exceptions import RetryableError
from spendflow.utils.logger import get_logger

logger = get_logger()

# Define exceptions that are safe to retry
RETRYABLE_ERRORS = (
    ConnectionError,
    TimeoutError,
    socket.timeout,
    ssl.SSLError,
    HttpError,
    RetryableError
)


def retry_with_backoff(max_retries=None, initial_delay=None, backoff_factor=None, retryable_exceptions=RETRYABLE_ERRORS):
    """Decorator for exponential backoff retries.

    Unset parameters fall back to the ``retry`` section of settings.yaml.
    Only wrap idempotent calls: a retried call may have already been applied
    remotely.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            settings = get_settings()
            retries = settings.retry_max_retries if max_retries is None else max_retries
            delay = settings.retry_initial_delay_seconds if initial_delay is None else initial_delay
            factor = settings.retry_backoff_factor if backoff_factor is None else backoff_factor
            last_exception = None

            for attempt in range(retries + 1):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    last_exception = e

                    # Don't retry 4xx HttpErrors (except 429)
                    if isinstance(e, HttpError):
                        if e.resp.status < 500 and e.resp.status != 429:
                            raise

                    if attempt == retries:
                        break

                    wait_time = delay * (factor ** attempt)

                    if "SSL" in str(e):
                        logger.warning(f"SSL issue in {func.__name__} (Attempt {attempt+1}): {e}. Retrying...")
                    else:
                        logger.warning(f"Network glitch in {func.__name__} (Attempt {attempt+1}): {e}. Retrying in {wait_time}s...")

                    time.sleep(wait_time)

            logger.error(f"Permanently failed {func.__name__} after {retries} retries.")
            raise last_exception
        return wrapper
    return decorator
