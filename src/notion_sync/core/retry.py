"""
Retry Module
Provides retry functionality for Notion API calls with exponential backoff.
"""

import time
from functools import wraps
from typing import Callable, Optional, Tuple

import requests

from notion_sync.config import API_MAX_RETRIES, API_RETRY_BASE_DELAY
from notion_sync.constants import RETRYABLE_STATUS_CODES
from notion_sync.logger import logger


ResponseFunc = Callable[..., requests.Response]


def backoff_delay(attempt: int, base_delay: float = API_RETRY_BASE_DELAY,
                  response: Optional[requests.Response] = None) -> float:
    """
    Delay before retry number `attempt` (0-based): base_delay * 2 ** attempt.

    A Retry-After header on the response raises the delay, never lowers it.
    """
    delay = base_delay * (2 ** attempt)
    if response is not None:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                delay = max(delay, float(retry_after))
            except ValueError:
                pass
    return delay


def retry_on_status(
    max_retries: int = API_MAX_RETRIES,
    base_delay: float = API_RETRY_BASE_DELAY,
    retryable_status_codes: Tuple[int, ...] = RETRYABLE_STATUS_CODES
) -> Callable[[ResponseFunc], ResponseFunc]:
    """
    Decorator for retrying response-returning functions with exponential backoff.

    Rate limiting (429), conflicts (409) and service unavailable (503) are
    transient on the Notion API and are retried. Any other response is
    returned as-is; when retries run out the last response is returned so
    the caller can turn it into an error.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds (will be multiplied exponentially)
        retryable_status_codes: HTTP status codes that should trigger a retry

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: ResponseFunc) -> ResponseFunc:
        @wraps(func)
        def wrapper(*args, **kwargs) -> requests.Response:
            for attempt in range(max_retries + 1):
                response = func(*args, **kwargs)

                if response.status_code not in retryable_status_codes:
                    return response

                if attempt < max_retries:
                    delay = backoff_delay(attempt, base_delay, response)
                    logger.warning(
                        f"Received {response.status_code}, retrying in {delay:.2f}s "
                        f"({attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                else:
                    logger.error(f"Max retries reached, last status: {response.status_code}")

            return response

        return wrapper
    return decorator


def call_with_retry(func: ResponseFunc, *args,
                    max_retries: int = API_MAX_RETRIES,
                    base_delay: float = API_RETRY_BASE_DELAY,
                    **kwargs) -> requests.Response:
    """
    Execute a function with retry logic.

    This is a functional alternative to the decorator for cases where
    the retry settings are only known at call time (e.g. per client).

    Args:
        func: Function returning a requests.Response
        *args: Positional arguments for the function
        max_retries: Maximum retry attempts
        base_delay: Base delay in seconds
        **kwargs: Keyword arguments for the function

    Returns:
        The final response
    """
    return retry_on_status(max_retries, base_delay)(func)(*args, **kwargs)
