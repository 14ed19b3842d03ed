"""Retry helpers with exponential backoff for page fetches and inserts."""

from typing import Tuple, Type

import httpx
import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base


logger = structlog.get_logger(__name__)


# Transient HTTP failures worth another attempt
HTTP_RETRY_EXCEPTIONS: Tuple[Type[BaseException], ...] = (
    httpx.HTTPStatusError,
    httpx.TransportError,
)

# Client errors other than these fail the same way on every attempt
RETRYABLE_STATUS_CODES = frozenset({408, 425, 429})

DEFAULT_WAIT = wait_exponential(multiplier=1, min=2, max=30)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    logger.warning(
        "retrying",
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        error=str(outcome.exception()) if outcome else None,
    )


def is_transient_http_error(exc: BaseException) -> bool:
    """Whether a fetch failure may succeed on a later attempt."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status in RETRYABLE_STATUS_CODES
    return isinstance(exc, HTTP_RETRY_EXCEPTIONS)


def http_retrying(attempts: int, wait: wait_base = DEFAULT_WAIT) -> AsyncRetrying:
    """Retry controller for page fetches.

    With ``attempts=1`` the call runs exactly once and its error is re-raised.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait,
        retry=retry_if_exception(is_transient_http_error),
        before_sleep=_log_before_sleep,
        reraise=True,
    )


def _is_transient_db_error(exc: BaseException) -> bool:
    # Constraint violations will fail the same way every time
    return isinstance(exc, SQLAlchemyError) and not isinstance(exc, IntegrityError)


def db_retrying(attempts: int, wait: wait_base = DEFAULT_WAIT) -> AsyncRetrying:
    """Retry controller for store inserts."""
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait,
        retry=retry_if_exception(_is_transient_db_error),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
