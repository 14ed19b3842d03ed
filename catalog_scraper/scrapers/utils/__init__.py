"""Scraper utilities: retry controllers for fetches and inserts."""

from .retry import (
    DEFAULT_WAIT,
    HTTP_RETRY_EXCEPTIONS,
    db_retrying,
    http_retrying,
    is_transient_http_error,
)


__all__ = [
    "DEFAULT_WAIT",
    "HTTP_RETRY_EXCEPTIONS",
    "http_retrying",
    "db_retrying",
    "is_transient_http_error",
]
