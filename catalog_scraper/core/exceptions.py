"""Custom exception classes for the catalog scraper."""

from typing import Optional


class CatalogScraperError(Exception):
    """Base exception for all catalog scraper errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class FetchError(CatalogScraperError):
    """Raised when a listing page cannot be retrieved."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class MalformedNumber(CatalogScraperError):
    """Raised when a numeric field's raw text does not parse."""

    def __init__(self, raw: str, reason: str, field: Optional[str] = None):
        self.raw = raw
        self.reason = reason
        self.field = field
        super().__init__(f"Malformed number {raw!r}: {reason}")


class PersistenceError(CatalogScraperError):
    """Raised when the store rejects or cannot accept an insert."""


class StoreUnavailable(CatalogScraperError):
    """Raised when the store cannot be reached at startup."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Store unavailable at {url}: {reason}")
