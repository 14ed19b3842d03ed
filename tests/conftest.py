"""Pytest configuration and shared fixtures."""

import sys
from typing import List

import pytest
import pytest_asyncio
import structlog

from catalog_scraper.db.session import open_store
from catalog_scraper.scrapers.base import ProductRecord


MEMORY_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


# ============================================================================
# FIXTURES
# ============================================================================

class RecordingSink:
    """In-memory sink capturing submitted records."""

    def __init__(self):
        self.records: List[ProductRecord] = []

    async def submit(self, record: ProductRecord) -> None:
        self.records.append(record)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest_asyncio.fixture
async def store():
    """In-memory SQLite store with the schema created."""
    store = await open_store(MEMORY_DB_URL)
    yield store
    await store.close()


@pytest.fixture
def digit_limit():
    """Pin int()'s string-conversion limit to its minimum (640 digits)."""
    if not hasattr(sys, "set_int_max_str_digits"):
        pytest.skip("interpreter has no int string-conversion limit")
    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(640)
    yield 640
    sys.set_int_max_str_digits(previous)
