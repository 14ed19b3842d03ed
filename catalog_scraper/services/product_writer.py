"""Persistence sink for extracted products.

A single writer task owns every insert, so at most one insert is in flight
at a time no matter how many item workers submit records.
"""

import asyncio
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from tenacity.wait import wait_base

from catalog_scraper.core.exceptions import PersistenceError
from catalog_scraper.models.product import ShoeProduct
from catalog_scraper.scrapers.base import ProductRecord
from catalog_scraper.scrapers.utils.retry import DEFAULT_WAIT, db_retrying


logger = structlog.get_logger(__name__)


class ProductWriter:
    """Queue-fed single-writer sink.

    Usage:
        writer = ProductWriter(store.session_factory)
        writer.start()
        await writer.submit(record)
        ...
        await writer.close()  # drains the queue first
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        attempts: int = 1,
        retry_wait: wait_base = DEFAULT_WAIT,
    ):
        """Initialize the writer.

        Args:
            session_factory: Factory for the run's store sessions
            attempts: Attempts per insert (1 = no retry)
            retry_wait: Backoff between insert attempts
        """
        self.session_factory = session_factory
        self.attempts = attempts
        self.retry_wait = retry_wait
        self._queue: asyncio.Queue[ProductRecord] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self.logger = logger.bind(service="product_writer")

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="product-writer")

    async def submit(self, record: ProductRecord) -> None:
        """Queue a record for insertion."""
        if self._task is None:
            raise RuntimeError("ProductWriter.start() must be called before submit()")
        await self._queue.put(record)

    async def close(self) -> None:
        """Wait for every queued record to be handled, then stop the writer."""
        if self._task is None:
            return
        await self._queue.join()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                await self.insert(record)
            except PersistenceError as e:
                self.logger.error(
                    "product_insert_failed",
                    brand=record.brand,
                    name=record.name,
                    error=e.message,
                )
            except Exception:
                # Keep the writer alive for the rest of the queue
                self.logger.exception("product_writer_unexpected_error", name=record.name)
            finally:
                self._queue.task_done()

    async def insert(self, record: ProductRecord) -> bool:
        """Insert one record.

        Returns:
            True if a row was written, False if the natural key already exists

        Raises:
            PersistenceError: If the store rejects the insert after all attempts
        """
        try:
            async for attempt in db_retrying(self.attempts, self.retry_wait):
                with attempt:
                    await self._insert_once(record)
        except IntegrityError:
            self.logger.info("duplicate_product_skipped", brand=record.brand, name=record.name)
            return False
        except SQLAlchemyError as e:
            raise PersistenceError(f"{type(e).__name__}: {e}") from e
        return True

    async def _insert_once(self, record: ProductRecord) -> None:
        async with self.session_factory() as session:
            try:
                session.add(ShoeProduct.from_record(record))
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise
