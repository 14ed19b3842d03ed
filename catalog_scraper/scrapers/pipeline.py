"""Pipeline coordinator.

Drives pagination, paces requests, fans item extraction out to concurrent
tasks and waits for all of them before shutting down.

State machine: INIT -> RUNNING -> DRAINING -> SHUTDOWN
"""

import asyncio
import contextlib
import enum
from typing import Optional, Protocol, Set

import httpx
import structlog
from bs4 import Tag

from catalog_scraper.config import Settings
from catalog_scraper.core.exceptions import FetchError, MalformedNumber
from catalog_scraper.db.session import open_store
from catalog_scraper.scrapers.base import CatalogSelectors, ProductRecord
from catalog_scraper.scrapers.extractor import RecordExtractor
from catalog_scraper.scrapers.fetcher import PageFetcher, build_page_url
from catalog_scraper.services.product_writer import ProductWriter


logger = structlog.get_logger(__name__)


class PipelineState(str, enum.Enum):
    INIT = "init"
    RUNNING = "running"
    DRAINING = "draining"
    SHUTDOWN = "shutdown"


class RecordSink(Protocol):
    async def submit(self, record: ProductRecord) -> None: ...


class CatalogPipeline:
    """Coordinates one pass over the catalog.

    Pages are fetched strictly in order, one at a time. Items are processed
    concurrently and in no particular order; ``max_concurrency`` bounds how
    many run at once (0 means unbounded).
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        sink: RecordSink,
        base_url: str,
        total_pages: int,
        page_delay: float,
        max_concurrency: int = 0,
        extractor: Optional[RecordExtractor] = None,
    ):
        self.fetcher = fetcher
        self.sink = sink
        self.base_url = base_url
        self.total_pages = total_pages
        self.page_delay = page_delay
        self.extractor = extractor or RecordExtractor(fetcher.selectors)
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None
        self._tasks: Set[asyncio.Task] = set()
        self.state = PipelineState.INIT
        self.logger = logger.bind(service="catalog_pipeline")

    def transition(self, state: PipelineState) -> None:
        self.state = state
        self.logger.info("pipeline_state_changed", state=state.value)

    @property
    def in_flight(self) -> int:
        """Number of dispatched item tasks not yet finished."""
        return len(self._tasks)

    async def run(self) -> None:
        """Fetch every page, then wait for all dispatched item work.

        Page and item failures are logged and skipped. On cancellation the
        outstanding item tasks are cancelled and awaited before re-raising.
        """
        self.transition(PipelineState.RUNNING)
        try:
            for page in range(1, self.total_pages + 1):
                url = build_page_url(self.base_url, page)
                try:
                    await self.fetcher.fetch(url, on_item=lambda item, page=page: self.dispatch(item, page))
                except FetchError as e:
                    self.logger.error("page_fetch_failed", page=page, url=url, error=e.reason)
                # Fixed pacing, applied whether or not the fetch succeeded
                await asyncio.sleep(self.page_delay)

            self.transition(PipelineState.DRAINING)
            await self.drain()
        except asyncio.CancelledError:
            self.logger.warning("pipeline_cancelled", pending=self.in_flight)
            await self._cancel_pending()
            raise

    def dispatch(self, item: Tag, page: int) -> asyncio.Task:
        """Schedule extraction of one item container as its own task."""
        task = asyncio.create_task(self._process_item(item, page))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Block until every dispatched item task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _cancel_pending(self) -> None:
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    async def _process_item(self, item: Tag, page: int) -> None:
        limiter = self._semaphore or contextlib.nullcontext()
        async with limiter:
            try:
                record = self.extractor.extract(item)
            except MalformedNumber as e:
                self.logger.error(
                    "item_extraction_failed",
                    page=page,
                    field=e.field,
                    raw=e.raw,
                    error=e.reason,
                )
                return
            except Exception:
                self.logger.exception("item_processing_failed", page=page)
                return

            self.logger.info("product_extracted", page=page, **record.to_document())
            await self.sink.submit(record)


def build_http_client(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=transport,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": settings.USER_AGENT},
    )


async def run_scrape(
    settings: Settings,
    selectors: CatalogSelectors = CatalogSelectors(),
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Run the whole pipeline end to end.

    Args:
        settings: Run configuration
        selectors: Catalog layout selectors
        transport: Optional httpx transport (tests pass httpx.MockTransport)

    Raises:
        StoreUnavailable: If the store cannot be reached; nothing is fetched
    """
    log = logger.bind(service="run_scrape")
    log.info(
        "pipeline_state_changed",
        state=PipelineState.INIT.value,
        base_url=settings.CATALOG_BASE_URL,
        total_pages=settings.TOTAL_PAGES,
    )
    store = await open_store(settings.DATABASE_URL, echo=settings.DEBUG)

    writer = ProductWriter(store.session_factory, attempts=settings.INSERT_ATTEMPTS)
    client = build_http_client(settings, transport)

    pipeline = CatalogPipeline(
        fetcher=PageFetcher(client, selectors, attempts=settings.FETCH_ATTEMPTS),
        sink=writer,
        base_url=settings.CATALOG_BASE_URL,
        total_pages=settings.TOTAL_PAGES,
        page_delay=settings.PAGE_DELAY_SECONDS,
        max_concurrency=settings.MAX_CONCURRENCY,
    )

    writer.start()
    try:
        await pipeline.run()
    finally:
        await writer.close()
        await client.aclose()
        await store.close()
        pipeline.transition(PipelineState.SHUTDOWN)
