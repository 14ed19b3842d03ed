"""Listing page fetcher.

Resolves one page URL to a parsed document and hands every item container
to a callback. Transport details stay behind the injected httpx client.
"""

from typing import Callable, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import httpx
import structlog
from bs4 import BeautifulSoup, Tag
from tenacity.wait import wait_base

from catalog_scraper.core.exceptions import FetchError
from catalog_scraper.scrapers.base import CatalogSelectors
from catalog_scraper.scrapers.utils.retry import DEFAULT_WAIT, http_retrying


logger = structlog.get_logger(__name__)


def build_page_url(base_url: str, page: int) -> str:
    """Substitute a page number into the catalog URL.

    ``https://shop/catalog/`` -> ``https://shop/catalog/?page=3``. Existing
    query parameters are kept; an existing ``page`` parameter is replaced.
    """
    parsed = urlparse(base_url)
    params = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != "page"]
    params.append(("page", str(page)))
    return urlunparse(parsed._replace(query=urlencode(params)))


class PageFetcher:
    """Fetches listing pages and enumerates their item containers."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        selectors: CatalogSelectors = CatalogSelectors(),
        attempts: int = 1,
        retry_wait: wait_base = DEFAULT_WAIT,
    ):
        """Initialize the fetcher.

        Args:
            client: HTTP client used for every request
            selectors: Selector set; only ``container`` is used here
            attempts: Attempts per page (1 = no retry)
            retry_wait: Backoff between attempts
        """
        self.client = client
        self.selectors = selectors
        self.attempts = attempts
        self.retry_wait = retry_wait
        self.logger = logger.bind(service="page_fetcher")

    async def fetch(self, url: str, on_item: Optional[Callable[[Tag], None]] = None) -> int:
        """Fetch one page and invoke ``on_item`` per item container.

        Args:
            url: Absolute page URL
            on_item: Called synchronously with each container, in document order

        Returns:
            Number of item containers found

        Raises:
            FetchError: On non-2xx status, transport error or timeout
        """
        html = await self._get_html(url)

        soup = BeautifulSoup(html, "lxml")
        items = soup.select(self.selectors.container)
        self.logger.info("page_parsed", url=url, items=len(items))

        if on_item is not None:
            for item in items:
                on_item(item)
        return len(items)

    async def _get_html(self, url: str) -> str:
        try:
            async for attempt in http_retrying(self.attempts, self.retry_wait):
                with attempt:
                    self.logger.info("visiting", url=url)
                    response = await self.client.get(url)
                    response.raise_for_status()
                    return response.text
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"{type(e).__name__}: {e}") from e
        raise FetchError(url, "no attempt made")
