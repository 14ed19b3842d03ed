"""Command-line entry point for a catalog scrape.

Usage:
    catalog-scraper
    catalog-scraper --pages 5 --delay 1
    catalog-scraper --database-url sqlite+aiosqlite:///shoes.db --concurrency 8

Every flag overrides the matching environment variable (see config.py).
Exit codes: 0 after a completed run (individual page/item failures are only
logged), 1 if the store is unreachable at startup, 130 on Ctrl-C.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from catalog_scraper.config import get_settings
from catalog_scraper.core.exceptions import StoreUnavailable
from catalog_scraper.core.logging import configure_logging
from catalog_scraper.scrapers.pipeline import run_scrape


log = structlog.get_logger("catalog_scraper")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-scraper",
        description="Scrape a paginated product catalog into the database.",
    )
    parser.add_argument("--database-url", dest="DATABASE_URL", help="SQLAlchemy async store URL")
    parser.add_argument("--base-url", dest="CATALOG_BASE_URL", help="Catalog listing URL (page number is appended)")
    parser.add_argument("--pages", dest="TOTAL_PAGES", type=int, help="Number of pages to fetch")
    parser.add_argument("--delay", dest="PAGE_DELAY_SECONDS", type=float, help="Seconds to wait between pages")
    parser.add_argument("--concurrency", dest="MAX_CONCURRENCY", type=int, help="Max items processed at once (0 = unbounded)")
    parser.add_argument("--timeout", dest="REQUEST_TIMEOUT_SECONDS", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--fetch-attempts", dest="FETCH_ATTEMPTS", type=int, help="Attempts per page")
    parser.add_argument("--insert-attempts", dest="INSERT_ATTEMPTS", type=int, help="Attempts per insert")
    parser.add_argument("--log-level", dest="LOG_LEVEL", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings(**vars(args))
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return 2

    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    try:
        asyncio.run(run_scrape(settings))
    except StoreUnavailable as e:
        log.critical("store_unavailable", error=e.message)
        return 1
    except KeyboardInterrupt:
        log.warning("interrupted")
        return 130

    log.info("run_complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
