"""Catalog scraping: field parsers, record extraction, page fetching.

The pipeline coordinator lives in ``catalog_scraper.scrapers.pipeline`` and
is not re-exported here to keep model imports free of cycles.
"""

from .base import CatalogSelectors, PriceInfo, ProductRecord
from .parsers import (
    parse_discount_percent,
    parse_price,
    parse_reviews_count,
    reviews_count_is_ambiguous,
)

__all__ = [
    # Data structures
    "CatalogSelectors",
    "PriceInfo",
    "ProductRecord",
    # Field parsers
    "parse_price",
    "parse_discount_percent",
    "parse_reviews_count",
    "reviews_count_is_ambiguous",
]
