"""Builds ProductRecord objects from item container elements."""

from typing import Callable, List

import structlog
from bs4 import Tag

from catalog_scraper.core.exceptions import MalformedNumber
from catalog_scraper.scrapers.base import CatalogSelectors, PriceInfo, ProductRecord
from catalog_scraper.scrapers.parsers import (
    parse_discount_percent,
    parse_price,
    parse_reviews_count,
    reviews_count_is_ambiguous,
)


logger = structlog.get_logger(__name__)


def child_text(item: Tag, selector: str) -> str:
    """Concatenated, stripped text of every match under ``item``.

    Returns an empty string when nothing matches.
    """
    return "".join(el.get_text() for el in item.select(selector)).strip()


class RecordExtractor:
    """Extracts one ProductRecord per item container.

    Extraction is all-or-nothing: the first numeric field that fails to parse
    aborts the item with a MalformedNumber naming that field.
    """

    def __init__(self, selectors: CatalogSelectors = CatalogSelectors()):
        self.selectors = selectors
        self.logger = logger.bind(service="record_extractor")

    def extract(self, item: Tag) -> ProductRecord:
        """Parse one item container.

        Args:
            item: BeautifulSoup element matched by the container selector

        Returns:
            ProductRecord with every numeric field parsed

        Raises:
            MalformedNumber: If a numeric field is missing or unparsable;
                ``field`` is set to the offending field name
        """
        sel = self.selectors

        brand = child_text(item, sel.brand)
        name = child_text(item, sel.name)

        original = self._parse_field("original_price", child_text(item, sel.original_price), parse_price)
        discount = self._parse_field("discount_percent", child_text(item, sel.discount), parse_discount_percent)
        discounted = self._parse_field("discounted_price", child_text(item, sel.discounted_price), parse_price)

        reviews_text = child_text(item, sel.reviews_count)
        reviews = self._parse_field("reviews_count", reviews_text, parse_reviews_count)
        if reviews_count_is_ambiguous(reviews_text):
            self.logger.warning(
                "reviews_count_needs_review",
                brand=brand,
                name=name,
                raw=reviews_text,
                parsed=reviews,
            )

        promotions: List[str] = [el.get_text(strip=True) for el in item.select(sel.promotions)]

        return ProductRecord(
            brand=brand,
            name=name,
            price=PriceInfo(
                original=original,
                discount_percent=discount,
                discounted=discounted,
            ),
            reviews_count=reviews,
            promotions=promotions,
        )

    @staticmethod
    def _parse_field(field: str, raw: str, parser: Callable[[str], int]) -> int:
        try:
            return parser(raw)
        except MalformedNumber as e:
            e.field = field
            raise
