"""Tests for RecordExtractor."""

import pytest
from bs4 import BeautifulSoup
from structlog.testing import capture_logs

from catalog_scraper.core.exceptions import MalformedNumber
from catalog_scraper.scrapers.base import CatalogSelectors
from catalog_scraper.scrapers.extractor import RecordExtractor, child_text

from tests.factories import item_html, parse_item


@pytest.fixture
def extractor() -> RecordExtractor:
    return RecordExtractor()


class TestRecordExtractor:
    def test_extracts_well_formed_item(self, extractor):
        record = extractor.extract(parse_item(item_html()))

        assert record.to_document() == {
            "brand": "Acme",
            "name": "Runner X",
            "price": {"original": 5000, "discount_percent": 10, "discounted": 4500},
            "reviews_count": 42,
            "promotions": ["Sale"],
        }

    def test_missing_brand_is_empty_string(self, extractor):
        record = extractor.extract(parse_item(item_html(brand=None)))
        assert record.brand == ""

    def test_promotions_keep_document_order_and_duplicates(self, extractor):
        item = parse_item(item_html(promotions=["-10% code", "Sale", "Sale"]))
        record = extractor.extract(item)
        assert record.promotions == ["-10% code", "Sale", "Sale"]

    def test_no_promotions(self, extractor):
        record = extractor.extract(parse_item(item_html(promotions=[])))
        assert record.promotions == []

    def test_discounted_above_original_is_passed_through(self, extractor):
        item = parse_item(item_html(original="1,000 ₽", discounted="1,500 ₽"))
        record = extractor.extract(item)
        assert record.price.original == 1000
        assert record.price.discounted == 1500

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"original": None}, "original_price"),
            ({"discount": "big sale"}, "discount_percent"),
            ({"discounted": "n/a"}, "discounted_price"),
            ({"reviews": "no reviews"}, "reviews_count"),
        ],
    )
    def test_unparsable_numeric_field_names_the_field(self, extractor, overrides, field):
        with pytest.raises(MalformedNumber) as exc_info:
            extractor.extract(parse_item(item_html(**overrides)))
        assert exc_info.value.field == field

    def test_first_failing_field_wins(self, extractor):
        item = parse_item(item_html(original="oops", discounted="oops"))
        with pytest.raises(MalformedNumber) as exc_info:
            extractor.extract(item)
        assert exc_info.value.field == "original_price"
        assert exc_info.value.raw == "oops"

    def test_ambiguous_reviews_are_flagged_but_kept(self, extractor):
        with capture_logs() as logs:
            record = extractor.extract(parse_item(item_html(reviews="1.2K")))

        assert record.reviews_count == 12
        flagged = [e for e in logs if e["event"] == "reviews_count_needs_review"]
        assert len(flagged) == 1
        assert flagged[0]["raw"] == "1.2K"
        assert flagged[0]["log_level"] == "warning"

    def test_custom_selectors(self):
        selectors = CatalogSelectors(
            container=".card",
            brand=".b",
            name=".n",
            original_price=".op",
            discount=".d",
            discounted_price=".dp",
            reviews_count=".r",
            promotions=".p",
        )
        html = (
            '<div class="card"><i class="b">Nord</i><i class="n">Trail</i>'
            '<i class="op">2,000 ₽</i><i class="d">50%</i><i class="dp">1,000 ₽</i>'
            '<i class="r">3 отзыва</i></div>'
        )
        item = BeautifulSoup(html, "lxml").select_one(".card")
        record = RecordExtractor(selectors).extract(item)

        assert record.brand == "Nord"
        assert record.price.discount_percent == 50
        assert record.reviews_count == 3
        assert record.promotions == []


def test_child_text_concatenates_matches():
    item = parse_item('<div class="css-f4s3gt"><b> A </b><b>B </b></div>')
    assert child_text(item, "b") == "A B"
    assert child_text(item, ".missing") == ""
