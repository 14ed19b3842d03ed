"""Tests for the field parsers."""

import pytest

from catalog_scraper.core.exceptions import MalformedNumber
from catalog_scraper.scrapers.parsers import (
    parse_discount_percent,
    parse_price,
    parse_reviews_count,
    reviews_count_is_ambiguous,
)


class TestParsePrice:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12,500 ₽", 12500),
            ("12\u00a0500\u00a0₽", 12500),
            ("1,234,567 ₽", 1234567),
            ("  990 ₽  ", 990),
            ("4500", 4500),
            ("3,200 руб.", 3200),
            ("+15 ₽", 15),
        ],
    )
    def test_valid_prices(self, raw, expected):
        assert parse_price(raw) == expected

    def test_plain_space_is_not_a_separator(self):
        with pytest.raises(MalformedNumber):
            parse_price("12 500 ₽")

    @pytest.mark.parametrize("raw", ["", "   ", "₽", "12.5 ₽", "abc", "5,000 $", "١٢٣"])
    def test_malformed_prices(self, raw):
        with pytest.raises(MalformedNumber) as exc_info:
            parse_price(raw)
        assert exc_info.value.raw == raw
        assert exc_info.value.field is None

    def test_idempotent_on_own_output(self):
        value = parse_price("12,500 ₽")
        assert parse_price(str(value)) == value


class TestParseDiscountPercent:
    @pytest.mark.parametrize(
        "raw, expected",
        [(" 20% ", 20), ("20%", 20), ("7", 7), ("-30%", -30), ("15 %", 15)],
    )
    def test_valid_discounts(self, raw, expected):
        assert parse_discount_percent(raw) == expected

    @pytest.mark.parametrize("raw", ["", "%", "20.5%", "twenty%", "20%%"])
    def test_malformed_discounts(self, raw):
        with pytest.raises(MalformedNumber):
            parse_discount_percent(raw)

    def test_idempotent_on_own_output(self):
        value = parse_discount_percent(" 20% ")
        assert parse_discount_percent(str(value)) == value


class TestParseReviewsCount:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("123 отзывa", 123),
            ("42", 42),
            ("(7)", 7),
            ("1 234 reviews", 1234),
            # Known lossy rule: magnitude suffixes are not interpreted
            ("1.2K", 12),
        ],
    )
    def test_concatenates_digits(self, raw, expected):
        assert parse_reviews_count(raw) == expected

    @pytest.mark.parametrize("raw", ["no reviews", "", "   "])
    def test_no_digits_is_malformed(self, raw):
        with pytest.raises(MalformedNumber):
            parse_reviews_count(raw)

    def test_idempotent_on_own_output(self):
        value = parse_reviews_count("123 отзывa")
        assert parse_reviews_count(str(value)) == value


class TestReviewsCountIsAmbiguous:
    @pytest.mark.parametrize("raw", ["1.2K", "1 234 reviews", "3k", "5 тыс", "2M"])
    def test_flags_lossy_inputs(self, raw):
        assert reviews_count_is_ambiguous(raw) is True

    @pytest.mark.parametrize("raw", ["42", "123 отзывa", "(7)", "no reviews"])
    def test_plain_counts_are_not_flagged(self, raw):
        assert reviews_count_is_ambiguous(raw) is False


class TestOversizedNumbers:
    @pytest.mark.parametrize(
        "parser, raw",
        [
            (parse_price, "1" * 1000 + " ₽"),
            (parse_discount_percent, "9" * 1000 + "%"),
            (parse_reviews_count, "9" * 1000 + " reviews"),
        ],
    )
    def test_too_many_digits_is_malformed(self, digit_limit, parser, raw):
        with pytest.raises(MalformedNumber) as exc_info:
            parser(raw)
        assert exc_info.value.raw == raw
