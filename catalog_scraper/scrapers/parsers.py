"""Field parsers for locale-formatted listing text.

Handles the formats the catalog renders:
- "12,500 ₽", also with a non-breaking space as separator -> 12500
- " 20% " -> 20
- "123 отзыва" -> 123

Every parser is pure and raises MalformedNumber instead of guessing.
"""

import re

from catalog_scraper.core.exceptions import MalformedNumber


# Thousands separators dropped before parsing prices
_PRICE_SEPARATORS = (",", "\u00a0")

# Trailing currency marker (ruble sign or its abbreviations)
_CURRENCY_SUFFIX = re.compile(r"\s*(?:₽|руб\.?|р\.)\s*$")

_INTEGER = re.compile(r"^[+-]?[0-9]+$")
_DIGIT_RUN = re.compile(r"[0-9]+")
_MAGNITUDE_SUFFIX = re.compile(r"[0-9]\s*(?:[kKmM]|тыс)")


def _int_or_malformed(digits: str, raw: str) -> int:
    # int() refuses strings past the interpreter's digit limit
    try:
        return int(digits)
    except ValueError as e:
        raise MalformedNumber(raw, str(e)) from e


def _to_int(cleaned: str, raw: str) -> int:
    if not cleaned:
        raise MalformedNumber(raw, "empty after cleaning")
    if not _INTEGER.match(cleaned):
        raise MalformedNumber(raw, f"unexpected characters in {cleaned!r}")
    return _int_or_malformed(cleaned, raw)


def parse_price(text: str) -> int:
    """Parse a price such as ``"12,500 ₽"`` into whole currency units.

    Raises:
        MalformedNumber: If nothing numeric is left after cleaning
    """
    cleaned = text
    for sep in _PRICE_SEPARATORS:
        cleaned = cleaned.replace(sep, "")
    cleaned = _CURRENCY_SUFFIX.sub("", cleaned.strip()).strip()
    return _to_int(cleaned, text)


def parse_discount_percent(text: str) -> int:
    """Parse a discount badge such as ``" 20% "``.

    Raises:
        MalformedNumber: If the text is not an integer percentage
    """
    cleaned = text.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1].strip()
    return _to_int(cleaned, text)


def parse_reviews_count(text: str) -> int:
    """Concatenate the digits of a free-text review counter.

    Lossy on purpose: ``"1.2K"`` becomes ``12``. Use
    reviews_count_is_ambiguous() to flag such inputs.

    Raises:
        MalformedNumber: If the text holds no digits at all
    """
    digits = "".join(ch for ch in text if "0" <= ch <= "9")
    if not digits:
        raise MalformedNumber(text, "no digits found")
    return _int_or_malformed(digits, text)


def reviews_count_is_ambiguous(text: str) -> bool:
    """Whether digit concatenation may misread this review counter.

    True when the number is split into several digit runs ("1.2K", "1 234")
    or carries a magnitude suffix ("3k", "5 тыс").
    """
    return len(_DIGIT_RUN.findall(text)) > 1 or bool(_MAGNITUDE_SUFFIX.search(text))
