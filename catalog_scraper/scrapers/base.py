"""Core data structures shared by the extractor, pipeline and writer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class CatalogSelectors:
    """CSS selectors for one catalog layout.

    ``container`` is matched against the whole page; every other selector is
    matched relative to a single item container.
    """

    container: str = ".css-f4s3gt"
    brand: str = ".css-wfg91f span"
    name: str = ".aqa-item-name"
    original_price: str = ".css-1hu3vxw"
    discount: str = ".css-1yjzpb2"
    discounted_price: str = ".css-1xczz6l"
    reviews_count: str = ".reviews-count"
    promotions: str = ".e1i0l88z7"


@dataclass
class PriceInfo:
    """Whole-currency-unit prices for one product.

    ``discounted <= original`` is expected but not enforced; the catalog
    occasionally violates it and the value is passed through as-is.
    """

    original: int
    discount_percent: int
    discounted: int


@dataclass
class ProductRecord:
    """One fully parsed catalog listing entry."""

    brand: str
    name: str
    price: PriceInfo
    reviews_count: int
    promotions: List[str] = field(default_factory=list)  # document order, duplicates kept

    def to_document(self) -> Dict[str, Any]:
        """Nested dict form used for logging and storage."""
        return {
            "brand": self.brand,
            "name": self.name,
            "price": {
                "original": self.price.original,
                "discount_percent": self.price.discount_percent,
                "discounted": self.price.discounted,
            },
            "reviews_count": self.reviews_count,
            "promotions": list(self.promotions),
        }
