"""Stored product rows scraped from the catalog."""

from typing import List

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from catalog_scraper.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from catalog_scraper.scrapers.base import PriceInfo, ProductRecord


class ShoeProduct(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One catalog listing entry.

    Uniquely identified by the (brand, name) natural key. Rows are only ever
    inserted by the pipeline, never updated.
    """

    __tablename__ = "shoes"

    brand: Mapped[str] = mapped_column(String(200), nullable=False, default="", index=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)

    # Whole currency units
    original_price: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    discounted_price: Mapped[int] = mapped_column(Integer, nullable=False)

    reviews_count: Mapped[int] = mapped_column(Integer, nullable=False)
    promotions: Mapped[List[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=list,
    )

    __table_args__ = (
        UniqueConstraint("brand", "name", name="uq_shoes_brand_name"),
    )

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ShoeProduct":
        return cls(
            brand=record.brand,
            name=record.name,
            original_price=record.price.original,
            discount_percent=record.price.discount_percent,
            discounted_price=record.price.discounted,
            reviews_count=record.reviews_count,
            promotions=list(record.promotions),
        )

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            brand=self.brand,
            name=self.name,
            price=PriceInfo(
                original=self.original_price,
                discount_percent=self.discount_percent,
                discounted=self.discounted_price,
            ),
            reviews_count=self.reviews_count,
            promotions=list(self.promotions),
        )

    def __repr__(self) -> str:
        return f"<ShoeProduct(id={self.id}, brand='{self.brand}', name='{self.name[:50]}')>"
