"""SQLAlchemy models for the catalog scraper.

All models are imported here so metadata.create_all() sees every table.
"""

from catalog_scraper.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from catalog_scraper.models.product import ShoeProduct

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "ShoeProduct",
]
