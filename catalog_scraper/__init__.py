"""Paginated product catalog scraper with database persistence."""

__version__ = "0.1.0"
