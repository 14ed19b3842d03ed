"""Persistence services."""

from .product_writer import ProductWriter

__all__ = ["ProductWriter"]
