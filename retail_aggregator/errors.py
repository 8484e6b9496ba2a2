from __future__ import annotations

from typing import Optional


class AggregatorError(Exception):
    """Base class for every failure surfaced by the aggregation pipeline."""


class FetchError(AggregatorError):
    """The HTTP capability failed to deliver a page."""


class ParseError(AggregatorError):
    """A page could not be interpreted (price, pagination marker, layout)."""


class PaginationError(AggregatorError):
    pass


class CategoryWalkError(AggregatorError):
    """Raised when walking one category of one retailer fails."""

    def __init__(self, retailer: str, category: str, page: int, cause: Optional[BaseException] = None) -> None:
        self.retailer = retailer
        self.category = category
        self.page = page
        message = f"could not load products from {retailer} (category={category!r}, page={page})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class SnapshotError(AggregatorError):
    """Dump or restore of the product store failed."""


class ConfigError(AggregatorError):
    """A configured retailer, adapter or serializer cannot be resolved."""
