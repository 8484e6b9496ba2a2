from __future__ import annotations

import logging
from typing import List, Optional

from .base import ProductUpserter, UpdateReport
from ..adapters.base import Product, RetailerAdapter
from ..errors import CategoryWalkError, PaginationError

logger = logging.getLogger(__name__)


async def walk_category(
    adapter: RetailerAdapter,
    category: str,
    *,
    max_pages: Optional[int] = None,
) -> List[Product]:
    """
    Fetch every page of one category, in page order.

    The last page reported by the latest response decides whether another page
    is fetched. Any failure discards the pages collected so far.
    """
    page = 1
    products: List[Product] = []

    while True:
        try:
            result = await adapter.fetch_page(category, page)
        except Exception as exc:
            raise CategoryWalkError(adapter.name, category, page, exc) from exc

        if result.current_page != page:
            logger.debug("%s reported page %s for %r while page %s was requested",
                         adapter.name, result.current_page, category, page)
        products.extend(result.products)
        logger.debug("%s %r page %s/%s: %s products",
                     adapter.name, category, page, result.last_page, len(result.products))

        if page >= result.last_page:
            return products

        if max_pages is not None and page >= max_pages:
            raise PaginationError(
                f"{adapter.name} reports {result.last_page} pages for {category!r}, limit is {max_pages}"
            )
        page += 1


async def load_products(adapter: RetailerAdapter, *, max_pages: Optional[int] = None) -> List[Product]:
    """
    Walk all categories of one adapter sequentially, in the order the adapter lists them.
    Later categories may depend on adapter state set while fetching earlier ones.
    """
    products: List[Product] = []
    for category in adapter.categories():
        category_products = await walk_category(adapter, category, max_pages=max_pages)
        logger.info("%s | %s | %s products", adapter.name, category, len(category_products))
        products.extend(category_products)
    return products


async def update_sources(
    store: ProductUpserter,
    *adapters: RetailerAdapter,
    max_pages: Optional[int] = None,
) -> UpdateReport:
    """
    Load every adapter in argument order and commit the combined result with one upsert.
    The store is not touched when any adapter fails.
    """
    report = UpdateReport()
    products: List[Product] = []

    for adapter in adapters:
        adapter_products = await load_products(adapter, max_pages=max_pages)
        report.retailer_counts[adapter.name] = report.retailer_counts.get(adapter.name, 0) + len(adapter_products)
        products.extend(adapter_products)

    store.upsert(products)
    logger.info("Upserted %s products from %s retailers", len(products), len(adapters))
    return report
