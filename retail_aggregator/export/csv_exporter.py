from __future__ import annotations

import csv
from typing import List
from pathlib import Path

from ..adapters.base import Product


class CSVExporter:
    """
    Writes one row per product, in the order given (normally ProductStore.find_all()).
    """

    _headers = [
        "retailer",
        "manufacturer",
        "model",
        "category",
        "price",
        "available",
        "availability_info",
        "product_url",
        "thumbnail_url",
        "created_at",
        "updated_at",
    ]

    def export(self, products: List[Product], path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(self._headers)
            for product in products:
                w.writerow(
                    [
                        product.retailer,
                        product.manufacturer,
                        product.model,
                        product.category,
                        f"{product.price:.2f}",
                        "yes" if product.is_available else "no",
                        product.availability_info,
                        product.product_url,
                        product.thumbnail_url,
                        product.created_at.isoformat() if product.created_at else "",
                        product.updated_at.isoformat() if product.updated_at else "",
                    ]
                )
