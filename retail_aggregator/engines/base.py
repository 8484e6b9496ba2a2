from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Protocol

from ..adapters.base import Product


@dataclass
class UpdateReport:
    retailer_counts: Dict[str, int] = field(default_factory=dict)  # retailer name -> products loaded

    @property
    def total(self) -> int:
        return sum(self.retailer_counts.values())


class ProductUpserter(Protocol):
    """
    Anything the aggregator can commit a combined batch into.
    """
    def upsert(self, products: Iterable[Product]) -> None:  # pragma: no cover - interface
        ...
