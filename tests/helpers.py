"""Stub adapters, stores and clocks shared by the test modules."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List


from retail_aggregator.adapters.base import Product, ProductPage

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StubRetailer:
    """Adapter whose pages come from a {category: {page: ProductPage}} table."""

    def __init__(self, name: str, pages: Dict[str, Dict[int, ProductPage]], categories: List[str] | None = None):
        self.name = name
        self.pages = pages
        self._categories = categories if categories is not None else list(pages)
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}

    def categories(self) -> List[str]:
        return list(self._categories)

    async def fetch_page(self, category: str, page: int) -> ProductPage:
        self.calls.append((category, page))
        if (category, page) in self.failures:
            raise self.failures[(category, page)]
        return self.pages[category][page]


class RecordingStore:
    """ProductUpserter that remembers every batch it received."""

    def __init__(self):
        self.batches: List[List[Product]] = []

    def upsert(self, products):
        self.batches.append(list(products))


class StepClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


def make_product(manufacturer: str, model: str, price: float = 100.0, retailer: str = "Test", **kwargs) -> Product:
    return Product(retailer=retailer, manufacturer=manufacturer, model=model, price=price, **kwargs)


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


