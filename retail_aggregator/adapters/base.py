from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

#: Joins the natural-key fields. Not expected inside retailer, manufacturer or model.
KEY_SEPARATOR = "\x1f"


@dataclass(frozen=True)
class Product:
    """Normalized listing every retailer adapter must produce."""

    retailer: str
    manufacturer: str
    model: str
    category: str = ""
    is_available: bool = False
    availability_info: str = ""
    price: float = 0.0
    product_url: str = ""
    thumbnail_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return product_key(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "retailer": self.retailer,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "category": self.category,
            "is_available": self.is_available,
            "availability_info": self.availability_info,
            "price": self.price,
            "product_url": self.product_url,
            "thumbnail_url": self.thumbnail_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """
        Inverse of to_dict(). Raises KeyError, TypeError or ValueError on malformed input.
        """
        return cls(
            retailer=str(data["retailer"]),
            manufacturer=str(data["manufacturer"]),
            model=str(data["model"]),
            category=str(data.get("category") or ""),
            is_available=bool(data.get("is_available", False)),
            availability_info=str(data.get("availability_info") or ""),
            price=float(data["price"]),
            product_url=str(data.get("product_url") or ""),
            thumbnail_url=str(data.get("thumbnail_url") or ""),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )


def product_key(product: Product) -> str:
    """
    Derive the natural key (retailer, manufacturer, model).
    Empty fields still yield a key; such keys are collision-prone.
    """
    return KEY_SEPARATOR.join((product.retailer, product.manufacturer, product.model))


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"timestamp must be an ISO-8601 string, got {type(value).__name__}")
    return datetime.fromisoformat(value)


@dataclass
class ProductPage:
    """One fetched page of a category listing."""

    products: List[Product] = field(default_factory=list)
    current_page: int = 1
    last_page: int = 1


class RetailerAdapter(Protocol):
    """
    Interface for retailer-specific fetching and parsing.
    Keep this small and stable; the aggregator owns pagination and merging.

    One instance may hold fetch-order-dependent state (e.g. a manufacturer
    list learned from the first page) and must be driven by one caller at a time.
    """

    name: str  # copied verbatim into every Product.retailer

    def categories(self) -> List[str]:
        """Return the category identifiers to walk, in order."""
        ...

    async def fetch_page(self, category: str, page: int) -> ProductPage:
        """
        Fetch and parse one page of one category.
        A single-page category must report current_page == last_page == 1.
        """
        ...
