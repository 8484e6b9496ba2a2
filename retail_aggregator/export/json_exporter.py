from __future__ import annotations

import json
from typing import Dict, Mapping, TextIO

from ..adapters.base import Product
from ..errors import SnapshotError


class JSONSerializer:
    """
    Writes the key -> product mapping as one JSON object with ISO-8601 timestamps.
    """

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def dump(self, products: Mapping[str, Product], sink: TextIO) -> None:
        serializable = {key: product.to_dict() for key, product in products.items()}
        try:
            json.dump(serializable, sink, indent=self.indent, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as exc:
            raise SnapshotError(f"could not encode product snapshot: {exc}") from exc

    def load(self, source: TextIO) -> Dict[str, Product]:
        try:
            data = json.load(source)
        except (OSError, ValueError) as exc:
            raise SnapshotError(f"could not decode product snapshot: {exc}") from exc

        if not isinstance(data, dict):
            raise SnapshotError(f"product snapshot must be a JSON object, got {type(data).__name__}")

        products: Dict[str, Product] = {}
        for key, raw in data.items():
            if not isinstance(raw, dict):
                raise SnapshotError(f"product {key!r} must be a JSON object")
            try:
                products[key] = Product.from_dict(raw)
            except (KeyError, TypeError, ValueError) as exc:
                raise SnapshotError(f"invalid product {key!r} in snapshot: {exc!r}") from exc
        return products
