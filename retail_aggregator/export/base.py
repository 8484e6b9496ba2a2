from __future__ import annotations

from typing import Dict, List, Mapping, Protocol, TextIO

from ..adapters.base import Product


class Serializer(Protocol):
    """
    Snapshot codec used by ProductStore.dump/restore.
    load() must either return the complete mapping or raise.
    """
    def dump(self, products: Mapping[str, Product], sink: TextIO) -> None:
        ...

    def load(self, source: TextIO) -> Dict[str, Product]:
        ...


class Exporter(Protocol):
    def export(self, products: List[Product], path: str) -> None:
        ...
