from __future__ import annotations

import dataclasses
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TextIO

from ..adapters.base import Product, product_key
from ..export.base import Serializer
from ..export.json_exporter import JSONSerializer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductStore:
    """
    In-memory products keyed by (retailer, manufacturer, model).

    A single lock guards the collection: upsert, find_all, dump and restore
    never interleave, so readers see a batch either completely or not at all.
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._products: Dict[str, Product] = {}
        self._lock = threading.Lock()
        self.serializer: Serializer = serializer or JSONSerializer()
        self._clock = clock or _utcnow

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def get(self, key: str) -> Optional[Product]:
        with self._lock:
            return self._products.get(key)

    def upsert(self, products: Iterable[Product]) -> None:
        """
        Insert or replace products. created_at survives from the first insert,
        updated_at is stamped on every call. A later duplicate in the batch wins.
        The batch is applied to a copy; a failing item leaves the store untouched.
        """
        with self._lock:
            now = self._clock()
            staged = dict(self._products)
            inserted = 0
            batch = 0
            for product in products:
                key = product_key(product)
                existing = staged.get(key)
                if existing is None:
                    created_at = now
                    inserted += 1
                else:
                    created_at = existing.created_at
                staged[key] = dataclasses.replace(product, created_at=created_at, updated_at=now)
                batch += 1
            self._products = staged
        logger.debug("Upsert: %s products, %s new", batch, inserted)

    def find_all(self) -> List[Product]:
        """All products ordered by ascending price; equal prices keep insertion order."""
        with self._lock:
            products = list(self._products.values())
        return sorted(products, key=lambda p: p.price)

    def dump(self, sink: TextIO) -> None:
        with self._lock:
            self.serializer.dump(self._products, sink)

    def restore(self, source: TextIO) -> None:
        """
        Replace the whole collection with the decoded snapshot.
        Decoding happens before the swap, so a bad stream leaves the store untouched.
        """
        with self._lock:
            products = self.serializer.load(source)
            self._products = products
        logger.info("Restored %s products", len(products))

    # ---- File helpers -------------------------------------------------------

    def dump_to_path(self, path: str | os.PathLike[str]) -> None:
        """
        Write the snapshot next to `path` and rename it into place,
        so a failed dump never truncates the previous snapshot.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                self.dump(f)
            os.replace(tmp_name, target)
        except BaseException:
            os.unlink(tmp_name)
            raise
        logger.info("Wrote snapshot to %s", target)

    def restore_from_path(self, path: str | os.PathLike[str]) -> None:
        with open(path, "r", encoding="utf-8") as f:
            self.restore(f)
