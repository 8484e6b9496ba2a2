from __future__ import annotations

import logging
from importlib import metadata
from typing import Any, Callable, Dict, List

from .base import RetailerAdapter
from .musik_produktiv import MusikProduktivAdapter
from ..utils.loader import is_dotted_path, load_symbol

logger = logging.getLogger(__name__)

#: Builds an adapter around the shared fetch capability.
AdapterFactory = Callable[[Any], RetailerAdapter]


class AdapterRegistry:
    """
    Registry for available adapters.
    Supports built-ins, config-defined dotted classes, and entry-point plugins.
    """
    def __init__(self) -> None:
        self._factories: Dict[str, AdapterFactory] = {"musik_produktiv": MusikProduktivAdapter}

    # ---- Introspection / Management ----

    def register(self, name: str, factory: AdapterFactory) -> None:
        if name in self._factories:
            logger.warning("Adapter %s is already registered; replacing it", name)
        self._factories[name] = factory

    @property
    def names(self) -> List[str]:
        return list(self._factories)

    def create(self, name: str, http: Any) -> RetailerAdapter:
        """
        Instantiate an adapter from a registered name or a dotted class path.
        Raises KeyError for unknown names.
        """
        if name in self._factories:
            return self._factories[name](http)
        if is_dotted_path(name):
            return load_symbol(name)(http)
        raise KeyError(f"unknown retailer adapter {name!r}; known: {', '.join(self.names)}")

    # ---- Discovery ----

    def discover_entry_points(self, group: str = "retail_aggregator.adapters") -> int:
        """
        Discover third-party adapters installed as entry points.
        Returns count of newly registered adapters.
        """
        added = 0
        for ep in metadata.entry_points().select(group=group):
            try:
                factory = ep.load()
            except Exception as exc:
                logger.warning("Failed to load adapter plugin %s: %r", ep.name, exc)
                continue
            self.register(ep.name, factory)
            added += 1
        return added
