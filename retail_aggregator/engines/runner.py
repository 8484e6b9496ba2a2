from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from .aggregator import update_sources
from .base import UpdateReport
from ..adapters.base import RetailerAdapter
from ..adapters.registry import AdapterRegistry
from ..config import AggregatorConfig
from ..errors import ConfigError
from ..export.base import Exporter
from ..export.csv_exporter import CSVExporter
from ..store.memory import ProductStore
from ..utils.http import HttpClient, create_session
from ..utils.loader import load_symbol

logger = logging.getLogger(__name__)


def build_registry(cfg: AggregatorConfig) -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.discover_entry_points()
    # Allow runtime registration of additional adapters
    for dotted in cfg.extra_adapters:
        try:
            factory = load_symbol(dotted)
        except ImportError as exc:
            raise ConfigError(f"could not load adapter {dotted!r}: {exc}") from exc
        registry.register(dotted.rsplit(":", 1)[-1].rsplit(".", 1)[-1], factory)
    return registry


def build_adapters(cfg: AggregatorConfig, registry: AdapterRegistry, http: HttpClient) -> List[RetailerAdapter]:
    try:
        return [registry.create(name, http) for name in cfg.retailers]
    except (KeyError, ImportError) as exc:
        raise ConfigError(f"could not create retailer adapters: {exc}") from exc


def build_store(cfg: AggregatorConfig, *, restore: bool = True) -> ProductStore:
    """
    Create the store with the configured serializer, seeded from the last snapshot if one exists.
    """
    try:
        serializer_cls = load_symbol(cfg.serializer)
    except ImportError as exc:
        raise ConfigError(f"could not load serializer {cfg.serializer!r}: {exc}") from exc
    store = ProductStore(serializer=serializer_cls())
    if restore and Path(cfg.snapshot_path).exists():
        store.restore_from_path(cfg.snapshot_path)
    return store


def write_outputs(cfg: AggregatorConfig, store: ProductStore, exporter: Optional[Exporter] = None) -> None:
    """Blocking file output after a successful update: snapshot, then the optional CSV listing."""
    store.dump_to_path(cfg.snapshot_path)
    if cfg.csv_output:
        exporter = exporter or CSVExporter()
        exporter.export(store.find_all(), cfg.csv_output)
        logger.info("Wrote CSV listing to %s", cfg.csv_output)


async def run_update(
    cfg: AggregatorConfig,
    store: ProductStore,
    registry: Optional[AdapterRegistry] = None,
) -> UpdateReport:
    """
    One full aggregation run: fetch every configured retailer, commit, snapshot.
    Nothing is written when a retailer fails.
    """
    registry = registry or build_registry(cfg)
    session = create_session()
    try:
        http = HttpClient(session, timeout=cfg.request_timeout, user_agent=cfg.user_agent)
        adapters = build_adapters(cfg, registry, http)
        report = await update_sources(store, *adapters, max_pages=cfg.max_pages)
    finally:
        await session.close()

    # Disk writes run off the event loop so API readers are not blocked.
    await asyncio.to_thread(write_outputs, cfg, store)
    return report
