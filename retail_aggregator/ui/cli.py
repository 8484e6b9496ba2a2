from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List

from ..config import AggregatorConfig
from ..engines.base import UpdateReport
from ..engines.runner import build_store, run_update
from ..errors import AggregatorError
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Retail product aggregator CLI")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--retailers", type=str, default=None,
                   help="Comma-separated adapter names or dotted paths (default from config)")
    p.add_argument("--snapshot", type=str, default=None, help="Snapshot file path")
    p.add_argument("--no-restore", action="store_true", help="Start from an empty store instead of the snapshot")
    p.add_argument("--max-pages", type=int, default=None, help="Max pages per category (default unlimited)")
    p.add_argument("--csv", type=str, default=None, help="Also write the ordered listing as CSV")
    p.add_argument("--list", action="store_true", help="Print the stored products and exit without fetching")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--serve", action="store_true", help="Run REST API server instead of an update")
    p.add_argument("--host", type=str, default="127.0.0.1", help="API host (when --serve)")
    p.add_argument("--port", type=int, default=8000, help="API port (when --serve)")
    return p


def _load_config(args: argparse.Namespace) -> AggregatorConfig:
    if args.config:
        cfg = AggregatorConfig.from_file(args.config)
    else:
        cfg = AggregatorConfig.from_env()

    if args.retailers:
        cfg.retailers = [r.strip() for r in args.retailers.split(",") if r.strip()]
    if args.snapshot:
        cfg.snapshot_path = args.snapshot
    if args.max_pages is not None:
        cfg.max_pages = args.max_pages
    if args.csv:
        cfg.csv_output = args.csv

    cfg.validate()
    return cfg


def run_server(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("retail_aggregator.apis.app:create_app", factory=True, host=host, port=port)


def print_products(cfg: AggregatorConfig) -> None:
    store = build_store(cfg)
    for product in store.find_all():
        print(f"{product.price:>10.2f}  {'+' if product.is_available else '-'}  "
              f"{product.retailer} | {product.manufacturer} {product.model}")


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    cfg = _load_config(args)

    if args.list:
        try:
            print_products(cfg)
        except AggregatorError as exc:
            logger.error("Could not read products: %s", exc)
            return 1
        return 0

    try:
        store = build_store(cfg, restore=not args.no_restore)
        report: UpdateReport = asyncio.run(run_update(cfg, store))
    except AggregatorError as exc:
        logger.error("Update failed: %s", exc)
        return 1

    for retailer, count in report.retailer_counts.items():
        logger.info("Retailer: %s | Products: %s", retailer, count)
    logger.info("Loaded: %s | Stored: %s | Snapshot: %s", report.total, len(store), cfg.snapshot_path)
    return 0
