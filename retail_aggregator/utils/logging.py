from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def setup_logging(level: str | int | None = None, log_file: Optional[str] = None) -> None:
    """
    Configure application logging: stdout, plus a file when RETAIL_LOG_FILE or log_file is set.
    """
    if level is None:
        level = os.getenv("RETAIL_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    log_file = log_file or os.getenv("RETAIL_LOG_FILE")
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )
    # aiohttp internals are noise below INFO for a batch job
    logging.getLogger("aiohttp").setLevel(max(level, logging.INFO))
