from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from pathlib import Path
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION


@dataclass
class AggregatorConfig:
    """
    Canonical configuration object passed throughout the system.
    Keep it dataclass-only (no heavy deps) to stay upgrade-friendly.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    # Registered adapter names or dotted class paths, walked in this order.
    retailers: List[str] = field(default_factory=lambda: ["musik_produktiv"])
    request_timeout: float = 15.0
    user_agent: str = f"retail_aggregator/{__version__}"
    # Upper bound on pages per category; None trusts the retailer's pagination.
    max_pages: Optional[int] = None
    snapshot_path: str = "data/products.json"
    # Dotted path for the snapshot codec to allow runtime swapping without code changes.
    serializer: str = "retail_aggregator.export.json_exporter:JSONSerializer"
    # Optional CSV listing written after each update
    csv_output: Optional[str] = None
    # Extra adapters (dotted class paths) to register at startup
    extra_adapters: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "AggregatorConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        def _list(name: str, default: str = "") -> List[str]:
            return [v.strip() for v in _get(name, default).split(",") if v.strip()]

        max_pages = _get("RETAIL_MAX_PAGES", "")
        return cls(
            retailers=_list("RETAIL_RETAILERS", "musik_produktiv"),
            request_timeout=float(_get("RETAIL_REQUEST_TIMEOUT", "15.0")),
            user_agent=_get("RETAIL_USER_AGENT", f"retail_aggregator/{__version__}"),
            max_pages=int(max_pages) if max_pages else None,
            snapshot_path=_get("RETAIL_SNAPSHOT_PATH", "data/products.json"),
            serializer=_get("RETAIL_SERIALIZER", "retail_aggregator.export.json_exporter:JSONSerializer"),
            csv_output=_get("RETAIL_CSV_OUTPUT", "") or None,
            extra_adapters=_list("RETAIL_EXTRA_ADAPTERS"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "AggregatorConfig":
        """
        Load configuration from a JSON file. Supports schema migration for future versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.retailers:
            raise ValueError("retailers cannot be empty; provide at least one adapter.")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        # Validate snapshot path parent exists or is creatable
        Path(self.snapshot_path).parent.mkdir(parents=True, exist_ok=True)


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    # A single retailer may be given as a plain string.
    if isinstance(raw.get("retailers"), str):
        raw["retailers"] = [r.strip() for r in raw["retailers"].split(",") if r.strip()]
    return raw
