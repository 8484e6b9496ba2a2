from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
import logging

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from ..adapters.base import Product
from ..config import AggregatorConfig
from ..engines.runner import build_store, run_update
from ..errors import AggregatorError
from ..store.memory import ProductStore
from ..version import __version__

logger = logging.getLogger(__name__)


class ProductOut(BaseModel):
    retailer: str
    manufacturer: str
    model: str
    category: str
    is_available: bool
    availability_info: str
    price: float
    product_url: str
    thumbnail_url: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        return cls(
            retailer=product.retailer,
            manufacturer=product.manufacturer,
            model=product.model,
            category=product.category,
            is_available=product.is_available,
            availability_info=product.availability_info,
            price=product.price,
            product_url=product.product_url,
            thumbnail_url=product.thumbnail_url,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class UpdateOut(BaseModel):
    retailers: Dict[str, int]
    total: int
    stored: int


def create_app(store: Optional[ProductStore] = None, config: Optional[AggregatorConfig] = None) -> FastAPI:
    cfg = config or AggregatorConfig.from_env()
    products = store if store is not None else build_store(cfg)

    app = FastAPI(title="retail_aggregator API", version=__version__)
    app.state.store = products
    app.state.config = cfg

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/products", response_model=List[ProductOut])
    async def list_products(retailer: Optional[str] = None, available: Optional[bool] = None) -> List[ProductOut]:
        out = []
        for product in products.find_all():
            if retailer is not None and product.retailer != retailer:
                continue
            if available is not None and product.is_available != available:
                continue
            out.append(ProductOut.from_product(product))
        return out

    @app.post("/update", response_model=UpdateOut)
    async def update() -> UpdateOut:
        try:
            report = await run_update(cfg, products)
        except AggregatorError as exc:
            logger.warning("Update via API failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return UpdateOut(retailers=report.retailer_counts, total=report.total, stored=len(products))

    @app.post("/snapshot")
    async def snapshot() -> Dict[str, str]:
        try:
            products.dump_to_path(cfg.snapshot_path)
        except AggregatorError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"snapshot": cfg.snapshot_path}

    return app

