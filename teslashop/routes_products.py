"""
Storefront catalog routes: active product listing (by category or model) and
product search with price, category and sort filters.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from teslashop.app import error_response, get_store
from teslashop.config import SEARCH_SETTINGS
from teslashop.model_detector import normalize_model_token
from teslashop.store import CatalogStore, camelize_keys

router = APIRouter(tags=["products"])


def _storefront_product(record: dict[str, Any]) -> dict[str, Any]:
    payload = camelize_keys({k: v for k, v in record.items() if k not in ("category_name", "category_slug")})
    payload["category"] = {"name": record.get("category_name"), "slug": record.get("category_slug")}
    return payload


@router.get("/api/products")
async def list_products(
    category: Optional[str] = None,
    limit: Optional[int] = None,
    exclude: Optional[str] = None,
    model: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
):
    if model:
        try:
            model = normalize_model_token(model)
        except ValueError as e:
            return error_response(str(e), 400)
    products = store.list_products(category_id=category, limit=limit, exclude=exclude, model=model)
    return {"products": [_storefront_product(p) for p in products]}


@router.get("/api/search")
async def search_products(
    q: str = "",
    sort: str = SEARCH_SETTINGS["default_sort"],
    min_price: float = Query(0, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    categories: Optional[str] = None,
    store: CatalogStore = Depends(get_store),
):
    if not q.strip():
        return {"products": [], "total": 0}

    category_names = [c.strip() for c in (categories or "").split(",") if c.strip()]
    products = store.search_products(
        q,
        sort=sort,
        min_price=min_price,
        max_price=max_price,
        categories=category_names,
        limit=SEARCH_SETTINGS["max_results"],
    )
    items = [_storefront_product(p) for p in products]
    return {
        "products": items,
        "total": len(items),
        "query": q,
        "filters": {
            "categories": category_names,
            "priceRange": [min_price, max_price],
            "sort": sort,
        },
    }
