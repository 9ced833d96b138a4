"""
Category management routes: listing with rolled-up product counts, create,
read, update and delete, clean-all, and the idempotent Tesla auto-setup.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import duckdb
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from teslashop.app import error_response, get_store
from teslashop.category_setup import run_auto_setup
from teslashop.logger import get_logger
from teslashop.store import CatalogStore, DuplicateCategoryError, camelize_keys

logger = get_logger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    parent_id: Optional[str] = Field(default=None, alias="parentId")


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class AutoSetupRequest(BaseModel):
    model: Optional[str] = None
    hierarchy: Optional[Dict[str, Any]] = None


@router.get("")
async def list_categories(store: CatalogStore = Depends(get_store)):
    return [camelize_keys(c) for c in store.list_categories()]


@router.post("")
async def create_category(body: CategoryCreate, store: CatalogStore = Depends(get_store)):
    if not body.name or not body.name.strip():
        return error_response("Category name is required", 400)
    try:
        category = store.create_category(
            body.name,
            description=body.description.strip() if body.description and body.description.strip() else None,
            is_active=body.is_active is not False,
            parent_id=body.parent_id,
        )
    except DuplicateCategoryError as e:
        return error_response(str(e), 400)
    except KeyError:
        return error_response("Parent category not found", 400)
    return {"success": True, "category": camelize_keys(category)}


@router.post("/tesla-auto-setup")
async def tesla_auto_setup(body: Optional[AutoSetupRequest] = None, store: CatalogStore = Depends(get_store)):
    body = body or AutoSetupRequest()
    try:
        result = run_auto_setup(store, model=body.model, hierarchy=body.hierarchy)
    except ValueError as e:
        return error_response(str(e), 400)
    except duckdb.Error as e:
        logger.error(f"Tesla auto-setup error: {e}")
        return error_response(f"Failed to set up Tesla categories: {e}", 500, success=False)
    return result.to_dict()


# Declared before /{category_id} so "clean-all" is not read as an id
@router.delete("/clean-all")
async def clean_all_categories(store: CatalogStore = Depends(get_store)):
    product_count = store.count_products()
    if product_count > 0:
        return error_response(
            f"Cannot delete categories while {product_count} products exist. "
            "Delete products first or they will become orphaned.",
            400,
            suggestion="Use the bulk delete products feature first, then clean categories.",
        )

    deleted = store.delete_all_categories()
    if deleted == 0:
        return {"message": "No categories to delete", "deleted": {"categories": 0}}

    logger.info(f"Deleted {deleted} categories")
    return {
        "success": True,
        "message": "Successfully cleaned all categories!",
        "deleted": {"categories": deleted},
    }


@router.get("/{category_id}")
async def get_category(category_id: str, store: CatalogStore = Depends(get_store)):
    category = store.get_category(category_id)
    if category is None:
        return error_response("Category not found", 404)
    payload = camelize_keys(category)
    payload["productCount"] = store.count_products(category_id)
    return payload


@router.put("/{category_id}")
async def update_category(category_id: str, body: CategoryUpdate, store: CatalogStore = Depends(get_store)):
    try:
        category = store.update_category(
            category_id,
            name=body.name,
            description=body.description,
            update_description="description" in body.model_fields_set,
            is_active=body.is_active,
        )
    except KeyError:
        return error_response("Category not found", 404)
    except DuplicateCategoryError as e:
        return error_response(str(e), 400)
    return {"success": True, "category": camelize_keys(category)}


@router.delete("/{category_id}")
async def delete_category(category_id: str, store: CatalogStore = Depends(get_store)):
    product_count = store.count_products(category_id)
    if product_count > 0:
        return error_response(
            f"Cannot delete category with {product_count} products. Move products to another category first.",
            400,
        )
    if not store.delete_category(category_id):
        return error_response("Category not found", 404)
    return {"success": True}
