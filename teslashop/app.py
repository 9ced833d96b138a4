"""
FastAPI application factory.

Run with ``uvicorn teslashop.app:create_app --factory`` or ``python main.py serve``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from teslashop.logger import get_logger
from teslashop.store import CatalogStore

logger = get_logger(__name__)


def get_store(request: Request) -> CatalogStore:
    """Dependency returning the store owned by the running app."""
    return request.app.state.store


def error_response(message: str, status_code: int, **extra) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status_code)


def create_app(store: CatalogStore | None = None) -> FastAPI:
    """
    Build the API.

    Args:
        store: Catalog store to serve. If None, opens the default DuckDB file
               and closes it on shutdown.
    """
    owns_store = store is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Serving catalog from {app.state.store.db_path}")
        yield
        if owns_store:
            logger.info("Closing catalog store")
            app.state.store.close()

    app = FastAPI(title="Tesla Parts Back Office", lifespan=lifespan)
    app.state.store = store if store is not None else CatalogStore()

    # Routers import get_store/error_response from this module
    from teslashop.routes_categories import router as categories_router
    from teslashop.routes_import import router as import_router
    from teslashop.routes_products import router as products_router

    app.include_router(import_router)
    app.include_router(categories_router)
    app.include_router(products_router)

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app
