"""
Bulk-import routes: spreadsheet preview upload, confirmed import of previewed
rows and the import template download. Spreadsheet parsing runs in the
threadpool; writes to the catalog store stay on the event loop.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel

from teslashop.app import error_response, get_store
from teslashop.bulk_import import build_preview, commit_import
from teslashop.file_loader import EmptyFileError, UnsupportedFileError, file_suffix, is_supported
from teslashop.logger import get_logger
from teslashop.model_detector import normalize_model_token
from teslashop.store import CatalogStore
from teslashop.template import render_template

logger = get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["bulk-import"])


class BulkImportRequest(BaseModel):
    data: Optional[List[Dict[str, Any]]] = None


@router.post("/bulk-import/preview")
async def preview_upload(
    file: Optional[UploadFile] = File(None),
    model: Optional[str] = Form(None),
):
    if file is None:
        return error_response("No file uploaded", 400)

    filename = file.filename or "upload"
    if not is_supported(filename):
        return error_response(f"Unsupported file format: {file_suffix(filename) or 'unknown'}", 400)

    override = (model or "").strip() or None
    if override:
        try:
            override = normalize_model_token(override)
        except ValueError as e:
            return error_response(str(e), 400)

    content = await file.read()
    try:
        preview = await run_in_threadpool(build_preview, content, filename, override)
    except (UnsupportedFileError, EmptyFileError) as e:
        return error_response(str(e), 400)
    except Exception:
        logger.exception(f"Error processing file {filename}")
        return error_response("Failed to process file. Please check the format and try again.", 500)

    return preview.to_dict()


@router.post("/bulk-import")
async def import_products(body: BulkImportRequest, store: CatalogStore = Depends(get_store)):
    if body.data is None:
        return error_response("Invalid data format", 400)
    summary = commit_import(store, body.data)
    return summary.to_dict()


@router.get("/bulk-import/template")
async def download_template(fmt: str = Query("xlsx", alias="format")):
    try:
        content, filename, media_type = render_template(fmt)
    except ValueError as e:
        return error_response(str(e), 400)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
