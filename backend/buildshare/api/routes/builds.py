"""Build Routes — HTTP surface over the build record store.

Invariants:
    - Every handler delegates to exactly one BuildStore operation
    - Successful JSON results use the {status, message, data} envelope
    - Failed results use the error's http_status and failure_envelope()
    - The store is taken from app.state (set in the lifespan); tests override
      get_build_store
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse, Response

from buildshare.api.error_handlers import failure_envelope
from buildshare.core.errors import BuildShareError, ErrorContext, RecordNotFoundError
from buildshare.core.operation_result import OperationResult
from buildshare.schemas.build import CreateInput, UpdateInput
from buildshare.services.build_store import BuildStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/build", tags=["builds"])


def get_build_store(request: Request) -> BuildStore:
    return request.app.state.build_store


def _failure(error: BuildShareError) -> JSONResponse:
    return JSONResponse(
        status_code=error.http_status, content=failure_envelope(error),
    )


def _to_response(
    result: OperationResult, status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    if not result.success:
        return _failure(result.error)
    return JSONResponse(
        status_code=status_code,
        content={
            "status": result.status,
            "message": result.message,
            "data": jsonable_encoder(result.data),
        },
    )


def _unsupported_format(shortcode: str, ext: str, operation: str) -> JSONResponse:
    return _failure(RecordNotFoundError(
        f"Unsupported format '.{ext}'.",
        ErrorContext(shortcode=shortcode, operation=operation),
    ))


def _content_disposition(file_name: str) -> str:
    fallback = file_name.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


# ─── Writes ──────────────────────────────────────────────────────

@router.post("/submit")
async def submit_build(
    body: CreateInput, store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.create(body), status.HTTP_201_CREATED)


@router.patch("/update/{shortcode}")
async def update_build(
    shortcode: str, body: UpdateInput,
    store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.update_by_shortcode(shortcode, body))


@router.delete("/delete/{shortcode}")
async def delete_build(
    shortcode: str, store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.delete_by_shortcode(shortcode))


# ─── Reads ───────────────────────────────────────────────────────

@router.get("/retrieve/{shortcode}")
async def retrieve_build(
    shortcode: str, store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.retrieve_by_shortcode(shortcode))


@router.get("/lookup/{shortcode}")
async def lookup_build(
    shortcode: str, store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.exists_by_shortcode(shortcode))


@router.get("/download/{shortcode}")
async def download_build(
    shortcode: str, store: BuildStore = Depends(get_build_store),
):
    result = await store.generate_file(shortcode)
    if not result.success:
        return _failure(result.error)
    file = result.data
    return Response(
        content=file.data_bytes,
        media_type="application/octet-stream",
        headers={"Content-Disposition": _content_disposition(file.file_name)},
    )


@router.get("/image/{shortcode}.{ext}")
async def build_image(
    shortcode: str, ext: str, store: BuildStore = Depends(get_build_store),
):
    if ext.lower() != "png":
        return _unsupported_format(shortcode, ext, "fetch_image")
    result = await store.fetch_image(shortcode)
    if not result.success:
        return _failure(result.error)
    return Response(content=result.data, media_type="image/png")


@router.get("/preview/{shortcode}.{ext}")
async def build_preview(
    shortcode: str, ext: str, store: BuildStore = Depends(get_build_store),
):
    if ext.lower() != "htm":
        return _unsupported_format(shortcode, ext, "render_preview")
    result = await store.render_preview(shortcode)
    if not result.success:
        return _failure(result.error)
    return Response(content=result.data, media_type="text/html; charset=utf-8")


@router.get("/schema/{shortcode}")
async def build_schema(
    shortcode: str, store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.fetch_schema_data(shortcode))


@router.get("/request/{shortcode}")
async def request_build(
    shortcode: str, store: BuildStore = Depends(get_build_store),
):
    """Hand the build to the desktop client through its custom protocol."""
    result = await store.exists_by_shortcode(shortcode)
    if not result.success:
        return _failure(result.error)
    return RedirectResponse(
        store.schema_url(shortcode),
        status_code=status.HTTP_301_MOVED_PERMANENTLY,
    )


@router.get("/search")
async def search_builds(
    value: str = Query(""), store: BuildStore = Depends(get_build_store),
):
    return _to_response(await store.search(value))
