from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import BinaryIO

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.responses import Response

from lfsgate_core.config import CoreConfig, config_snapshot
from lfsgate_core.metastore import MetaStore, MetaStoreError
from lfsgate_core.mgmt.assets import open_asset
from lfsgate_core.mgmt.render import PageData, TemplateRenderError, render_page
from lfsgate_core.storage.base import ContentStore, ContentStoreError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

# Gated: app.py includes this router behind the admin Basic-auth dependency.
router = APIRouter(prefix="/mgmt", tags=["mgmt"])

# Ungated: stylesheets only.
assets_router = APIRouter(prefix="/mgmt", tags=["mgmt"])


def _get_config(request: Request) -> CoreConfig:
    config = getattr(request.app.state, "lfsgate_config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="Config not initialized")
    return config


def _get_meta_store(request: Request) -> MetaStore:
    store = getattr(request.app.state, "meta_store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Metadata store not initialized")
    return store


def _get_content_store(request: Request) -> ContentStore:
    store = getattr(request.app.state, "content_store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Content store not initialized")
    return store


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    # The response also closes the stream in a background task, for
    # responses that are never iterated. close() is idempotent.
    try:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


def _render_or_404(request: Request, template_name: str, page: PageData) -> HTMLResponse:
    try:
        return render_page(request, template_name, page)
    except TemplateRenderError as e:
        logger.error("mgmt render failed: %s", e)
        raise HTTPException(status_code=404, detail="Not Found") from e


@assets_router.get("/css/{file}")
async def mgmt_css(file: str) -> StreamingResponse:
    try:
        f = open_asset("css", file)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail="Not Found") from e

    return StreamingResponse(
        _iter_stream(f), media_type="text/css", background=BackgroundTask(f.close)
    )


@router.get("", response_class=HTMLResponse)
async def mgmt_index(request: Request) -> HTMLResponse:
    config = _get_config(request)
    return _render_or_404(
        request, "config.html", PageData(name="index", config=config_snapshot(config))
    )


@router.get("/objects", response_model=None)
async def mgmt_objects(request: Request) -> Response:
    store = _get_meta_store(request)
    try:
        objects = store.list_objects()
    except MetaStoreError as e:
        logger.error("mgmt: listing objects failed: %s", e)
        return PlainTextResponse(f"Error retrieving objects: {e}")

    return _render_or_404(request, "objects.html", PageData(name="objects", objects=objects))


@router.get("/raw/{oid}")
async def mgmt_object_raw(request: Request, oid: str) -> StreamingResponse:
    meta_store = _get_meta_store(request)
    content_store = _get_content_store(request)

    try:
        meta = meta_store.get_object_unsafe(oid)
    except MetaStoreError as e:
        raise HTTPException(status_code=404, detail="Object not found") from e

    try:
        content = content_store.get(meta, 0)
    except ContentStoreError as e:
        raise HTTPException(status_code=404, detail="Object content not found") from e

    headers = {
        "Content-Disposition": f"attachment; filename={oid}",
        "Content-Transfer-Encoding": "binary",
        "Content-Length": str(meta.size),
    }
    return StreamingResponse(
        _iter_stream(content),
        media_type="application/octet-stream",
        headers=headers,
        background=BackgroundTask(content.close),
    )


@router.get("/locks", response_model=None)
async def mgmt_locks(request: Request) -> Response:
    store = _get_meta_store(request)
    try:
        locks = store.list_locks()
    except MetaStoreError as e:
        logger.error("mgmt: listing locks failed: %s", e)
        return PlainTextResponse(f"Error retrieving locks: {e}")

    return _render_or_404(request, "locks.html", PageData(name="locks", locks=locks))


@router.get("/users", response_model=None)
async def mgmt_users(request: Request) -> Response:
    store = _get_meta_store(request)
    try:
        users = store.list_users()
    except MetaStoreError as e:
        logger.error("mgmt: listing users failed: %s", e)
        return PlainTextResponse(f"Error retrieving users: {e}")

    return _render_or_404(request, "users.html", PageData(name="users", users=users))


@router.post("/add", response_model=None)
async def mgmt_add_user(
    request: Request,
    name: str = Form(default=""),
    password: str = Form(default=""),
) -> Response:
    if not name or not password:
        return PlainTextResponse("Invalid username or password")

    store = _get_meta_store(request)
    try:
        store.add_user(name, password)
    except MetaStoreError as e:
        return PlainTextResponse(f"Error adding user: {e}")

    logger.info("mgmt: added user %r", name)
    return RedirectResponse(url="/mgmt/users", status_code=302)


@router.post("/del", response_model=None)
async def mgmt_delete_user(request: Request, name: str = Form(default="")) -> Response:
    if not name:
        return PlainTextResponse("Invalid username")

    store = _get_meta_store(request)
    try:
        store.delete_user(name)
    except MetaStoreError as e:
        return PlainTextResponse(f"Error deleting user: {e}")

    logger.info("mgmt: deleted user %r", name)
    return RedirectResponse(url="/mgmt/users", status_code=302)


@router.get("/object/del/{oid}", response_model=None)
async def mgmt_delete_object(request: Request, oid: str) -> Response:
    """Delete an object's content, then its metadata.

    Forward-only, no rollback. A content failure leaves the object fully
    intact; a metadata failure leaves metadata without content, which the
    ``--check`` provisioning command reports.

    Known limitation: locks referencing the object are neither checked nor
    released. Callers must make sure the object is unlocked first.
    """

    meta_store = _get_meta_store(request)
    content_store = _get_content_store(request)

    try:
        meta_store.get_object_unsafe(oid)
    except MetaStoreError as e:
        raise HTTPException(status_code=404, detail="Object not found") from e

    try:
        content_store.delete_file(oid)
    except ContentStoreError as e:
        logger.error("mgmt: delete %s failed at content stage: %s", oid, e)
        raise HTTPException(status_code=500, detail="Failed to delete object content") from e
    logger.info("mgmt: delete %s: content removed", oid)

    try:
        meta_store.delete_object(oid)
    except MetaStoreError as e:
        logger.error(
            "mgmt: delete %s failed at metadata stage (content already removed): %s", oid, e
        )
        raise HTTPException(status_code=500, detail="Failed to delete object metadata") from e
    logger.info("mgmt: delete %s: metadata removed", oid)

    body = json.dumps({"success": "true"})
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Length": str(len(body.encode("utf-8")))},
    )
