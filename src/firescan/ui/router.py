from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from starlette.responses import Response

from firescan.context import ViewerContext
from firescan.errors import QueryError
from firescan.models import UNKNOWN_COUNT, CollectionSummary
from firescan.paging import build_page_view, locate_record, parse_record_number
from firescan.ui.rendering import render_template

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ui"])


def get_viewer_context(request: Request) -> ViewerContext:
    ctx = getattr(request.app.state, "viewer", None)
    if ctx is None:
        raise HTTPException(status_code=500, detail="Viewer not initialized")
    return ctx


def _count_or(ctx: ViewerContext, name: str, fallback: int) -> int:
    try:
        return ctx.gateway.count(name)
    except QueryError as exc:
        logger.warning("error counting %s: %s", name, exc)
        return fallback


@router.get("/", response_class=HTMLResponse)
def ui_index(request: Request, ctx: ViewerContext = Depends(get_viewer_context)) -> Response:
    collections = [
        CollectionSummary(name=name, count=_count_or(ctx, name, UNKNOWN_COUNT))
        for name in ctx.config.collections
    ]

    return render_template(
        request,
        ctx.templates,
        "index.html",
        {
            "title": f"{ctx.config.project_id} • FireScan",
            "project_id": ctx.config.project_id,
            "collections": collections,
        },
    )


@router.get("/collection/{name:path}", response_class=HTMLResponse)
def ui_collection(
    request: Request, name: str, ctx: ViewerContext = Depends(get_viewer_context)
) -> Response:
    name = name.strip("/")
    if not name:
        return RedirectResponse(url="/", status_code=302)

    record = parse_record_number(request.query_params.get("page"))

    # An unknown total still lets the page render; it only disables "next".
    total = _count_or(ctx, name, 0)

    window = locate_record(record, ctx.config.batch_size)
    try:
        docs = ctx.gateway.fetch(name, window.offset, window.limit)
    except QueryError as exc:
        logger.error("error fetching %s: %s", name, exc)
        return PlainTextResponse(f"error fetching documents: {exc}", status_code=500)

    view = build_page_view(
        collection=name,
        record=record,
        total=total,
        window=window,
        docs=docs,
    )

    return render_template(
        request,
        ctx.templates,
        "collection.html",
        {
            "title": f"{name} • FireScan",
            "project_id": ctx.config.project_id,
            "view": view,
        },
    )
