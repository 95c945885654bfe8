"""FastAPI server for the regindex catalog."""

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from ..database.store import CatalogStore
from ..domain.event import parse_envelope
from ..errors import CatalogError, MalformedRequest, NotFound
from ..services import EventSink, QueryArgs, QueryService, StatusPatchService

logger = logging.getLogger(__name__)


def create_app(store: CatalogStore, cors_origins: Optional[list] = None) -> FastAPI:
    """Create the regindex FastAPI application around an open store."""

    sink = EventSink(store)
    query_service = QueryService(store)
    status_service = StatusPatchService(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        sink.close()

    app = FastAPI(
        title="regindex",
        description="Repository and tag catalog built from registry notifications",
        version="0.1.0",
        lifespan=lifespan,
    )

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["GET", "PATCH", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["cSphere"],
        )

    # Added after CORSMiddleware so it also wraps preflight answers.
    @app.middleware("http")
    async def csphere_marker(request: Request, call_next):
        response = await call_next(request)
        if request.method == "OPTIONS" and request.url.path == "/index":
            response.headers["cSphere"] = "true"
        return response

    app.state.store = store
    app.state.sink = sink

    @app.exception_handler(CatalogError)
    def catalog_error(request: Request, exc: CatalogError):
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return PlainTextResponse(str(exc), status_code=500)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "regindex"}

    @app.get("/index")
    def get_page(
        keyword: Optional[str] = Query(None, description="Substring filter on repository name"),
        skip: Optional[str] = Query(None, description="Repositories to skip"),
        limit: Optional[str] = Query(None, description="Page size"),
    ):
        args = QueryArgs.from_params(keyword, skip, limit)
        page = query_service.get_page(args)
        return JSONResponse(
            [repo.to_dict() for repo in page],
            media_type="application/json; charset=utf-8",
        )

    @app.options("/index")
    def announce_csphere():
        return Response(status_code=200, headers={"cSphere": "true"})

    @app.patch("/tag-status")
    async def set_tag_status(request: Request):
        body = await request.body()
        try:
            patch = status_service.decode(body)
            await run_in_threadpool(status_service.set_tag_status, patch)
        except MalformedRequest as e:
            return PlainTextResponse(str(e), status_code=400)
        except NotFound as e:
            return PlainTextResponse(str(e), status_code=404)
        except CatalogError as e:
            return PlainTextResponse(str(e), status_code=500)
        return Response(status_code=204)

    @app.post("/events")
    async def receive_events(request: Request):
        body = await request.body()
        try:
            events = parse_envelope(json.loads(body))
        except (ValueError, MalformedRequest) as e:
            return PlainTextResponse(str(e), status_code=400)
        applied = await run_in_threadpool(sink.write, events)
        return {"applied": applied}

    return app
