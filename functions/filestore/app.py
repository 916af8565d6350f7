"""
FastAPI application entry point for the file store service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from filestore.config import get_settings
from filestore.db import FileStoreError
from filestore.dependencies import get_file_store, reset_file_store
from filestore.routes import router
from filestore.schemas import StatusResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize the store before serving; failures abort startup."""
    override = app.dependency_overrides.get(get_file_store)
    store = override() if override else get_file_store()
    store.ensure_initialized()

    yield

    if override is None:
        reset_file_store()


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def store_error_handler(request: Request, exc: FileStoreError) -> JSONResponse:
    logger.error("%s error: %s", request.method, exc, exc_info=exc)
    return JSONResponse({"error": str(exc)}, status_code=500)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Single File Store", version="0.1.0", lifespan=lifespan)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(FileStoreError, store_error_handler)
    app.include_router(router, prefix=settings.api_prefix)

    routes = [f"{settings.api_prefix}/file", f"{settings.api_prefix}/file/raw"]

    @app.get("/", response_model=StatusResponse)
    def index():
        return StatusResponse(status="up", routes=routes)

    return app


app = create_app()
