"""
HTTP routes for the file store API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from filestore.body import read_text_body
from filestore.db import RECORD_ID, FileStore, FileStoreError
from filestore.dependencies import get_file_store
from filestore.schemas import (
    DeletedResponse,
    ErrorResponse,
    FileIdResponse,
    FileResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


@router.post(
    "/file",
    response_model=FileIdResponse,
    status_code=201,
    responses={413: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
def create_file(
    content: str = Depends(read_text_body),
    store: FileStore = Depends(get_file_store),
):
    """
    Store the request body. Overwrites any existing content; POST never
    conflicts.
    """
    store.replace(content)
    return FileIdResponse(id=RECORD_ID)


@router.put(
    "/file",
    response_model=FileIdResponse,
    responses={413: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
def replace_file(
    content: str = Depends(read_text_body),
    store: FileStore = Depends(get_file_store),
):
    store.replace(content)
    return FileIdResponse(id=RECORD_ID)


@router.get(
    "/file",
    response_model=FileResponse,
    responses={404: {"model": ErrorResponse}, **ERROR_RESPONSES},
)
def get_file(store: FileStore = Depends(get_file_store)):
    record = store.get()
    if not record:
        logger.debug("File record missing")
        raise HTTPException(status_code=404, detail="not found")
    return FileResponse(id=record.id, content=record.content)


@router.delete("/file", response_model=DeletedResponse, responses=ERROR_RESPONSES)
def delete_file(store: FileStore = Depends(get_file_store)):
    """Clear the content. The record itself is kept."""
    store.clear()
    return DeletedResponse(deleted=True)


@router.get("/file/raw", response_class=PlainTextResponse)
def get_file_raw(store: FileStore = Depends(get_file_store)):
    # Empty content and a missing record are both "Not found" here, unlike
    # GET /file which returns an empty record.
    try:
        record = store.get()
    except FileStoreError:
        logger.exception("Raw download failed")
        return PlainTextResponse("Server error", status_code=500)
    if not record or record.content == "":
        return PlainTextResponse("Not found", status_code=404)
    return PlainTextResponse(record.content)
