"""
Pydantic schemas for the file store API.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class FileIdResponse(BaseModel):
    id: int


class FileResponse(BaseModel):
    id: int
    content: str


class DeletedResponse(BaseModel):
    deleted: Literal[True]


class ErrorResponse(BaseModel):
    error: str


class StatusResponse(BaseModel):
    status: Literal["up"]
    routes: list[str]
