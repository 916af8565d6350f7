"""
Raw request body reading with a hard size ceiling.

Any content type is accepted and interpreted as text; there is no content
negotiation.
"""

from __future__ import annotations

import codecs

from fastapi import Depends, HTTPException, Request

from filestore.config import Settings, get_settings

PAYLOAD_TOO_LARGE = "request entity too large"


def _charset(content_type: str | None) -> str:
    if not content_type:
        return "utf-8"
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset":
            charset = value.strip().strip('"')
            try:
                return codecs.lookup(charset).name
            except LookupError:
                return "utf-8"
    return "utf-8"


def decode_body(data: bytes, content_type: str | None) -> str:
    try:
        return data.decode(_charset(content_type), errors="replace")
    except LookupError:
        # bytes-to-bytes codecs such as base64 or zlib are not text encodings
        return data.decode("utf-8", errors="replace")


async def read_text_body(
    request: Request, settings: Settings = Depends(get_settings)
) -> str:
    """
    Read the request body as text, rejecting it with 413 once it exceeds
    ``settings.max_body_bytes``. The declared Content-Length is checked first
    so honest oversized uploads are refused without reading them.
    """
    limit = settings.max_body_bytes
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE)

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE)
        chunks.append(chunk)
    return decode_body(b"".join(chunks), request.headers.get("content-type"))
