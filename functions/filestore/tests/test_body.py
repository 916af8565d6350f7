import asyncio
import unittest

from fastapi import HTTPException
from starlette.requests import Request

from filestore.body import decode_body, read_text_body
from filestore.config import Settings


def _request(chunks: list[bytes], headers: list[tuple[bytes, bytes]] | None = None):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive():
        return messages.pop(0)

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/file",
        "query_string": b"",
        "headers": headers or [],
    }
    return Request(scope, receive)


class ReadTextBodyTests(unittest.TestCase):
    def test_streamed_chunks_are_joined(self):
        request = _request([b"hel", b"lo"])
        text = asyncio.run(read_text_body(request, Settings(max_body_bytes=8)))
        self.assertEqual(text, "hello")

    def test_streamed_body_over_limit_without_length_header(self):
        request = _request([b"abc", b"def"])
        with self.assertRaises(HTTPException) as ctx:
            asyncio.run(read_text_body(request, Settings(max_body_bytes=4)))
        self.assertEqual(ctx.exception.status_code, 413)

    def test_declared_length_over_limit_is_refused_up_front(self):
        request = _request([b""], headers=[(b"content-length", b"100")])
        with self.assertRaises(HTTPException) as ctx:
            asyncio.run(read_text_body(request, Settings(max_body_bytes=4)))
        self.assertEqual(ctx.exception.status_code, 413)


class DecodeBodyTests(unittest.TestCase):
    def test_defaults_to_utf8(self):
        self.assertEqual(decode_body("ü".encode("utf-8"), None), "ü")
        self.assertEqual(decode_body("ü".encode("utf-8"), "application/json"), "ü")

    def test_unknown_charset_falls_back_to_utf8(self):
        self.assertEqual(
            decode_body("ü".encode("utf-8"), "text/plain; charset=bogus"), "ü"
        )

    def test_non_text_codec_falls_back_to_utf8(self):
        for charset in ("base64", "rot13", "zlib"):
            self.assertEqual(
                decode_body(b"hello", f"text/plain; charset={charset}"), "hello"
            )

    def test_invalid_bytes_are_replaced(self):
        self.assertEqual(decode_body(b"a\xffb", "text/plain"), "a\ufffdb")


if __name__ == "__main__":
    unittest.main()
