"""
Streaming multipart/form-data encoding for a single file part.

Only the part header and the closing boundary are held in memory; the file
content is read from the caller's stream in chunks while the request is sent.
"""

from __future__ import annotations
import secrets
from typing import BinaryIO, Iterator, Optional

DEFAULT_CHUNK_SIZE = 64 * 1024


def escape_quotes(value: str) -> str:
    """Escape a value for use inside a quoted header parameter."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class MultipartFile:
    """A ``multipart/form-data`` body made of one file part."""

    def __init__(self, field: str, filename: str, content_type: Optional[str] = None,
                 boundary: Optional[str] = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.boundary = boundary or secrets.token_hex(16)
        self.chunk_size = chunk_size
        self.header = (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{escape_quotes(field)}"; '
            f'filename="{escape_quotes(filename)}"\r\n'
            f"Content-Type: {content_type or 'application/octet-stream'}\r\n"
            "\r\n"
        ).encode("utf-8")
        self.footer = f"\r\n--{self.boundary}--\r\n".encode("ascii")

    @property
    def content_type(self) -> str:
        """Value for the request's ``Content-Type`` header."""
        return f"multipart/form-data; boundary={self.boundary}"

    def iter_body(self, stream: BinaryIO) -> Iterator[bytes]:
        """Yield the header, the stream's content, then the footer."""
        yield self.header
        while True:
            chunk = stream.read(self.chunk_size)
            if not chunk:
                break
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            yield chunk
        yield self.footer
