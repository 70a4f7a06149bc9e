# =============================================================================
# Multipart Writer
# =============================================================================
# Streams a multipart section (RFC 2046) to a binary sink:
#
#   --boundary\r\n
#   Header: value\r\n
#   \r\n
#   <part data>
#   \r\n--boundary\r\n
#   ...
#   \r\n--boundary--\r\n
#
# Part data is written straight through to the sink as the caller produces
# it; nothing is buffered here. Part headers are written sorted by name so
# the output is deterministic.
# =============================================================================

import re
from collections.abc import Mapping
from typing import BinaryIO

from mailwright.mime.errors import BoundaryError, MIMEError

# RFC 2046 bchars: 1-70 characters, may contain spaces but not end with one
_BOUNDARY_RE = re.compile(r"[0-9A-Za-z'()+_,\-./:=? ]{0,69}[0-9A-Za-z'()+_,\-./:=?]")


class MultipartWriter:
    """
    Writes the parts of one multipart section.

    Usage:
        >>> mixed = MultipartWriter(buf, boundary)
        >>> part = mixed.create_part({"Content-Type": "text/plain"})
        >>> part.write(b"hello")
        >>> mixed.close()
    """

    def __init__(self, sink: BinaryIO, boundary: str) -> None:
        if not _BOUNDARY_RE.fullmatch(boundary):
            raise BoundaryError(f"Invalid multipart boundary: {boundary!r}")

        self._sink = sink
        self._boundary = boundary
        self._has_parts = False
        self._closed = False

    @property
    def boundary(self) -> str:
        return self._boundary

    def create_part(self, headers: Mapping[str, str]) -> BinaryIO:
        """
        Start a new part with the given headers.

        Returns:
            The sink to write the part body to. Anything written to it
            belongs to this part until the next create_part() or close().
        """
        if self._closed:
            raise MIMEError("Multipart section already closed")

        if self._has_parts:
            delimiter = f"\r\n--{self._boundary}\r\n"
        else:
            delimiter = f"--{self._boundary}\r\n"
        self._has_parts = True

        lines = [delimiter]
        for name in sorted(headers):
            lines.append(f"{name}: {headers[name]}\r\n")
        lines.append("\r\n")

        self._sink.write("".join(lines).encode("utf-8"))
        return self._sink

    def close(self) -> None:
        """Write the closing delimiter. The section can't be written to afterwards."""
        if self._closed:
            return
        self._closed = True

        if self._has_parts:
            self._sink.write(f"\r\n--{self._boundary}--\r\n".encode("ascii"))
        else:
            self._sink.write(f"--{self._boundary}--\r\n".encode("ascii"))
