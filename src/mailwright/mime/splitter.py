# =============================================================================
# Line Splitter
# =============================================================================
# Breaks output into fixed-width lines so base64 attachment data stays within
# SMTP/MIME line-length limits.
#
# Each write() call is wrapped on its own: the column counter restarts at 0
# for every call and the final, possibly short, chunk of a call is written
# without a line break. Writing twice therefore does NOT continue the
# previous line - callers that need contiguous lines must write whole
# multiples of the line width (the base64 encoder does exactly that).
# =============================================================================

from typing import BinaryIO

# Maximum base64 characters per line
MAX_LINE_LEN = 60

CRLF = b"\r\n"


class LineSplitter:
    """
    Wraps a binary sink, inserting CRLF after every max_len bytes written.

    Usage:
        >>> splitter = LineSplitter(part)
        >>> splitter.write(b"A" * 130)   # writes 60 + CRLF + 60 + CRLF + 10
        134
    """

    def __init__(self, sink: BinaryIO, max_len: int = MAX_LINE_LEN) -> None:
        self._sink = sink
        self.max_len = max_len

    def write(self, data: bytes) -> int:
        """
        Write data as lines of max_len bytes.

        Returns:
            The number of bytes written to the sink, including the inserted
            line breaks.
        """
        breaks = len(data) // self.max_len
        offset = 0
        for _ in range(breaks):
            self._sink.write(data[offset:offset + self.max_len])
            self._sink.write(CRLF)
            offset += self.max_len

        if offset < len(data):
            self._sink.write(data[offset:])

        return len(data) + breaks * len(CRLF)
