# =============================================================================
# MIME Module
# =============================================================================
# Turns an Email into MIME bytes.
#
# Features:
#   - multipart/mixed envelope with random boundaries
#   - multipart/alternative plain text + HTML body (quoted-printable)
#   - Attachments (base64, 60 column lines, sniffed content types)
#   - Inline attachments with Content-ID for "cid:" references
# =============================================================================

from mailwright.mime.attachments import ContentIDPolicy, write_attachments
from mailwright.mime.body import encode_quoted_printable, write_body
from mailwright.mime.builder import (
    build_mime,
    build_mime_with_boundaries,
    random_boundary,
    write_headers,
)
from mailwright.mime.errors import AttachmentError, BoundaryError, MIMEError
from mailwright.mime.multipart import MultipartWriter
from mailwright.mime.sniff import detect_content_type
from mailwright.mime.splitter import LineSplitter

__all__ = [
    "ContentIDPolicy",
    "write_attachments",
    "encode_quoted_printable",
    "write_body",
    "build_mime",
    "build_mime_with_boundaries",
    "random_boundary",
    "write_headers",
    "AttachmentError",
    "BoundaryError",
    "MIMEError",
    "MultipartWriter",
    "detect_content_type",
    "LineSplitter",
]
