# =============================================================================
# Body Writer
# =============================================================================
# Writes the multipart/alternative section holding the message body:
#   - text/plain part, if there is a plain text body
#   - text/html part, if there is an HTML body
#
# Plain always comes first: clients show the LAST alternative they can
# render, so HTML wins where it is supported.
# =============================================================================

import logging
from email import quoprimime
from typing import BinaryIO

from mailwright.mime.multipart import MultipartWriter

logger = logging.getLogger(__name__)

# RFC 2045 limit for quoted-printable lines, soft break included
QP_LINE_LEN = 76


def encode_quoted_printable(data: bytes) -> bytes:
    """
    Quoted-printable encode data with CRLF line endings.

    Lines longer than QP_LINE_LEN are wrapped with soft line breaks ("=").
    Bytes are mapped one-to-one through latin-1 so any encoding survives.
    """
    encoded = quoprimime.body_encode(data.decode("latin-1"), maxlinelen=QP_LINE_LEN, eol="\r\n")
    return encoded.encode("ascii")


def write_body(sink: BinaryIO, plain: bytes, html: bytes, boundary: str) -> None:
    """
    Write the multipart/alternative body section.

    With no body at all the section is still opened and closed, giving an
    empty but well-formed multipart.

    The section is always closed, even if writing a part fails. In that case
    the original error is raised, not any error from closing.
    """
    alt = MultipartWriter(sink, boundary)

    try:
        for content_type, data in (("text/plain", plain), ("text/html", html)):
            if not data:
                continue

            part = alt.create_part({
                "Content-Type": f"{content_type}; charset=UTF-8",
                "Content-Transfer-Encoding": "quoted-printable",
            })
            part.write(encode_quoted_printable(bytes(data)))
    except Exception:
        try:
            alt.close()
        except OSError as close_error:
            logger.debug(f"Error closing alternative section after failure: {close_error}")
        raise

    alt.close()
