# =============================================================================
# MIME Builder
# =============================================================================
# Serializes an Email into a complete MIME message:
#
#   From / Mime-Version / Date / Reply-To / Subject / To / Cc / [Bcc] / custom
#   Content-Type: multipart/mixed
#     |- multipart/alternative (text/plain, text/html)    <- body.py
#     |- attachment part                                  <- attachments.py
#     |- ...
#
# Two fresh random boundaries are generated for every build. They are long
# enough that content can't guess them to inject its own MIME parts.
# =============================================================================

import logging
import secrets
from email.header import Header
from email.utils import formataddr, formatdate, parseaddr
from typing import BinaryIO

from mailwright.core.message import Email
from mailwright.mime.attachments import ContentIDPolicy, write_attachments
from mailwright.mime.body import write_body
from mailwright.mime.errors import BoundaryError, MIMEError
from mailwright.mime.multipart import MultipartWriter
from mailwright.mime.splitter import LineSplitter

logger = logging.getLogger(__name__)

# Random bytes per boundary (hex encoded to twice this length)
BOUNDARY_BYTES = 30


def random_boundary() -> str:
    """
    Returns a random hexadecimal string used to separate MIME parts.

    Raises:
        BoundaryError: If the OS random source is unavailable.
    """
    try:
        return secrets.token_hex(BOUNDARY_BYTES)
    except (OSError, NotImplementedError) as e:
        raise BoundaryError(f"Failed to generate MIME boundary: {e}") from e


def build_mime(
    email: Email,
    sink: BinaryIO,
    content_id_policy: ContentIDPolicy = ContentIDPolicy.INLINE,
) -> None:
    """
    Write the MIME representation of email to sink.

    The Date header is regenerated on every call.

    Raises:
        BoundaryError: If no boundary could be generated (nothing written).
        AttachmentError: If an attachment can't be read or encoded.
        MIMEError: If writing to sink fails.
    """
    mixed_boundary = random_boundary()
    alt_boundary = random_boundary()

    email.date = formatdate(localtime=True)

    build_mime_with_boundaries(email, sink, mixed_boundary, alt_boundary, content_id_policy)


def build_mime_with_boundaries(
    email: Email,
    sink: BinaryIO,
    mixed_boundary: str,
    alt_boundary: str,
    content_id_policy: ContentIDPolicy = ContentIDPolicy.INLINE,
) -> None:
    """
    Write the MIME message using the given boundaries.

    The output only depends on the email and the boundaries, which makes
    this the deterministic core of build_mime().
    """
    try:
        write_headers(email, sink)

        mixed = MultipartWriter(sink, mixed_boundary)
        sink.write(
            f'Content-Type: multipart/mixed;\r\n\tboundary="{mixed.boundary}"; '
            f"charset=UTF-8\r\n\r\n".encode("ascii")
        )

        alt_part = mixed.create_part({
            "Content-Type": f'multipart/alternative;\r\n\tboundary="{alt_boundary}"',
        })
        write_body(alt_part, bytes(email.plain), bytes(email.html), alt_boundary)

        write_attachments(email.attachments, mixed, LineSplitter, content_id_policy)

        mixed.close()
    except OSError as e:
        raise MIMEError(f"Failed to write MIME message: {e}") from e

    logger.debug(
        f"Built MIME message with {len(email.attachments)} attachment(s) "
        f"for {len(email.to_addrs)} recipient(s)"
    )


def from_header(email: Email) -> str:
    """Returns the From header line, with the display name if one is set."""
    if not email.from_name:
        return f"From: {email.from_addr}\r\n"

    return f"From: {formataddr((email.from_name, email.from_addr))}\r\n"


def _encode_address(addr: str) -> str:
    """RFC 2047 encode the display name of an address, if it has one."""
    name, bare = parseaddr(addr)
    if not bare:
        return addr

    try:
        return formataddr((name, bare))
    except UnicodeEncodeError:
        # Non-ASCII address part; leave it for the server to judge
        return addr


def _address_list(addrs: list[str]) -> str:
    return ",".join(_encode_address(addr) for addr in addrs)


def _encode_subject(subject: str) -> str:
    if subject.isascii():
        return subject
    return Header(subject, "utf-8").encode(linesep="\r\n")


def write_headers(email: Email, sink: BinaryIO) -> None:
    """
    Write the message headers in a fixed order.

    To, Cc and Bcc are each written as a single comma separated header, and
    only when they have at least one address. Bcc is only written when the
    email asks for it. Custom headers follow, one line per value.
    Display names in address headers are RFC 2047 encoded when non-ASCII.
    """
    lines = [
        from_header(email),
        "Mime-Version: 1.0\r\n",
        f"Date: {email.date}\r\n",
    ]

    if email.reply_to:
        lines.append(f"Reply-To: {_encode_address(email.reply_to)}\r\n")

    lines.append(f"Subject: {_encode_subject(email.subject)}\r\n")

    if email.to_addrs:
        lines.append(f"To: {_address_list(email.to_addrs)}\r\n")

    if email.cc_addrs:
        lines.append(f"Cc: {_address_list(email.cc_addrs)}\r\n")

    if email.write_bcc_header and email.bcc_addrs:
        lines.append(f"Bcc: {_address_list(email.bcc_addrs)}\r\n")

    for name, values in email.headers.items():
        for value in values:
            lines.append(f"{name}: {value}\r\n")

    sink.write("".join(lines).encode("utf-8"))
