# =============================================================================
# Attachment Encoder
# =============================================================================
# Writes one MIME part per attachment, in the order they were attached:
#
#   1. Read up to SNIFF_LEN bytes and detect the content type (unless the
#      attachment carries an explicit one)
#   2. Open a part with Content-Type, Content-Disposition,
#      Content-Transfer-Encoding and (depending on policy) Content-ID
#   3. Stream the sniffed bytes plus the rest of the content through a
#      base64 encoder and a LineSplitter into the part
#
# Attachment streams are read exactly once. Nothing is buffered beyond one
# encoder chunk, so large files don't have to fit in memory twice.
# =============================================================================

import base64
import logging
import shutil
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import BinaryIO, Protocol

from mailwright.core.message import Attachment
from mailwright.mime.errors import AttachmentError, MIMEError
from mailwright.mime.sniff import SNIFF_LEN, detect_content_type
from mailwright.mime.splitter import MAX_LINE_LEN, LineSplitter

logger = logging.getLogger(__name__)

# Input bytes per encoded line (45 bytes -> 60 base64 characters)
_LINE_INPUT_LEN = MAX_LINE_LEN // 4 * 3

# Bytes encoded per write to the splitter: a whole number of lines, so the
# splitter never has to carry a partial line over to the next write.
_ENCODE_CHUNK = _LINE_INPUT_LEN * 64


class ContentIDPolicy(str, Enum):
    """
    Which attachments get a Content-ID header.

    A Content-ID lets an HTML body reference an attachment with a
    "cid:<filename>" URL. Mail clients differ on which parts they expect
    it on, so this is configurable.
    """
    INLINE = "inline"           # Only inline attachments (default)
    ATTACHMENT = "attachment"   # Only regular (non-inline) attachments
    BOTH = "both"
    NONE = "none"

    def applies_to(self, attachment: Attachment) -> bool:
        if self is ContentIDPolicy.BOTH:
            return True
        if self is ContentIDPolicy.INLINE:
            return attachment.inline
        if self is ContentIDPolicy.ATTACHMENT:
            return not attachment.inline
        return False


class PartCreator(Protocol):
    """Anything that can open a new MIME part, e.g. a MultipartWriter."""

    def create_part(self, headers: Mapping[str, str]) -> BinaryIO:
        ...


class _Base64Writer:
    """
    Streaming base64 encoder.

    Input is buffered until more than a whole _ENCODE_CHUNK is available, so
    at least one byte is always left for close(). close() encodes the rest,
    including the padded final group, without a trailing line break.
    """

    def __init__(self, sink) -> None:
        self._sink = sink
        self._pending = bytearray()

    def write(self, data: bytes) -> int:
        self._pending += data
        if len(self._pending) > _ENCODE_CHUNK:
            cut = (len(self._pending) - 1) // _ENCODE_CHUNK * _ENCODE_CHUNK
            self._sink.write(base64.b64encode(self._pending[:cut]))
            del self._pending[:cut]
        return len(data)

    def close(self) -> None:
        if not self._pending:
            return

        encoded = base64.b64encode(self._pending)
        self._pending.clear()

        # Last character on its own: a full final line gets no line break
        self._sink.write(encoded[:-1])
        self._sink.write(encoded[-1:])


def _quote(value: str) -> str:
    """Quote a header parameter value, escaping backslashes and quotes."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _read_head(stream: BinaryIO) -> bytes:
    """Read up to SNIFF_LEN bytes, stopping early only at end of stream."""
    head = bytearray()
    while len(head) < SNIFF_LEN:
        chunk = stream.read(SNIFF_LEN - len(head))
        if not chunk:
            break
        head += chunk
    return bytes(head)


def attachment_headers(
    attachment: Attachment,
    content_type: str,
    content_id_policy: ContentIDPolicy = ContentIDPolicy.INLINE,
) -> dict[str, str]:
    """
    Build the part headers for an attachment.

    Parameters are folded onto a tab-indented continuation line, e.g.:

        Content-Type: text/plain; charset=utf-8;
        	filename="advice"
    """
    filename = _quote(attachment.filename)
    disposition = "inline" if attachment.inline else "attachment"

    headers = {
        "Content-Type": f"{content_type};\n\tfilename={filename}",
        "Content-Disposition": f"{disposition};\n\tfilename={filename}",
        "Content-Transfer-Encoding": "base64",
    }
    if content_id_policy.applies_to(attachment):
        headers["Content-ID"] = f"<{attachment.filename}>"
    return headers


def write_attachments(
    attachments: Iterable[Attachment],
    mixed: PartCreator,
    splitter: Callable[[BinaryIO], object] = LineSplitter,
    content_id_policy: ContentIDPolicy = ContentIDPolicy.INLINE,
) -> None:
    """
    Write every attachment as a base64 encoded MIME part.

    Args:
        attachments: Attachments to write, in order.
        mixed: Creates the part for each attachment.
        splitter: Wraps a part sink to break the base64 output into lines.
        content_id_policy: Which attachments get a Content-ID header.

    Raises:
        AttachmentError: If any attachment can't be read, or its part can't
                         be created or written. Nothing after the failing
                         attachment is written.
    """
    for attachment in attachments:
        try:
            head = _read_head(attachment.content)

            content_type = attachment.mime_type or detect_content_type(head)
            headers = attachment_headers(attachment, content_type, content_id_policy)
            part = mixed.create_part(headers)

            encoder = _Base64Writer(splitter(part))
            encoder.write(head)

            # More to write?
            if len(head) == SNIFF_LEN:
                shutil.copyfileobj(attachment.content, encoder, _ENCODE_CHUNK)

            encoder.close()
        except (OSError, ValueError, MIMEError) as e:
            raise AttachmentError(
                f"Failed to encode attachment {attachment.filename!r}: {e}"
            ) from e

        logger.debug(f"Encoded attachment {attachment.filename!r} as {content_type}")
