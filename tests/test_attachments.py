# =============================================================================
# Tests for attachment encoding
# =============================================================================

import base64
from io import BytesIO

import pytest

from mailwright.core import Attachment
from mailwright.mime.attachments import (
    ContentIDPolicy,
    attachment_headers,
    write_attachments,
)
from mailwright.mime.errors import AttachmentError
from mailwright.mime.multipart import MultipartWriter
from mailwright.mime.splitter import LineSplitter


def _write(attachments, policy=ContentIDPolicy.INLINE, boundary="t"):
    sink = BytesIO()
    mixed = MultipartWriter(sink, boundary)
    write_attachments(attachments, mixed, LineSplitter, policy)
    mixed.close()
    return sink.getvalue()


def _payload(output: bytes, boundary: bytes = b"t") -> bytes:
    """Decode the base64 body of the only part in output."""
    body = output.split(b"\r\n\r\n", 1)[1]
    body = body.rsplit(b"\r\n--" + boundary + b"--\r\n", 1)[0]
    return base64.b64decode(body.replace(b"\r\n", b""))


class FailingStream:
    def read(self, size=-1):
        raise OSError("disk on fire")


def test_small_text_attachment():
    output = _write([Attachment("advice", BytesIO(b"Don't Panic"))])

    assert output == (
        b"--t\r\n"
        b"Content-Disposition: attachment;\n\tfilename=\"advice\"\r\n"
        b"Content-Transfer-Encoding: base64\r\n"
        b"Content-Type: text/plain; charset=utf-8;\n\tfilename=\"advice\"\r\n"
        b"\r\n"
        b"RG9uJ3QgUGFuaWM="
        b"\r\n--t--\r\n"
    )


def test_inline_attachment_gets_content_id():
    output = _write([Attachment("logo.png", BytesIO(b"\x89PNG\r\n\x1a\n" + b"\x00" * 20), inline=True)])

    assert b"Content-Disposition: inline;\n\tfilename=\"logo.png\"\r\n" in output
    assert b"Content-ID: <logo.png>\r\n" in output
    assert b"Content-Type: image/png;\n\tfilename=\"logo.png\"\r\n" in output


@pytest.mark.parametrize(
    "policy, inline, has_cid",
    [
        (ContentIDPolicy.INLINE, True, True),
        (ContentIDPolicy.INLINE, False, False),
        (ContentIDPolicy.ATTACHMENT, True, False),
        (ContentIDPolicy.ATTACHMENT, False, True),
        (ContentIDPolicy.BOTH, True, True),
        (ContentIDPolicy.BOTH, False, True),
        (ContentIDPolicy.NONE, True, False),
        (ContentIDPolicy.NONE, False, False),
    ],
)
def test_content_id_policy(policy, inline, has_cid):
    headers = attachment_headers(Attachment("a.txt", BytesIO(), inline=inline), "text/plain", policy)
    assert ("Content-ID" in headers) is has_cid


def test_explicit_mime_type_skips_sniffing():
    output = _write([Attachment("data.csv", BytesIO(b"a,b\n1,2\n"), mime_type="text/csv")])
    assert b"Content-Type: text/csv;\n\tfilename=\"data.csv\"\r\n" in output


def test_filename_is_quoted():
    headers = attachment_headers(Attachment('my "best" \\file', BytesIO()), "text/plain")
    assert headers["Content-Disposition"] == 'attachment;\n\tfilename="my \\"best\\" \\\\file"'


def test_large_attachment_round_trips():
    data = bytes(range(256)) * 40    # well past the sniffing window

    output = _write([Attachment("blob.bin", BytesIO(data))])

    assert b"Content-Type: application/octet-stream;" in output
    assert _payload(output) == data


def test_base64_lines_are_60_columns():
    data = b"x" * 5000
    output = _write([Attachment("big.txt", BytesIO(data))])

    body = output.split(b"\r\n\r\n", 1)[1].rsplit(b"\r\n--t--", 1)[0]
    lines = body.split(b"\r\n")
    assert all(len(line) == 60 for line in lines[:-1])
    assert 0 < len(lines[-1]) <= 60


@pytest.mark.parametrize("size", [45, 2880, 2880 * 3])
def test_full_last_line_has_no_blank_line(size):
    data = b"z" * size
    output = _write([Attachment("z.txt", BytesIO(data))])

    assert not output.endswith(b"\r\n\r\n--t--\r\n")
    assert _payload(output) == data

    body = output.split(b"\r\n\r\n", 1)[1].rsplit(b"\r\n--t--", 1)[0]
    assert all(len(line) == 60 for line in body.split(b"\r\n"))


def test_exactly_sniff_length_attachment():
    data = b"z" * 512
    output = _write([Attachment("z.txt", BytesIO(data))])
    assert _payload(output) == data


def test_attachments_keep_their_order():
    output = _write([
        Attachment("first.txt", BytesIO(b"one")),
        Attachment("second.txt", BytesIO(b"two")),
        Attachment("third.txt", BytesIO(b"three")),
    ])

    first = output.index(b'filename="first.txt"')
    second = output.index(b'filename="second.txt"')
    third = output.index(b'filename="third.txt"')
    assert first < second < third
    assert output.count(b"\r\n--t\r\n") == 2


def test_short_reads_are_completed():
    class Trickle(BytesIO):
        def read(self, size=-1):
            return super().read(min(size, 7) if size and size > 0 else 7)

    data = b"0123456789" * 100
    output = _write([Attachment("trickle.txt", Trickle(data))])
    assert _payload(output) == data


def test_read_error_raises_attachment_error():
    with pytest.raises(AttachmentError) as excinfo:
        _write([Attachment("broken", FailingStream())])

    assert "broken" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_no_attachments_writes_nothing():
    sink = BytesIO()
    mixed = MultipartWriter(sink, "t")
    write_attachments([], mixed)
    assert sink.getvalue() == b""
