# =============================================================================
# Tests for the body section and quoted-printable encoding
# =============================================================================

from io import BytesIO

import pytest

from mailwright.mime.body import encode_quoted_printable, write_body
from mailwright.mime.errors import BoundaryError


LOREM = (
    b"Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod "
    b"tempor incididunt ut labore et dolore magna aliqua."
)


def _body(plain: bytes, html: bytes) -> bytes:
    sink = BytesIO()
    write_body(sink, plain, html, "t")
    return sink.getvalue()


def test_plain_only():
    assert _body(b"Plain", b"") == (
        b"--t\r\n"
        b"Content-Transfer-Encoding: quoted-printable\r\n"
        b"Content-Type: text/plain; charset=UTF-8\r\n"
        b"\r\n"
        b"Plain"
        b"\r\n--t--\r\n"
    )


def test_html_only():
    assert _body(b"", b"<b>HTML</b>") == (
        b"--t\r\n"
        b"Content-Transfer-Encoding: quoted-printable\r\n"
        b"Content-Type: text/html; charset=UTF-8\r\n"
        b"\r\n"
        b"<b>HTML</b>"
        b"\r\n--t--\r\n"
    )


def test_plain_comes_before_html():
    output = _body(b"Plain", b"<b>HTML</b>")

    assert output.index(b"text/plain") < output.index(b"text/html")
    assert output.count(b"\r\n--t\r\n") == 1
    assert output.endswith(b"<b>HTML</b>\r\n--t--\r\n")


def test_no_bodies_gives_empty_section():
    assert _body(b"", b"") == b"--t--\r\n"


def test_invalid_boundary():
    with pytest.raises(BoundaryError):
        write_body(BytesIO(), b"Plain", b"", "bad boundary ")


def test_long_lines_get_soft_breaks():
    encoded = encode_quoted_printable(LOREM)

    assert encoded.startswith(
        b"Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tem=\r\npor"
    )
    for line in encoded.split(b"\r\n"):
        assert len(line) <= 76


def test_non_ascii_is_escaped():
    assert encode_quoted_printable("café".encode("utf-8")) == b"caf=C3=A9"


def test_equals_sign_is_escaped():
    assert encode_quoted_printable(b"a=b") == b"a=3Db"


def test_line_breaks_become_crlf():
    assert encode_quoted_printable(b"one\ntwo") == b"one\r\ntwo"


def test_write_failure_still_closes_section():
    class BrokenAfterHeaders(BytesIO):
        def __init__(self):
            super().__init__()
            self.writes = 0

        def write(self, data):
            self.writes += 1
            if self.writes == 2:
                raise OSError("sink full")
            return super().write(data)

    sink = BrokenAfterHeaders()
    with pytest.raises(OSError, match="sink full"):
        write_body(sink, b"Plain", b"", "t")

    assert sink.getvalue().endswith(b"\r\n--t--\r\n")
