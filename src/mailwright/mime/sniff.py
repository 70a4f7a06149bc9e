# =============================================================================
# Content Sniffing
# =============================================================================
# Infers a content type from the leading bytes of a payload, following the
# WHATWG MIME Sniffing Standard (https://mimesniff.spec.whatwg.org/) - the
# same heuristic browsers apply to unlabelled downloads.
#
# Only the first SNIFF_LEN bytes are considered. Signatures are tried in
# order and the first match wins; data that matches nothing falls through
# to the text check and finally to "application/octet-stream".
# =============================================================================

from dataclasses import dataclass

# The algorithm never looks past this many bytes
SNIFF_LEN = 512

# Whitespace skipped before looking for markup (HTML/XML signatures)
_WHITESPACE = b"\t\n\x0c\r "

HTML_TYPE = "text/html; charset=utf-8"
TEXT_TYPE = "text/plain; charset=utf-8"
DEFAULT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class _HTMLSignature:
    """Case-insensitive tag prefix that must be followed by space or '>'."""
    pattern: bytes

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        data = data[first_non_ws:]
        if len(data) < len(self.pattern) + 1:
            return None

        for i, expected in enumerate(self.pattern):
            actual = data[i]
            if ord("A") <= expected <= ord("Z"):
                actual &= 0xDF      # upper-case the input byte
            if actual != expected:
                return None

        # Next byte must terminate the tag
        if data[len(self.pattern)] not in b" >":
            return None
        return HTML_TYPE


@dataclass(frozen=True)
class _MaskedSignature:
    """Pattern compared against the input after AND-ing with a mask."""
    mask: bytes
    pattern: bytes
    content_type: str
    skip_ws: bool = False

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if self.skip_ws:
            data = data[first_non_ws:]
        if len(data) < len(self.pattern):
            return None

        for actual, mask, expected in zip(data, self.mask, self.pattern):
            if actual & mask != expected:
                return None
        return self.content_type


@dataclass(frozen=True)
class _ExactSignature:
    prefix: bytes
    content_type: str

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if data.startswith(self.prefix):
            return self.content_type
        return None


class _MP4Signature:
    """ISO base media file with an "mp4" brand in its ftyp box."""

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        if len(data) < 12:
            return None

        box_size = int.from_bytes(data[:4], "big")
        if len(data) < box_size or box_size % 4 != 0:
            return None
        if data[4:8] != b"ftyp":
            return None

        for start in range(8, box_size, 4):
            if start == 12:
                # Bytes 12-15 hold the minor version, not a brand
                continue
            if data[start:start + 3] == b"mp4":
                return "video/mp4"
        return None


class _TextSignature:
    """Matches when no binary control bytes are present."""

    def match(self, data: bytes, first_non_ws: int) -> str | None:
        for b in data[first_non_ws:]:
            if b <= 0x08 or b == 0x0B or 0x0E <= b <= 0x1A or 0x1C <= b <= 0x1F:
                return None
        return TEXT_TYPE


def _html(tag: str) -> _HTMLSignature:
    return _HTMLSignature(tag.encode("ascii"))


_SIGNATURES = (
    _html("<!DOCTYPE HTML"),
    _html("<HTML"),
    _html("<HEAD"),
    _html("<SCRIPT"),
    _html("<IFRAME"),
    _html("<H1"),
    _html("<DIV"),
    _html("<FONT"),
    _html("<TABLE"),
    _html("<A"),
    _html("<STYLE"),
    _html("<TITLE"),
    _html("<B"),
    _html("<BODY"),
    _html("<BR"),
    _html("<P"),
    _html("<!--"),
    _MaskedSignature(b"\xff\xff\xff\xff\xff", b"<?xml", "text/xml; charset=utf-8", skip_ws=True),
    _ExactSignature(b"%PDF-", "application/pdf"),
    _ExactSignature(b"%!PS-Adobe-", "application/postscript"),

    # Byte order marks
    _MaskedSignature(b"\xff\xff\x00\x00", b"\xfe\xff\x00\x00", "text/plain; charset=utf-16be"),
    _MaskedSignature(b"\xff\xff\x00\x00", b"\xff\xfe\x00\x00", "text/plain; charset=utf-16le"),
    _MaskedSignature(b"\xff\xff\xff\x00", b"\xef\xbb\xbf\x00", TEXT_TYPE),

    # Images
    _ExactSignature(b"\x00\x00\x01\x00", "image/x-icon"),
    _ExactSignature(b"\x00\x00\x02\x00", "image/x-icon"),
    _ExactSignature(b"BM", "image/bmp"),
    _ExactSignature(b"GIF87a", "image/gif"),
    _ExactSignature(b"GIF89a", "image/gif"),
    _MaskedSignature(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WEBPVP",
        "image/webp",
    ),
    _ExactSignature(b"\x89PNG\r\n\x1a\n", "image/png"),
    _ExactSignature(b"\xff\xd8\xff", "image/jpeg"),

    # Audio and video
    _MaskedSignature(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"FORM\x00\x00\x00\x00AIFF",
        "audio/aiff",
    ),
    _MaskedSignature(b"\xff\xff\xff", b"ID3", "audio/mpeg"),
    _MaskedSignature(b"\xff\xff\xff\xff\xff", b"OggS\x00", "application/ogg"),
    _MaskedSignature(b"\xff" * 8, b"MThd\x00\x00\x00\x06", "audio/midi"),
    _MaskedSignature(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00AVI ",
        "video/avi",
    ),
    _MaskedSignature(
        b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
        b"RIFF\x00\x00\x00\x00WAVE",
        "audio/wave",
    ),
    _MP4Signature(),
    _ExactSignature(b"\x1a\x45\xdf\xa3", "video/webm"),

    # Fonts
    _MaskedSignature(
        b"\x00" * 34 + b"\xff\xff",
        b"\x00" * 34 + b"LP",
        "application/vnd.ms-fontobject",
    ),
    _ExactSignature(b"\x00\x01\x00\x00", "font/ttf"),
    _ExactSignature(b"OTTO", "font/otf"),
    _ExactSignature(b"ttcf", "font/collection"),
    _ExactSignature(b"wOFF", "font/woff"),
    _ExactSignature(b"wOF2", "font/woff2"),

    # Archives
    _ExactSignature(b"\x1f\x8b\x08", "application/x-gzip"),
    _ExactSignature(b"PK\x03\x04", "application/zip"),
    _ExactSignature(b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    _ExactSignature(b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    _ExactSignature(b"\x00asm", "application/wasm"),

    _TextSignature(),
)


def detect_content_type(data: bytes) -> str:
    """
    Determine the content type of data from its first bytes.

    Always returns a valid MIME type; data that can't be identified is
    reported as "application/octet-stream".

    Example:
        >>> detect_content_type(b"Don't Panic")
        'text/plain; charset=utf-8'
        >>> detect_content_type(b"<html><body></body></html>")
        'text/html; charset=utf-8'
    """
    data = bytes(data[:SNIFF_LEN])

    first_non_ws = 0
    while first_non_ws < len(data) and data[first_non_ws] in _WHITESPACE:
        first_non_ws += 1

    for signature in _SIGNATURES:
        content_type = signature.match(data, first_non_ws)
        if content_type:
            return content_type

    return DEFAULT_TYPE
