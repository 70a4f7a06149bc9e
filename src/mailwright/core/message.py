# =============================================================================
# Email Model
# =============================================================================
# Represents an outgoing email before it is serialized to MIME. This is the
# "message state" the MIME builder reads from:
#   - Envelope and header fields (From, To, Cc, Bcc, Subject, Reply-To)
#   - Arbitrary extra headers (a header name may repeat)
#   - Plain text and HTML bodies (append-only writers)
#   - Attachments, whose content is not read until the message is built
#
# The model itself never touches the network or encodes anything. The only
# field the builder writes back is `date`, regenerated on every build.
# =============================================================================

import io
import re
from dataclasses import dataclass, field
from email.utils import formatdate
from typing import BinaryIO


class BodyPart:
    """
    An append-only buffer holding one email body (plain text or HTML).

    BodyPart behaves like a writable binary file, so it can be handed
    directly to template engines or anything else that writes output.

    Example:
        >>> email.html.write("<p>So long, and thanks for all the fish.</p>")
        >>> email.plain.set("Get a real email client")
        >>> str(email.plain)
        'Get a real email client'
    """

    def __init__(self, initial: bytes | str = b"") -> None:
        self._buf = bytearray()
        if initial:
            self.write(initial)

    def write(self, data: bytes | str) -> int:
        """Append data to the body. Strings are encoded as UTF-8."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buf += data
        return len(data)

    def set(self, data: bytes | str) -> None:
        """Replace the body with data."""
        self._buf.clear()
        self.write(data)

    def reset(self) -> None:
        """Empty the body."""
        self._buf.clear()

    def getvalue(self) -> bytes:
        """Returns the raw body bytes."""
        return bytes(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __str__(self) -> str:
        return self._buf.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"BodyPart({len(self._buf)} bytes)"


@dataclass
class Attachment:
    """
    A file to embed in an outgoing email.

    Attributes:
        filename: Name presented to the recipient. For inline attachments
                  this is also the Content-ID token, so HTML bodies can
                  reference it as <img src="cid:filename">.
        content: Binary stream with the attachment data. It is read exactly
                 once, when the message is built, never before.
        inline: True to render the attachment inline (Content-Disposition:
                inline) rather than as a downloadable file.
        mime_type: Explicit content type. Empty means the type is sniffed
                   from the first bytes of the content.
    """
    filename: str
    content: BinaryIO
    inline: bool = False
    mime_type: str = ""

    def __repr__(self) -> str:
        return f"Attachment(filename={self.filename!r}, inline={self.inline})"


def _now() -> str:
    """RFC 5322 timestamp in local time, e.g. 'Mon, 02 Jan 2006 15:04:05 -0700'."""
    return formatdate(localtime=True)


@dataclass
class Email:
    """
    Represents an email being composed for sending.

    Address lists and header values are sanitized by the setters: line
    breaks are stripped so callers can't inject extra headers, and empty
    addresses are dropped.

    Attributes:
        from_addr: Sender address, used for both the From header and the
                   SMTP MAIL FROM command.
        from_name: Optional display name for the From header.
        reply_to: Optional Reply-To address.
        subject: Subject line.
        to_addrs: "To" recipients.
        cc_addrs: "Cc" recipients, visible to everyone.
        bcc_addrs: "Bcc" recipients. Only added to the SMTP envelope unless
                   write_bcc_header is set.
        headers: Extra headers. Each name maps to an ordered list of values.
        attachments: Ordered list of attachments.
        plain: Plain text body.
        html: HTML body.
        date: Date header value. Regenerated every time the email is built.
        write_bcc_header: Disclose Bcc recipients in a Bcc header.

    Example:
        >>> email = Email().set_from("jsmith@example.com").set_to("dom@example.org")
        >>> email.set_subject("Business proposition")
        >>> email.html.write("<b>Hello</b>")
    """

    from_addr: str = ""
    from_name: str = ""
    reply_to: str = ""
    subject: str = ""

    to_addrs: list[str] = field(default_factory=list)
    cc_addrs: list[str] = field(default_factory=list)
    bcc_addrs: list[str] = field(default_factory=list)

    headers: dict[str, list[str]] = field(default_factory=dict)
    attachments: list[Attachment] = field(default_factory=list)

    plain: BodyPart = field(default_factory=BodyPart)
    html: BodyPart = field(default_factory=BodyPart)

    date: str = field(default_factory=_now)
    write_bcc_header: bool = False

    # Compiled once per email, never reassigned
    line_breaks: re.Pattern = field(
        default_factory=lambda: re.compile(r"\r?\n"), init=False, repr=False, compare=False
    )

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    def _trim(self, value: str) -> str:
        return self.line_breaks.sub("", value)

    def _addresses(self, addrs: tuple[str, ...]) -> list[str]:
        result = []
        for addr in addrs:
            trimmed = self._trim(addr)
            if trimmed:
                result.append(trimmed)
        return result

    def set_to(self, *addrs: str) -> "Email":
        """Replace the list of "To" recipients."""
        self.to_addrs = self._addresses(addrs)
        return self

    def set_cc(self, *addrs: str) -> "Email":
        """Replace the list of "Cc" recipients."""
        self.cc_addrs = self._addresses(addrs)
        return self

    def set_bcc(self, *addrs: str) -> "Email":
        """Replace the list of blind carbon copy recipients."""
        self.bcc_addrs = self._addresses(addrs)
        return self

    def set_from(self, addr: str) -> "Email":
        self.from_addr = self._trim(addr)
        return self

    def set_from_name(self, name: str) -> "Email":
        self.from_name = self._trim(name)
        return self

    def set_reply_to(self, addr: str) -> "Email":
        self.reply_to = self._trim(addr)
        return self

    def set_subject(self, subject: str) -> "Email":
        self.subject = self._trim(subject)
        return self

    def add_header(self, name: str, value: str) -> "Email":
        """
        Add a value for a custom header, keeping any existing values.

        Each value becomes its own header line, in the order added.
        """
        self.headers.setdefault(self._trim(name), []).append(self._trim(value))
        return self

    def set_header(self, name: str, value: str) -> "Email":
        """Set a custom header, replacing any existing values."""
        self.headers[self._trim(name)] = [self._trim(value)]
        return self

    # -------------------------------------------------------------------------
    # Attachments
    # -------------------------------------------------------------------------

    def attach(
        self,
        filename: str,
        content: BinaryIO | bytes | str,
        *,
        inline: bool = False,
        mime_type: str = "",
    ) -> "Email":
        """
        Attach content to the email under the given filename.

        Note: a stream is not read until the email is built, and it is read
        exactly once - attach a fresh stream for every send.

        Args:
            filename: Name shown to the recipient (and Content-ID token).
            content: Binary stream, or bytes/str data to attach.
            inline: Display the attachment inline in the message body.
            mime_type: Explicit content type; sniffed from content if empty.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        if isinstance(content, (bytes, bytearray)):
            content = io.BytesIO(content)

        self.attachments.append(
            Attachment(
                filename=self._trim(filename),
                content=content,
                inline=inline,
                mime_type=self._trim(mime_type),
            )
        )
        return self

    def attach_inline(
        self, filename: str, content: BinaryIO | bytes | str, mime_type: str = ""
    ) -> "Email":
        """Attach content to be displayed inline (e.g. images in the HTML body)."""
        return self.attach(filename, content, inline=True, mime_type=mime_type)

    def clear_attachments(self) -> "Email":
        """Remove all attachments."""
        self.attachments = []
        return self

    # -------------------------------------------------------------------------
    # Representation
    # -------------------------------------------------------------------------

    def __repr__(self) -> str:
        """
        Redacted description of the email, for logging and debugging.

        Body content is summarized by size only.
        """
        custom = ""
        if self.headers:
            custom = ", ".join(f"{k}: {v!r}" for k, v in self.headers.items()) + ", "
        names = [f"{{filename: {a.filename}}}" for a in self.attachments]
        return (
            f"Email(date={self.date!r}, from={self.from_addr!r}, "
            f"from_name={self.from_name!r}, html={len(self.html)} bytes, "
            f"plain={len(self.plain)} bytes, to={self.to_addrs}, "
            f"cc={self.cc_addrs}, bcc={self.bcc_addrs}, subject={self.subject!r}, "
            f"{custom}attachments ({len(names)}): {names})"
        )
