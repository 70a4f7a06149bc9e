# =============================================================================
# SMTP Envelope
# =============================================================================
# The envelope is what the SMTP server sees: MAIL FROM and RCPT TO. It is
# separate from the headers inside the message - Bcc recipients are only
# ever here, and display names are stripped.
# =============================================================================

from dataclasses import dataclass
from email.utils import parseaddr

from mailwright.core.credentials import Credentials
from mailwright.core.message import Email


def strip_names(addrs: list[str]) -> list[str]:
    """
    Reduce RFC 5322 addresses to their bare address part.

    "John Doe <c@example.com>" becomes "c@example.com". Strings that don't
    parse as an address are returned unchanged.
    """
    result = []
    for addr in addrs:
        _, bare = parseaddr(addr)
        result.append(bare or addr)
    return result


@dataclass(frozen=True)
class Envelope:
    """
    SMTP envelope for one send.

    Attributes:
        sender: Address for the MAIL FROM command.
        recipients: Addresses for RCPT TO, in the order they are issued.
        credentials: Login details, or None to skip authentication.
    """
    sender: str
    recipients: tuple[str, ...]
    credentials: Credentials | None = None

    @classmethod
    def from_email(cls, email: Email, credentials: Credentials | None = None) -> "Envelope":
        """
        Build the envelope for an email: To first, then Cc, then Bcc.
        """
        recipients = strip_names(email.to_addrs + email.cc_addrs + email.bcc_addrs)
        return cls(
            sender=email.from_addr,
            recipients=tuple(recipients),
            credentials=credentials,
        )

    def __repr__(self) -> str:
        return (
            f"Envelope(sender={self.sender!r}, recipients={list(self.recipients)}, "
            f"auth set: {self.credentials is not None})"
        )
