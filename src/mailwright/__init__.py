# =============================================================================
# mailwright: MIME Email Composition and SMTP Delivery
# =============================================================================
#
# mailwright builds RFC 5322 / MIME messages and delivers them over SMTP.
#
# Features:
#   - Plain text and HTML bodies (multipart/alternative, quoted-printable)
#   - Attachments and inline images with sniffed content types
#   - STARTTLS, plaintext and implicit TLS transports (via aiosmtplib)
#   - PLAIN, LOGIN and CRAM-MD5 authentication, passwords in the keyring
#   - XDG Base Directory compliant configuration
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailwright"

from mailwright.config import Config, ConfigError, MimeConfig
from mailwright.core import (
    Account,
    Attachment,
    BodyPart,
    Credentials,
    CredentialsError,
    Email,
    MailError,
)
from mailwright.mailer import Mailer
from mailwright.mime import AttachmentError, BoundaryError, ContentIDPolicy, MIMEError
from mailwright.smtp import (
    Envelope,
    ExplicitTLSTransport,
    PlaintextTransport,
    RecipientRefusedError,
    SendError,
    SenderRefusedError,
    SessionState,
    SMTPAuthenticationError,
    SMTPConnectionError,
    SMTPError,
    StartTLSTransport,
    Transport,
    transport_for,
)

# Main entry point - this is what gets called by the 'mailwright' command
from mailwright.app import main

__all__ = [
    "main",
    "__version__",
    "__app_name__",
    "Config",
    "ConfigError",
    "MimeConfig",
    "Account",
    "Attachment",
    "BodyPart",
    "Credentials",
    "CredentialsError",
    "Email",
    "MailError",
    "Mailer",
    "AttachmentError",
    "BoundaryError",
    "ContentIDPolicy",
    "MIMEError",
    "Envelope",
    "ExplicitTLSTransport",
    "PlaintextTransport",
    "RecipientRefusedError",
    "SendError",
    "SenderRefusedError",
    "SessionState",
    "SMTPAuthenticationError",
    "SMTPConnectionError",
    "SMTPError",
    "StartTLSTransport",
    "Transport",
    "transport_for",
]
