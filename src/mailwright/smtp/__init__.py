# =============================================================================
# SMTP Module
# =============================================================================
# Delivers built messages over SMTP.
#
# Features:
#   - STARTTLS, plaintext and implicit TLS transports
#   - PLAIN, LOGIN and CRAM-MD5 authentication (or best offered)
#   - Server reply codes carried on every error
# =============================================================================

from mailwright.smtp.envelope import Envelope, strip_names
from mailwright.smtp.transport import (
    TRANSPORTS,
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
    default_tls_context,
    transport_for,
)

__all__ = [
    "Envelope",
    "strip_names",
    "TRANSPORTS",
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
    "default_tls_context",
    "transport_for",
]
