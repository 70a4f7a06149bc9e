# =============================================================================
# mailwright Core Module
# =============================================================================
# This module contains the core domain models for mailwright. These are plain
# Python dataclasses with no networking or encoding logic - they can be
# imported anywhere without causing circular dependency issues.
#
# The core models represent:
#   - Email: The message state being composed
#   - Attachment: A file embedded in an email
#   - BodyPart: A writable plain text or HTML body
#   - Account: A sending identity and its SMTP server
#   - Credentials: SMTP AUTH login details
# =============================================================================

from mailwright.core.account import Account, SECURITY_METHODS
from mailwright.core.credentials import AUTH_MECHANISMS, Credentials, CredentialsError
from mailwright.core.errors import MailError
from mailwright.core.message import Attachment, BodyPart, Email

__all__ = [
    "Account",
    "SECURITY_METHODS",
    "AUTH_MECHANISMS",
    "Credentials",
    "CredentialsError",
    "MailError",
    "Attachment",
    "BodyPart",
    "Email",
]
