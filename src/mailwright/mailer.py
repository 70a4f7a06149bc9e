# =============================================================================
# Mailer
# =============================================================================
# Ties the pieces together: builds an Email into MIME bytes and hands them
# to an SMTP transport together with the envelope.
#
# Usage:
#     mailer = Mailer(StartTLSTransport("smtp.example.com", 587), credentials)
#     email = Email().set_from("me@example.com").set_to("you@example.com")
#     email.plain.write("Hello")
#     await mailer.send(email)
# =============================================================================

import logging
from io import BytesIO

from mailwright.config import MimeConfig
from mailwright.core.account import Account
from mailwright.core.credentials import Credentials
from mailwright.core.message import Email
from mailwright.mime.attachments import ContentIDPolicy
from mailwright.mime.builder import build_mime
from mailwright.smtp.envelope import Envelope
from mailwright.smtp.transport import SendError, Transport, transport_for

logger = logging.getLogger(__name__)


class Mailer:
    """
    Sends Email objects through a transport.

    A Mailer holds no per-message state. The same instance can send any
    number of emails, including concurrently from one event loop.

    Attributes:
        transport: Strategy that talks to the SMTP server.
        credentials: Login details, or None to send unauthenticated.
        content_id_policy: Which attachments get a Content-ID header.
    """

    def __init__(
        self,
        transport: Transport,
        credentials: Credentials | None = None,
        content_id_policy: ContentIDPolicy = ContentIDPolicy.INLINE,
    ) -> None:
        self.transport = transport
        self.credentials = credentials
        self.content_id_policy = content_id_policy

    @classmethod
    def from_account(
        cls,
        account: Account,
        credentials: Credentials | None = None,
        mime: MimeConfig | None = None,
    ) -> "Mailer":
        """
        Create a Mailer for a configured account.

        If no credentials are passed and the account has a username, the
        password is loaded from the system keyring.

        Raises:
            CredentialsError: If the keyring has no password for the account.
        """
        transport = transport_for(
            account.smtp_security,
            account.smtp_host,
            account.smtp_port,
            local_name=account.local_name,
            timeout=account.timeout,
            ca_file=account.ca_file or None,
        )

        if credentials is None and account.username:
            credentials = Credentials.from_keyring(
                account.keyring_service,
                account.username,
                account.auth_mechanism,
            )

        policy = mime.content_id_policy if mime is not None else ContentIDPolicy.INLINE
        return cls(transport, credentials, policy)

    def mime_buf(self, email: Email) -> bytes:
        """
        Build the complete MIME message for email.

        Regenerates the Date header and the boundaries.

        Raises:
            MIMEError: If the message can't be built.
        """
        buf = BytesIO()
        build_mime(email, buf, self.content_id_policy)
        return buf.getvalue()

    async def send(self, email: Email) -> None:
        """
        Build and send an email.

        The message is built in full before connecting, so a build failure
        never leaves a half-written message on the server.

        Raises:
            SendError: If the email has no recipients or the server rejects it.
            MIMEError: If the message can't be built.
            SMTPError: Any other SMTP failure (see the transport module).
        """
        envelope = Envelope.from_email(email, self.credentials)
        if not envelope.recipients:
            raise SendError("Email has no recipients (To, Cc or Bcc)")

        message = self.mime_buf(email)

        logger.debug(f"Sending {len(message)} byte message via {self.transport!r}")
        await self.transport.send(envelope, message)

    def __repr__(self) -> str:
        return (
            f"Mailer(transport={self.transport!r}, "
            f"auth set: {self.credentials is not None})"
        )
