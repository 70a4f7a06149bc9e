# =============================================================================
# SMTP Transports
# =============================================================================
# Sends built MIME messages to a remote SMTP server using aiosmtplib.
#
# Three strategies share one protocol conversation and differ only in how
# the connection is secured:
#   - StartTLSTransport:    plain connection, upgraded with STARTTLS when
#                           the server advertises it
#   - PlaintextTransport:   plain connection, STARTTLS never attempted
#   - ExplicitTLSTransport: TLS handshake before the first SMTP command
#
# Conversation (one connection per send, no retries):
#
#   DISCONNECTED -> CONNECTED -> AUTHENTICATED | UNAUTHENTICATED
#     -> SENDER_SET -> RECIPIENTS_ACKNOWLEDGED -> DATA_STREAMING
#     -> COMPLETED | FAILED -> CLOSED
#
# Any failure goes straight to a best-effort QUIT and raises one SMTPError
# carrying the server's reply code and text.
# =============================================================================

import logging
import ssl
from enum import Enum, auto

import aiosmtplib

from mailwright.core.credentials import Credentials
from mailwright.core.errors import MailError
from mailwright.smtp.envelope import Envelope

logger = logging.getLogger(__name__)

# aiosmtplib method for each explicitly chosen SASL mechanism
_AUTH_METHODS = {
    "plain": "auth_plain",
    "login": "auth_login",
    "cram-md5": "auth_crammd5",
}


class SessionState(Enum):
    """Progress of a single SMTP session."""
    DISCONNECTED = auto()
    CONNECTED = auto()
    AUTHENTICATED = auto()
    UNAUTHENTICATED = auto()
    SENDER_SET = auto()
    RECIPIENTS_ACKNOWLEDGED = auto()
    DATA_STREAMING = auto()
    COMPLETED = auto()
    FAILED = auto()
    CLOSED = auto()


class Transport:
    """
    Base class for SMTP transport strategies.

    Subclasses only choose how the connection is secured (see
    _client_options); the conversation itself lives here. A transport holds
    no per-send state, so one instance can serve many sends.

    Attributes:
        hostname: SMTP server hostname. Also the name the server
                  certificate is validated against.
        port: SMTP server port.
        local_name: Hostname announced in EHLO.
        timeout: Timeout in seconds for each SMTP operation.
    """

    security = ""

    # Timeout for SMTP operations (seconds)
    TIMEOUT = 30.0

    def __init__(
        self,
        hostname: str,
        port: int,
        *,
        local_name: str = "localhost",
        timeout: float = TIMEOUT,
        tls_context: ssl.SSLContext | None = None,
    ) -> None:
        self.hostname = hostname
        self.port = port
        self.local_name = local_name
        self.timeout = timeout
        self.tls_context = tls_context

    def _client_options(self) -> dict:
        raise NotImplementedError

    def _client(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.hostname,
            port=self.port,
            local_hostname=self.local_name,
            timeout=self.timeout,
            **self._client_options(),
        )

    async def send(self, envelope: Envelope, message: bytes) -> None:
        """
        Deliver a built message.

        Args:
            envelope: Sender, recipients and optional credentials.
            message: The complete MIME message.

        Raises:
            SMTPConnectionError: Connection, TLS or I/O failure.
            SMTPAuthenticationError: Login rejected or not possible.
            SenderRefusedError: MAIL FROM rejected.
            RecipientRefusedError: A RCPT TO was rejected; no DATA is sent.
            SendError: Message rejected or other negative reply.
        """
        client = self._client()
        state = SessionState.DISCONNECTED

        logger.info(f"Connecting to SMTP {self.hostname}:{self.port} ({self.security})")

        try:
            await client.connect()
            state = SessionState.CONNECTED
            logger.debug("SMTP connection established")

            if envelope.credentials is not None:
                await self._authenticate(client, envelope.credentials)
                state = SessionState.AUTHENTICATED
            else:
                state = SessionState.UNAUTHENTICATED

            await client.mail(envelope.sender)
            state = SessionState.SENDER_SET

            for recipient in envelope.recipients:
                await client.rcpt(recipient)
                logger.debug(f"Recipient accepted: {recipient}")
            state = SessionState.RECIPIENTS_ACKNOWLEDGED

            state = SessionState.DATA_STREAMING
            await client.data(message)
            state = SessionState.COMPLETED

        except (aiosmtplib.SMTPException, OSError) as e:
            failed_in, state = state, SessionState.FAILED
            logger.debug(f"SMTP session failed in state {failed_in.name}")
            raise _translate(e, failed_in, self) from e
        finally:
            await self._close(client)
            logger.debug(f"SMTP session closed ({state.name})")

        logger.info(
            f"Message from {envelope.sender} delivered to {self.hostname} "
            f"for {len(envelope.recipients)} recipient(s)"
        )

    async def _authenticate(self, client: aiosmtplib.SMTP, credentials: Credentials) -> None:
        """Log in with the configured mechanism, or the best one offered."""
        logger.debug(f"Authenticating as {credentials.username} ({credentials.mechanism})")

        if credentials.mechanism == "auto":
            await client.login(credentials.username, credentials.password)
        else:
            method = getattr(client, _AUTH_METHODS[credentials.mechanism])
            await method(credentials.username, credentials.password)

        logger.debug("SMTP authentication successful")

    async def _close(self, client: aiosmtplib.SMTP) -> None:
        """QUIT if still connected; drop the connection if QUIT fails."""
        if not client.is_connected:
            return

        try:
            await client.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning(f"Error during SMTP QUIT: {e}")
            client.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hostname}:{self.port})"


class StartTLSTransport(Transport):
    """
    Plain connection, upgraded with STARTTLS if the server offers it.

    tls_context is used for the upgrade; by default the system trust store
    validates the certificate.
    """

    security = "starttls"

    def _client_options(self) -> dict:
        options = {"use_tls": False, "start_tls": None}
        if self.tls_context is not None:
            options["tls_context"] = self.tls_context
        return options


class PlaintextTransport(Transport):
    """
    Plain connection that never attempts STARTTLS.

    For servers that don't support STARTTLS, or advertise it but break
    during the upgrade.
    """

    security = "plain"

    def _client_options(self) -> dict:
        return {"use_tls": False, "start_tls": False}


class ExplicitTLSTransport(Transport):
    """
    Connects over TLS and validates the server before any SMTP command.

    If no tls_context is given a default one is built: system trust store
    (or ca_file if set), hostname verification, TLS 1.2 minimum. A context
    passed in by the caller is used as is and never modified.
    """

    security = "ssl"

    def __init__(
        self,
        hostname: str,
        port: int,
        *,
        local_name: str = "localhost",
        timeout: float = Transport.TIMEOUT,
        tls_context: ssl.SSLContext | None = None,
        ca_file: str | None = None,
    ) -> None:
        if tls_context is None:
            tls_context = default_tls_context(ca_file)

        super().__init__(
            hostname,
            port,
            local_name=local_name,
            timeout=timeout,
            tls_context=tls_context,
        )

    def _client_options(self) -> dict:
        return {"use_tls": True, "start_tls": False, "tls_context": self.tls_context}


def default_tls_context(ca_file: str | None = None) -> ssl.SSLContext:
    """Certificate-validating client context with a TLS 1.2 floor."""
    context = ssl.create_default_context(cafile=ca_file or None)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


TRANSPORTS: dict[str, type[Transport]] = {
    StartTLSTransport.security: StartTLSTransport,
    PlaintextTransport.security: PlaintextTransport,
    ExplicitTLSTransport.security: ExplicitTLSTransport,
}


def transport_for(
    security: str,
    hostname: str,
    port: int,
    *,
    local_name: str = "localhost",
    timeout: float = Transport.TIMEOUT,
    ca_file: str | None = None,
) -> Transport:
    """
    Create the transport for a security method ("starttls", "plain", "ssl").

    Raises:
        ValueError: If security is not a known method.
    """
    try:
        cls = TRANSPORTS[security]
    except KeyError:
        raise ValueError(f"Unknown SMTP security method: {security!r}") from None

    if cls is ExplicitTLSTransport:
        return cls(hostname, port, local_name=local_name, timeout=timeout, ca_file=ca_file)

    tls_context = default_tls_context(ca_file) if ca_file and cls is StartTLSTransport else None
    return cls(hostname, port, local_name=local_name, timeout=timeout, tls_context=tls_context)


def _translate(e: Exception, state: SessionState, transport: Transport) -> "SMTPError":
    """Map an aiosmtplib/socket error to our exception for the failed step."""
    where = f"{transport.hostname}:{transport.port}"
    code = getattr(e, "code", None)
    reply = getattr(e, "message", None)
    detail = f"{code} {reply}" if code is not None else str(e)

    if isinstance(e, aiosmtplib.SMTPRecipientRefused):
        return RecipientRefusedError(
            f"Recipient {e.recipient} refused by {where}: {detail}",
            code=code, server_message=reply, state=state, recipient=e.recipient,
        )
    if isinstance(e, aiosmtplib.SMTPSenderRefused):
        return SenderRefusedError(
            f"Sender {e.sender} refused by {where}: {detail}",
            code=code, server_message=reply, state=state, sender=e.sender,
        )
    # Between connect and MAIL FROM the only step is login
    login_failed = state is SessionState.CONNECTED and not isinstance(e, OSError)
    if isinstance(e, aiosmtplib.SMTPAuthenticationError) or login_failed:
        return SMTPAuthenticationError(
            f"SMTP authentication failed at {where}: {detail}",
            code=code, server_message=reply, state=state,
        )
    if isinstance(e, (
        aiosmtplib.SMTPConnectError,
        aiosmtplib.SMTPHeloError,
        aiosmtplib.SMTPServerDisconnected,
        aiosmtplib.SMTPTimeoutError,
        OSError,
    )) or state is SessionState.DISCONNECTED:
        return SMTPConnectionError(
            f"SMTP connection to {where} failed: {detail}",
            code=code, server_message=reply, state=state,
        )
    return SendError(
        f"Failed to send email via {where}: {detail}",
        code=code, server_message=reply, state=state,
    )


# =============================================================================
# Exceptions
# =============================================================================

class SMTPError(MailError):
    """
    Base exception for SMTP operations.

    Attributes:
        code: SMTP reply code, if the server replied.
        server_message: SMTP reply text, if the server replied.
        state: Session state reached before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        server_message: str | None = None,
        state: SessionState | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.server_message = server_message
        self.state = state


class SMTPConnectionError(SMTPError):
    """Raised when unable to connect, negotiate TLS, or keep the connection."""
    pass


class SMTPAuthenticationError(SMTPError):
    """Raised when SMTP authentication fails."""
    pass


class SenderRefusedError(SMTPError):
    """Raised when the server rejects MAIL FROM."""

    def __init__(self, message: str, *, sender: str = "", **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.sender = sender


class RecipientRefusedError(SMTPError):
    """Raised when the server rejects a RCPT TO."""

    def __init__(self, message: str, *, recipient: str = "", **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.recipient = recipient


class SendError(SMTPError):
    """Raised when email sending fails."""
    pass
