# =============================================================================
# SMTP Credentials
# =============================================================================
# Login name and password for SMTP AUTH. The password is never shown by
# repr() and never included in log lines or error messages.
# =============================================================================

import logging
from dataclasses import dataclass, field

import keyring
from keyring.errors import KeyringError

from mailwright.core.errors import MailError

logger = logging.getLogger(__name__)

# SASL mechanisms we know how to drive; "auto" lets the client pick the
# strongest one the server advertises.
AUTH_MECHANISMS = ("auto", "plain", "login", "cram-md5")


@dataclass(frozen=True)
class Credentials:
    """
    Authentication details for an SMTP server.

    Attributes:
        username: Login name.
        password: Secret. Excluded from repr().
        mechanism: SASL mechanism ("auto", "plain", "login", "cram-md5").
    """
    username: str
    password: str = field(repr=False)
    mechanism: str = "auto"

    def __post_init__(self) -> None:
        if self.mechanism not in AUTH_MECHANISMS:
            raise ValueError(
                f"Unsupported auth mechanism {self.mechanism!r} "
                f"(expected one of {', '.join(AUTH_MECHANISMS)})"
            )

    @classmethod
    def from_keyring(cls, service: str, username: str, mechanism: str = "auto") -> "Credentials":
        """
        Load the password for username from the system keyring.

        Args:
            service: Keyring service name (see Account.keyring_service).
            username: Login name, also the keyring user name.
            mechanism: SASL mechanism to use.

        Raises:
            CredentialsError: If no password is stored or the keyring fails.
        """
        logger.debug(f"Loading SMTP password for {username} from keyring service {service}")

        try:
            password = keyring.get_password(service, username)
        except KeyringError as e:
            raise CredentialsError(f"Keyring lookup failed for {username}: {e}") from e

        if not password:
            raise CredentialsError(
                f"No password found in keyring for {username}. "
                f"Set it with: keyring set {service} {username}"
            )

        return cls(username=username, password=password, mechanism=mechanism)


class CredentialsError(MailError):
    """Raised when credentials can't be loaded."""
    pass
