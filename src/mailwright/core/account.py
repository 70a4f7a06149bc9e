# =============================================================================
# Account Model
# =============================================================================
# Represents a sending account: the identity used in the From header and the
# SMTP server the mail is handed to.
#
# IMPORTANT: Passwords are NOT stored here. They are retrieved from the system
# keyring at runtime using the 'keyring' library. This keeps credentials secure
# and out of config files.
# =============================================================================

from dataclasses import dataclass

from mailwright.core.credentials import AUTH_MECHANISMS

# Connection security methods understood by the SMTP transports
SECURITY_METHODS = ("starttls", "plain", "ssl")


@dataclass
class Account:
    """
    Represents an email account with SMTP configuration.

    Attributes:
        name: A unique identifier for this account (e.g., "personal", "work").
              Used as the key in config files and for keyring lookups.
        email: The sender address for this account.
        display_name: The name shown in the "From" field when sending emails.
                      Empty means the bare address is used.

        smtp_host: Hostname of the SMTP server (e.g., "smtp.gmail.com").
        smtp_port: Port for SMTP connection. Standard ports:
                   - 465 for SMTP with implicit TLS ("ssl")
                   - 587 for SMTP with STARTTLS (recommended)
                   - 25 for server-to-server relay
        smtp_security: Connection security method:
                   - "starttls": plain connection, upgraded if the server
                     offers STARTTLS
                   - "plain": never attempt STARTTLS
                   - "ssl": TLS from the first byte

        username: Login name for SMTP AUTH. Empty disables authentication.
        auth_mechanism: "auto", "plain", "login" or "cram-md5".
        local_name: Hostname announced in EHLO.
        ca_file: Optional PEM bundle of trusted CAs for TLS validation.
        timeout: Timeout in seconds for each SMTP operation.

    Example:
        >>> account = Account(
        ...     name="work",
        ...     email="user@example.com",
        ...     display_name="John Doe",
        ...     smtp_host="smtp.example.com",
        ...     smtp_port=587,
        ...     username="user@example.com",
        ... )
    """

    # Account identification
    name: str                           # Unique account identifier
    email: str                          # Sender address
    display_name: str = ""              # Name shown in "From" field

    # SMTP configuration
    smtp_host: str = ""
    smtp_port: int = 587                # Default to STARTTLS port
    smtp_security: str = "starttls"     # "starttls", "plain" or "ssl"

    # Authentication (password lives in the keyring)
    username: str = ""
    auth_mechanism: str = "auto"

    # Session tuning
    local_name: str = "localhost"
    ca_file: str = ""
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.smtp_security not in SECURITY_METHODS:
            raise ValueError(
                f"Unknown smtp_security {self.smtp_security!r} for account "
                f"{self.name!r} (expected one of {', '.join(SECURITY_METHODS)})"
            )
        if self.auth_mechanism not in AUTH_MECHANISMS:
            raise ValueError(
                f"Unknown auth_mechanism {self.auth_mechanism!r} for account "
                f"{self.name!r} (expected one of {', '.join(AUTH_MECHANISMS)})"
            )

    @property
    def keyring_service(self) -> str:
        """
        Returns the service name used for keyring password storage.

        We use a consistent naming scheme so passwords can be easily
        managed via the keyring CLI if needed:
            keyring set mailwright:work user@example.com
        """
        return f"mailwright:{self.name}"

    def __str__(self) -> str:
        """Human-readable representation showing account name and email."""
        return f"{self.name} <{self.email}>"

    def __repr__(self) -> str:
        """Developer-friendly representation with key fields."""
        return (
            f"Account(name={self.name!r}, email={self.email!r}, "
            f"smtp={self.smtp_host}:{self.smtp_port}, security={self.smtp_security})"
        )
