# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating mailwright configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailwright/  (default: ~/.config/mailwright/)
#
# Files:
#   - config.toml: Sending accounts and MIME preferences
#
# Passwords never go in the config file; they live in the system keyring
# (see Account.keyring_service).
# =============================================================================

import logging
import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailwright.core import Account, MailError
from mailwright.mime.attachments import ContentIDPolicy

logger = logging.getLogger(__name__)


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "mailwright"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailwright.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailwright/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class MimeConfig:
    """
    Options that change how messages are built.

    Attributes:
        content_id_policy: Which attachments get a Content-ID header.
        write_bcc_header: Disclose Bcc recipients in a Bcc header.
    """
    content_id_policy: ContentIDPolicy = ContentIDPolicy.INLINE
    write_bcc_header: bool = False


@dataclass
class Config:
    """
    Main configuration container for mailwright.

    Attributes:
        default_account: Name of the account used when none is given.
        accounts: Dictionary of configured sending accounts, keyed by name.
        mime: Message building options.

    Usage:
        >>> config = Config.load()
        >>> print(config.accounts['work'].smtp_host)
        'smtp.example.com'
    """
    # General settings
    default_account: str = ""

    # Account configurations (name -> Account)
    accounts: dict[str, Account] = field(default_factory=dict)

    mime: MimeConfig = field(default_factory=MimeConfig)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def get_account(self, name: str | None = None) -> Account:
        """
        Look up an account by name, or the default account.

        Raises:
            ConfigError: If no such account is configured.
        """
        name = name or self.default_account
        if not name:
            if len(self.accounts) == 1:
                return next(iter(self.accounts.values()))
            raise ConfigError("No account given and no default_account configured")

        try:
            return self.accounts[name]
        except KeyError:
            raise ConfigError(f"Unknown account: {name}") from None

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from the config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Defaults to the XDG location.

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            logger.debug(f"No config file at {config_path}, using defaults")
            return cls()

        # Load and parse the TOML file
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Can't read config file {config_path}: {e}") from e

        logger.debug(f"Loaded config from {config_path}")
        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to the config file.

        Creates the config directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self._to_dict()

        with open(config_path, "wb") as f:
            tomli_w.dump(data, f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).

        This handles the nested structure of the config file and
        converts account entries into Account objects.
        """
        config = cls()

        # General settings
        general = data.get("general", {})
        config.default_account = general.get("default_account", "")

        # MIME settings
        mime = data.get("mime", {})
        try:
            config.mime = MimeConfig(
                content_id_policy=ContentIDPolicy(mime.get("content_id_policy", "inline")),
                write_bcc_header=bool(mime.get("write_bcc_header", False)),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid [mime] section: {e}") from e

        # Accounts - each key under [accounts] is an account name
        accounts_data = data.get("accounts", {})
        for name, acct_data in accounts_data.items():
            try:
                config.accounts[name] = Account(
                    name=name,
                    email=acct_data.get("email", ""),
                    display_name=acct_data.get("display_name", ""),
                    smtp_host=acct_data.get("smtp_host", ""),
                    smtp_port=int(acct_data.get("smtp_port", 587)),
                    smtp_security=acct_data.get("smtp_security", "starttls"),
                    username=acct_data.get("username", ""),
                    auth_mechanism=acct_data.get("auth_mechanism", "auto"),
                    local_name=acct_data.get("local_name", "localhost"),
                    ca_file=acct_data.get("ca_file", ""),
                    timeout=float(acct_data.get("timeout", 30.0)),
                )
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid account {name!r}: {e}") from e

        return config

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        # General settings
        data["general"] = {
            "default_account": self.default_account,
        }

        data["mime"] = {
            "content_id_policy": self.mime.content_id_policy.value,
            "write_bcc_header": self.mime.write_bcc_header,
        }

        # Accounts
        data["accounts"] = {}
        for name, account in self.accounts.items():
            data["accounts"][name] = {
                "email": account.email,
                "display_name": account.display_name,
                "smtp_host": account.smtp_host,
                "smtp_port": account.smtp_port,
                "smtp_security": account.smtp_security,
                "username": account.username,
                "auth_mechanism": account.auth_mechanism,
                "local_name": account.local_name,
                "ca_file": account.ca_file,
                "timeout": account.timeout,
            }

        return data


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(MailError):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print the XDG paths for debugging.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:       {get_xdg_config_home()}")
    print(f"Config file:  {Config.config_file_path()}")
