# =============================================================================
# mailwright Command Line
# =============================================================================
# Composes an email from command-line flags and sends it through a
# configured account, or writes the MIME message to stdout (--dry-run).
#
#   mailwright --to you@example.com --subject "Report" \
#              --text-file body.txt --attach report.pdf
#
# The CLI is a thin layer over the library: it fills an Email, picks an
# Account from the config file and hands both to a Mailer.
# =============================================================================

import argparse
import asyncio
import logging
import sys
from contextlib import ExitStack
from pathlib import Path

from mailwright import __app_name__, __version__
from mailwright.config import Config, ConfigError, print_paths
from mailwright.core import Account, Email, MailError
from mailwright.mailer import Mailer
from mailwright.mime.builder import build_mime

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Entry Point
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="mailwright: compose MIME email and send it over SMTP",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--account",
        help="Account to send from (default: default_account from config)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    # Addressing
    parser.add_argument("--from", dest="from_addr", default="", help="Sender address")
    parser.add_argument("--from-name", default="", help="Sender display name")
    parser.add_argument("--reply-to", default="", help="Reply-To address")
    parser.add_argument("--to", action="append", default=[], help="Recipient (repeatable)")
    parser.add_argument("--cc", action="append", default=[], help="Cc recipient (repeatable)")
    parser.add_argument("--bcc", action="append", default=[], help="Bcc recipient (repeatable)")

    # Content
    parser.add_argument("--subject", default="", help="Subject line")
    parser.add_argument("--text", default="", help="Plain text body")
    parser.add_argument("--text-file", type=Path, help="Read the plain text body from a file")
    parser.add_argument("--html-file", type=Path, help="Read the HTML body from a file")
    parser.add_argument(
        "--attach",
        action="append",
        type=Path,
        default=[],
        help="Attach a file (repeatable)",
    )
    parser.add_argument(
        "--inline",
        action="append",
        type=Path,
        default=[],
        help="Attach a file inline, referenced from HTML as cid:<filename> (repeatable)",
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Add a custom header (repeatable)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Write the MIME message to stdout instead of sending it",
    )

    args = parser.parse_args(argv)

    for header in args.header:
        name, sep, _ = header.partition(":")
        if not sep or not name.strip():
            parser.error(f"--header expects 'Name: value', got {header!r}")

    return args


def compose(args: argparse.Namespace, account: Account | None, files: ExitStack) -> Email:
    """
    Build the Email described by the command-line arguments.

    Attachment files are opened on files and stay open until it closes.
    """
    email = Email()

    from_addr = args.from_addr or (account.email if account else "")
    from_name = args.from_name or (account.display_name if account else "")
    email.set_from(from_addr).set_from_name(from_name).set_reply_to(args.reply_to)
    email.set_to(*args.to).set_cc(*args.cc).set_bcc(*args.bcc)
    email.set_subject(args.subject)

    for header in args.header:
        name, _, value = header.partition(":")
        email.add_header(name.strip(), value.strip())

    if args.text:
        email.plain.write(args.text)
    if args.text_file:
        email.plain.write(args.text_file.read_bytes())
    if args.html_file:
        email.html.write(args.html_file.read_bytes())

    for path in args.attach:
        email.attach(path.name, files.enter_context(open(path, "rb")))
    for path in args.inline:
        email.attach_inline(path.name, files.enter_context(open(path, "rb")))

    return email


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for mailwright.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Loads configuration and picks the account
        4. Composes the email and sends it (or prints it with --dry-run)

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    # Handle --paths flag
    if args.paths:
        print_paths()
        return 0

    try:
        config = Config.load(args.config)

        # A dry run doesn't need a server, so it works without an account
        account = None
        if config.accounts or not args.dry_run:
            account = config.get_account(args.account)

        with ExitStack() as files:
            email = compose(args, account, files)
            email.write_bcc_header = config.mime.write_bcc_header

            if args.dry_run:
                sys.stdout.flush()
                build_mime(email, sys.stdout.buffer, config.mime.content_id_policy)
                sys.stdout.buffer.flush()
                return 0

            mailer = Mailer.from_account(account, mime=config.mime)
            logger.debug(f"Sending {email!r} with {mailer!r}")
            asyncio.run(mailer.send(email))

    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    except (MailError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Sent to {len(email.to_addrs) + len(email.cc_addrs) + len(email.bcc_addrs)} recipient(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
