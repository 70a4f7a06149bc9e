# =============================================================================
# Tests for the command line
# =============================================================================

import email as stdlib_email

import pytest

from mailwright import __version__
from mailwright.app import main, parse_args


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_repeatable_flags():
    args = parse_args(["--to", "a@example.com", "--to", "b@example.com", "--bcc", "c@example.com"])
    assert args.to == ["a@example.com", "b@example.com"]
    assert args.bcc == ["c@example.com"]
    assert args.cc == []


def test_bad_header_flag():
    with pytest.raises(SystemExit):
        parse_args(["--header", "no colon here"])


def test_paths(capsys, monkeypatch, temp_dir):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
    assert main(["--paths"]) == 0
    assert str(temp_dir / "mailwright" / "config.toml") in capsys.readouterr().out


def test_dry_run_writes_mime(capsys, temp_dir):
    body = temp_dir / "body.txt"
    body.write_text("Hello from a file")
    attachment = temp_dir / "notes.txt"
    attachment.write_bytes(b"Don't Panic")

    code = main([
        "--config", str(temp_dir / "missing.toml"),
        "--dry-run",
        "--from", "me@example.com",
        "--to", "you@example.com",
        "--subject", "Dry run",
        "--text-file", str(body),
        "--attach", str(attachment),
        "--header", "X-Priority: 1",
    ])

    assert code == 0
    message = stdlib_email.message_from_string(capsys.readouterr().out)
    assert message["From"] == "me@example.com"
    assert message["Subject"] == "Dry run"
    assert message["X-Priority"] == "1"

    alternative, notes = message.get_payload()
    assert alternative.get_payload()[0].get_payload(decode=True) == b"Hello from a file"
    assert notes.get_filename() == "notes.txt"
    assert notes.get_payload(decode=True) == b"Don't Panic"


def test_dry_run_uses_account_identity(capsys, temp_dir):
    config = temp_dir / "config.toml"
    config.write_text(
        '[accounts.work]\nemail = "me@example.com"\ndisplay_name = "Me Myself"\n'
        'smtp_host = "smtp.example.com"\n'
    )

    code = main(["--config", str(config), "--dry-run", "--to", "you@example.com"])

    assert code == 0
    assert "From: Me Myself <me@example.com>" in capsys.readouterr().out


def test_send_without_account_fails(capsys, temp_dir):
    code = main(["--config", str(temp_dir / "missing.toml"), "--to", "you@example.com"])

    assert code == 1
    assert "Config error" in capsys.readouterr().err


def test_invalid_config(capsys, temp_dir):
    config = temp_dir / "config.toml"
    config.write_text("not = [valid")

    assert main(["--config", str(config), "--dry-run"]) == 1
    assert "Config error" in capsys.readouterr().err


def test_missing_attachment(capsys, temp_dir):
    code = main([
        "--config", str(temp_dir / "missing.toml"),
        "--dry-run",
        "--to", "you@example.com",
        "--attach", str(temp_dir / "nope.bin"),
    ])

    assert code == 1
    assert "Error" in capsys.readouterr().err


def test_unknown_auth_mechanism_is_config_error(capsys, temp_dir):
    config = temp_dir / "config.toml"
    config.write_text(
        '[accounts.w]\nemail = "me@example.com"\nsmtp_host = "smtp.example.com"\n'
        'username = "u"\nauth_mechanism = "xoauth2"\n'
    )

    code = main(["--config", str(config), "--to", "x@example.com", "--text", "hi"])

    assert code == 1
    assert "xoauth2" in capsys.readouterr().err
