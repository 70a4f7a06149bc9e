# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the mailwright test suite:
#   - sample model objects (Account, Email)
#   - a throw-away certificate authority for TLS tests
#   - a scripted SMTP server that checks the exact bytes a client sends
# =============================================================================

import asyncio
import ipaddress
import ssl
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from mailwright.core import Account, Email


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_account():
    """Create a sample Account for testing."""
    return Account(
        name="test",
        email="test@example.com",
        display_name="Test User",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_security="starttls",
    )


@pytest.fixture
def sample_email():
    """Create a sample Email with both bodies and one attachment."""
    email = (
        Email()
        .set_from("jsmith@example.com")
        .set_from_name("John Smith")
        .set_to("dom@example.org", "Tom <tom@example.org>")
        .set_subject("Business proposition")
    )
    email.plain.write("Hello there")
    email.html.write("<p>Hello <b>there</b></p>")
    email.attach("advice", b"Don't Panic")
    return email


# =============================================================================
# TLS
# =============================================================================

def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


@pytest.fixture(scope="session")
def tls_files(tmp_path_factory):
    """
    Mint a CA and a server certificate for 127.0.0.1 / localhost.

    Returns:
        Dict with "ca", "cert" and "key" PEM file paths.
    """
    directory = tmp_path_factory.mktemp("pki")
    now = datetime.now(timezone.utc)

    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca_cert = (
        x509.CertificateBuilder()
        .subject_name(_name("mailwright test CA"))
        .issuer_name(_name("mailwright test CA"))
        .public_key(ca_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True, content_commitment=False, key_encipherment=False,
                data_encipherment=False, key_agreement=False, key_cert_sign=True,
                crl_sign=True, encipher_only=False, decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(ca_key.public_key()), critical=False)
        .sign(ca_key, hashes.SHA256())
    )

    server_key = ec.generate_private_key(ec.SECP256R1())
    server_cert = (
        x509.CertificateBuilder()
        .subject_name(_name("localhost"))
        .issuer_name(ca_cert.subject)
        .public_key(server_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(
            x509.SubjectAlternativeName([
                x509.DNSName("localhost"),
                x509.IPAddress(ipaddress.ip_address("127.0.0.1")),
            ]),
            critical=False,
        )
        .add_extension(x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()),
            critical=False,
        )
        .sign(ca_key, hashes.SHA256())
    )

    paths = {
        "ca": directory / "ca.pem",
        "cert": directory / "server.pem",
        "key": directory / "server-key.pem",
    }
    paths["ca"].write_bytes(ca_cert.public_bytes(serialization.Encoding.PEM))
    paths["cert"].write_bytes(server_cert.public_bytes(serialization.Encoding.PEM))
    paths["key"].write_bytes(
        server_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return paths


@pytest.fixture
def server_tls_context(tls_files):
    """Server side TLS context presenting the test certificate."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(tls_files["cert"], tls_files["key"])
    return context


# =============================================================================
# Scripted SMTP Server
# =============================================================================

class ScriptedServer:
    """
    A one-connection server that follows a fixed transcript.

    The script is a list of ("expect", bytes) and ("respond", bytes) steps.
    Each "expect" reads exactly that many bytes from the client and records
    them; a mismatch stops the script and is recorded in `errors`.

    Usage:
        server = ScriptedServer([
            ("respond", b"220 hello\\r\\n"),
            ("expect", b"EHLO localhost\\r\\n"),
            ...
        ])
        await server.start()
        ... run the client against server.port ...
        await server.stop()
        assert server.finished and not server.errors
    """

    def __init__(self, script: list[tuple[str, bytes]], ssl_context: ssl.SSLContext | None = None) -> None:
        self.script = script
        self.ssl_context = ssl_context
        self.received: list[bytes] = []
        self.errors: list[str] = []
        self.finished = False
        self.port = 0
        self._server: asyncio.AbstractServer | None = None
        self._done = asyncio.Event()

    async def start(self) -> None:
        self._server = await asyncio.start_server(
            self._handle, "127.0.0.1", 0, ssl=self.ssl_context,
        )
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    async def wait(self, timeout: float = 5.0) -> None:
        """Wait until the client connection has been handled."""
        await asyncio.wait_for(self._done.wait(), timeout)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            for step, data in self.script:
                if step == "respond":
                    writer.write(data)
                    await writer.drain()
                    continue

                got = await reader.readexactly(len(data))
                self.received.append(got)
                if got != data:
                    self.errors.append(f"expected {data!r}, got {got!r}")
                    return
            self.finished = True
        except (asyncio.IncompleteReadError, ConnectionError) as e:
            self.errors.append(f"connection ended early: {e!r}")
        finally:
            writer.close()
            self._done.set()


@pytest.fixture
def scripted_server():
    """Factory for ScriptedServer instances."""
    return ScriptedServer
