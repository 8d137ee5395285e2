"""Test configuration and fixtures for h2scan."""

import logging
import os
import ssl
import tempfile
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


class FakeSocket:
    """Plain TCP socket stand-in that counts closes."""

    def __init__(self, peer: tuple[str, int] = ("10.0.0.2", 443)):
        self.peer = peer
        self.timeout: float | None = None
        self.close_count = 0

    def getpeername(self) -> tuple[str, int]:
        return self.peer

    def settimeout(self, timeout: float) -> None:
        self.timeout = timeout

    def close(self) -> None:
        self.close_count += 1

    def __enter__(self) -> "FakeSocket":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FakeTLSSocket(FakeSocket):
    """Completed TLS session stand-in."""

    def __init__(self, tls_version: str | None, alpn: str | None, der: bytes | None):
        super().__init__()
        self._tls_version = tls_version
        self._alpn = alpn
        self._der = der

    def version(self) -> str | None:
        return self._tls_version

    def selected_alpn_protocol(self) -> str | None:
        return self._alpn

    def getpeercert(self, binary_form: bool = False) -> bytes | None:
        assert binary_form
        return self._der


class FakeTLSContext:
    """Records wrapped sockets; either fails the handshake or returns a session."""

    def __init__(
        self,
        tls_version: str | None = "TLSv1.3",
        alpn: str | None = "h2",
        der: bytes | None = None,
        error: Exception | None = None,
    ):
        self.tls_version = tls_version
        self.alpn = alpn
        self.der = der
        self.error = error
        self.wrapped: list[FakeSocket] = []
        self.sessions: list[FakeTLSSocket] = []

    def wrap_socket(self, sock: FakeSocket, server_hostname: str | None = None) -> FakeTLSSocket:
        self.wrapped.append(sock)
        if self.error is not None:
            raise self.error
        session = FakeTLSSocket(self.tls_version, self.alpn, self.der)
        session.peer = sock.peer
        self.sessions.append(session)
        return session


class RecordingDialer:
    """Dialer returning fake sockets, or raising ``error`` for every address."""

    def __init__(self, error: Exception | None = None, peer_port: int = 443):
        self.error = error
        self.peer_port = peer_port
        self.calls: list[tuple[tuple[str, int], float]] = []
        self.sockets: list[FakeSocket] = []

    def __call__(self, address: tuple[str, int], timeout: float) -> FakeSocket:
        self.calls.append((address, timeout))
        if self.error is not None:
            raise self.error
        sock = FakeSocket(peer=(address[0], self.peer_port))
        self.sockets.append(sock)
        return sock


def make_certificate_der(common_name: str | None) -> bytes:
    """Self-signed DER certificate with the given subject CN (None: no CN)."""
    key = ec.generate_private_key(ec.SECP256R1())
    attributes = [x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test")]
    if common_name is not None:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    name = x509.Name(attributes)
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.DER)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Run with no H2SCAN_* variables, no .env and an empty home directory."""
    for key in list(os.environ):
        if key.startswith("H2SCAN_"):
            monkeypatch.delenv(key, raising=False)
    home = temp_dir / "home"
    home.mkdir()
    work = temp_dir / "work"
    work.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(work)
    return work


@pytest.fixture(autouse=True)
def reset_h2scan_logger() -> Generator[None, None, None]:
    """Undo configure_logging so caplog sees records in every test."""
    yield
    root = logging.getLogger("h2scan")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture
def good_cert_der() -> bytes:
    return make_certificate_der("good.example")


@pytest.fixture
def refused_dialer() -> RecordingDialer:
    return RecordingDialer(error=ConnectionRefusedError(111, "Connection refused"))


@pytest.fixture
def handshake_error() -> ssl.SSLError:
    return ssl.SSLError(1, "[SSL: WRONG_VERSION_NUMBER] wrong version number")
