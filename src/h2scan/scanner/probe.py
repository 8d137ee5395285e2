"""Per-address TCP dial, TLS handshake and result classification."""

import logging
import socket
import ssl
from collections.abc import Callable
from ipaddress import IPv4Address
from typing import Any

from cryptography import x509
from cryptography.x509.oid import NameOID

from .filters import (
    alpn_or_placeholder,
    is_placeholder_certificate,
    passes_report_gate,
    tls_version_label,
)
from .models import HandshakeResult, ProbeStatus, ScanTask
from .report import format_report_line, format_target
from .sink import ResultSink

logger = logging.getLogger(__name__)

ALPN_PROTOCOLS = ["h2", "http/1.1"]

Dialer = Callable[[tuple[str, int], float], Any]


def default_tls_context() -> ssl.SSLContext:
    """Client context that completes handshakes against any certificate."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    # Reconnaissance only: self-signed and mismatched certificates must still handshake.
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.set_alpn_protocols(ALPN_PROTOCOLS)
    return context


def peer_common_name(tls_sock: Any) -> str:
    """Return the subject CN of the leaf certificate, or ``""``."""
    der = tls_sock.getpeercert(binary_form=True)
    if not der:
        return ""
    try:
        cert = x509.load_der_x509_certificate(der)
        attributes = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    except ValueError as exc:
        logger.debug("Unparsable peer certificate: %s", exc)
        return ""
    if not attributes:
        return ""
    value = attributes[0].value
    return value.decode(errors="replace") if isinstance(value, bytes) else str(value)


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def _remote_text(sock: Any, fallback: str) -> str:
    try:
        host, port = sock.getpeername()[:2]
    except OSError:
        return fallback
    return format_target(host, port)


def classify(result: HandshakeResult, show_fail: bool, port: int | str) -> str | None:
    """Turn a probe outcome into a report line, or None when it is not reported."""
    if not result.ok:
        return format_report_line(result, port) if show_fail else None

    if not passes_report_gate(show_fail, result.tls_version, alpn_or_placeholder(result.alpn)):
        return None

    if is_placeholder_certificate(result.common_name):
        logger.debug("Dropping %s: placeholder certificate %r", result.remote, result.common_name)
        return None

    return format_report_line(result, port)


class Prober:
    """Dials one address, performs the TLS handshake and reports the outcome."""

    def __init__(
        self,
        port: int,
        timeout: float,
        sink: ResultSink | None = None,
        show_fail: bool = False,
        dialer: Dialer | None = None,
        tls_context: Any = None,
    ):
        self.port = port
        self.timeout = timeout
        self.sink = sink
        self.show_fail = show_fail
        self._dial = dialer or socket.create_connection
        self._tls_context = tls_context or default_tls_context()

    def probe(
        self,
        address: IPv4Address | str,
        port: int | None = None,
        timeout: float | None = None,
    ) -> HandshakeResult:
        """Dial and handshake; ``port``/``timeout`` default to the prober's own."""
        port = self.port if port is None else port
        timeout = self.timeout if timeout is None else timeout
        target = format_target(address, port)
        try:
            sock = self._dial((str(address), port), timeout)
        except OSError as exc:
            return HandshakeResult(ProbeStatus.DIAL_FAILED, target, error=_describe(exc))

        with sock:
            remote = _remote_text(sock, target)
            # The whole handshake must finish within one timeout from here.
            sock.settimeout(timeout)
            try:
                tls_sock = self._tls_context.wrap_socket(sock, server_hostname=None)
            except (ssl.SSLError, OSError) as exc:
                return HandshakeResult(
                    ProbeStatus.HANDSHAKE_FAILED, target, error=_describe(exc), remote=remote
                )

            with tls_sock:
                return HandshakeResult(
                    ProbeStatus.SUCCESS,
                    target,
                    remote=remote,
                    tls_version=tls_version_label(tls_sock.version()),
                    alpn=tls_sock.selected_alpn_protocol() or "",
                    common_name=peer_common_name(tls_sock),
                )

    def scan(
        self,
        address: IPv4Address | str,
        port: int | None = None,
        timeout: float | None = None,
    ) -> str | None:
        """Probe ``address`` and hand any reportable line to the sink."""
        port = self.port if port is None else port
        result = self.probe(address, port, timeout)
        line = classify(result, self.show_fail, port)
        if line is not None and self.sink is not None:
            self.sink.submit(line)
        return line

    def handle(self, task: ScanTask) -> str | None:
        """Scan one queued task with the port and timeout it was created with."""
        return self.scan(task.address, task.port, task.timeout)
