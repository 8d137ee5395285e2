"""Report line formatting and domain extraction."""

import re
from ipaddress import IPv4Address, ip_address

from .filters import alpn_or_placeholder
from .models import HandshakeResult, ProbeStatus

# Wide enough for "255.255.255.255:65535" plus a separator.
ADDRESS_FIELD_WIDTH = len("255.255.255.255:65535") + 1

_HOSTNAME = re.compile(r"[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+")


def format_target(host: str | IPv4Address, port: int | str) -> str:
    """Render ``host:port``, bracketing anything that is not a plain IPv4 address."""
    text = str(host)
    try:
        is_v4 = isinstance(ip_address(text), IPv4Address)
    except ValueError:
        is_v4 = False
    if not is_v4:
        text = f"[{text}]"
    return f"{text}:{port}"


def _aligned(address: str, rest: str) -> str:
    return f"{address:<{ADDRESS_FIELD_WIDTH}}{rest}"


def format_report_line(result: HandshakeResult, port: int | str) -> str:
    """Build the aligned line written to the console and results file."""
    if result.status is ProbeStatus.DIAL_FAILED:
        return _aligned(result.target, f"Dial failed: {result.error}")
    if result.status is ProbeStatus.HANDSHAKE_FAILED:
        return _aligned(result.remote or result.target, f"- TLS handshake failed: {result.error}")
    return _aligned(
        result.remote,
        f"---- TLS v{result.tls_version}    ALPN: {alpn_or_placeholder(result.alpn)} ----    "
        f"{result.common_name}:{port}",
    )


def extract_domain(line: str) -> str:
    """Return the first domain-looking token after the address field.

    Tokens starting with ``v`` (version labels) are skipped, any ``:port``
    suffix is cut off, and only hostname characters are accepted so error
    text such as ``(_ssl.c:1006)`` never counts as a domain.
    """
    for index, part in enumerate(line.split()):
        if index == 0 or "." not in part or part.startswith("v"):
            continue
        candidate = part.split(":", 1)[0]
        if _HOSTNAME.fullmatch(candidate):
            return candidate
    return ""
