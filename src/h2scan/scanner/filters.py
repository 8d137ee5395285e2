"""Heuristics deciding which handshakes are worth reporting."""

TLS_VERSION_LABELS = {
    "TLSv1": "1.0",
    "TLSv1.1": "1.1",
    "TLSv1.2": "1.2",
    "TLSv1.3": "1.3",
}

# Wire values, for callers that only have the numeric protocol version.
TLS_VERSION_CODES = {
    0x0301: "1.0",
    0x0302: "1.1",
    0x0303: "1.2",
    0x0304: "1.3",
}

ALPN_PLACEHOLDER = "  "

# Default certificates shipped by appliances and test setups.
PLACEHOLDER_COMMON_NAMES = frozenset(
    {
        "invalid2.invalid",
        "OPNsense.localdomain",
    }
)


def tls_version_label(version: str | int | None) -> str:
    """Map an ssl version string or wire code to ``1.0``..``1.3``; unknown -> ``""``."""
    if isinstance(version, int):
        return TLS_VERSION_CODES.get(version, "")
    if not version:
        return ""
    return TLS_VERSION_LABELS.get(version, "")


def alpn_or_placeholder(protocol: str | None) -> str:
    return protocol or ALPN_PLACEHOLDER


def passes_report_gate(show_fail: bool, tls_version: str, alpn: str) -> bool:
    """Report everything in show-fail mode, otherwise only TLS 1.3 + h2."""
    return show_fail or (tls_version == "1.3" and alpn == "h2")


def is_placeholder_certificate(common_name: str) -> bool:
    """Return True for certificate names that do not identify a real site.

    Wildcards, ``localhost``, anything without exactly one dot, and known
    appliance defaults are all rejected.
    """
    return (
        common_name.startswith("*")
        or common_name == "localhost"
        or common_name.count(".") != 1
        or common_name in PLACEHOLDER_COMMON_NAMES
    )
