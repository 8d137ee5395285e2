"""Tests for report line formatting and domain extraction."""

import ssl

import pytest

from h2scan.scanner.models import HandshakeResult, ProbeStatus
from h2scan.scanner.report import (
    ADDRESS_FIELD_WIDTH,
    extract_domain,
    format_report_line,
    format_target,
)


class TestFormatTarget:
    def test_ipv4_is_not_bracketed(self):
        assert format_target("93.184.216.34", 443) == "93.184.216.34:443"

    def test_ipv6_is_bracketed(self):
        assert format_target("2001:db8::1", "8443") == "[2001:db8::1]:8443"


class TestFormatReportLine:
    def test_success_line_layout(self):
        result = HandshakeResult(
            ProbeStatus.SUCCESS,
            "93.184.216.34:443",
            remote="93.184.216.34:443",
            tls_version="1.3",
            alpn="h2",
            common_name="example.com",
        )
        line = format_report_line(result, 443)
        assert line == (
            "93.184.216.34:443".ljust(ADDRESS_FIELD_WIDTH)
            + "---- TLS v1.3    ALPN: h2 ----    example.com:443"
        )

    def test_missing_alpn_uses_placeholder(self):
        result = HandshakeResult(
            ProbeStatus.SUCCESS, "1.2.3.4:443", remote="1.2.3.4:443", tls_version="1.2"
        )
        assert "ALPN:    ----" in format_report_line(result, 443)

    def test_address_field_is_fixed_width(self):
        short = HandshakeResult(ProbeStatus.SUCCESS, "", remote="1.2.3.4:443", tls_version="1.3")
        long = HandshakeResult(
            ProbeStatus.SUCCESS, "", remote="255.255.255.254:65535", tls_version="1.3"
        )
        assert format_report_line(short, 443).index("----") == ADDRESS_FIELD_WIDTH
        assert format_report_line(long, 443).index("----") == ADDRESS_FIELD_WIDTH

    def test_dial_failure_line(self):
        result = HandshakeResult(
            ProbeStatus.DIAL_FAILED, "10.0.0.2:443", error="[Errno 111] Connection refused"
        )
        line = format_report_line(result, 443)
        assert line.startswith("10.0.0.2:443 ")
        assert line.endswith("Dial failed: [Errno 111] Connection refused")

    def test_handshake_failure_uses_remote(self):
        result = HandshakeResult(
            ProbeStatus.HANDSHAKE_FAILED,
            "10.0.0.2:443",
            error="wrong version number",
            remote="10.0.0.9:443",
        )
        line = format_report_line(result, 443)
        assert line.startswith("10.0.0.9:443 ")
        assert "TLS handshake failed: wrong version number" in line


class TestExtractDomain:
    def test_example_line(self):
        line = "93.184.216.34        ---- TLS v1.3    ALPN: h2 ----    example.com:443"
        assert extract_domain(line) == "example.com"

    def test_formatted_line_round_trip(self):
        result = HandshakeResult(
            ProbeStatus.SUCCESS,
            "",
            remote="10.1.2.3:8443",
            tls_version="1.3",
            alpn="h2",
            common_name="shop.example",
        )
        assert extract_domain(format_report_line(result, 8443)) == "shop.example"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "10.0.0.2:443",
            "10.0.0.2:443          ---- TLS v1.3    ALPN: h2 ----    :443",
            "10.0.0.2:443          Dial failed: timed out",
        ],
    )
    def test_no_domain(self, line):
        assert extract_domain(line) == ""

    def test_ssl_error_text_is_not_a_domain(self):
        error = ssl.SSLError(1, "[SSL: WRONG_VERSION_NUMBER] wrong version number (_ssl.c:1006)")
        result = HandshakeResult(
            ProbeStatus.HANDSHAKE_FAILED,
            "127.0.0.1:443",
            error=str(error),
            remote="127.0.0.1:60985",
        )
        assert extract_domain(format_report_line(result, 443)) == ""

    def test_skips_junk_before_real_domain(self):
        line = "10.0.0.2:443          (_ssl.c:1006) shop.example:443"
        assert extract_domain(line) == "shop.example"
