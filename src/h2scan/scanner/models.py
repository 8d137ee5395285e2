"""Data models for scan tasks and handshake outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from ipaddress import IPv4Address
from pathlib import Path

from h2scan.errors import ConfigError


class Direction(Enum):
    """Direction the address cursor walks."""

    FORWARD = 1
    BACKWARD = -1


class ProbeStatus(Enum):
    DIAL_FAILED = "dial_failed"
    HANDSHAKE_FAILED = "handshake_failed"
    SUCCESS = "success"


@dataclass
class ScanConfig:
    """Configuration for a scan run."""

    start: str = "0.0.0.0"
    port: int = 443
    threads: int = 128
    timeout: float = 4.0
    count: int = 10000
    show_fail: bool = False
    output: bool = True
    direction: Direction = Direction.FORWARD
    results_file: Path = field(default_factory=lambda: Path("results.txt"))
    domains_file: Path = field(default_factory=lambda: Path("domains.txt"))
    queue_size: int | None = None

    def validate(self) -> "ScanConfig":
        """Check values, normalising the port; raise ConfigError on bad input."""
        try:
            IPv4Address(self.start)
        except ValueError as exc:
            raise ConfigError(f"Invalid start address: {self.start!r}") from exc
        try:
            self.port = int(self.port)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid port: {self.port!r}") from exc
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"Port out of range: {self.port}")
        if self.threads < 1:
            raise ConfigError("Thread count must be >= 1")
        if self.timeout <= 0:
            raise ConfigError("Timeout must be positive")
        if self.count < 0:
            raise ConfigError("Address count must be >= 0")
        return self


@dataclass(frozen=True)
class ScanTask:
    """One address to probe, with the port and timeout captured at creation."""

    address: IPv4Address
    port: int
    timeout: float


@dataclass(frozen=True)
class HandshakeResult:
    """Outcome of one dial + TLS handshake attempt."""

    status: ProbeStatus
    target: str
    error: str = ""
    remote: str = ""
    tls_version: str = ""
    alpn: str = ""
    common_name: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ProbeStatus.SUCCESS


@dataclass
class ScanSummary:
    """Counters reported at the end of a scan run."""

    requested: int
    queued: int = 0
    reported: int = 0
    domains: int = 0
    elapsed: float = 0.0
    exhausted: bool = False
