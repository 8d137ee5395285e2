"""Concurrent TLS/ALPN scan engine."""

from .cursor import AddressCursor
from .filters import is_placeholder_certificate, passes_report_gate, tls_version_label
from .models import (
    Direction,
    HandshakeResult,
    ProbeStatus,
    ScanConfig,
    ScanSummary,
    ScanTask,
)
from .orchestrator import open_outputs, run_scan
from .pool import WaitGroup, WorkerPool
from .probe import Prober, classify, default_tls_context
from .report import extract_domain, format_report_line, format_target
from .sink import ReportWriter, ResultSink

__all__ = [
    "AddressCursor",
    "Direction",
    "HandshakeResult",
    "ProbeStatus",
    "Prober",
    "ReportWriter",
    "ResultSink",
    "ScanConfig",
    "ScanSummary",
    "ScanTask",
    "WaitGroup",
    "WorkerPool",
    "classify",
    "default_tls_context",
    "extract_domain",
    "format_report_line",
    "format_target",
    "is_placeholder_certificate",
    "open_outputs",
    "passes_report_gate",
    "run_scan",
    "tls_version_label",
]
