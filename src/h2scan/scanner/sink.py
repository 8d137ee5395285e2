"""Single-consumer result sink that logs and persists report lines."""

import logging
import queue
import threading
from typing import Protocol, TextIO

from .report import extract_domain

logger = logging.getLogger(__name__)
results_logger = logging.getLogger("h2scan.results")

_STOP = object()


class ResultSink(Protocol):
    """Anything that accepts report lines."""

    def submit(self, line: str) -> bool: ...


class ReportWriter:
    """Drains report lines on one thread, in arrival order.

    Every line is logged. It is appended to ``results_file`` when
    ``persist`` is set, and any domain found in it goes to ``domains_file``.
    Write errors are logged and never stop the scan.
    """

    def __init__(
        self,
        results_file: TextIO | None = None,
        domains_file: TextIO | None = None,
        persist: bool = True,
        maxsize: int = 0,
    ):
        self.results_file = results_file
        self.domains_file = domains_file
        self.persist = persist
        self.lines_handled = 0
        self.lines_written = 0
        self.domains_written = 0
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._thread: threading.Thread | None = None
        self._closed = False
        self._lock = threading.Lock()

    def start(self) -> "ReportWriter":
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._consume, name="h2scan-report-writer", daemon=True
            )
            self._thread.start()
        return self

    def submit(self, line: str) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._queue.put(line)
        return True

    def close(self, timeout: float | None = None) -> None:
        """Stop accepting lines, drain what is queued and join the consumer."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        if self._thread is not None:
            self._thread.join(timeout)

    def __enter__(self) -> "ReportWriter":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _consume(self) -> None:
        while True:
            line = self._queue.get()
            if line is _STOP:
                return
            self.handle(line)

    def handle(self, line: str) -> None:
        self.lines_handled += 1
        results_logger.info(line)
        if self.persist and self.results_file is not None:
            if self._write(self.results_file, line, "results file"):
                self.lines_written += 1

        domain = extract_domain(line)
        if domain and self.domains_file is not None:
            if self._write(self.domains_file, domain, "domains file"):
                self.domains_written += 1

    @staticmethod
    def _write(handle: TextIO, text: str, label: str) -> bool:
        try:
            handle.write(text + "\n")
            handle.flush()
        except (OSError, ValueError) as exc:
            # ValueError: write to a closed file.
            logger.error("Error writing into %s: %s", label, exc)
            return False
        return True
