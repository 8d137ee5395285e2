"""Wires cursor, worker pool, prober and report writer into one scan run."""

import logging
import time
from pathlib import Path
from typing import Any, TextIO

from h2scan.errors import OutputSetupError

from .cursor import AddressCursor
from .models import ScanConfig, ScanSummary, ScanTask
from .pool import WaitGroup, WorkerPool
from .probe import Dialer, Prober
from .sink import ReportWriter

logger = logging.getLogger(__name__)


def _open_append(path: Path, label: str) -> TextIO:
    try:
        return open(path, "a", encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to open %s %s: %s", label, path, exc)
        raise OutputSetupError(f"Failed to open {label} {path}: {exc}") from exc


def open_outputs(results_path: Path, domains_path: Path) -> tuple[TextIO, TextIO]:
    """Open both output files for appending, or raise OutputSetupError."""
    results_file = _open_append(Path(results_path), "results file")
    try:
        domains_file = _open_append(Path(domains_path), "domains file")
    except OutputSetupError:
        results_file.close()
        raise
    return results_file, domains_file


def run_scan(
    config: ScanConfig,
    *,
    dialer: Dialer | None = None,
    tls_context: Any = None,
) -> ScanSummary:
    """Scan up to ``config.count`` addresses after ``config.start``.

    Blocks until every queued address has been probed and every report
    line has been written. Fewer addresses are scanned when the cursor
    reaches the edge of the address space.
    """
    config.validate()
    results_file, domains_file = open_outputs(config.results_file, config.domains_file)
    summary = ScanSummary(requested=config.count)
    started = time.perf_counter()
    queue_size = config.queue_size if config.queue_size is not None else config.count

    writer = ReportWriter(
        results_file=results_file,
        domains_file=domains_file,
        persist=config.output,
        maxsize=queue_size,
    )
    pool: WorkerPool | None = None

    try:
        writer.start()
        prober = Prober(
            port=config.port,
            timeout=config.timeout,
            sink=writer,
            show_fail=config.show_fail,
            dialer=dialer,
            tls_context=tls_context,
        )
        wait_group = WaitGroup()
        pool = WorkerPool(
            config.threads,
            prober.handle,
            wait_group=wait_group,
            maxsize=queue_size,
        )
        pool.start()

        cursor = AddressCursor(config.start)
        logger.debug(
            "Scanning %d addresses from %s (%s) on port %d with %d threads",
            config.count,
            config.start,
            config.direction.name.lower(),
            config.port,
            config.threads,
        )
        for address in cursor.take(config.count, config.direction):
            wait_group.add(1)
            pool.submit(ScanTask(address=address, port=config.port, timeout=config.timeout))
            summary.queued += 1
        pool.close()

        if summary.queued < config.count:
            summary.exhausted = True
            logger.warning(
                "Address space exhausted at %s: queued %d of %d addresses",
                cursor.current,
                summary.queued,
                config.count,
            )

        wait_group.wait()
        pool.join()
    except BaseException:
        if pool is not None:
            pool.cancel()
        raise
    finally:
        # Drain the writer before its files go away.
        writer.close()
        results_file.close()
        domains_file.close()

    summary.reported = writer.lines_handled
    summary.domains = writer.domains_written
    summary.elapsed = time.perf_counter() - started
    logger.info("Scan completed.")
    return summary
