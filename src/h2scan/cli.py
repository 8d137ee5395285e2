"""h2scan CLI - find TLS 1.3 / HTTP/2 servers across an IPv4 range."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from h2scan.config import get_log_level, load_scan_config
from h2scan.errors import ConfigError, OutputSetupError
from h2scan.scanner import Direction, run_scan
from h2scan.utils.log import configure_logging

app = typer.Typer(
    name="h2scan",
    help="Sequential IPv4 scanner for TLS 1.3 servers negotiating h2",
    no_args_is_help=True,
)
console = Console()


@app.command()
def version() -> None:
    """Show the installed h2scan version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        current_version = pkg_version("h2scan")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"h2scan {current_version}")


@app.command()
def scan(
    addr: Optional[str] = typer.Option(
        None, "--addr", "-a", help="Address to start the scan after (default: 0.0.0.0)"
    ),
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Port to scan (default: 443)"),
    thread: Optional[int] = typer.Option(
        None, "--thread", "-t", help="Number of threads to scan in parallel (default: 128)"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "--timeOut", help="Dial and handshake timeout in seconds (default: 4)"
    ),
    count: Optional[int] = typer.Option(
        None, "--count", "-n", help="Number of addresses to scan (default: 10000)"
    ),
    output: Optional[bool] = typer.Option(
        None, "--output/--no-output", help="Append results to the results file (default: on)"
    ),
    show_fail: Optional[bool] = typer.Option(
        None, "--show-fail/--hide-fail", help="Report dial and handshake failures too"
    ),
    reverse: bool = typer.Option(False, "--reverse", help="Walk addresses downwards"),
    results_file: Optional[Path] = typer.Option(
        None, "--results-file", help="Results file (default: results.txt)"
    ),
    domains_file: Optional[Path] = typer.Option(
        None, "--domains-file", help="Domains file (default: domains.txt)"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level (default: INFO)"),
) -> None:
    """Scan addresses following --addr for TLS 1.3 servers that negotiate h2."""
    configure_logging(log_level or get_log_level())

    try:
        config = load_scan_config(
            start=addr,
            port=port,
            threads=thread,
            timeout=timeout,
            count=count,
            output=output,
            show_fail=show_fail,
            direction=Direction.BACKWARD if reverse else None,
            results_file=results_file,
            domains_file=domains_file,
        )
    except ConfigError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1) from exc

    console.print(
        f"[blue]Scanning {config.count} addresses after {config.start} "
        f"on port {config.port} ({config.threads} threads)...[/blue]"
    )

    try:
        summary = run_scan(config)
    except OutputSetupError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted.[/yellow]")
        raise typer.Exit(130) from None

    if summary.exhausted:
        console.print(
            f"[yellow]Address space exhausted after {summary.queued} addresses.[/yellow]"
        )
    console.print(
        f"[green]Scan complete: {summary.queued} addresses, {summary.reported} reported, "
        f"{summary.domains} domains in {summary.elapsed:.1f}s[/green]"
    )


def main():
    """Entry point for the CLI."""
    app()
