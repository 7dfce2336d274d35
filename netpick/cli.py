"""CLI entry point for netpick."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from netpick import __version__
from netpick.config import (
    DEBUG_ENV_VAR,
    DEFAULT_MAX_SERVERS,
    GEO_TIMEOUT,
    PROBE_CONCURRENCY,
    PROBE_TIMEOUT,
    Settings,
    load_settings,
)
from netpick.errors import NoReachableServersError
from netpick.models import SelectionReport

EXIT_NO_SERVERS = 2
EXIT_INTERRUPTED = 130


def _configure_logging(debug: bool) -> None:
    """Route trace diagnostics to stderr when debugging; stay silent otherwise."""
    if not debug:
        return
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # Keep transport chatter out of the trace
    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@click.command()
@click.option("-n", "--max-servers", type=click.IntRange(min=1), default=DEFAULT_MAX_SERVERS, help="Servers to select", show_default=True)
@click.option("-t", "--timeout", default=GEO_TIMEOUT, help="Per-provider lookup timeout in seconds", show_default=True)
@click.option("--probe-timeout", default=PROBE_TIMEOUT, help="Per-probe timeout in seconds", show_default=True)
@click.option("-c", "--concurrency", type=click.IntRange(min=1), default=PROBE_CONCURRENCY, help="Simultaneous probes", show_default=True)
@click.option("--deadline", type=float, default=None, help="Overall time budget for the whole run in seconds")
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.option("-o", "--output", default=None, help="Write JSON results to file")
@click.option(
    "--debug/--no-debug",
    default=None,
    help=f"Emit per-provider and per-probe trace diagnostics [default: ${DEBUG_ENV_VAR}]",
)
@click.version_option(version=__version__)
def main(
    max_servers: int,
    timeout: float,
    probe_timeout: float,
    concurrency: int,
    deadline: float | None,
    json_output: bool,
    output: str | None,
    debug: bool | None,
) -> None:
    """Find the best nearby test servers.

    Resolves your approximate location, probes candidate servers
    concurrently and ranks them by latency, distance and reach.
    """
    settings = load_settings(
        debug=debug,
        max_servers=max_servers,
        geo_timeout=timeout,
        probe_timeout=probe_timeout,
        probe_concurrency=concurrency,
        deadline=deadline,
    )
    _configure_logging(settings.debug)

    try:
        report = asyncio.run(_run(settings, quiet=json_output))
    except KeyboardInterrupt:
        if not json_output:
            from netpick.display import console
            console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(EXIT_INTERRUPTED)
    except NoReachableServersError as exc:
        _handle_failure(exc, settings, json_output, output)
        sys.exit(EXIT_NO_SERVERS)

    _handle_output(report, settings, json_output, output)


async def _run(settings: Settings, quiet: bool) -> SelectionReport:
    from netpick.display import console
    from netpick.engine import run_selection

    if quiet:
        return await run_selection(settings)
    with console.status("[bold]Locating you and probing servers...[/bold]"):
        return await run_selection(settings)


def _handle_output(report: SelectionReport, settings: Settings, json_output: bool, output: str | None) -> None:
    from netpick.display import console, render_location, render_probe_details, render_servers
    from netpick.export import export_json, write_to_file

    if json_output:
        json_str = export_json(report)
        if output:
            write_to_file(json_str, output)
        else:
            click.echo(json_str)
        return

    render_location(report.location, report.used_fallback)
    if settings.debug:
        render_probe_details(report)
    render_servers(report)

    if output:
        write_to_file(export_json(report), output)
        console.print(f"\n[dim]Results written to {output}[/dim]")


def _handle_failure(
    exc: NoReachableServersError,
    settings: Settings,
    json_output: bool,
    output: str | None,
) -> None:
    from netpick.display import render_error, render_location, render_probe_details
    from netpick.export import export_json, write_to_file

    report = exc.report
    if json_output and report is not None:
        json_str = export_json(report)
        if output:
            write_to_file(json_str, output)
        else:
            click.echo(json_str)
        return

    if report is not None:
        render_location(report.location, report.used_fallback)
        if settings.debug:
            render_probe_details(report)
    render_error(f"{exc}. Check your network connection and try again.")


if __name__ == "__main__":
    main()
