"""Rich terminal output for netpick."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from netpick.models import Location, SelectionReport

console = Console()

# Latency color thresholds (milliseconds)
FAST_THRESHOLD_MS = 20.0
MEDIUM_THRESHOLD_MS = 50.0


def _color_for_ms(value: float) -> str:
    """Return a Rich color name based on latency."""
    if value <= FAST_THRESHOLD_MS:
        return "green"
    elif value <= MEDIUM_THRESHOLD_MS:
        return "yellow"
    return "red"


def _fmt_ms(value: float) -> Text:
    return Text(f"{value:.1f}ms", style=_color_for_ms(value))


def render_location(location: Location, used_fallback: bool) -> None:
    """Display the resolved location and where it came from."""
    if used_fallback:
        render_warning(
            f"All geolocation services failed, using default location ({location.city}, {location.country})"
        )
        return

    parts = [f"{location.city}, {location.country}"]
    if location.isp:
        parts.append(f"[dim]{location.isp}[/dim]")
    parts.append(f"[dim]({location.latitude:.2f}, {location.longitude:.2f}) via {location.source}[/dim]")
    console.print(f"[bold]Location:[/bold] {' | '.join(parts)}")


def render_servers(report: SelectionReport) -> None:
    """Display the selected servers as a ranked table."""
    table = Table(
        show_header=True,
        border_style="bright_black",
        expand=False,
        header_style="bold",
        title=(
            f"[bold]Selected Servers[/bold] "
            f"[dim]({report.reachable_count} of {len(report.candidates)} candidates reachable)[/dim]"
        ),
        title_style="",
    )
    table.add_column("#", justify="right", width=3, style="dim")
    table.add_column("Server", style="bold", min_width=16)
    table.add_column("Class")
    table.add_column("Latency", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("URL", style="dim")

    for rank, s in enumerate(report.servers, 1):
        table.add_row(
            str(rank),
            s.name,
            s.candidate.server_class.value,
            _fmt_ms(s.latency_ms),
            f"{s.distance_km:,.0f} km",
            f"{s.quality:.1f}",
            s.url,
        )

    console.print()
    console.print(table)


def render_probe_details(report: SelectionReport) -> None:
    """Display every candidate with its probe outcome (debug view)."""
    table = Table(show_header=True, border_style="bright_black", header_style="bold", title="Candidates")
    table.add_column("Server", min_width=16)
    table.add_column("Class")
    table.add_column("Distance", justify="right")
    table.add_column("Probe")
    table.add_column("Median", justify="right")
    table.add_column("Range", justify="right")

    for c in report.candidates:
        probe = report.probes.get(c.id)
        median = spread = ""
        if probe is None:
            outcome = Text("not probed", style="dim")
        elif probe.success and probe.latency_ms is not None:
            outcome = _fmt_ms(probe.latency_ms)
            if probe.median_ms is not None:
                median = f"{probe.median_ms:.1f}ms"
                spread = f"{probe.min_ms:.1f}-{probe.max_ms:.1f}ms"
        else:
            outcome = Text(probe.failure.value if probe.failure else "failed", style="red")
        table.add_row(c.name, c.server_class.value, f"{c.distance_km:,.0f} km", outcome, median, spread)

    console.print()
    console.print(table)


def render_error(message: str) -> None:
    """Display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def render_warning(message: str) -> None:
    """Display a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")
